"""
Card Risk — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Parse the card file.
  4. Score, sanitize or query.
  5. Report to stdout (``--json`` where it makes sense).

Install and run::

    pip install -e .
    card-risk --help
    card-risk validate-config
    card-risk init-db
    card-risk score cards.json --as-of 2024-11-15
    card-risk quick-score cards.json
    card-risk sanitize cards.json
    card-risk batch cards.json --mode full --persist
    card-risk top --limit 10
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="card-risk",
    help="Collectible card speculation-risk scoring CLI.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from card_risk.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config) -> None:
    from card_risk.utils.logging import configure_logging
    configure_logging(config.logging)


def _parse_as_of_or_exit(as_of: Optional[str]) -> Optional[date]:
    from card_risk.utils.time_utils import parse_date

    try:
        return parse_date(as_of)
    except ValueError as exc:
        typer.echo(f"[ERROR] Invalid --as-of date: {exc}", err=True)
        raise typer.Exit(code=1)


def _load_cards_or_exit(path: Path, as_of: Optional[date]):
    from card_risk.errors import CardInputError
    from card_risk.ingestion.card_file import load_card_file

    try:
        return load_card_file(path, as_of=as_of)
    except CardInputError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def build_providers(config):
    """Provider set for the configured mode.

    ``static`` : curated PSA populations and the configured macro snapshot;
                 no sentiment provider, so sentiment is neutral unless the
                 card file supplies it.
    ``http``   : adds Reddit sentiment and live BTC / Fear & Greed data.
    """
    from card_risk.providers.base import ProviderSet
    from card_risk.providers.static import KnownPopulationProvider, StaticMacroProvider

    if config.providers.mode == "http":
        from card_risk.providers.macro_http import HttpMacroProvider
        from card_risk.providers.reddit import RedditSentimentProvider

        return ProviderSet(
            population=KnownPopulationProvider(),
            sentiment=RedditSentimentProvider(config.providers),
            macro=HttpMacroProvider(
                config.providers, policy_rate=config.macro_defaults.policy_rate,
            ),
        )
    return ProviderSet(
        population=KnownPopulationProvider(),
        macro=StaticMacroProvider.from_defaults(config.macro_defaults),
    )


def _print_full_score(score) -> None:
    typer.echo(f"{score.card_name} ({score.card_id})")
    typer.echo(f"  Total:          {score.total_score}/100  [{score.rating_label}]")
    typer.echo(f"  Recommendation: {score.recommendation.value}")
    for dim in score.dimensions():
        flag = "  (default)" if dim.degraded else ""
        typer.echo(f"    {dim.dimension.value:<11} {dim.score:6.1f}  x{dim.weight:.2f}{flag}")
    typer.echo(f"  {score.summary}")


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None, "--config", help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False, "--full", help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values."""
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:     {config.database.db_path}")
    typer.echo(f"  Provider mode:     {config.providers.mode}")
    typer.echo(f"  Provider timeout:  {config.providers.timeout_seconds:g}s")
    typer.echo(f"  Batch mode:        {config.batch.mode} (concurrency {config.batch.concurrency})")
    typer.echo(f"  Outlier sigma:     {config.sanitizer.outlier_sigma:g}")
    typer.echo(f"  Log level:         {config.logging.level}")
    typer.echo(f"  Debug mode:        {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path from config."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Create the SQLite database and apply the schema. Safe to re-run."""
    from card_risk.db.connection import open_score_db
    from card_risk.db.schema import get_existing_tables

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    path = db_path or config.database.db_path

    typer.echo(f"Initializing database at: {path}")
    with open_score_db(config.database, db_path=path) as conn:
        tables = get_existing_tables(conn)
    typer.echo(f"  Tables: {', '.join(tables)}")
    typer.echo("[OK] Database ready.")


@app.command("score")
def score(
    card_file: Path = typer.Argument(..., help="JSON card file (one card or a list)."),
    as_of: Optional[str] = typer.Option(None, "--as-of", help="Reference date YYYY-MM-DD."),
    as_json: bool = typer.Option(False, "--json", help="Print full scores as JSON."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Compute the full five-dimension score for every card in CARD_FILE."""
    from card_risk.scoring.engine import score_card

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    as_of_date = _parse_as_of_or_exit(as_of)
    cards = _load_cards_or_exit(card_file, as_of_date)
    providers = build_providers(config)
    settings = config.scoring_settings()

    results = [
        score_card(
            card.card_id, card.prices, card.metadata, card.signals, providers,
            as_of=as_of_date, settings=settings,
        )
        for card in cards
    ]

    if as_json:
        typer.echo(json.dumps([r.model_dump(mode="json") for r in results], indent=2))
        return
    for result in results:
        _print_full_score(result)
        typer.echo("")


@app.command("quick-score")
def quick_score(
    card_file: Path = typer.Argument(..., help="JSON card file (one card or a list)."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Print the quick (price + population only) score for every card."""
    from card_risk.pipeline.batch import run_batch

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    cards = _load_cards_or_exit(card_file, None)

    result = run_batch(cards, mode="quick", settings=config.scoring_settings())
    for card_result in result.results:
        if card_result.ok:
            typer.echo(f"  {card_result.card_id:<24} {card_result.total_score:>3}")
        else:
            typer.echo(f"  {card_result.card_id:<24} [FAILED] {card_result.error}")
    if result.failed:
        raise typer.Exit(code=1)


@app.command("rebound")
def rebound(
    card_file: Path = typer.Argument(..., help="JSON card file (one card or a list)."),
    as_json: bool = typer.Option(False, "--json", help="Print indicators and scores as JSON."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Print RSI / MACD / volume technicals and the rebound score per card."""
    from card_risk.scoring.engine import prepare_series
    from card_risk.scoring.technicals import compute_technical_indicators, score_rebound

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    cards = _load_cards_or_exit(card_file, None)
    settings = config.scoring_settings()

    output = {}
    for card in cards:
        series = prepare_series(card.card_id, card.prices, settings)
        current = card.volumes[-1] if card.volumes else 0.0
        indicators = compute_technical_indicators(series, current, card.volumes[:-1])
        result = score_rebound(indicators)
        output[card.card_id] = {
            "indicators": indicators.model_dump(mode="json"),
            "rebound": result.model_dump(mode="json"),
        }
        if not as_json:
            typer.echo(
                f"  {card.card_id:<24} {result.score:>3}  {result.recommendation.value:<11} "
                f"rsi={indicators.rsi14:.2f} macd_hist={indicators.macd.histogram:+.3f} "
                f"volume x{indicators.volume_ratio:.2f}"
            )
    if as_json:
        typer.echo(json.dumps(output, indent=2))


@app.command("sanitize")
def sanitize(
    card_file: Path = typer.Argument(..., help="JSON card file (one card or a list)."),
    as_json: bool = typer.Option(False, "--json", help="Print cleaned series as JSON."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Clean each card's price series and report what changed."""
    from card_risk.pipeline.sanitizer import sanitize_price_series

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    cards = _load_cards_or_exit(card_file, None)

    output = {}
    for card in cards:
        cleaned = sanitize_price_series(card.prices, config.sanitizer)
        output[card.card_id] = cleaned
        if not as_json:
            typer.echo(
                f"  {card.card_id}: {len(cleaned.points)} points "
                f"({cleaned.invalid_dropped} invalid dropped, "
                f"{cleaned.duplicates_removed} duplicates removed, "
                f"{cleaned.outlier_count} outliers flagged, "
                f"{cleaned.interpolated_count} interpolated)"
            )
    if as_json:
        typer.echo(json.dumps(
            {card_id: s.model_dump(mode="json") for card_id, s in output.items()}, indent=2,
        ))


@app.command("batch")
def batch(
    card_file: Path = typer.Argument(..., help="JSON card file (list of cards)."),
    mode: Optional[str] = typer.Option(None, "--mode", help="quick or full (default: config)."),
    persist: bool = typer.Option(False, "--persist", help="Upsert full scores into the DB."),
    as_of: Optional[str] = typer.Option(None, "--as-of", help="Reference date YYYY-MM-DD."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Score many cards with bounded concurrency."""
    from card_risk.db.connection import open_score_db
    from card_risk.db.repositories.score_repo import ScoreRepository
    from card_risk.pipeline.batch import run_batch

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    batch_mode = mode or config.batch.mode
    if batch_mode not in ("quick", "full"):
        typer.echo(f"[ERROR] Unknown mode '{batch_mode}'. Use quick or full.", err=True)
        raise typer.Exit(code=1)
    if persist and batch_mode != "full":
        typer.echo("[ERROR] --persist requires --mode full.", err=True)
        raise typer.Exit(code=1)

    as_of_date = _parse_as_of_or_exit(as_of)
    cards = _load_cards_or_exit(card_file, as_of_date)
    kwargs = dict(
        mode=batch_mode,
        providers=build_providers(config),
        settings=config.scoring_settings(),
        concurrency=config.batch.concurrency,
        as_of=as_of_date,
    )

    if persist:
        with open_score_db(config.database) as conn:
            result = run_batch(cards, repository=ScoreRepository(conn), **kwargs)
    else:
        result = run_batch(cards, **kwargs)

    for card_result in result.results:
        if card_result.ok:
            typer.echo(f"  {card_result.card_id:<24} {card_result.total_score:>3}")
        else:
            typer.echo(f"  {card_result.card_id:<24} [FAILED] {card_result.error}")
    typer.echo(
        f"[OK] {result.processed} processed, {result.succeeded} succeeded, "
        f"{result.failed} failed."
    )
    if result.failed:
        raise typer.Exit(code=1)


@app.command("top")
def top(
    limit: int = typer.Option(20, "--limit", help="Number of cards to list."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """List the most speculative persisted cards."""
    from card_risk.db.connection import open_score_db
    from card_risk.db.repositories.score_repo import ScoreRepository

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    with open_score_db(config.database) as conn:
        rows = ScoreRepository(conn).list_top(limit=limit)

    if not rows:
        typer.echo("No scores stored yet. Run `card-risk batch FILE --mode full --persist`.")
        return
    for row in rows:
        typer.echo(
            f"  {row.total_score:>3}  {row.recommendation.value:<5}  "
            f"{row.card_name or row.card_id}  [{row.rating.label}]"
        )


if __name__ == "__main__":
    app()
