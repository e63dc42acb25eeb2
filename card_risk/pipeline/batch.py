"""
Batch scoring — score many cards, optionally persisting each result.

Modes
-----
quick : ``compute_quick_score()`` per card. Synchronous, no providers.
full  : ``compute_full_score()`` per card, at most ``concurrency`` cards in
        flight (``asyncio.Semaphore``). Each finished card is upserted on
        its own when a repository is given.

Cards share no state. A card that fails is logged and counted; the batch
carries on. Results come back in input order regardless of completion order.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Literal, Optional, Sequence

from card_risk.config import ScoringSettings
from card_risk.db.repositories.score_repo import ScoreRepository
from card_risk.ingestion.card_file import CardInput
from card_risk.models.score import FullSpeculationScore
from card_risk.providers.base import ProviderSet
from card_risk.scoring.engine import compute_full_score, compute_quick_score, prepare_series
from card_risk.utils.time_utils import today_utc

logger = logging.getLogger(__name__)

BatchMode = Literal["quick", "full"]


@dataclass
class CardResult:
    """Outcome for one card.

    Attributes:
        card_id: Card identifier.
        total_score: 0–100 total, or ``None`` if scoring failed.
        full_score: Complete breakdown (full mode only).
        error: Failure message, if any.
    """

    card_id: str
    total_score: Optional[int] = None
    full_score: Optional[FullSpeculationScore] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    """Aggregate outcome of a batch run."""

    mode: BatchMode
    results: list[CardResult] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return self.processed - self.succeeded


def _quick_one(card: CardInput, settings: ScoringSettings) -> CardResult:
    try:
        series = prepare_series(card.card_id, card.prices, settings)
        population = card.metadata.psa_population
        if population is None and card.signals.population is not None:
            population = card.signals.population.psa10_population
        total = compute_quick_score(series, population, card.metadata.is_vintage)
    except Exception as exc:
        logger.error(
            "Quick score failed for %s: %s", card.card_id, exc, extra={"card_id": card.card_id}
        )
        return CardResult(card_id=card.card_id, error=str(exc))
    return CardResult(card_id=card.card_id, total_score=total)


async def _full_one(
    card: CardInput,
    semaphore: asyncio.Semaphore,
    providers: ProviderSet,
    settings: ScoringSettings,
    as_of: date,
    repository: Optional[ScoreRepository],
) -> CardResult:
    async with semaphore:
        try:
            score = await compute_full_score(
                card.card_id,
                card.prices,
                card.metadata,
                card.signals,
                providers,
                as_of=as_of,
                settings=settings,
            )
            if repository is not None:
                repository.upsert(score)
        except Exception as exc:
            logger.error(
                "Full score failed for %s: %s", card.card_id, exc, extra={"card_id": card.card_id}
            )
            return CardResult(card_id=card.card_id, error=str(exc))
    return CardResult(card_id=card.card_id, total_score=score.total_score, full_score=score)


async def run_batch_async(
    cards: Sequence[CardInput],
    mode: BatchMode = "quick",
    providers: Optional[ProviderSet] = None,
    settings: Optional[ScoringSettings] = None,
    repository: Optional[ScoreRepository] = None,
    concurrency: int = 8,
    as_of: Optional[date] = None,
) -> BatchResult:
    """Score ``cards`` and return per-card outcomes in input order.

    Args:
        cards: Parsed card inputs.
        mode: ``"quick"`` or ``"full"``.
        providers: Providers for full mode.
        settings: Engine settings.
        repository: When given, each full score is upserted as it completes.
            Quick scores are never persisted.
        concurrency: Maximum cards scored at once in full mode.
        as_of: Reference date shared by every card. Defaults to today (UTC).

    Raises:
        ValueError: If ``concurrency < 1`` or ``mode`` is unknown.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}.")
    settings = settings or ScoringSettings()
    result = BatchResult(mode=mode)

    if mode == "quick":
        if repository is not None:
            logger.warning("Quick mode does not persist scores; repository ignored.")
        result.results = [_quick_one(card, settings) for card in cards]
    elif mode == "full":
        providers = providers or ProviderSet()
        as_of = as_of or today_utc()
        semaphore = asyncio.Semaphore(concurrency)
        result.results = list(await asyncio.gather(*(
            _full_one(card, semaphore, providers, settings, as_of, repository)
            for card in cards
        )))
    else:
        raise ValueError(f"Unknown batch mode {mode!r}; use 'quick' or 'full'.")

    logger.info(
        "Batch (%s): %d processed, %d succeeded, %d failed",
        mode, result.processed, result.succeeded, result.failed,
    )
    return result


def run_batch(
    cards: Sequence[CardInput],
    mode: BatchMode = "quick",
    providers: Optional[ProviderSet] = None,
    settings: Optional[ScoringSettings] = None,
    repository: Optional[ScoreRepository] = None,
    concurrency: int = 8,
    as_of: Optional[date] = None,
) -> BatchResult:
    """Synchronous wrapper around ``run_batch_async()``."""
    return asyncio.run(
        run_batch_async(cards, mode, providers, settings, repository, concurrency, as_of)
    )
