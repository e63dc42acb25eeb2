"""
External data providers for the scoring engine.

Modules
-------
base        : Provider protocols, ``ProviderSet`` and ``fetch_signal()``.
static      : Offline providers: configured macro snapshot, curated PSA
              populations, in-memory prices and metadata.
macro_http  : Live macro data (CoinGecko BTC history, alternative.me Fear &
              Greed) over ``httpx.AsyncClient``.
reddit      : Live sentiment from subreddit search results.

The engine never constructs providers itself; callers pass a ``ProviderSet``.
"""
