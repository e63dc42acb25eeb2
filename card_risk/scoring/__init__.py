"""
Speculation scoring: five dimension scorers, the aggregator, and the engine.

Modules
-------
weights     : Fixed dimension weights, validated at import time.
stats       : Statistical primitives (mean, std, CV, PTR, returns, Pearson).
volatility  : D1: coefficient of variation, peak-to-trough, acceleration.
growth      : D2: excess return, pump-and-dump asymmetry, crypto correlation.
scarcity    : D3: rarity, PSA population, supply/demand, vintage bonus.
sentiment   : D4: social buzz, buyer/seller ratio, hype, popularity.
macro       : D5: crypto correlation, Fear & Greed, rates, seasonality.
aggregator  : Weighted total, rating bands, recommendation, summary text.
quick       : Reduced-dependency quick score for batch/offline use.
technicals  : RSI-14, MACD, volume ratio and the rebound score (outside the total).
engine      : ``compute_full_score()``: sanitizes, fans out providers, scores.

Everything except ``engine`` is pure: no I/O, no clock reads, no globals.
"""
