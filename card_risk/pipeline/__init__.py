"""
Pre- and post-scoring pipeline stages.

Modules
-------
sanitizer : Cleans raw price observations into a regular daily series.
batch     : Scores many cards with bounded concurrency and optional persistence.
"""
