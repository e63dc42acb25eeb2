"""
Input parsing.

Modules
-------
card_file : JSON card files → validated ``CardInput`` records.
"""
