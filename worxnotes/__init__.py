"""
Worx Notes - repair sheet records for the shop floor.
"""
__version__ = "1.0.0"
