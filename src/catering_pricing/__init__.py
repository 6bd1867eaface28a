"""
Catering Pricing Package

Quote engine for a food-catering ordering service.
Turns a package, tier, bowl or meal-box selection into an itemised quote in
paise: food cost → delivery → weekend surge → bulk discount → GST → advance.
"""

__version__ = "1.0.0"
