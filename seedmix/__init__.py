"""
SeedMix - Seed-Based Track Recommendation Service

Recommends tracks from one or more seed tracks and optional listener
preferences by combining Last.fm lookups through a layered fallback chain
and weighted Borda rank aggregation.
"""

__version__ = "1.0.0"
__author__ = "SeedMix Team"
