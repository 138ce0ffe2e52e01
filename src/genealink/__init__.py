"""
GeneaLink - Civil Registry Person Search and Family Tree Reconstruction

Locates individuals in flat civil-status registers despite spelling noise and
rebuilds plausible family trees from records that only carry free-text parent
names.
"""

__version__ = "0.1.0"
__author__ = "GeneaLink Contributors"

# Name similarity above which a ranked result is labelled a strong match
SIMILARITY_STRONG = 75
