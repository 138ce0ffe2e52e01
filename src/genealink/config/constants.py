"""Domain constants for Cameroonian civil-status records.

Gazetteer data, regional surname patterns and the letter classes used by the
phonetic encoder. Patterns are stored lowercase; callers lowercase their input
before matching.
"""

# =============================================================================
# PHONETIC ENCODING
# =============================================================================
# Letter clusters folded to a single letter before encoding. Prefix clusters
# are typical of Bantu and Grassfields family names (Nguessi, Tchana,
# Kamdem, Fonkou); they are folded to N so spelling variants share a code.

PHONETIC_PREFIX_FOLDS = ("NGU", "NGA", "NDI", "NTO", "TCH", "KAM", "FON")
PHONETIC_PREFIX_TARGET = "N"

PHONETIC_SUFFIX_FOLDS = ("DEM", "TOU", "KON", "BOU")
PHONETIC_SUFFIX_TARGET = "M"

# Digit classes (classic Soundex grouping)
PHONETIC_CLASSES = {
    "BFPV": "1",  # labials and labio-dental fricatives
    "CGJKQSXZ": "2",  # gutturals and sibilants
    "DT": "3",  # dentals
    "L": "4",  # liquid
    "MN": "5",  # nasals
    "R": "6",  # rhotic
}

PHONETIC_CODE_LENGTH = 4
PHONETIC_EMPTY_CODE = "0000"

# =============================================================================
# NAME PATTERNS
# =============================================================================
# Pattern bonuses applied by the similarity scorer when both names match.

NAME_PREFIXES = ("ndi", "nga", "fon", "ngo", "tcho", "kam")
NAME_PREFIX_BONUS = 10

NAME_SUFFIXES = ("dem", "toh", "kong", "bou")
NAME_SUFFIX_BONUS = 8

COMMON_GIVEN_NAMES = ("jean", "marie", "paul", "pierre", "joseph", "emmanuel")
COMMON_GIVEN_NAME_BONUS = 5

# Leading tokens that on their own suggest a single-token query is a name
NAME_LIKE_PREFIXES = NAME_PREFIXES + ("jean", "marie", "paul", "pierre")

# =============================================================================
# GAZETTEER
# =============================================================================
# Cities recognised in free-text queries, mapped to their region. Order
# matters: the first city found in a query wins.

CITY_REGIONS = {
    "yaoundé": "Centre",
    "douala": "Littoral",
    "bafoussam": "Ouest",
    "bamenda": "Nord-Ouest",
    "garoua": "Nord",
    "maroua": "Extrême-Nord",
    "ngaoundéré": "Adamaoua",
    "bertoua": "Est",
    "ebolowa": "Sud",
    "kribi": "Sud",
    "limbe": "Sud-Ouest",
    "kumba": "Sud-Ouest",
    "tiko": "Sud-Ouest",
    "buea": "Sud-Ouest",
    "dschang": "Ouest",
    "mbouda": "Ouest",
}

UNIDENTIFIED_REGION = "unidentified"

# Cities mined from search history when proposing location suggestions
HISTORY_CITIES = ("yaoundé", "douala", "bafoussam", "bamenda")
