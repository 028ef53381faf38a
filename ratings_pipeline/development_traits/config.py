"""
Configuration settings for development trait and draft position reconciliation.

The secondary dataset is a weekly player list that carries the attributes
the ratings API omits: development trait and draft history.
"""

from types import MappingProxyType

# API Configuration
SECONDARY_BASE_URL = 'https://static.madden.tools/madden-25/json/iterations'
REQUEST_TIMEOUT = 30  # Seconds
REQUEST_HEADERS = {
    'referer': 'https://madden.tools/',
    'user-agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36',
    'accept': 'application/json',
}

# Job Configuration
JOB_TYPE = 'development_traits_update'
PASS_TRAITS = 'traits'
PASS_DRAFT = 'draft'
ALL_PASSES = (PASS_TRAITS, PASS_DRAFT)

# Secondary trait code -> development_trait_id
DEVELOPMENT_TRAIT_MAP = MappingProxyType({
    0: 1,  # Normal
    1: 2,  # Star
    2: 3,  # Superstar
    3: 4,  # X-Factor
})

# Draft layout
DRAFT_ROUNDS = 54
PICKS_PER_ROUND = 32
FIRST_PICK = 1
LAST_PICK = DRAFT_ROUNDS * PICKS_PER_ROUND  # 1728, also the default for unknown picks


def get_cache_filename(week_number):
    """Secondary cache file name for a week, e.g. 'mt-week-12.json'."""
    return f"mt-week-{week_number}.json"


# Logging format
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
