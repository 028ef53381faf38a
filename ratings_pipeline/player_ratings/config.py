"""
Configuration for player ratings ingestion.
"""

from collections import OrderedDict
from pathlib import Path

# API Configuration
RATINGS_API_URL = 'https://drop-api.ea.com/rating/madden-nfl'
RATINGS_PAGE_URL = 'https://www.ea.com/games/madden-nfl/ratings'
RATINGS_LOCALE = 'en'
PAGE_SIZE = 100
API_DELAY_SECONDS = 1.0  # Between pages
REQUEST_TIMEOUT = 30  # seconds

USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36'
REQUEST_HEADERS = {
    'referer': 'https://www.ea.com/',
    'user-agent': USER_AGENT,
    'origin': 'https://www.ea.com',
    'accept': 'application/json',
}

# Used when the ratings page does not expose an iteration
DEFAULT_ITERATION = '12-week-11'

# Job Configuration
JOB_TYPE = 'ratings_update'

# Defaults applied to rating rows
DEFAULT_DEVELOPMENT_TRAIT_ID = 1  # Normal
DEFAULT_RUNNING_STYLE = 'None'
DEFAULT_ARCHETYPE = 'None'

# Provider stat key -> player_rating column
RATING_COLUMNS = OrderedDict([
    ('overall', 'overall'),
    ('acceleration', 'acceleration'),
    ('agility', 'agility'),
    ('jumping', 'jumping'),
    ('stamina', 'stamina'),
    ('strength', 'strength'),
    ('awareness', 'awareness'),
    ('bCVision', 'bcvision'),
    ('blockShedding', 'block_shedding'),
    ('breakSack', 'break_sack'),
    ('breakTackle', 'break_tackle'),
    ('carrying', 'carrying'),
    ('catchInTraffic', 'catch_in_traffic'),
    ('catching', 'catching'),
    ('changeOfDirection', 'change_of_direction'),
    ('deepRouteRunning', 'deep_route_running'),
    ('finesseMoves', 'finesse_moves'),
    ('hitPower', 'hit_power'),
    ('impactBlocking', 'impact_blocking'),
    ('injury', 'injury'),
    ('jukeMove', 'juke_move'),
    ('kickAccuracy', 'kick_accuracy'),
    ('kickPower', 'kick_power'),
    ('kickReturn', 'kick_return'),
    ('leadBlock', 'lead_block'),
    ('manCoverage', 'man_coverage'),
    ('mediumRouteRunning', 'medium_route_running'),
    ('passBlock', 'pass_block'),
    ('passBlockFinesse', 'pass_block_finesse'),
    ('passBlockPower', 'pass_block_power'),
    ('playAction', 'play_action'),
    ('playRecognition', 'play_recognition'),
    ('powerMoves', 'power_moves'),
    ('press', 'press'),
    ('pursuit', 'pursuit'),
    ('release', 'release'),
    ('runBlock', 'run_block'),
    ('runBlockFinesse', 'run_block_finesse'),
    ('runBlockPower', 'run_block_power'),
    ('shortRouteRunning', 'short_route_running'),
    ('spectacularCatch', 'spectacular_catch'),
    ('speed', 'speed'),
    ('spinMove', 'spin_move'),
    ('stiffArm', 'stiff_arm'),
    ('tackle', 'tackle'),
    ('throwAccuracyDeep', 'throw_accuracy_deep'),
    ('throwAccuracyMid', 'throw_accuracy_mid'),
    ('throwAccuracyShort', 'throw_accuracy_short'),
    ('throwOnTheRun', 'throw_on_the_run'),
    ('throwPower', 'throw_power'),
    ('throwUnderPressure', 'throw_under_pressure'),
    ('toughness', 'toughness'),
    ('trucking', 'trucking'),
    ('zoneCoverage', 'zone_coverage'),
])

RUNNING_STYLE_STAT = 'runningStyle'

# Logging
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Database
SCHEMA_PATH = Path(__file__).parent / 'schema.sql'
