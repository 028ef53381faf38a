"""
Central database and cache configuration for the ratings pipeline.

This module is the single source of truth for database paths, snapshot cache
locations and connection pool limits, keeping test and production data apart.

Environment Control:
    - Set DATA_ENV=test for test environment
    - Set DATA_ENV=production for production (default)
    - Can also be controlled via function parameters

Values are read from the process environment after loading an optional
.env file from the working directory.
"""

import os
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Database file names
PRODUCTION_DB = "ratings.db"
TEST_DB = "ratings_test.db"

# Default environment
DEFAULT_ENVIRONMENT = "production"
VALID_ENVIRONMENTS = ('production', 'test')

# Base paths
BASE_DIR = Path(__file__).parent.parent.parent
DATABASE_DIR = BASE_DIR / "database"
CACHE_DIR = BASE_DIR / "cache"

# Cache subdirectories
RATINGS_CACHE_SUBDIR = "iterations"
SECONDARY_CACHE_SUBDIR = "secondary_iterations"

# Connection pool defaults
DEFAULT_POOL_SIZE = 20
DEFAULT_ACQUIRE_TIMEOUT = 5.0
DEFAULT_STATEMENT_TIMEOUT = 10.0
DEFAULT_BUSY_TIMEOUT = 5.0
DEFAULT_LOOKUP_WORKERS = 4


def get_environment(override=None):
    """
    Get the current environment setting.

    Args:
        override: Optional environment override ('test' or 'production')

    Returns:
        str: The environment ('test' or 'production')
    """
    if override:
        return override.lower()

    env = os.getenv('DATA_ENV', DEFAULT_ENVIRONMENT).lower()

    if env not in VALID_ENVIRONMENTS:
        logger.warning(f"Invalid DATA_ENV '{env}', using '{DEFAULT_ENVIRONMENT}'")
        return DEFAULT_ENVIRONMENT

    return env


def is_test_environment(environment=None):
    """Check if running in test environment."""
    return get_environment(environment) == 'test'


def get_database_path(environment=None):
    """
    Get the appropriate database path based on environment.

    RATINGS_DB_PATH wins over everything else when set.

    Args:
        environment: Optional environment override ('test' or 'production')

    Returns:
        Path: Full path to the database file
    """
    explicit = os.getenv('RATINGS_DB_PATH')
    if explicit:
        return Path(explicit)

    database_dir = Path(os.getenv('RATINGS_DB_DIR', str(DATABASE_DIR)))
    if is_test_environment(environment):
        return database_dir / TEST_DB
    return database_dir / PRODUCTION_DB


def get_cache_dir():
    """Root directory for provider snapshot caches."""
    return Path(os.getenv('RATINGS_CACHE_DIR', str(CACHE_DIR)))


def get_ratings_cache_dir():
    """Directory holding one primary snapshot file per iteration name."""
    return get_cache_dir() / RATINGS_CACHE_SUBDIR


def get_secondary_cache_dir():
    """Directory holding one secondary dataset file per week number."""
    return get_cache_dir() / SECONDARY_CACHE_SUBDIR


def _env_number(name, default, cast):
    raw = os.getenv(name)
    if raw is None or raw == '':
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Invalid {name} '{raw}', using {default}")
        return default


def get_pool_settings():
    """
    Get connection pool limits.

    Returns:
        dict: max_size, acquire_timeout, statement_timeout and busy_timeout
    """
    return {
        'max_size': _env_number('DB_POOL_SIZE', DEFAULT_POOL_SIZE, int),
        'acquire_timeout': _env_number('DB_ACQUIRE_TIMEOUT', DEFAULT_ACQUIRE_TIMEOUT, float),
        'statement_timeout': _env_number('DB_STATEMENT_TIMEOUT', DEFAULT_STATEMENT_TIMEOUT, float),
        'busy_timeout': _env_number('DB_BUSY_TIMEOUT', DEFAULT_BUSY_TIMEOUT, float),
    }


def get_lookup_workers():
    """Number of threads used for read-only dimension lookups."""
    return _env_number('DB_LOOKUP_WORKERS', DEFAULT_LOOKUP_WORKERS, int)


if __name__ == "__main__":
    print("Ratings Pipeline Configuration")
    print("=" * 50)
    print(f"Current environment: {get_environment()}")
    print(f"Database path: {get_database_path()}")
    print(f"Ratings cache: {get_ratings_cache_dir()}")
    print(f"Secondary cache: {get_secondary_cache_dir()}")
    print(f"Pool settings: {get_pool_settings()}")
