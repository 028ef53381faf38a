"""
Central configuration module for the ratings pipeline.
"""

from .database_config import (
    get_environment,
    get_database_path,
    get_cache_dir,
    get_ratings_cache_dir,
    get_secondary_cache_dir,
    get_pool_settings,
    get_lookup_workers,
    is_test_environment,
)

__all__ = [
    'get_environment',
    'get_database_path',
    'get_cache_dir',
    'get_ratings_cache_dir',
    'get_secondary_cache_dir',
    'get_pool_settings',
    'get_lookup_workers',
    'is_test_environment',
]
