"""
Player Ratings Module

Weekly ingestion of the ratings snapshot: fetch, normalize, commit.
"""
