"""
Madden NFL player ratings pipeline.

Syncs weekly rating snapshots into a relational store and reconciles them
against a secondary player dataset.
"""

__version__ = "0.1.0"
