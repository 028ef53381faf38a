"""
Development Traits Module

Reconciles ingested ratings against a secondary player dataset to fill in
development traits and draft positions.
"""
