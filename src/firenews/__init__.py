"""
FireNews - Regional fire and emergency news monitoring aggregator.

This package fans out over many RSS/Atom feeds, normalizes their items,
reconciles duplicate coverage across publishers, classifies items by
relevance and serves a single time-ordered list per category.
"""

__version__ = "0.4.0"
