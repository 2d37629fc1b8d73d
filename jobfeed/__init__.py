"""
Tiered Job Feed
===============

Aggregates engineering job listings from public job-board APIs, scores
them against a candidate profile and serves a tier-weighted feed.

Features:
- Concurrent polling of Greenhouse and Workable boards
- URL de-duplication and keyword/location/recency scoring
- 70/20/10 company-tier mixing with recent-first ordering
- Pollable feed with ETag / Last-Modified conditional fetch
"""

__version__ = "1.0.0"
