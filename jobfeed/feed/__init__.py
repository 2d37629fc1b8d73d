"""Feed Module - serving stored listings to pollers"""

from .query import FeedQuery
from .store import JobStore, QueryResult
from .service import FeedService, FeedResult, freshness_token

__all__ = [
    "FeedQuery",
    "JobStore",
    "QueryResult",
    "FeedService",
    "FeedResult",
    "freshness_token",
]
