"""Orchestration Module - scheduled aggregation passes"""

from .scheduler import FeedScheduler, feed_scheduler

__all__ = ["FeedScheduler", "feed_scheduler"]
