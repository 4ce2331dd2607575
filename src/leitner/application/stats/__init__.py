# Application Stats Package
from .aggregator import StatsAggregator, summarize

__all__ = ["StatsAggregator", "summarize"]
