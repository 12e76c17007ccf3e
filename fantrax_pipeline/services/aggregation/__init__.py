"""Derived daily team and matchup scores."""

from fantrax_pipeline.services.aggregation.daily_aggregator import DailyAggregator, as_date

__all__ = ["DailyAggregator", "as_date"]
