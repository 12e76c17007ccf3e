"""Roster repair passes."""

from fantrax_pipeline.services.matching.roster_matcher import MatchSummary, RosterMatcher

__all__ = ["MatchSummary", "RosterMatcher"]
