"""
Services module for the pipeline's business logic.

This module organizes services into:
- sync: identity resolution, raw record schemas and bulk reconciliation
- aggregation: derived daily team and matchup scores
- matching: repair passes linking roster slots to players and pitching staffs
"""
