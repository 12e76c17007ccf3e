"""Matching utilities shared by the sync and matching services."""

from fantrax_pipeline.services.sync.utils.name_normalizer import (
    normalize_player_name,
    normalize_team_name,
    name_similarity,
    are_names_equal,
)

__all__ = [
    "normalize_player_name",
    "normalize_team_name",
    "name_similarity",
    "are_names_equal",
]
