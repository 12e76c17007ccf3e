"""Tests for the raw record schemas.

Scraped values arrive as display strings ("1,234.5", "-", ""); the records
turn them into typed values and report bad input as ValidationError.
"""
from datetime import date

import pytest

from fantrax_pipeline.core.exceptions import ValidationError
from fantrax_pipeline.services.sync.records import (
    MatchupRecord,
    MlbGameRecord,
    PlayerRecord,
    RosterRecord,
    StandingRecord,
    TeamDailyBatch,
    TeamPitchingRecord,
    extract_batter_lines,
    parse_record,
)


class TestScrapedRecords:
    """Fantasy platform records."""

    def test_standing_cleans_display_numbers(self):
        """Thousands separators and placeholders are handled."""
        record = parse_record(StandingRecord, {
            "teamId": "tmA",
            "teamName": "Moonshots",
            "rank": "1",
            "wins": "12",
            "winPercentage": ".750",
            "gamesBack": "-",
            "fantasyPointsFor": "1,234.5",
            "waiverWireOrder": "8",
        })

        stats = record.stats()
        assert stats["rank"] == 1
        assert stats["win_percentage"] == pytest.approx(0.75)
        assert stats["games_back"] is None
        assert stats["fantasy_points_for"] == pytest.approx(1234.5)
        assert stats["waiver_position"] == 8
        assert "team_id" not in stats

    def test_missing_team_id_is_validation_error(self):
        """A record without its key field is rejected with the field name."""
        with pytest.raises(ValidationError) as exc_info:
            parse_record(StandingRecord, {"teamName": "Nobody"})

        assert exc_info.value.entity == "StandingRecord"
        assert "teamId" in exc_info.value.fields

    def test_non_mapping_is_validation_error(self):
        """Only dicts are accepted as raw records."""
        with pytest.raises(ValidationError):
            parse_record(StandingRecord, ["tmA"])

    def test_matchup_period_type(self):
        """Period type defaults to regular season and must be known."""
        record = parse_record(MatchupRecord, {"periodNumber": 5, "awayTeamId": "a", "homeTeamId": "b"})
        assert record.period_number == "5"
        assert record.period_type == "Regular Season"

        with pytest.raises(ValidationError):
            parse_record(MatchupRecord, {
                "periodNumber": 5, "awayTeamId": "a", "homeTeamId": "b", "periodType": "Exhibition",
            })

    def test_roster_record(self):
        """Roster slots need a name and an integer slot."""
        record = parse_record(RosterRecord, {
            "playerName": "Mike Trout",
            "positionCode": "OF",
            "rosterSlot": "2",
            "isActive": True,
        })
        assert record.roster_slot == 2
        assert record.normalized_name is None

        with pytest.raises(ValidationError):
            parse_record(RosterRecord, {"playerName": "", "positionCode": "OF", "rosterSlot": 1})

    def test_team_pitching_counters(self):
        """The team pitching line accepts 'ip' and maps strikeouts to k."""
        record = parse_record(TeamPitchingRecord, {
            "teamName": "Moonshots",
            "fantasyPoints": "18",
            "ip": "6.1",
            "strikeouts": "7",
            "earned_runs": "",
        })

        counters = record.counters()
        assert counters["innings_pitched"] == "6.1"
        assert counters["k"] == 7
        assert counters["earned_runs"] == 0
        assert record.fantasy_points == 18.0
        assert record.active is True

    def test_team_daily_batch_date(self):
        """The batch header parses its date."""
        batch = parse_record(TeamDailyBatch, {"teamId": "tmA", "periodNumber": "5", "date": "2023-05-10"})
        assert batch.stat_date == date(2023, 5, 10)
        assert batch.period_number == 5


class TestMlbRecords:
    """MLB API payloads."""

    def test_game_from_api_flattens(self):
        """Nested status, teams and venue are flattened."""
        game = MlbGameRecord.from_api({
            "gamePk": 717465,
            "season": "2023",
            "officialDate": "2023-05-10",
            "gameType": "R",
            "status": {"abstractGameState": "Final"},
            "teams": {
                "away": {"team": {"id": 108}, "score": 3},
                "home": {"team": {"id": 147}, "score": 5},
            },
            "venue": {"id": 3313, "name": "Yankee Stadium"},
        })

        assert game.game_pk == 717465
        assert game.official_date == date(2023, 5, 10)
        assert game.abstract_game_state == "Final"
        assert game.home_team_id == 147
        assert game.away_team_score == 3
        assert game.venue_name == "Yankee Stadium"

    def test_player_hand_codes(self):
        """batSide/pitchHand objects collapse to their code."""
        player = parse_record(PlayerRecord, {
            "id": 545361,
            "fullName": "Mike Trout",
            "batSide": {"code": "R", "description": "Right"},
            "pitchHand": {"code": "R", "description": "Right"},
        })
        assert player.bat_side == "R"
        assert player.pitch_hand == "R"

    def test_extract_batter_lines_skips_non_batters(self):
        """Batters with no plate appearance are left out."""
        boxscore = {
            "teams": {
                "away": {
                    "team": {"id": 108, "name": "Los Angeles Angels"},
                    "batters": [545361, 999],
                    "players": {
                        "ID545361": {
                            "person": {"id": 545361, "fullName": "Mike Trout"},
                            "stats": {"batting": {"atBats": 4, "hits": 2, "homeRuns": 1, "summary": "2-4 | HR"}},
                        },
                        "ID999": {
                            "person": {"id": 999, "fullName": "Pinch Runner"},
                            "stats": {"batting": {"stolenBases": 1}},
                        },
                    },
                },
                "home": {"team": {"id": 147, "name": "New York Yankees"}, "batters": [], "players": {}},
            }
        }

        lines = extract_batter_lines(717465, boxscore)

        assert len(lines) == 1
        assert lines[0]["player_id"] == 545361
        assert lines[0]["team_id"] == 108
        assert lines[0]["home_runs"] == 1
        assert lines[0]["batting_summary"] == "2-4 | HR"
