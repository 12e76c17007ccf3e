"""
Raw scraper and MLB API record schemas.

Each scraper emits plain dicts with its own camelCase field names and
string-typed numbers ("1,234.5", "-", ""). The models here validate those
dicts and turn them into the keyword arguments the repositories take.

Pydantic's errors are translated into ``ValidationError`` by ``parse_record``
so callers only ever see the pipeline's own exception taxonomy.
"""
from datetime import date
from typing import Annotated, Any, Dict, List, Optional, Type, TypeVar

import pydantic
from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_validator

from fantrax_pipeline.core.exceptions import ValidationError
from fantrax_pipeline.models import PeriodType

M = TypeVar("M", bound=BaseModel)

_BLANKS = {"", "-", "--", "—", "n/a", "N/A"}


def _clean_number(value: Any) -> Any:
    """Strip thousands separators and map scraped placeholders to None."""
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if text in _BLANKS:
            return None
        if text.startswith("+"):
            text = text[1:]
        try:
            number = float(text)
        except ValueError:
            return text  # let pydantic report it
        return int(number) if number.is_integer() and "." not in text else number
    return value


def _zero_if_blank(value: Any) -> Any:
    cleaned = _clean_number(value)
    return 0 if cleaned is None else cleaned


def _text_or_none(value: Any) -> Any:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


Number = Annotated[Optional[float], BeforeValidator(_clean_number)]
Count = Annotated[Optional[int], BeforeValidator(_clean_number)]
Counter = Annotated[int, BeforeValidator(_zero_if_blank)]
Points = Annotated[float, BeforeValidator(_zero_if_blank)]
Text = Annotated[Optional[str], BeforeValidator(_text_or_none)]
Key = Annotated[str, BeforeValidator(lambda v: str(v).strip() if v is not None else v)]


class RawRecord(BaseModel):
    """Base for scraped records: accepts aliases or field names, ignores extras."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", str_strip_whitespace=True)


def parse_record(model: Type[M], raw: Any) -> M:
    """
    Validate one raw record.

    Raises:
        ValidationError: With the offending field names
    """
    if isinstance(raw, model):
        return raw
    if not isinstance(raw, dict):
        raise ValidationError(f"{model.__name__} expects a mapping, got {type(raw).__name__}", entity=model.__name__)
    try:
        return model.model_validate(raw)
    except pydantic.ValidationError as e:
        fields = [".".join(str(part) for part in error["loc"]) for error in e.errors()]
        raise ValidationError(
            f"Invalid {model.__name__}: {', '.join(fields)}",
            entity=model.__name__,
            fields=fields,
        ) from e


# ============================================================================
# Schedule, standings and season stats
# ============================================================================

class MatchupRecord(RawRecord):
    """One row of the season schedule scrape."""
    period_number: Key = Field(alias="periodNumber")
    period_type: str = Field(default=PeriodType.REGULAR_SEASON.value, alias="periodType")
    date_range: Text = Field(default=None, alias="dateRange")
    away_team_id: Key = Field(alias="awayTeamId")
    away_team_name: Text = Field(default=None, alias="awayTeamName")
    home_team_id: Key = Field(alias="homeTeamId")
    home_team_name: Text = Field(default=None, alias="homeTeamName")
    matchup_id: Text = Field(default=None, alias="matchupId")
    season: Text = None

    @field_validator("period_type", mode="before")
    @classmethod
    def _known_period_type(cls, value):
        if value is None or value == "":
            return PeriodType.REGULAR_SEASON.value
        return PeriodType(value).value


class TeamScopedRecord(RawRecord):
    """Records that name a fantasy team by platform id."""
    team_id: Key = Field(alias="teamId")
    team_name: Text = Field(default=None, alias="teamName")


class StandingRecord(TeamScopedRecord):
    team_icon_url: Text = Field(default=None, alias="teamIconUrl")
    rank: Count = None
    wins: Count = None
    losses: Count = None
    ties: Count = None
    win_percentage: Number = Field(default=None, alias="winPercentage")
    division_record: Text = Field(default=None, alias="divisionRecord")
    games_back: Number = Field(default=None, alias="gamesBack")
    waiver_position: Count = Field(
        default=None,
        validation_alias=AliasChoices("waiverWireOrder", "waiverPosition", "waiver_position"),
    )
    fantasy_points_for: Number = Field(default=None, alias="fantasyPointsFor")
    fantasy_points_against: Number = Field(default=None, alias="fantasyPointsAgainst")
    streak: Text = None

    def stats(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"team_id", "team_name", "team_icon_url"})


class SeasonStatRecord(TeamScopedRecord):
    fantasy_points: Number = Field(default=None, alias="fantasyPoints")
    adjustments: Number = None
    total_points: Number = Field(default=None, alias="totalPoints")
    fantasy_points_per_game: Number = Field(default=None, alias="fantasyPointsPerGame")
    games_played: Count = Field(default=None, alias="gamesPlayed")
    hitting_points: Number = Field(default=None, alias="hittingPoints")
    team_pitching_points: Number = Field(default=None, alias="teamPitchingPoints")
    waiver_position: Count = Field(default=None, alias="waiverPosition")
    points_behind_leader: Number = Field(default=None, alias="pointsBehindLeader")

    def stats(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"team_id", "team_name"})


class HittingStatRecord(TeamScopedRecord):
    runs: Count = None
    singles: Count = None
    doubles: Count = None
    triples: Count = None
    home_runs: Count = Field(default=None, alias="homeRuns")
    runs_batted_in: Count = Field(default=None, alias="runsBattedIn")
    walks: Count = None
    stolen_bases: Count = Field(default=None, alias="stolenBases")
    caught_stealing: Count = Field(default=None, alias="caughtStealing")

    def stats(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"team_id", "team_name"})


class PitchingStatRecord(TeamScopedRecord):
    wins: Count = None
    innings_pitched: Text = Field(default=None, alias="inningsPitched")
    earned_runs: Count = Field(default=None, alias="earnedRuns")
    hits_plus_walks: Count = Field(default=None, alias="hitsPlusWalks")
    strikeouts: Count = None

    def stats(self) -> Dict[str, Any]:
        return self.model_dump(exclude={"team_id", "team_name"})


# ============================================================================
# Rosters
# ============================================================================

class RosterRecord(RawRecord):
    """One roster slot from the roster scrape."""
    player_name: str = Field(alias="playerName", min_length=1)
    normalized_name: Text = Field(default=None, alias="normalizedName")
    position_code: Key = Field(alias="positionCode")
    roster_slot: int = Field(alias="rosterSlot")
    is_active: bool = Field(default=False, alias="isActive")
    mlb_team: Text = Field(default=None, alias="mlbTeam")
    bat_side: Text = Field(default=None, alias="batSide")
    fantrax_player_id: Text = Field(default=None, alias="fantraxPlayerId")


# ============================================================================
# Daily player stats
# ============================================================================

class HittingPlayerRecord(RawRecord):
    """One hitter's line in a team's daily stats scrape."""
    player_id: Key = Field(alias="playerId")
    name: Text = None
    mlb_team: Text = Field(default=None, alias="mlbTeam")
    position_played: Text = Field(default=None, alias="positionPlayed")
    active: bool = False
    fantasy_points: Points = Field(default=0.0, alias="fantasyPoints")
    ab: Counter = 0
    h: Counter = 0
    r: Counter = 0
    singles: Counter = 0
    doubles: Counter = 0
    triples: Counter = 0
    hr: Counter = 0
    rbi: Counter = 0
    bb: Counter = 0
    sb: Counter = 0
    cs: Counter = 0

    def counters(self) -> Dict[str, int]:
        return self.model_dump(include={"ab", "h", "r", "singles", "doubles", "triples", "hr", "rbi", "bb", "sb", "cs"})


class TeamPitchingRecord(RawRecord):
    """The team-pitching line of a team's daily stats scrape."""
    team_name: Text = Field(default=None, alias="teamName")
    position_played: Text = Field(default=None, alias="positionPlayed")
    active: bool = True
    fantasy_points: Points = Field(default=0.0, alias="fantasyPoints")
    wins: Counter = 0
    innings_pitched: Text = Field(default=None, validation_alias=AliasChoices("ip", "inningsPitched", "innings_pitched"))
    earned_runs: Counter = Field(default=0, alias="earned_runs")
    hits_allowed: Counter = Field(default=0, alias="hits_allowed")
    bb_allowed: Counter = Field(default=0, alias="bb_allowed")
    h_plus_bb: Counter = Field(default=0, alias="h_plus_bb")
    strikeouts: Counter = Field(default=0, validation_alias=AliasChoices("strikeouts", "k"))

    def counters(self) -> Dict[str, Any]:
        return {
            "wins": self.wins,
            "innings_pitched": self.innings_pitched,
            "earned_runs": self.earned_runs,
            "hits_allowed": self.hits_allowed,
            "bb_allowed": self.bb_allowed,
            "h_plus_bb": self.h_plus_bb,
            "k": self.strikeouts,
        }


class TeamDailyBatch(RawRecord):
    """Everything the daily stats scrape returned for one fantasy team."""
    team_id: Key = Field(alias="teamId")
    team_name: Text = Field(default=None, alias="teamName")
    period_number: Count = Field(default=None, alias="periodNumber")
    stat_date: Optional[date] = Field(default=None, alias="date")
    hitting_players: List[Dict[str, Any]] = Field(default_factory=list, alias="hittingPlayers")
    pitching_players: List[Dict[str, Any]] = Field(default_factory=list, alias="pitchingPlayers")


# ============================================================================
# MLB API
# ============================================================================

class MlbGameRecord(RawRecord):
    """A game from the MLB schedule endpoint, flattened."""
    game_pk: int = Field(alias="gamePk")
    season: Text = None
    official_date: Optional[date] = Field(default=None, alias="officialDate")
    game_type: Text = Field(default=None, alias="gameType")
    abstract_game_state: Text = Field(default=None, alias="abstractGameState")
    day_night: Text = Field(default=None, alias="dayNight")
    home_team_id: Optional[int] = Field(default=None, alias="homeTeamId")
    away_team_id: Optional[int] = Field(default=None, alias="awayTeamId")
    home_team_score: Optional[int] = Field(default=None, alias="homeTeamScore")
    away_team_score: Optional[int] = Field(default=None, alias="awayTeamScore")
    venue_id: Optional[int] = Field(default=None, alias="venueId")
    venue_name: Text = Field(default=None, alias="venueName")

    @classmethod
    def from_api(cls, game: Dict[str, Any]) -> "MlbGameRecord":
        """Flatten ``game.status``, ``game.teams.{home,away}`` and ``game.venue``."""
        teams = game.get("teams") or {}
        home = teams.get("home") or {}
        away = teams.get("away") or {}
        venue = game.get("venue") or {}
        flat = {
            "gamePk": game.get("gamePk"),
            "season": game.get("season"),
            "officialDate": game.get("officialDate"),
            "gameType": game.get("gameType"),
            "abstractGameState": (game.get("status") or {}).get("abstractGameState"),
            "dayNight": game.get("dayNight"),
            "homeTeamId": (home.get("team") or {}).get("id"),
            "awayTeamId": (away.get("team") or {}).get("id"),
            "homeTeamScore": home.get("score"),
            "awayTeamScore": away.get("score"),
            "venueId": venue.get("id"),
            "venueName": venue.get("name"),
        }
        return parse_record(cls, flat)


# boxscore "batting" key -> batter_game_stats column
BATTING_FIELD_MAP = {
    "gamesPlayed": "games_played",
    "plateAppearances": "plate_appearances",
    "atBats": "at_bats",
    "runs": "runs",
    "hits": "hits",
    "doubles": "doubles",
    "triples": "triples",
    "homeRuns": "home_runs",
    "rbi": "rbi",
    "stolenBases": "stolen_bases",
    "caughtStealing": "caught_stealing",
    "baseOnBalls": "base_on_balls",
    "intentionalWalks": "intentional_walks",
    "strikeOuts": "strikeouts",
    "hitByPitch": "hit_by_pitch",
    "sacFlies": "sac_flies",
    "sacBunts": "sac_bunts",
    "groundIntoDoublePlay": "ground_into_double_play",
    "groundIntoTriplePlay": "ground_into_triple_play",
    "flyOuts": "fly_outs",
    "groundOuts": "ground_outs",
    "popOuts": "pop_outs",
    "lineOuts": "line_outs",
    "airOuts": "air_outs",
    "totalBases": "total_bases",
    "leftOnBase": "left_on_base",
    "summary": "batting_summary",
    "avg": "avg",
    "obp": "obp",
    "slg": "slg",
    "ops": "ops",
    "atBatsPerHomeRun": "at_bats_per_home_run",
    "stolenBasePercentage": "stolen_base_percentage",
}

# A batter with none of these never came to the plate
_PLATE_APPEARANCE_KEYS = ("atBats", "baseOnBalls", "hitByPitch", "sacBunts", "sacFlies")


def extract_batter_lines(game_pk: int, boxscore: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Pull per-batter lines out of an MLB boxscore payload.

    Batters who never came to the plate (pinch runners, defensive
    substitutions) are skipped.
    """
    lines = []
    teams = boxscore.get("teams") or {}
    for side in ("away", "home"):
        team_data = teams.get(side) or {}
        team = team_data.get("team") or {}
        players = team_data.get("players") or {}
        for batter_id in team_data.get("batters") or []:
            player = players.get(f"ID{batter_id}") or {}
            batting = (player.get("stats") or {}).get("batting") or {}
            if not any(batting.get(key) for key in _PLATE_APPEARANCE_KEYS):
                continue
            person = player.get("person") or {}
            line = {
                "game_pk": game_pk,
                "player_id": person.get("id", batter_id),
                "player_name": person.get("fullName"),
                "team_id": team.get("id"),
                "team_name": team.get("name"),
            }
            for api_key, column in BATTING_FIELD_MAP.items():
                if api_key in batting:
                    line[column] = batting[api_key]
            lines.append(line)
    return lines


class BatterLineRecord(RawRecord):
    """A flattened boxscore batting line (see ``extract_batter_lines``)."""
    game_pk: int
    player_id: int
    player_name: Text = None
    team_id: int
    team_name: Text = None
    batting_summary: Text = None
    games_played: Counter = 0
    plate_appearances: Counter = 0
    at_bats: Counter = 0
    runs: Counter = 0
    hits: Counter = 0
    doubles: Counter = 0
    triples: Counter = 0
    home_runs: Counter = 0
    rbi: Counter = 0
    stolen_bases: Counter = 0
    caught_stealing: Counter = 0
    base_on_balls: Counter = 0
    intentional_walks: Counter = 0
    strikeouts: Counter = 0
    hit_by_pitch: Counter = 0
    sac_flies: Counter = 0
    sac_bunts: Counter = 0
    ground_into_double_play: Counter = 0
    ground_into_triple_play: Counter = 0
    fly_outs: Counter = 0
    ground_outs: Counter = 0
    pop_outs: Counter = 0
    line_outs: Counter = 0
    air_outs: Counter = 0
    total_bases: Counter = 0
    left_on_base: Counter = 0
    avg: str = ".000"
    obp: str = ".000"
    slg: str = ".000"
    ops: str = ".000"
    at_bats_per_home_run: str = "-"
    stolen_base_percentage: str = "-"


class MlbTeamRecord(RawRecord):
    """A club from the MLB teams endpoint."""
    id: int
    name: str
    abbreviation: Text = None
    short_name: Text = Field(default=None, alias="shortName")


class PlayerRecord(RawRecord):
    """A person from the MLB people endpoint."""
    id: int
    full_name: str = Field(alias="fullName", min_length=1)
    first_name: Text = Field(default=None, alias="firstName")
    last_name: Text = Field(default=None, alias="lastName")
    birth_date: Optional[date] = Field(default=None, alias="birthDate")
    active: Optional[bool] = None
    bat_side: Text = Field(default=None, alias="batSide")
    pitch_hand: Text = Field(default=None, alias="pitchHand")
    mlb_debut_date: Optional[date] = Field(default=None, alias="mlbDebutDate")

    @field_validator("bat_side", "pitch_hand", mode="before")
    @classmethod
    def _hand_code(cls, value):
        # The API nests these as {"code": "R", "description": "Right"}
        if isinstance(value, dict):
            return value.get("code")
        return value
