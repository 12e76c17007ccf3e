"""Tests for player and team name normalization.

Normalized names are the join key between fantasy roster slots and MLB
player records, so each rule gets a case here: trailing suffixes, a leading
"The", punctuation inside initials, accents, case and spacing. Team-name
similarity backs the pitching-staff linker.
"""
from fantrax_pipeline.services.sync.utils.name_normalizer import (
    are_names_equal,
    name_similarity,
    normalize_player_name,
    normalize_team_name,
)


class TestNormalizePlayerName:
    """Test suite for player name normalization."""

    # Suffixes

    def test_strips_jr(self):
        """Jr with or without a period."""
        assert normalize_player_name("Vladimir Guerrero Jr.") == "vladimir guerrero"
        assert normalize_player_name("Bobby Witt Jr") == "bobby witt"

    def test_strips_sr(self):
        """Sr. goes too."""
        assert normalize_player_name("Ken Griffey Sr.") == "ken griffey"

    def test_strips_generational_numerals(self):
        """II, III and IV are dropped from the end."""
        assert normalize_player_name("Michael Harris II") == "michael harris"
        assert normalize_player_name("John Smith III") == "john smith"
        assert normalize_player_name("John Smith IV") == "john smith"

    def test_removes_only_last_suffix(self):
        """Only the trailing suffix is removed."""
        assert normalize_player_name("Player Jr. III") == "player jr"

    def test_lone_suffix_is_kept(self):
        """A name that is only a suffix token is not emptied."""
        assert normalize_player_name("Jr.") == "jr"

    # Articles

    def test_removes_leading_the(self):
        """A leading 'The' word is dropped, 'Theo' is not."""
        assert normalize_player_name("The Yankees") == "yankees"
        assert normalize_player_name("Theo Epstein") == "theo epstein"

    # Punctuation

    def test_collapses_initials(self):
        """J.D. and A.J. become one token."""
        assert normalize_player_name("J.D. Martinez") == "jd martinez"
        assert normalize_player_name("A.J. Pollock") == "aj pollock"

    def test_drops_apostrophes_and_hyphens(self):
        """Inner punctuation is removed without a space."""
        assert normalize_player_name("Travis d'Arnaud") == "travis darnaud"
        assert normalize_player_name("Isiah Kiner-Falefa") == "isiah kinerfalefa"

    # Accents

    def test_folds_accents(self):
        """Acuña and Ramírez fold to ASCII."""
        assert normalize_player_name("Ronald Acuña Jr.") == "ronald acuna"
        assert normalize_player_name("José Ramírez") == "jose ramirez"
        assert normalize_player_name("Yoán Moncada") == "yoan moncada"

    # Case and spacing

    def test_lowercases(self):
        """Output is lowercase."""
        assert normalize_player_name("MIKE TROUT") == "mike trout"

    def test_normalizes_whitespace(self):
        """Runs of whitespace collapse to one space."""
        assert normalize_player_name("  Mike   Trout\t") == "mike trout"

    # Degenerate input

    def test_empty_and_none(self):
        """Empty or missing input normalizes to an empty string."""
        assert normalize_player_name("") == ""
        assert normalize_player_name(None) == ""

    def test_punctuation_only(self):
        """Nothing is left of a punctuation-only string."""
        assert normalize_player_name("' . -") == ""

    def test_normalizing_twice_is_stable(self):
        """A normalized name normalizes to itself."""
        first = normalize_player_name("J.D. Martinez Jr.")
        assert normalize_player_name(first) == first


class TestTeamNames:
    """Team name normalization and similarity."""

    def test_normalize_team_name(self):
        """Punctuation and a leading article are dropped."""
        assert normalize_team_name("The St. Louis Cardinals") == "st louis cardinals"
        assert normalize_team_name("") == ""

    def test_similarity_scores_close_names_high(self):
        """Close variants score well above unrelated names."""
        assert name_similarity("LA Dodgers", "L.A. Dodgers") >= 90
        assert name_similarity("LA Dodgers", "NY Yankees") < 70

    def test_are_names_equal(self):
        """Exact after normalization, optionally fuzzy."""
        assert are_names_equal("Ronald Acuña Jr.", "ronald acuna")
        assert not are_names_equal("Mike Trout", "Mike Trot")
        assert are_names_equal("Mike Trout", "Mike Trot", fuzzy=True, threshold=85)
