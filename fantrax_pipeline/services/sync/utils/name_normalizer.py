"""Name normalization for joining fantasy roster names to MLB records.

The fantasy platform and the MLB feeds disagree on small things:
- Suffixes: "Jr.", "Sr.", "II", "III", "IV"
- Leading article: "The Yankees" → "yankees"
- Punctuation: "J.D. Martinez" → "jd martinez"
- Accents: "Ronald Acuña Jr." → "ronald acuna"
- Case and spacing: "MIKE  TROUT" → "mike trout"
"""
import re
import unicodedata

from rapidfuzz import fuzz

# Compared after lowercasing and with dots removed
SUFFIXES = {'jr', 'sr', 'ii', 'iii', 'iv'}

LEADING_ARTICLE = 'the'

_PUNCTUATION = re.compile(r'[^\w\s]')


def normalize_player_name(name: str) -> str:
    """
    Reduce a player name to the form stored in ``normalized_full_name``.

    Accents are folded and the name lowercased before one trailing suffix
    and a leading "The" are dropped; punctuation goes last, so "J.D."
    becomes "jd" rather than "j d".

    Examples:
        >>> normalize_player_name("J.D. Martinez")
        'jd martinez'
        >>> normalize_player_name("Vladimir Guerrero Jr.")
        'vladimir guerrero'
        >>> normalize_player_name("Ronald Acuña")
        'ronald acuna'
    """
    if not name:
        return ""
    name = _strip_accents(name).lower()
    return _squash(_remove_leading_article(_remove_suffixes(name)))


def _remove_suffixes(name: str) -> str:
    """Drop one generational suffix from the end; a lone "Jr." stays."""
    parts = name.split()
    if len(parts) > 1 and parts[-1].replace('.', '') in SUFFIXES:
        return ' '.join(parts[:-1])
    return name


def _remove_leading_article(name: str) -> str:
    parts = name.split()
    if len(parts) > 1 and parts[0] == LEADING_ARTICLE:
        return ' '.join(parts[1:])
    return name


def _strip_accents(name: str) -> str:
    # NFD splits 'ñ' into 'n' plus a combining tilde (category Mn)
    return ''.join(
        ch for ch in unicodedata.normalize('NFD', name)
        if unicodedata.category(ch) != 'Mn'
    )


def _squash(name: str) -> str:
    """Delete punctuation and collapse whitespace."""
    return ' '.join(_PUNCTUATION.sub('', name).split())


def normalize_team_name(team_name: str) -> str:
    """
    Normalize MLB club names for comparison.

    "The St. Louis Cardinals" → "st louis cardinals"
    """
    if not team_name:
        return ""
    return _squash(_remove_leading_article(_strip_accents(team_name).lower()))


def name_similarity(name1: str, name2: str) -> float:
    """rapidfuzz WRatio (0-100) of the two team names after normalization."""
    return fuzz.WRatio(normalize_team_name(name1), normalize_team_name(name2))


def are_names_equal(name1: str, name2: str, fuzzy: bool = False, threshold: int = 90) -> bool:
    """
    Compare two player names after normalization.

    Args:
        fuzzy: Fall back to a WRatio comparison when the exact forms differ
        threshold: WRatio score a fuzzy pair must reach
    """
    left = normalize_player_name(name1)
    right = normalize_player_name(name2)
    if left == right:
        return True
    return fuzzy and fuzz.WRatio(left, right) >= threshold
