"""Similarity scoring and display-name quality for player identities."""

import re
from typing import Optional

from rapidfuzz.distance import Levenshtein

from tracker import Friend

# Containment alone must never beat a real near-exact match
CONTAINMENT_CAP = 0.85

# Cores must be longer than this to be compared
MIN_CORE_LENGTH = 2

# Squad tags that OCR keeps or drops around the same player name
CLAN_TAGS: tuple[str, ...] = (
    'atrs', 'rrq', 'evos', 'onic', 'geek', 'btr', 'team', 'clan', 'squad',
)

_NON_ALNUM_RE = re.compile(r'[^a-z0-9]')
_DIGITS_RE = re.compile(r'\d')
_SPECIAL_CHARS_RE = re.compile(r'[^a-z0-9\s]', re.IGNORECASE)


def normalize_for_comparison(text: Optional[str]) -> str:
    """Lowercase a name and drop everything that is not a letter or digit.

    Args:
        text: Raw identifier or display name.

    Returns:
        Normalized string for comparison.
    """
    return _NON_ALNUM_RE.sub('', (text or '').lower())


def _ratio(a: str, b: str) -> float:
    if not a and not b:
        return 1.0
    return Levenshtein.normalized_similarity(a, b)


def edit_similarity(a: str, b: str) -> float:
    """1 - levenshtein / max length, on normalized strings."""
    return _ratio(normalize_for_comparison(a), normalize_for_comparison(b))


def loose_similarity(a: str, b: str) -> float:
    """Edit similarity with digits removed (OCR appends stray digits)."""
    na = _DIGITS_RE.sub('', normalize_for_comparison(a))
    nb = _DIGITS_RE.sub('', normalize_for_comparison(b))
    return _ratio(na, nb)


def containment_similarity(a: str, b: str) -> float:
    """Length ratio if one normalized name contains the other, capped."""
    na = normalize_for_comparison(a)
    nb = normalize_for_comparison(b)
    if not na or not nb:
        return 0.0
    if na in nb or nb in na:
        return min(CONTAINMENT_CAP, min(len(na), len(nb)) / max(len(na), len(nb)))
    return 0.0


def strip_clan_tags(normalized: str) -> str:
    """Remove one known squad tag from the start and one from the end."""
    core = normalized
    tags = sorted(CLAN_TAGS, key=len, reverse=True)
    for tag in tags:
        if core.startswith(tag) and len(core) > len(tag):
            core = core[len(tag):]
            break
    for tag in tags:
        if core.endswith(tag) and len(core) > len(tag):
            core = core[:-len(tag)]
            break
    return core


def core_similarity(a: str, b: str) -> float:
    """Edit similarity of the names with squad tags removed.

    Returns 0.0 unless both cores are longer than MIN_CORE_LENGTH.
    """
    core_a = strip_clan_tags(normalize_for_comparison(a))
    core_b = strip_clan_tags(normalize_for_comparison(b))
    if len(core_a) <= MIN_CORE_LENGTH or len(core_b) <= MIN_CORE_LENGTH:
        return 0.0
    return _ratio(core_a, core_b)


def name_similarity(a: str, b: str) -> float:
    """Best score of the edit, loose, containment and core strategies.

    Args:
        a: First name or identifier.
        b: Second name or identifier.

    Returns:
        Similarity between 0.0 and 1.0.
    """
    return max(
        edit_similarity(a, b),
        loose_similarity(a, b),
        containment_similarity(a, b),
        core_similarity(a, b),
    )


def candidate_similarity(
    target_id: str,
    target_display_name: Optional[str],
    friend: Friend,
) -> float:
    """Score a roster entry against a detected player.

    Identifiers are always compared; display names only when both sides
    have one. The better of the two counts.
    """
    score = name_similarity(target_id, friend.game_user_id)
    if target_display_name and friend.display_name:
        score = max(score, name_similarity(target_display_name, friend.display_name))
    return round(score, 4)


def count_special_chars(name: str) -> int:
    """Count characters that are neither alphanumeric nor whitespace."""
    return len(_SPECIAL_CHARS_RE.findall(name))


def display_name_key(name: str) -> tuple[int, int]:
    """Sort key for display names: fewer special characters, then shorter."""
    return count_special_chars(name), len(name)


def prefer_display_name(current: Optional[str], candidate: Optional[str]) -> bool:
    """Decide whether *candidate* should replace *current* as display name.

    Prefers fewer special characters, then the shorter name. Any name
    beats no name. On a full tie the candidate (newer) name wins.

    Args:
        current: Display name stored for the friend, if any.
        candidate: Display name just read from a scoreboard.

    Returns:
        True if the stored name should be replaced.
    """
    if not candidate or candidate == current:
        return False
    if not current:
        return True
    return display_name_key(candidate) <= display_name_key(current)
