"""Player-name cleanup and identifier derivation for OCR'd scoreboard text."""

import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Optional

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 30

# Upper bound for the fixpoint loop in normalize_player_name()
_MAX_PASSES = 8

HERO_ALIASES: Mapping[str, str] = MappingProxyType({
    'layla': 'Layla',
    'miya': 'Miya',
    'alucard': 'Alucard',
    'eudora': 'Eudora',
    'tigreal': 'Tigreal',
    'fanny': 'Fanny',
    'yin': 'Yin',
    'zilong': 'Zilong',
    'balmond': 'Balmond',
    'saber': 'Saber',
    'nana': 'Nana',
    'bruno': 'Bruno',
    'clint': 'Clint',
    'gord': 'Gord',
    'franco': 'Franco',
})

_LEADING_SYMBOLS_RE = re.compile(r'^[©®™@#$\s&()]+')
_LEADING_SYMBOLS_SECOND_RE = re.compile(r'^[@#$\s()]+')
_CAMEL_RE = re.compile(r'([a-z0-9])([A-Z])')
_ACRONYM_WORD_RE = re.compile(r'([A-Z])([A-Z][a-z])')
_SHORT_FRAGMENT_RE = re.compile(r'^[a-z]{1,2}\s+')
# Five capitals only: the four-letter result can never match again
_STRAY_CAPITAL_RE = re.compile(r'^([A-Z])([A-Z]{4})(?=\s|$)')
_PREFIX_WORD_RE = re.compile(r'^[A-Za-z]{3,4}\s+[a-z]\s+(?=[A-Z])')
_TRAILING_DIGITS_RE = re.compile(r'\s*\d+$')
_TRAILING_SYMBOLS_RE = re.compile(r'[©®™@#$]+$')
_WHITESPACE_RE = re.compile(r'\s+')

_ID_INVALID_RE = re.compile(r'[^a-z0-9_\s]')
_UNDERSCORES_RE = re.compile(r'_+')

_KDA_LINE_RE = re.compile(r'^\d+[\s/]+\d+[\s/]+\d+')
_NUMBER_LINE_RE = re.compile(r'^\d+[km]?$', re.IGNORECASE)
_NAME_CHARS_RE = re.compile(
    r"""^([A-Za-z0-9\s`~!@#$%^&*()_\-+=\[\]{}|\\:;"'<>.,?/™©®]+)"""
)

# UI labels that show up on their own line on the result screen
_SKIP_PATTERNS = [
    re.compile(r'^(victory|defeat|win|lose)$', re.IGNORECASE),
    re.compile(r'^(duration|battleid|battle id)', re.IGNORECASE),
    re.compile(r'^(hero damage|turret damage|damage taken|teamfight)', re.IGNORECASE),
    re.compile(r'^(ranked|classic|brawl|rank)$', re.IGNORECASE),
    re.compile(r'^(level|rating|gold|gpm)$', re.IGNORECASE),
]


def _strip_stray_capital(match: re.Match) -> str:
    """Drop a stray capital fused to an acronym (BATRS -> ATRS).

    Kept when the letter recurs in the acronym, e.g. BABAA.
    """
    first, rest = match.group(1), match.group(2)
    if first in rest:
        return match.group(0)
    return rest


def _normalize_once(name: str) -> str:
    """Apply one pass of the OCR cleanup rules."""
    cleaned = name.strip()

    # Symbols can come concatenated ("& ©@"), so strip twice
    cleaned = _LEADING_SYMBOLS_RE.sub('', cleaned)
    cleaned = _LEADING_SYMBOLS_SECOND_RE.sub('', cleaned)

    # Re-insert spaces lost by OCR: "KaungKhant" -> "Kaung Khant",
    # "ATRSAgatsuma" -> "ATRS Agatsuma"
    cleaned = _CAMEL_RE.sub(r'\1 \2', cleaned)
    cleaned = _ACRONYM_WORD_RE.sub(r'\1 \2', cleaned)

    stripped = _SHORT_FRAGMENT_RE.sub('', cleaned)
    if stripped:
        cleaned = stripped

    cleaned = _STRAY_CAPITAL_RE.sub(_strip_stray_capital, cleaned)

    # "San d ATRS Agatsuma" -> "ATRS Agatsuma"
    cleaned = _PREFIX_WORD_RE.sub('', cleaned)

    cleaned = _TRAILING_DIGITS_RE.sub('', cleaned)
    cleaned = _TRAILING_SYMBOLS_RE.sub('', cleaned)

    return _WHITESPACE_RE.sub(' ', cleaned).strip()


def normalize_player_name(name: str) -> str:
    """Remove OCR artifacts from a player name.

    Handles cases like:
        "( ri BATRS Agatsuma" -> "ATRS Agatsuma"
        "& ©@ATRS Agatsuma"   -> "ATRS Agatsuma"
        "ATRSAgatsuma"        -> "ATRS Agatsuma"
        "BABA garou"          -> "BABA garou"

    The cleanup rules are applied until the name no longer changes, so
    normalizing an already normalized name is a no-op.

    Args:
        name: Raw name candidate from OCR text.

    Returns:
        Cleaned display name. May be shorter than MIN_NAME_LENGTH; callers
        decide whether to reject it.
    """
    cleaned = name
    for _ in range(_MAX_PASSES):
        result = _normalize_once(cleaned)
        if result == cleaned:
            break
        cleaned = result
    return cleaned


def derive_game_user_id(display_name: str) -> str:
    """Derive the lowercase, underscore-joined identifier of a display name.

    Args:
        display_name: A normalized display name.

    Returns:
        Identifier string, empty if nothing usable remains.
    """
    value = display_name.lower()
    value = _ID_INVALID_RE.sub('', value)
    value = _WHITESPACE_RE.sub('_', value)
    value = _UNDERSCORES_RE.sub('_', value)
    return value.strip('_')


def is_ui_label(text: str) -> bool:
    """Check whether a line is scoreboard chrome rather than a name."""
    if _KDA_LINE_RE.match(text) or _NUMBER_LINE_RE.match(text):
        return True
    return any(pattern.match(text) for pattern in _SKIP_PATTERNS)


def extract_player_name(text: str) -> Optional[tuple[str, str]]:
    """Extract a player name from a line or name candidate.

    Args:
        text: Raw OCR text believed to hold a player name.

    Returns:
        Tuple (display_name, game_user_id), or None if the text does not
        look like a name.
    """
    cleaned = text.strip()
    if is_ui_label(cleaned):
        return None

    if cleaned[:1] in ('@', '#'):
        cleaned = cleaned[1:].strip()

    if not MIN_NAME_LENGTH <= len(cleaned) <= MAX_NAME_LENGTH:
        return None

    match = _NAME_CHARS_RE.match(cleaned)
    if not match or len(match.group(1).strip()) < MIN_NAME_LENGTH:
        return None

    display_name = normalize_player_name(match.group(1))
    if len(display_name) < MIN_NAME_LENGTH:
        return None

    game_user_id = derive_game_user_id(display_name)
    if not game_user_id:
        return None

    return display_name, game_user_id


def normalize_hero(name: str, aliases: Mapping[str, str] = HERO_ALIASES) -> Optional[str]:
    """Map a hero name to its canonical spelling, or None if unknown."""
    return aliases.get(name.strip().lower())


def find_hero(text: str, aliases: Mapping[str, str] = HERO_ALIASES) -> Optional[str]:
    """Return the first known hero named in a line of text."""
    for word in re.findall(r'[A-Za-z]{3,}', text):
        hero = normalize_hero(word, aliases)
        if hero:
            return hero
    return None
