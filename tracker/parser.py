"""Scoreboard parser: turns raw OCR text into a structured match."""

import logging
import re
from collections.abc import Callable, Mapping
from typing import NamedTuple, Optional

from tracker import Kda, ParsedMatch, ParsedPlayer
from tracker.names import (
    HERO_ALIASES,
    MAX_NAME_LENGTH,
    MIN_NAME_LENGTH,
    extract_player_name,
    find_hero,
)

log = logging.getLogger(__name__)

MAX_KDA_VALUE = 100
OUTCOME_SCAN_LINES = 5
OWNER_PARTY_SIZE = 5
KNOWN_MODES = ('ranked', 'classic', 'brawl')

# K/D/A separated by any mix of / - : and whitespace
_KDA_RE = re.compile(r'(\d+)[/\s\-:]+(\d+)[/\s\-:]+(\d+)')
_GOLD_AFTER_KDA_RE = re.compile(r'^[\s.\-:]+(\d{4,6})\b')
_GPM_RE = re.compile(r'(\d+)\s*gpm', re.IGNORECASE)
_BARE_GOLD_RE = re.compile(r'\b(\d{4,6})\b')

# Score pairs in the result banner. OCR frequently reads the "V" of
# VICTORY as "B", so both letters count as a victory marker.
_VICTORY_SCORE_RE = re.compile(
    r'(\d+)\s*[.=]?\s*(?:victory|[vb])\s*[.=\-]?\s*(\d+)', re.IGNORECASE,
)
_LEADING_MARKER_SCORE_RE = re.compile(
    r'(?:^|\s)[vb]\s*(\d+)[\s.=\-]+(\d+)', re.IGNORECASE,
)
_DEFEAT_SCORE_RE = re.compile(
    r'(?:defeat|\bd)\s*(\d+)[\s.=\-]+(\d+)', re.IGNORECASE,
)
_BARE_SCORE_RE = re.compile(r'(\d+)\s*(?:[.=\-]|vs)\s*(\d+)', re.IGNORECASE)

_NAME_SYMBOLS = '©®™&@#'
_MARKER_NAME_RE = re.compile(
    rf'[{_NAME_SYMBOLS}]\s*([^\d{_NAME_SYMBOLS}\s][^\d{_NAME_SYMBOLS}]{{1,29}}?)\s*$'
)
_CAPITALIZED_NAME_RE = re.compile(r'([A-Z][A-Za-z0-9 ]{1,29}?)\s*$')
_COLON_NAME_RE = re.compile(r'([A-Za-z][A-Za-z0-9 ]{1,28}?)\s*:')
_WORD_RUN_RE = re.compile(r'[A-Za-z][A-Za-z0-9 ]{1,28}')
_STOPWORDS = frozenset({
    'a', 'an', 'the', 'is', 'at', 'on', 'in', 'to', 'for', 'of', 'and', 'or', 'but',
})


class KdaMatch(NamedTuple):
    """A KDA triple found in a line, with its position."""

    kda: Kda
    start: int
    end: int


# ---------------------------------------------------------------------------
# KDA extraction
# ---------------------------------------------------------------------------

def _to_kda(match: re.Match) -> Optional[Kda]:
    k, d, a = (int(match.group(i)) for i in (1, 2, 3))
    if k > MAX_KDA_VALUE or d > MAX_KDA_VALUE or a > MAX_KDA_VALUE:
        return None
    return Kda(k, d, a)


def extract_all_kdas(text: str) -> list[KdaMatch]:
    """Find every non-overlapping KDA triple in a line.

    Supports K/D/A, K-D-A, K:D:A, "K D A" and mixed separators. Triples
    with a component above MAX_KDA_VALUE are digit noise (gold, damage,
    battle IDs) and are skipped.

    Args:
        text: One line of OCR text.

    Returns:
        KdaMatch list in line order.
    """
    results: list[KdaMatch] = []
    # A rejected triple still consumes its characters, so an overlapping
    # valid one is not found: 'Player123 5/2/8' yields nothing. Intended.
    for match in _KDA_RE.finditer(text):
        kda = _to_kda(match)
        if kda is not None:
            results.append(KdaMatch(kda, match.start(), match.end()))
    return results


def extract_kda(text: str) -> Optional[Kda]:
    """Return the first valid KDA triple of a line, or None."""
    matches = extract_all_kdas(text)
    return matches[0].kda if matches else None


# ---------------------------------------------------------------------------
# Outcome and mode
# ---------------------------------------------------------------------------

def _outcome_from_keyword(line: str) -> Optional[str]:
    lowered = line.lower()
    if 'victory' in lowered or 'win' in lowered:
        return 'win'
    if 'defeat' in lowered or 'lose' in lowered:
        return 'lose'
    return None


def _outcome_from_victory_marker(line: str) -> Optional[str]:
    for pattern in (_VICTORY_SCORE_RE, _LEADING_MARKER_SCORE_RE):
        match = pattern.search(line)
        if match and int(match.group(1)) > int(match.group(2)):
            return 'win'
    return None


def _outcome_from_defeat_marker(line: str) -> Optional[str]:
    if _DEFEAT_SCORE_RE.search(line):
        return 'lose'
    return None


def _outcome_from_bare_score(line: str) -> Optional[str]:
    """Larger number is assumed to be the winning side. Approximate."""
    if extract_all_kdas(line):
        return None
    match = _BARE_SCORE_RE.search(line)
    if not match:
        return None
    left, right = int(match.group(1)), int(match.group(2))
    if left > right:
        return 'win'
    if right > left:
        return 'lose'
    return None


OutcomeStrategy = Callable[[str], Optional[str]]

# Keyword matches beat every score heuristic, so keywords are tried on all
# scanned lines before any score pattern is.
OUTCOME_STRATEGIES: list[tuple[str, OutcomeStrategy]] = [
    ('keyword', _outcome_from_keyword),
    ('victory_marker', _outcome_from_victory_marker),
    ('defeat_marker', _outcome_from_defeat_marker),
    ('bare_score', _outcome_from_bare_score),
]


def detect_outcome(lines: list[str]) -> Optional[str]:
    """Detect win/lose from the top lines of the scoreboard.

    Args:
        lines: Normalized, non-empty lines.

    Returns:
        'win', 'lose' or None if nothing matched.
    """
    head = lines[:OUTCOME_SCAN_LINES]
    for name, strategy in OUTCOME_STRATEGIES:
        for line in head:
            outcome = strategy(line)
            if outcome:
                log.debug("Ergebnis '%s' ueber Strategie %s erkannt", outcome, name)
                return outcome
    return None


def detect_mode(lines: list[str]) -> Optional[str]:
    """Return the first known game mode mentioned in the text."""
    for line in lines:
        lowered = line.lower()
        for mode in KNOWN_MODES:
            if mode in lowered:
                return mode
    return None


# ---------------------------------------------------------------------------
# Name extraction (text before a KDA triple)
# ---------------------------------------------------------------------------

def _name_after_marker(region: str) -> Optional[str]:
    """'& ©@ATRS Agatsuma' -> 'ATRS Agatsuma'"""
    match = _MARKER_NAME_RE.search(region)
    return match.group(1) if match else None


def _name_capitalized(region: str) -> Optional[str]:
    """'ri BATRS Agatsuma' -> 'BATRS Agatsuma'"""
    match = _CAPITALIZED_NAME_RE.search(region)
    return match.group(1) if match else None


def _name_before_colon(region: str) -> Optional[str]:
    """'layla:' -> 'layla'"""
    match = _COLON_NAME_RE.search(region)
    return match.group(1) if match else None


def _name_last_word(region: str) -> Optional[str]:
    words = [w.strip() for w in _WORD_RUN_RE.findall(region)]
    words = [
        w for w in words
        if MIN_NAME_LENGTH <= len(w) <= MAX_NAME_LENGTH and w.lower() not in _STOPWORDS
    ]
    return words[-1] if words else None


NameExtractor = Callable[[str], Optional[str]]

NAME_EXTRACTORS: list[tuple[str, NameExtractor]] = [
    ('marker', _name_after_marker),
    ('capitalized', _name_capitalized),
    ('colon', _name_before_colon),
    ('last_word', _name_last_word),
]


def extract_name_candidate(region: str) -> Optional[str]:
    """Run the name extractors in order until one yields a usable name.

    Args:
        region: Text between the previous KDA triple (or line start) and
            the current one.

    Returns:
        The raw name candidate, or None.
    """
    region = region.strip()
    if not region:
        return None
    for _name, extractor in NAME_EXTRACTORS:
        candidate = extractor(region)
        if candidate is None:
            continue
        candidate = candidate.strip()
        if MIN_NAME_LENGTH <= len(candidate) <= MAX_NAME_LENGTH:
            return candidate
    return None


def _gold_after(text: str, end: int) -> Optional[int]:
    match = _GOLD_AFTER_KDA_RE.match(text[end:])
    return int(match.group(1)) if match else None


def extract_players_from_line(line: str) -> list[ParsedPlayer]:
    """Extract every name + KDA pair found on a single line.

    OCR often glues both teams' rows into one line, so each KDA triple is
    paired with the text between it and the previous triple.

    Args:
        line: One line of OCR text.

    Returns:
        Players in line order; empty if none were found.
    """
    players: list[ParsedPlayer] = []
    region_start = 0
    for kda_match in extract_all_kdas(line):
        region = line[region_start:kda_match.start]
        region_start = kda_match.end

        candidate = extract_name_candidate(region)
        if candidate is None:
            continue
        name_info = extract_player_name(candidate)
        if name_info is None:
            continue

        display_name, game_user_id = name_info
        players.append(ParsedPlayer(
            game_user_id=game_user_id,
            display_name=display_name,
            kda=kda_match.kda,
            gpm=_gold_after(line, kda_match.end),
        ))
    return players


def _extract_gpm(line: str) -> Optional[int]:
    match = _GPM_RE.search(line) or _BARE_GOLD_RE.search(line)
    return int(match.group(1)) if match else None


def extract_player_from_context(
    lines: list[str],
    index: int,
    hero_aliases: Mapping[str, str] = HERO_ALIASES,
) -> Optional[ParsedPlayer]:
    """Build a player from a KDA line whose name sits on the lines above.

    The most recent of the previous two lines that holds a name wins.

    Args:
        lines: All normalized lines.
        index: Index of the line carrying the KDA.
        hero_aliases: Hero alias table.

    Returns:
        ParsedPlayer with an empty game_user_id if no name was found, or
        None if the line carries no KDA.
    """
    line = lines[index]
    kda = extract_kda(line)
    if kda is None:
        return None

    # Lines with their own KDA are player rows, not name labels
    context = [
        lines[i] for i in (index - 1, index - 2)
        if i >= 0 and not extract_all_kdas(lines[i])
    ]

    name_info = None
    for previous in context:
        name_info = extract_player_name(previous)
        if name_info:
            break

    hero = None
    for previous in context:
        hero = find_hero(previous, hero_aliases)
        if hero:
            break

    display_name, game_user_id = name_info if name_info else (None, '')
    return ParsedPlayer(
        game_user_id=game_user_id,
        display_name=display_name,
        hero=hero,
        kda=kda,
        gpm=_extract_gpm(line),
    )


# ---------------------------------------------------------------------------
# Match assembly
# ---------------------------------------------------------------------------

def select_owner_party(players: list[ParsedPlayer], size: int = OWNER_PARTY_SIZE) -> list[int]:
    """Pick the indices of the players on the uploader's side.

    Positional: the first *size* players in parse order. Scoreboards
    usually list the uploader's team first, but this breaks if the column
    order of the screenshot changes.
    """
    return list(range(min(size, len(players))))


def split_lines(raw_text: str) -> list[str]:
    """Split text into trimmed, non-empty lines."""
    return [line.strip() for line in raw_text.split('\n') if line.strip()]


def parse_scoreboard(
    raw_text: str,
    hero_aliases: Mapping[str, str] = HERO_ALIASES,
) -> Optional[ParsedMatch]:
    """Parse OCR text of a post-match scoreboard.

    Never raises on malformed input. Missing outcome, mode or gold leave
    the corresponding fields unset.

    Args:
        raw_text: Raw OCR text, one scoreboard row per line (roughly).
        hero_aliases: Hero alias table used to detect hero names.

    Returns:
        ParsedMatch, or None if fewer than two lines or no players were found.
    """
    lines = split_lines(raw_text or '')
    if len(lines) < 2:
        log.debug("Zu wenige Zeilen im OCR-Text (%d)", len(lines))
        return None

    result = detect_outcome(lines)
    mode = detect_mode(lines)

    players: list[ParsedPlayer] = []
    for i, line in enumerate(lines):
        found = extract_players_from_line(line)
        if found:
            players.extend(found)
            continue

        player = extract_player_from_context(lines, i, hero_aliases)
        if player is None:
            continue
        if not player.game_user_id:
            placeholder = f'player_{len(players)}'
            player = ParsedPlayer(
                game_user_id=placeholder,
                display_name=placeholder,
                hero=player.hero,
                kda=player.kda,
                gpm=player.gpm,
            )
        players.append(player)

    if not players:
        log.info("Keine Spieler im OCR-Text gefunden")
        return None

    result_guessed = False
    if result is None:
        # Unverified; flagged so the result can be corrected later
        result = 'win'
        result_guessed = True
        log.warning("Kein Ergebnis erkannt, nehme 'win' an (%d Spieler)", len(players))

    owner_party_indices = select_owner_party(players)

    return ParsedMatch(
        result=result,
        players=players,
        owner_party_indices=owner_party_indices,
        mode=mode,
        party_size=len(owner_party_indices),
        result_guessed=result_guessed,
    )
