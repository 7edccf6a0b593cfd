"""Identity resolution of detected players against the friend roster."""

import logging
from typing import Optional

from tracker import Friend, ParsedPlayer, Resolution
from tracker.similarity import candidate_similarity

log = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.65


def _build_id_index(roster: list[Friend]) -> dict[str, Friend]:
    """Build a hash index for exact id lookup. First entry per id wins."""
    index: dict[str, Friend] = {}
    for friend in roster:
        index.setdefault(friend.game_user_id, friend)
    return index


def _try_fuzzy_match(
    target_id: str,
    target_display_name: Optional[str],
    roster: list[Friend],
    threshold: float,
) -> Optional[Resolution]:
    """Find the best-scoring roster entry at or above the threshold.

    Ties keep the earlier roster entry.

    Args:
        target_id: Identifier of the detected player.
        target_display_name: Display name of the detected player, if any.
        roster: Known friends.
        threshold: Minimum similarity (0–1).

    Returns:
        FUZZY Resolution, or None if no candidate reaches the threshold.
    """
    best: Optional[Resolution] = None

    for friend in roster:
        score = candidate_similarity(target_id, target_display_name, friend)
        if score < threshold:
            continue
        if best is None or score > best.similarity:
            best = Resolution(match_type='FUZZY', friend=friend, similarity=score)

    return best


def resolve_identity(
    target_id: str,
    target_display_name: Optional[str],
    roster: list[Friend],
    threshold: float = DEFAULT_THRESHOLD,
) -> Resolution:
    """Decide whether a detected player is a known friend.

    Two stages:
    1. Exact id match (hash lookup). Never overridden by a fuzzy score.
    2. Fuzzy match over all roster entries (edit, loose, containment and
       core similarity on ids and display names).

    The roster is not modified.

    Args:
        target_id: Identifier of the detected player.
        target_display_name: Display name of the detected player, if any.
        roster: Known friends.
        threshold: Minimum similarity for a fuzzy match (0–1 scale).

    Returns:
        Resolution with match_type EXACT, FUZZY or NONE.
    """
    exact = _build_id_index(roster).get(target_id)
    if exact is not None:
        return Resolution(match_type='EXACT', friend=exact, similarity=1.0)

    fuzzy = _try_fuzzy_match(target_id, target_display_name, roster, threshold)
    if fuzzy is not None:
        log.debug(
            "Fuzzy-Match: %s -> %s (%.4f)",
            target_id, fuzzy.friend.game_user_id, fuzzy.similarity,
        )
        return fuzzy

    return Resolution(match_type='NONE')


def resolve_all(
    players: list[ParsedPlayer],
    roster: list[Friend],
    threshold: float = DEFAULT_THRESHOLD,
) -> list[Resolution]:
    """Resolve every player against the same, unchanged roster."""
    results = [
        resolve_identity(p.game_user_id, p.display_name, roster, threshold)
        for p in players
    ]
    log.info(
        "Abgleich abgeschlossen: %d Spieler verarbeitet",
        len(results),
    )
    return results
