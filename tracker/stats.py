"""Per-friend statistics rolled up from stored matches."""

import logging

from tracker import Friend, FriendStats, MatchRecord

log = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.2
MAX_CONFIDENCE = 0.9
CONFIDENCE_GAMES = 50


def _average(values: list[int]) -> float:
    return sum(values) / len(values) if values else 0.0


def compute_friend_stats(game_user_id: str, matches: list[MatchRecord]) -> FriendStats:
    """Compute synergy statistics for one friend.

    Only matches where the friend played in the owner's party count as
    games together.

    Args:
        game_user_id: Id of the friend.
        matches: Stored matches of the owner.

    Returns:
        FriendStats for the friend.
    """
    together = [
        m for m in matches
        if any(p.friend_id == game_user_id and p.is_owner_party for p in m.players)
    ]
    games = len(together)
    wins = sum(1 for m in together if m.result == 'win')

    rows = [
        p for m in together for p in m.players
        if p.friend_id == game_user_id and p.k is not None
    ]

    return FriendStats(
        game_user_id=game_user_id,
        games_together=games,
        wins_together=wins,
        avg_k=_average([p.k for p in rows]),
        avg_d=_average([p.d or 0 for p in rows]),
        avg_a=_average([p.a or 0 for p in rows]),
        synergy_score=wins / games if games else 0.0,
        confidence=min(BASE_CONFIDENCE + (games / CONFIDENCE_GAMES) * 0.7, MAX_CONFIDENCE),
    )


def compute_all_stats(roster: list[Friend], matches: list[MatchRecord]) -> list[FriendStats]:
    """Compute statistics for every friend of the roster, in roster order."""
    stats = [compute_friend_stats(f.game_user_id, matches) for f in roster]
    log.info("Statistiken fuer %d Freunde berechnet", len(stats))
    return stats
