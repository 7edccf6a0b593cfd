"""Reconciliation of a parsed match with the friend roster.

Turns resolver decisions into roster actions (attach, merge, create) and
builds the match record handed to the statistics aggregator. Pure: the
caller owns persistence and any locking across concurrent uploads.
"""

import dataclasses
import logging

from tracker import Friend, MatchRecord, ParsedMatch, PlayerLink, RecordedPlayer
from tracker.resolver import DEFAULT_THRESHOLD, resolve_identity
from tracker.similarity import prefer_display_name

log = logging.getLogger(__name__)


def _replace_friend(roster: list[Friend], old: Friend, new: Friend) -> None:
    for i, friend in enumerate(roster):
        if friend is old:
            roster[i] = new
            return


def reconcile_players(
    match: ParsedMatch,
    roster: list[Friend],
    threshold: float = DEFAULT_THRESHOLD,
) -> tuple[list[PlayerLink], list[Friend]]:
    """Resolve every player of a match and derive the roster actions.

    - EXACT -> ATTACH: the friend takes over a differing display name.
    - FUZZY -> MERGE: the player is re-keyed to the friend; the display
      name is replaced only if the new one is cleaner.
    - NONE  -> CREATE: a new friend is added and is visible to the
      remaining players of the same match.

    Args:
        match: Parsed scoreboard.
        roster: Known friends. Not modified.
        threshold: Minimum similarity for a fuzzy match.

    Returns:
        Tuple (links, updated_roster).
    """
    working = list(roster)
    links: list[PlayerLink] = []

    for index, player in enumerate(match.players):
        resolution = resolve_identity(
            player.game_user_id, player.display_name, working, threshold,
        )
        friend = resolution.friend
        renamed = False

        if resolution.match_type == 'EXACT':
            action = 'ATTACH'
            if player.display_name and player.display_name != friend.display_name:
                updated = dataclasses.replace(friend, display_name=player.display_name)
                _replace_friend(working, friend, updated)
                friend, renamed = updated, True

        elif resolution.match_type == 'FUZZY':
            action = 'MERGE'
            if prefer_display_name(friend.display_name, player.display_name):
                updated = dataclasses.replace(friend, display_name=player.display_name)
                _replace_friend(working, friend, updated)
                friend, renamed = updated, True

        else:
            action = 'CREATE'
            friend = Friend(
                game_user_id=player.game_user_id,
                display_name=player.display_name or player.game_user_id,
            )
            working.append(friend)

        links.append(PlayerLink(
            player_index=index,
            player=player,
            resolution=resolution,
            action=action,
            friend=friend,
            renamed=renamed,
        ))

    created = sum(1 for link in links if link.action == 'CREATE')
    merged = sum(1 for link in links if link.action == 'MERGE')
    log.info(
        "%d Spieler abgeglichen (%d neu, %d zusammengefuehrt)",
        len(links), created, merged,
    )
    return links, working


def build_match_record(
    match: ParsedMatch,
    links: list[PlayerLink],
    match_id: str,
) -> MatchRecord:
    """Build the stored form of a reconciled match.

    Player rows carry the friend's id, so merged players are re-keyed.
    """
    owner = set(match.owner_party_indices)
    players: list[RecordedPlayer] = []
    for link in links:
        kda = link.player.kda
        players.append(RecordedPlayer(
            game_user_id=link.friend.game_user_id,
            friend_id=link.friend.game_user_id,
            is_owner_party=link.player_index in owner,
            hero=link.player.hero,
            k=kda.k if kda else None,
            d=kda.d if kda else None,
            a=kda.a if kda else None,
            gpm=link.player.gpm,
        ))
    return MatchRecord(
        match_id=match_id,
        result=match.result,
        players=players,
        mode=match.mode,
        party_size=match.party_size,
    )
