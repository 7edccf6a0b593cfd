"""Core module for squad-tracker."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Kda:
    """Kills/deaths/assists of one player in one match."""

    k: int
    d: int
    a: int


@dataclass(frozen=True)
class ParsedPlayer:
    """A player row detected in OCR text."""

    game_user_id: str
    display_name: Optional[str] = None
    hero: Optional[str] = None
    kda: Optional[Kda] = None
    gpm: Optional[int] = None       # Gold or GPM estimate
    dmg_dealt: Optional[int] = None
    dmg_taken: Optional[int] = None


@dataclass
class ParsedMatch:
    """Structured result of parsing one scoreboard."""

    result: str                     # win, lose
    players: list[ParsedPlayer]
    owner_party_indices: list[int]
    mode: Optional[str] = None
    party_size: int = 0
    result_guessed: bool = False    # True if no outcome was found in the text


@dataclass(frozen=True)
class Friend:
    """A known identity from the roster."""

    game_user_id: str
    display_name: Optional[str] = None


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving a player name against the roster."""

    match_type: str                 # EXACT, FUZZY, NONE
    friend: Optional[Friend] = None
    similarity: float = 0.0         # 0.0 – 1.0


@dataclass
class PlayerLink:
    """How one parsed player was reconciled with the roster."""

    player_index: int
    player: ParsedPlayer
    resolution: Resolution
    action: str                     # ATTACH, MERGE, CREATE
    friend: Friend
    renamed: bool = False


@dataclass(frozen=True)
class RecordedPlayer:
    """A player row of a stored match."""

    game_user_id: str
    friend_id: Optional[str]
    is_owner_party: bool
    hero: Optional[str] = None
    k: Optional[int] = None
    d: Optional[int] = None
    a: Optional[int] = None
    gpm: Optional[int] = None


@dataclass
class MatchRecord:
    """A stored match as handed to the statistics aggregator."""

    match_id: str
    result: str
    players: list[RecordedPlayer] = field(default_factory=list)
    mode: Optional[str] = None
    party_size: int = 0


@dataclass
class FriendStats:
    """Aggregated statistics for one friend."""

    game_user_id: str
    games_together: int = 0
    wins_together: int = 0
    avg_k: float = 0.0
    avg_d: float = 0.0
    avg_a: float = 0.0
    synergy_score: float = 0.0
    confidence: float = 0.2
