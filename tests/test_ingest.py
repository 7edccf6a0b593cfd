"""Tests for tracker.ingest module."""

from tracker import Friend, Kda, ParsedMatch, ParsedPlayer
from tracker.ingest import build_match_record, reconcile_players
from tracker.parser import parse_scoreboard


def _match(*players, owner=None):
    players = list(players)
    if owner is None:
        owner = list(range(min(len(players), 5)))
    return ParsedMatch(
        result='win',
        players=players,
        owner_party_indices=owner,
        mode='ranked',
        party_size=len(owner),
    )


class TestReconcilePlayers:
    """Tests for deriving roster actions."""

    def test_exact_attaches(self, roster):
        match = _match(ParsedPlayer('baba_garou', 'BABA garou', kda=Kda(2, 2, 10)))
        links, updated = reconcile_players(match, roster)
        assert links[0].action == 'ATTACH'
        assert links[0].renamed is False
        assert updated == roster

    def test_exact_takes_over_new_display_name(self, roster):
        match = _match(ParsedPlayer('baba_garou', 'Baba Garou'))
        links, updated = reconcile_players(match, roster)
        assert links[0].renamed is True
        assert links[0].friend.display_name == 'Baba Garou'
        assert Friend('baba_garou', 'Baba Garou') in updated

    def test_fuzzy_merges(self, roster):
        match = _match(ParsedPlayer('atrs_agatsuma', 'ATRS Agatsuma'))
        links, updated = reconcile_players(match, roster)
        assert links[0].action == 'MERGE'
        assert links[0].friend.game_user_id == 'atrs_agastuma'
        assert len(updated) == len(roster)

    def test_fuzzy_keeps_cleaner_display_name(self, roster):
        match = _match(ParsedPlayer('atrs_agatsuma', 'ATRS Agatsuma@@'))
        links, updated = reconcile_players(match, roster)
        assert links[0].action == 'MERGE'
        assert links[0].renamed is False
        assert links[0].friend.display_name == 'ATRS Agastuma'

    def test_unknown_creates(self, roster):
        match = _match(ParsedPlayer('gow_kaung_khant', 'Gow kaung khant'))
        links, updated = reconcile_players(match, roster)
        assert links[0].action == 'CREATE'
        assert updated[-1] == Friend('gow_kaung_khant', 'Gow kaung khant')
        assert len(updated) == len(roster) + 1

    def test_created_friend_visible_within_match(self):
        match = _match(
            ParsedPlayer('newcomer', 'Newcomer'),
            ParsedPlayer('newcomer', 'Newcomer'),
        )
        links, updated = reconcile_players(match, [])
        assert [link.action for link in links] == ['CREATE', 'ATTACH']
        assert len(updated) == 1

    def test_input_roster_not_modified(self, roster):
        before = list(roster)
        match = _match(
            ParsedPlayer('gow_kaung_khant', 'Gow kaung khant'),
            ParsedPlayer('baba_garou', 'Baba Garou'),
        )
        reconcile_players(match, roster)
        assert roster == before

    def test_real_scoreboard(self, roster, real_ocr_text):
        match = parse_scoreboard(real_ocr_text)
        links, updated = reconcile_players(match, roster)
        assert [link.action for link in links] == [
            'CREATE', 'MERGE', 'ATTACH', 'CREATE', 'ATTACH',
        ]
        assert links[1].friend.game_user_id == 'atrs_agastuma'
        assert len(updated) == len(roster) + 2


class TestBuildMatchRecord:
    """Tests for the stored match form."""

    def test_merged_player_rekeyed(self, roster):
        match = _match(ParsedPlayer('atrs_agatsuma', 'ATRS Agatsuma', hero='Layla', kda=Kda(3, 3, 4), gpm=8538))
        links, _ = reconcile_players(match, roster)
        record = build_match_record(match, links, 'm1')
        row = record.players[0]
        assert row.game_user_id == 'atrs_agastuma'
        assert row.friend_id == 'atrs_agastuma'
        assert (row.k, row.d, row.a, row.gpm) == (3, 3, 4, 8538)
        assert row.hero == 'Layla'

    def test_owner_party_flag(self):
        match = _match(ParsedPlayer('alice'), ParsedPlayer('bob'), owner=[0])
        links, _ = reconcile_players(match, [])
        record = build_match_record(match, links, 'm2')
        assert [p.is_owner_party for p in record.players] == [True, False]

    def test_match_fields(self):
        match = _match(ParsedPlayer('alice'))
        links, _ = reconcile_players(match, [])
        record = build_match_record(match, links, 'm3')
        assert record.match_id == 'm3'
        assert record.result == 'win'
        assert record.mode == 'ranked'
        assert record.party_size == 1

    def test_missing_kda(self):
        match = _match(ParsedPlayer('alice'))
        links, _ = reconcile_players(match, [])
        row = build_match_record(match, links, 'm4').players[0]
        assert (row.k, row.d, row.a) == (None, None, None)
