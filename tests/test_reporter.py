"""Tests for tracker.reporter module."""

import csv

import pytest

from tracker import Friend
from tracker.ingest import build_match_record, reconcile_players
from tracker.parser import parse_scoreboard
from tracker.reader import read_roster
from tracker.reporter import (
    CSV_COLUMNS,
    print_stats,
    print_summary,
    write_csv_report,
    write_html_report,
    write_roster,
)
from tracker.stats import compute_all_stats


@pytest.fixture
def reconciled(roster, real_ocr_text):
    match = parse_scoreboard(real_ocr_text)
    links, updated = reconcile_players(match, roster)
    return match, links, updated


class TestWriteCsvReport:
    """Tests for the CSV report."""

    def test_header_and_rows(self, tmp_path, reconciled):
        match, links, _ = reconciled
        path = tmp_path / 'out' / 'report.csv'
        write_csv_report(links, path, match)

        with open(path, encoding='utf-8-sig', newline='') as f:
            rows = list(csv.DictReader(f, delimiter=';'))

        assert list(rows[0].keys()) == CSV_COLUMNS
        assert len(rows) == 5
        assert rows[1]['Match_Type'] == 'FUZZY'
        assert rows[1]['Action'] == 'MERGE'
        assert rows[1]['Friend_ID'] == 'atrs_agastuma'
        assert rows[1]['Similarity'] == '0.8333'

    def test_owner_party_marker(self, tmp_path, reconciled):
        match, links, _ = reconciled
        path = tmp_path / 'report.csv'
        write_csv_report(links, path, match)

        with open(path, encoding='utf-8-sig', newline='') as f:
            rows = list(csv.DictReader(f, delimiter=';'))

        assert all(row['Owner_Party'] == 'X' for row in rows)

    def test_written_with_bom(self, tmp_path, reconciled):
        match, links, _ = reconciled
        path = tmp_path / 'report.csv'
        write_csv_report(links, path, match)
        assert path.read_bytes().startswith(b'\xef\xbb\xbf')


class TestWriteHtmlReport:
    """Tests for the HTML report."""

    def test_contains_players(self, tmp_path, reconciled):
        match, links, _ = reconciled
        path = tmp_path / 'report.html'
        write_html_report(links, path, match, 'match_real')

        html = path.read_text(encoding='utf-8')
        assert 'Match-Report: match_real' in html
        assert 'BABA garou' in html
        assert 'class="fuzzy"' in html
        assert '(geraten)' in html


class TestWriteRoster:
    """Tests for writing the roster."""

    def test_readable_by_reader(self, tmp_path, reconciled):
        _, _, updated = reconciled
        path = tmp_path / 'roster_out.tsv'
        write_roster(updated, path)
        assert read_roster(path) == updated

    def test_missing_display_name(self, tmp_path):
        path = tmp_path / 'roster_out.tsv'
        write_roster([Friend('layla')], path)
        assert read_roster(path) == [Friend('layla', None)]


class TestPrintSummary:
    """Tests for stdout output."""

    def test_summary(self, capsys, reconciled):
        match, links, _ = reconciled
        print_summary(match, links, 'match_real.txt')
        out = capsys.readouterr().out
        assert '=== Match-Report: match_real.txt ===' in out
        assert 'Neue Freunde:' in out

    def test_stats(self, capsys, reconciled):
        match, links, updated = reconciled
        record = build_match_record(match, links, 'match_real')
        print_stats(compute_all_stats(updated, [record]))
        out = capsys.readouterr().out
        assert '=== Freunde-Statistik ===' in out
        assert 'baba_garou' in out
