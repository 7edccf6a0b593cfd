"""Tests for tracker.reader module."""

import pytest

from tracker import Friend
from tracker.reader import detect_encoding, normalize_whitespace, read_ocr_text, read_roster


class TestDetectEncoding:
    """Tests for BOM-based encoding detection."""

    def test_utf16_bom(self, tmp_path):
        path = tmp_path / 'roster.tsv'
        path.write_bytes(b'\xff\xfe' + 'Game User ID'.encode('utf-16-le'))
        assert detect_encoding(path) == 'utf-16-le'

    def test_utf8_default(self, data_dir):
        assert detect_encoding(data_dir / 'roster.tsv') == 'utf-8-sig'


class TestNormalizeWhitespace:
    """Tests for whitespace cleanup."""

    def test_unicode_whitespace(self):
        assert normalize_whitespace('Game\u2006User  ID ') == 'Game User ID'


class TestReadRoster:
    """Tests for roster loading."""

    def test_data_roster(self, roster):
        assert len(roster) == 4
        assert roster[0] == Friend('atrs_agastuma', 'ATRS Agastuma')

    def test_utf16_file(self, tmp_path):
        path = tmp_path / 'roster.tsv'
        content = 'Game User ID\tDisplay Name\r\nbaba_garou\tBABA garou\r\n'
        path.write_bytes(b'\xff\xfe' + content.encode('utf-16-le'))
        assert read_roster(path) == [Friend('baba_garou', 'BABA garou')]

    def test_utf8_bom_file(self, tmp_path):
        path = tmp_path / 'roster.tsv'
        path.write_text('Game User ID\tDisplay Name\nlayla\tLayla\n', encoding='utf-8-sig')
        assert read_roster(path) == [Friend('layla', 'Layla')]

    def test_empty_display_name(self, tmp_path):
        path = tmp_path / 'roster.tsv'
        path.write_text('Game User ID\tDisplay Name\nlayla\t\n', encoding='utf-8')
        assert read_roster(path) == [Friend('layla', None)]

    def test_row_without_id_skipped(self, tmp_path):
        path = tmp_path / 'roster.tsv'
        path.write_text('Game User ID\tDisplay Name\n\tGhost\nlayla\tLayla\n', encoding='utf-8')
        assert read_roster(path) == [Friend('layla', 'Layla')]

    def test_symbol_only_id_skipped(self, tmp_path):
        path = tmp_path / 'roster.tsv'
        path.write_text('Game User ID\tDisplay Name\n!!!\tGhost\nlayla\tLayla\n', encoding='utf-8')
        assert read_roster(path) == [Friend('layla', 'Layla')]

    def test_missing_columns(self, tmp_path):
        path = tmp_path / 'roster.tsv'
        path.write_text('Name\tScore\nlayla\t3\n', encoding='utf-8')
        with pytest.raises(ValueError, match='Fehlende Spalten'):
            read_roster(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'roster.tsv'
        path.write_text('', encoding='utf-8')
        with pytest.raises(ValueError, match='Header-Zeile'):
            read_roster(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_roster(tmp_path / 'missing.tsv')


class TestReadOcrText:
    """Tests for OCR text loading."""

    def test_reads_text(self, data_dir):
        text = read_ocr_text(data_dir / 'ocr' / 'match_simple.txt')
        assert 'Victory' in text
        assert text.startswith('Ranked')

    def test_bom_stripped(self, tmp_path):
        path = tmp_path / 'ocr.txt'
        path.write_text('Victory\n5/2/8', encoding='utf-8-sig')
        assert read_ocr_text(path) == 'Victory\n5/2/8'
