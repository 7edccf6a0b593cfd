"""Shared test fixtures."""

from pathlib import Path

import pytest

from tracker.reader import read_ocr_text, read_roster


DATA_DIR = Path(__file__).resolve().parent.parent / 'data'


@pytest.fixture(scope='session')
def data_dir() -> Path:
    """Path to the data directory."""
    return DATA_DIR


@pytest.fixture(scope='session')
def roster():
    """Friends from roster.tsv."""
    return read_roster(DATA_DIR / 'roster.tsv')


@pytest.fixture(scope='session')
def real_ocr_text() -> str:
    """Raw OCR output of a real result screen."""
    return read_ocr_text(DATA_DIR / 'ocr' / 'match_real.txt')
