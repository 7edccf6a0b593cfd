"""Roster and OCR text readers with automatic encoding detection."""

import csv
import io
import logging
import re
from pathlib import Path

from tracker import Friend

log = logging.getLogger(__name__)

ROSTER_COLUMNS = ('Game User ID', 'Display Name')

# Matches any sequence of whitespace (including Unicode whitespace like U+2006)
_WHITESPACE_RE = re.compile(r'\s+')
_ALNUM_RE = re.compile(r'[A-Za-z0-9]')


def detect_encoding(path: Path) -> str:
    """Detect file encoding by checking for BOM bytes.

    Args:
        path: Path to the file.

    Returns:
        Encoding string suitable for open().
    """
    with open(path, 'rb') as f:
        bom = f.read(2)
    if bom == b'\xff\xfe':
        return 'utf-16-le'
    return 'utf-8-sig'


def normalize_whitespace(value: str) -> str:
    """Collapse whitespace runs into a single space and strip the ends."""
    return _WHITESPACE_RE.sub(' ', value).strip()


def _read_text(path: Path) -> str:
    encoding = detect_encoding(path)
    with open(path, 'r', encoding=encoding) as f:
        content = f.read()
    # Strip BOM if present
    return content.lstrip('\ufeff')


def read_roster(path: str | Path) -> list[Friend]:
    """Read the friend roster from a tab-separated file.

    Handles UTF-16LE (with BOM) and UTF-8 encoded files automatically.
    Rows without an id, or whose id has no letter or digit, are skipped.

    Args:
        path: Path to the roster file.

    Returns:
        List of Friend objects in file order.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If required columns are missing.
    """
    path = Path(path)
    content = _read_text(path)

    reader = csv.DictReader(io.StringIO(content), delimiter='\t')

    if reader.fieldnames is None:
        raise ValueError(f"Datei {path} ist leer oder hat keine Header-Zeile.")
    actual_cols = {normalize_whitespace(c) for c in reader.fieldnames}
    missing = set(ROSTER_COLUMNS) - actual_cols
    if missing:
        raise ValueError(
            f"Fehlende Spalten in {path}: {', '.join(sorted(missing))}"
        )

    roster: list[Friend] = []
    for row_num, row in enumerate(reader, start=2):
        cleaned = {normalize_whitespace(k): normalize_whitespace(v or '')
                   for k, v in row.items() if k is not None}
        game_user_id = cleaned.get('Game User ID', '')
        if not game_user_id:
            log.warning("Zeile %d in %s uebersprungen: keine Game User ID", row_num, path)
            continue
        if not _ALNUM_RE.search(game_user_id):
            log.warning(
                "Zeile %d in %s uebersprungen: ungueltige Game User ID %r",
                row_num, path, game_user_id,
            )
            continue
        roster.append(Friend(
            game_user_id=game_user_id,
            display_name=cleaned.get('Display Name') or None,
        ))

    log.info("%d Freunde gelesen aus %s", len(roster), path)
    return roster


def read_ocr_text(path: str | Path) -> str:
    """Read raw OCR text from a file.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    text = _read_text(path)
    log.debug("%d Zeichen OCR-Text gelesen aus %s", len(text), path)
    return text
