"""squad-tracker – CLI-Tool zum Einlesen von Scoreboard-OCR-Texten."""

import argparse
import logging
from pathlib import Path

from tracker import Friend, MatchRecord
from tracker.ingest import build_match_record, reconcile_players
from tracker.parser import parse_scoreboard
from tracker.reader import read_ocr_text, read_roster
from tracker.reporter import (
    print_stats,
    print_summary,
    write_csv_report,
    write_html_report,
    write_roster,
)
from tracker.resolver import DEFAULT_THRESHOLD
from tracker.stats import compute_all_stats


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        description='Scoreboard-OCR-Texte einlesen und mit der Freundesliste abgleichen.',
        prog='track.py',
    )
    parser.add_argument(
        '--roster', required=True, type=Path,
        help='Pfad zur Freundesliste (TSV)',
    )
    parser.add_argument(
        '--ocr', type=Path,
        help='Pfad zu einer OCR-Textdatei',
    )
    parser.add_argument(
        '--ocr-dir', type=Path,
        help='Verzeichnis mit OCR-Textdateien (Batch-Modus)',
    )
    parser.add_argument(
        '--output', type=Path,
        help='Pfad fuer die Report-Ausgabe (CSV)',
    )
    parser.add_argument(
        '--output-dir', type=Path,
        help='Verzeichnis fuer Report-Ausgaben (Batch-Modus)',
    )
    parser.add_argument(
        '--roster-out', type=Path,
        help='Aktualisierte Freundesliste hierhin schreiben',
    )
    parser.add_argument(
        '--html', action='store_true',
        help='Zusaetzlich einen HTML-Report erzeugen',
    )
    parser.add_argument(
        '--summary', action='store_true',
        help='Zusammenfassung und Statistik auf stdout ausgeben',
    )
    parser.add_argument(
        '--fuzzy-threshold', type=float, default=DEFAULT_THRESHOLD,
        help=f'Schwellenwert fuer Fuzzy-Matching (Standard: {DEFAULT_THRESHOLD})',
    )
    return parser


def process_single_text(
    roster: list[Friend],
    ocr_path: Path,
    output_path: Path,
    html: bool,
    summary: bool,
    fuzzy_threshold: float,
) -> tuple[list[Friend], MatchRecord | None]:
    """Parse one OCR text file and reconcile it with the roster.

    Returns:
        Tuple (updated_roster, match_record). The record is None and the
        roster unchanged if the text could not be parsed.
    """
    match = parse_scoreboard(read_ocr_text(ocr_path))
    if match is None:
        logging.warning("Kein Scoreboard erkannt in %s, uebersprungen.", ocr_path.name)
        return roster, None

    links, roster = reconcile_players(match, roster, fuzzy_threshold)

    write_csv_report(links, output_path, match)

    if html:
        html_path = output_path.with_suffix('.html')
        write_html_report(links, html_path, match, ocr_path.stem)

    if summary:
        print_summary(match, links, ocr_path.name)

    return roster, build_match_record(match, links, ocr_path.stem)


def main() -> None:
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    parser = build_parser()
    args = parser.parse_args()

    if not args.ocr and not args.ocr_dir:
        parser.error('Entweder --ocr oder --ocr-dir muss angegeben werden.')

    if args.ocr and not args.output:
        parser.error('--output ist erforderlich bei Verwendung von --ocr.')

    if args.ocr_dir and not args.output_dir:
        parser.error('--output-dir ist erforderlich bei Verwendung von --ocr-dir.')

    if not 0.0 <= args.fuzzy_threshold <= 1.0:
        parser.error('--fuzzy-threshold muss zwischen 0 und 1 liegen.')

    if args.roster.exists():
        roster = read_roster(args.roster)
    else:
        logging.warning("Freundesliste %s nicht gefunden, starte leer.", args.roster)
        roster = []

    records: list[MatchRecord] = []

    if args.ocr:
        roster, record = process_single_text(
            roster, args.ocr, args.output,
            args.html, args.summary, args.fuzzy_threshold,
        )
        if record is not None:
            records.append(record)
    elif args.ocr_dir:
        args.output_dir.mkdir(parents=True, exist_ok=True)
        txt_files = sorted(args.ocr_dir.glob('*.txt'))

        if not txt_files:
            logging.warning("Keine Textdateien in %s gefunden.", args.ocr_dir)
            return

        # Roster updates carry over, so later files see friends created earlier
        for ocr_path in txt_files:
            output_path = args.output_dir / f"report_{ocr_path.stem}.csv"
            logging.info("Verarbeite %s ...", ocr_path.name)
            roster, record = process_single_text(
                roster, ocr_path, output_path,
                args.html, args.summary, args.fuzzy_threshold,
            )
            if record is not None:
                records.append(record)

    if args.roster_out:
        write_roster(roster, args.roster_out)

    if args.summary and records:
        print_stats(compute_all_stats(roster, records))


if __name__ == '__main__':
    main()
