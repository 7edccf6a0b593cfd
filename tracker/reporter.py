"""Report generation for reconciled matches (CSV, HTML, roster, summary)."""

import csv
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from tracker import Friend, FriendStats, ParsedMatch, PlayerLink
from tracker.reader import ROSTER_COLUMNS

log = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / 'templates'

CSV_COLUMNS = [
    'Index',
    'Game_User_ID',
    'Display_Name',
    'Hero',
    'K',
    'D',
    'A',
    'GPM',
    'Owner_Party',
    'Match_Type',
    'Similarity',
    'Action',
    'Friend_ID',
    'Friend_Name',
]


def _fmt(value) -> str:
    return '' if value is None else str(value)


def _link_to_row(link: PlayerLink, owner_party: set[int]) -> dict:
    """Convert a PlayerLink to a flat dict for CSV/HTML output."""
    player = link.player
    kda = player.kda
    return {
        'Index': str(link.player_index),
        'Game_User_ID': player.game_user_id,
        'Display_Name': _fmt(player.display_name),
        'Hero': _fmt(player.hero),
        'K': _fmt(kda.k if kda else None),
        'D': _fmt(kda.d if kda else None),
        'A': _fmt(kda.a if kda else None),
        'GPM': _fmt(player.gpm),
        'Owner_Party': 'X' if link.player_index in owner_party else '',
        'Match_Type': link.resolution.match_type,
        'Similarity': f'{link.resolution.similarity:.4f}',
        'Action': link.action,
        'Friend_ID': link.friend.game_user_id,
        'Friend_Name': _fmt(link.friend.display_name),
        # Used by the HTML template for row highlighting
        '_renamed': link.renamed,
    }


def write_csv_report(
    links: list[PlayerLink],
    output_path: Path,
    match: ParsedMatch,
) -> None:
    """Write reconciled players as a CSV report.

    Uses UTF-8 with BOM (utf-8-sig) and semicolon delimiter for
    compatibility with German Excel.

    Args:
        links: Reconciliation results of one match.
        output_path: Path for the output CSV file.
        match: The parsed match the links belong to.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    owner_party = set(match.owner_party_indices)

    with open(output_path, 'w', newline='', encoding='utf-8-sig') as f:
        writer = csv.DictWriter(
            f, fieldnames=CSV_COLUMNS, delimiter=';', extrasaction='ignore',
        )
        writer.writeheader()
        for link in links:
            writer.writerow(_link_to_row(link, owner_party))

    log.info("CSV-Report geschrieben: %s (%d Zeilen)", output_path, len(links))


def write_html_report(
    links: list[PlayerLink],
    output_path: Path,
    match: ParsedMatch,
    source_name: str = '',
) -> None:
    """Write reconciled players as an HTML report using Jinja2.

    Args:
        links: Reconciliation results of one match.
        output_path: Path for the output HTML file.
        match: The parsed match the links belong to.
        source_name: Name of the OCR text file (for the report title).
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template('report.html')

    owner_party = set(match.owner_party_indices)
    rows = [_link_to_row(link, owner_party) for link in links]

    html = template.render(
        source_name=source_name,
        match=match,
        rows=rows,
        stats=_compute_stats(links),
        columns=CSV_COLUMNS,
    )

    output_path.write_text(html, encoding='utf-8')
    log.info("HTML-Report geschrieben: %s", output_path)


def write_roster(roster: list[Friend], output_path: Path) -> None:
    """Write the roster as a tab-separated file readable by read_roster()."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f, delimiter='\t')
        writer.writerow(ROSTER_COLUMNS)
        for friend in roster:
            writer.writerow([friend.game_user_id, friend.display_name or ''])

    log.info("Freundesliste geschrieben: %s (%d Eintraege)", output_path, len(roster))


def _compute_stats(links: list[PlayerLink]) -> dict:
    """Compute summary counts from reconciliation results."""
    return {
        'total': len(links),
        'exact': sum(1 for link in links if link.resolution.match_type == 'EXACT'),
        'fuzzy': sum(1 for link in links if link.resolution.match_type == 'FUZZY'),
        'none': sum(1 for link in links if link.resolution.match_type == 'NONE'),
        'renamed': sum(1 for link in links if link.renamed),
    }


def print_summary(match: ParsedMatch, links: list[PlayerLink], source_name: str = '') -> None:
    """Print a summary of one reconciled match to stdout.

    Args:
        match: The parsed match.
        links: Reconciliation results of the match.
        source_name: Name of the OCR text file.
    """
    stats = _compute_stats(links)
    result = match.result + (' (geraten)' if match.result_guessed else '')

    print(f"\n=== Match-Report: {source_name} ===")
    print(f"Ergebnis:                  {result:>5}")
    print(f"Modus:                     {match.mode or '-':>5}")
    print(f"Erkannte Spieler:          {stats['total']:>5}")
    print(f"Eigene Gruppe:             {match.party_size:>5}")
    print("---")
    print(f"Exakte Matches:            {stats['exact']:>5}")
    print(f"Fuzzy Matches:             {stats['fuzzy']:>5}")
    print(f"Neue Freunde:              {stats['none']:>5}")
    print(f"Namen aktualisiert:        {stats['renamed']:>5}")
    print()


def print_stats(stats: list[FriendStats]) -> None:
    """Print per-friend statistics to stdout, best synergy first."""
    print("\n=== Freunde-Statistik ===")
    print(f"{'Freund':<24} {'Spiele':>6} {'Siege':>6} {'Synergie':>9} {'K/D/A':>17}")
    ordered = sorted(stats, key=lambda s: (-s.synergy_score, -s.games_together))
    for s in ordered:
        kda = f'{s.avg_k:.1f}/{s.avg_d:.1f}/{s.avg_a:.1f}'
        print(
            f"{s.game_user_id:<24} {s.games_together:>6} {s.wins_together:>6} "
            f"{s.synergy_score:>9.2f} {kda:>17}"
        )
    print()
