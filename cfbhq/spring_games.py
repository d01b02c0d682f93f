"""
Spring game schedule from a published Google Sheet (CSV export).

Columns: program, conference, date. The first row is the header.
"""

import csv
import io
import logging

from cfbhq import config
from cfbhq.upstream import get_text, retry

log = logging.getLogger("cfb-hq.spring-games")


def sheet_csv_url():
    return (
        f"https://docs.google.com/spreadsheets/d/e/{config.SPRING_GAMES_SHEET_ID}"
        f"/pub?gid={config.SPRING_GAMES_SHEET_GID}&single=true&output=csv"
    )


def parse_csv(text):
    """CSV text → ``[{program, conference, date}]``, skipping the header and blank programs."""
    reader = csv.reader(io.StringIO(text.strip()))
    games = []
    for row_num, row in enumerate(reader):
        if row_num == 0:
            continue
        cells = [cell.replace("\u00a0", " ").strip() for cell in row] + ["", "", ""]
        if not cells[0]:
            continue
        games.append({"program": cells[0], "conference": cells[1], "date": cells[2]})
    return games


def fetch_spring_games():
    url = sheet_csv_url()
    log.info(f"Fetching spring games from Google Sheet: {url}")
    text = retry(lambda: get_text(url, timeout=config.SHEET_TIMEOUT_SECONDS))
    games = parse_csv(text)
    if not games:
        log.warning("Spring games sheet returned no usable rows")
    return games
