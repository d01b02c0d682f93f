"""
Transfer portal tracker feed (spreadsheet exported as JSON).

Payload shape: ``{"collections": [{"sheetName": ..., "data": [[...], ...]}],
"updatedTime": ...}`` where the first row of ``data`` is the header.
"""

import logging
import math
from datetime import date, datetime, timezone

from cfbhq import config, teams
from cfbhq.players import slugify
from cfbhq.upstream import UpstreamError, get_json, retry

log = logging.getLogger("cfb-hq.transfer-portal")

# Column order of the sheet
COL_YEAR = 0
COL_NAME = 1
COL_STATUS = 2
COL_CLASS = 3
COL_POSITION = 4
COL_FORMER_CONF = 5
COL_FORMER_SCHOOL = 6
COL_NEW_CONF = 7
COL_NEW_SCHOOL = 8
COL_GRADE = 9
COL_DATE = 10

_STATUSES = {
    "active": "Entered",
    "entered": "Entered",
    "committed": "Committed",
    "enrolled": "Enrolled",
    "expected": "Enrolled",
    "withdrawn": "Withdrawn",
}

_CLASSES = {
    "FR": "FR", "FRESHMAN": "FR",
    "SO": "SO", "SOPHOMORE": "SO",
    "JR": "JR", "JUNIOR": "JR",
    "SR": "SR", "SENIOR": "SR",
    "GR": "GR", "GRADUATE": "GR",
}

POSITIONS = {
    "QB", "RB", "WR", "TE", "OL", "OT", "OG", "C",
    "EDGE", "DL", "DT", "LB", "CB", "S", "DB",
    "K", "P", "LS", "ATH",
}


def _cell(row, index):
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index]).strip()


def _is_header(row):
    return _cell(row, COL_NAME).lower() in ("player name", "player", "name")


def _normalize_status(value):
    return _STATUSES.get(value.lower(), "Entered")


def _normalize_class(value):
    return _CLASSES.get(value.upper(), "FR")


def _normalize_position(value):
    position = value.upper()
    return position if position in POSITIONS else "ATH"


def _grade(value):
    """Impact grade, or None unless it is a finite number above zero."""
    try:
        grade = float(value)
    except ValueError:
        return None
    if not math.isfinite(grade) or grade <= 0:
        return None
    return grade


def transform_rows(rows):
    """Sheet rows → TransferPlayer dicts.

    The header row and rows without a name or former school are dropped. A new
    school equal to the former school is treated as no move at all.
    """
    today = date.today().isoformat()
    players = []
    for i, row in enumerate(rows or []):
        if not isinstance(row, (list, tuple)):
            continue
        if i == 0 and _is_header(row):
            continue
        name = _cell(row, COL_NAME)
        former_school = _cell(row, COL_FORMER_SCHOOL)
        if not name or not former_school:
            continue

        new_school = _cell(row, COL_NEW_SCHOOL)
        moved = bool(new_school) and new_school != former_school
        players.append({
            "id": f"{slugify(name)}-{i}",
            "name": name,
            "year": _cell(row, COL_YEAR),
            "status": _normalize_status(_cell(row, COL_STATUS)),
            "class": _normalize_class(_cell(row, COL_CLASS)),
            "position": _normalize_position(_cell(row, COL_POSITION)),
            "formerConference": _cell(row, COL_FORMER_CONF),
            "formerSchool": former_school,
            "newConference": _cell(row, COL_NEW_CONF) if moved else None,
            "newSchool": new_school if moved else None,
            "rating": _grade(_cell(row, COL_GRADE)),
            "announcedDate": _cell(row, COL_DATE) or today,
        })
    return players


def _fetch_once():
    return get_json(config.TRANSFER_PORTAL_URL, timeout=config.TRANSFER_PORTAL_TIMEOUT_SECONDS)


def fetch_transfer_portal():
    """Fetch and transform the whole portal. Raises UpstreamError when unusable."""
    log.info("Fetching transfer portal feed...")
    data = retry(_fetch_once)

    collections = data.get("collections") if isinstance(data, dict) else None
    if not collections or not isinstance(collections[0], dict):
        raise UpstreamError("Transfer portal payload has no collections")

    players = transform_rows(collections[0].get("data"))
    updated = data.get("updatedTime") or datetime.now(timezone.utc).isoformat()
    log.info(f"Fetched {len(players)} transfer portal entries (updated {updated})")
    return {"players": players, "updatedTime": updated}


def players_for_team(players, team):
    """Entries leaving or joining ``team``."""
    return [
        p for p in players
        if teams.schools_match(p["formerSchool"], team) or teams.schools_match(p["newSchool"], team)
    ]
