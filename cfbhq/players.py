"""
Players directory: every rostered FBS player, built by fanning out over all
team rosters, plus the slug index used by the player profile route.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed

from cfbhq import config, espn, teams
from cfbhq.upstream import UpstreamError, retry

log = logging.getLogger("cfb-hq.players")

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

# Filter value → roster position abbreviations it covers
POSITION_GROUPS = {
    "QB": {"QB"},
    "RB": {"RB", "FB"},
    "WR": {"WR"},
    "TE": {"TE"},
    "OL": {"OL", "OT", "OG", "C", "T", "G", "OC"},
    "DL": {"DL", "DE", "DT", "NT", "EDGE"},
    "LB": {"LB", "ILB", "MLB", "OLB"},
    "CB": {"CB"},
    "S": {"S", "FS", "SS", "SAF"},
    "K": {"K", "PK"},
    "P": {"P"},
}


def slugify(name):
    """'Arch Manning Jr.' → 'arch-manning-jr'. Applying it twice changes nothing."""
    return _NON_ALNUM.sub("-", (name or "").lower()).strip("-")


def _to_cached_player(row, team):
    return {
        "id": row["id"],
        "name": row["name"],
        "slug": slugify(row["name"]),
        "firstName": row.get("firstName", ""),
        "lastName": row.get("lastName", ""),
        "jerseyNumber": row["jersey"],
        "position": row["position"],
        "positionName": row.get("positionName", ""),
        "class": row["class"],
        "height": row["height"],
        "weight": row["weight"],
        "hometown": row["hometown"],
        "teamId": team["id"],
        "teamName": team["name"],
        "teamSlug": team["slug"],
        "teamLogo": team["logo"],
        "conference": team["conference"],
        "headshot": row.get("headshot"),
    }


def _fetch_team_players(team):
    data = retry(lambda: espn.fetch_team_roster(team["espnId"]))
    return [_to_cached_player(row, team) for row in data["roster"] if row["name"]]


def fetch_all_rosters(team_list=None):
    """Flattened player list across every team, in team-table order.

    Teams whose roster can't be fetched are skipped. Raises UpstreamError
    only when no team at all came back.
    """
    team_list = team_list if team_list is not None else teams.ALL_TEAMS
    log.info(f"Fetching rosters for {len(team_list)} teams...")

    by_slug = {}
    with ThreadPoolExecutor(max_workers=config.ROSTER_MAX_WORKERS) as executor:
        future_to_team = {executor.submit(_fetch_team_players, t): t for t in team_list}
        for future in as_completed(future_to_team):
            team = future_to_team[future]
            try:
                by_slug[team["slug"]] = future.result()
            except Exception as e:
                log.debug(f"Roster fetch failed for {team['slug']}: {e}")

    if not by_slug:
        raise UpstreamError("No team rosters could be fetched")

    players = []
    for team in team_list:
        players.extend(by_slug.get(team["slug"], []))

    log.info(f"Fetched {len(players)} players from {len(by_slug)}/{len(team_list)} teams")
    return players


def build_player_index(players):
    """slug → player.

    Two players whose names slugify the same collide; the later one in roster
    order wins and the earlier one is unreachable by slug.
    """
    index = {}
    for player in players:
        if player["slug"]:
            index[player["slug"]] = player
    return index


def filter_players(players, search="", team="all", position="all", conference="all"):
    search = (search or "").strip().lower()
    team = (team or "all").lower()
    position = (position or "all").upper()
    conference = (conference or "all").lower()

    result = players
    if search:
        result = [
            p for p in result
            if search in p["name"].lower() or search in p["teamName"].lower()
        ]
    if team != "all":
        result = [p for p in result if p["teamSlug"] == team]
    if position != "ALL":
        covered = POSITION_GROUPS.get(position, {position})
        result = [p for p in result if p["position"].upper() in covered]
    if conference != "all":
        result = [p for p in result if p["conference"].lower() == conference]
    return result


def _to_int(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def paginate(items, page=1, limit=config.PLAYERS_DEFAULT_LIMIT):
    """Slice one page out of ``items``; bad or out-of-range params are clamped."""
    page = max(1, _to_int(page, 1))
    limit = min(config.PLAYERS_MAX_LIMIT, max(1, _to_int(limit, config.PLAYERS_DEFAULT_LIMIT)))
    total = len(items)
    total_pages = (total + limit - 1) // limit
    start = (page - 1) * limit
    return items[start:start + limit], {
        "page": page,
        "limit": limit,
        "totalPlayers": total,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1,
    }


def player_profile(player):
    """Profile payload for one indexed player."""
    team = teams.get_team_by_slug(player["teamSlug"]) or {}
    return {
        "id": player["id"],
        "slug": player["slug"],
        "name": player["name"],
        "firstName": player.get("firstName", ""),
        "lastName": player.get("lastName", ""),
        "jersey": player["jerseyNumber"],
        "position": player["position"],
        "positionName": player.get("positionName", ""),
        "height": player["height"],
        "weight": player["weight"],
        "class": player["class"],
        "hometown": player["hometown"],
        "headshot": player.get("headshot"),
        "team": {
            "id": player["teamId"],
            "slug": player["teamSlug"],
            "name": player["teamName"],
            "conference": player["conference"],
            "logo": player["teamLogo"],
            "espnId": team.get("espnId"),
        },
    }
