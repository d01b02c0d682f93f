"""
ESPN college-football API: fetch wrappers and transforms into the JSON
shapes the frontend consumes (ticker games, schedule games, standings,
rankings, rosters, team schedules, team stats and stat leaders).

ESPN payloads are only loosely documented and fields come and go, so every
transform reads with ``.get()`` and falls back to empty values.
"""

import logging
import re
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date, datetime, timezone

from cfbhq import config, teams
from cfbhq.upstream import UpstreamError, get_json

log = logging.getLogger("cfb-hq.espn")


# ═══════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════

def current_season(today=None):
    """CFB seasons run Aug-Jan: Jan-Jul still belongs to last year's season."""
    today = today or date.today()
    return today.year - 1 if today.month < 8 else today.year


def parse_espn_date(value):
    """ESPN dates look like '2025-09-06T16:00Z'. Returns aware UTC datetime or None."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _to_int(value, default=0):
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _competitors(event):
    """Return (competition, away, home) or None when the event is unusable."""
    competitions = event.get("competitions") or []
    if not competitions:
        return None
    comp = competitions[0] or {}
    competitors = comp.get("competitors") or []
    away = next((c for c in competitors if c.get("homeAway") == "away"), None)
    home = next((c for c in competitors if c.get("homeAway") == "home"), None)
    if not away or not home:
        return None
    return comp, away, home


def _status_type(comp):
    return (comp.get("status") or {}).get("type") or {}


def _rank(competitor):
    rank = (competitor.get("curatedRank") or {}).get("current")
    # ESPN uses 99 for "unranked"
    if not rank or rank > 25:
        return None
    return rank


# ═══════════════════════════════════════
# SCOREBOARD
# ═══════════════════════════════════════

def fetch_scoreboard(dates=None, groups=config.DEFAULT_GROUP, limit=None, week=None, season_type=None):
    """Raw scoreboard payload. Raises UpstreamError on any failure."""
    params = {"groups": groups}
    if dates:
        params["dates"] = dates.replace("-", "")
    if limit:
        params["limit"] = limit
    if week is not None:
        params["week"] = week
    if season_type is not None:
        params["seasontype"] = season_type
    data = get_json(f"{config.ESPN_SITE_URL}/scoreboard", params=params)
    if not isinstance(data, dict):
        raise UpstreamError("Scoreboard payload is not an object")
    return data


def to_ticker_game(event):
    """ESPN event → lightweight ticker game. None if the event lacks two sides."""
    parts = _competitors(event)
    if not parts:
        return None
    comp, away, home = parts

    state = _status_type(comp).get("state", "pre")
    is_live = state == "in"
    is_final = state == "post"
    has_score = is_live or is_final
    possession = (comp.get("situation") or {}).get("possession")

    def side(c):
        team = c.get("team") or {}
        return {
            "abbr": team.get("abbreviation", ""),
            "logo": team.get("logo", ""),
            "score": _to_int(c.get("score")) if has_score else None,
            "rank": _rank(c),
            "hasPossession": is_live and possession is not None and possession == c.get("id"),
        }

    return {
        "id": event.get("id", ""),
        "awayTeam": side(away),
        "homeTeam": side(home),
        "statusDetail": _status_type(comp).get("shortDetail", ""),
        "startDate": event.get("date", ""),
        "isLive": is_live,
        "isFinal": is_final,
    }


def fetch_ticker_games(dates=None):
    """FBS games for the score ticker (today, or a specific date)."""
    data = fetch_scoreboard(dates=dates, groups="80", limit=config.TICKER_LIMIT)
    games = (to_ticker_game(e) for e in data.get("events") or [])
    return [g for g in games if g]


# ═══════════════════════════════════════
# SCHEDULE
# ═══════════════════════════════════════

_LEADER_CATEGORIES = {
    "passingYards": "passing",
    "rushingYards": "rushing",
    "receivingYards": "receiving",
}


def _game_leaders(comp):
    """Top passing/rushing/receiving leader per game, or None if ESPN sent none."""
    leaders = {}
    for category in comp.get("leaders") or []:
        slot = _LEADER_CATEGORIES.get(category.get("name"))
        top = (category.get("leaders") or [None])[0]
        if not slot or not top:
            continue
        athlete = top.get("athlete") or {}
        leaders[slot] = {
            "name": athlete.get("shortName") or athlete.get("fullName", ""),
            "displayValue": top.get("displayValue", ""),
            "value": top.get("value", 0),
            "headshot": athlete.get("headshot"),
            "position": (athlete.get("position") or {}).get("abbreviation"),
            "teamId": (athlete.get("team") or {}).get("id"),
        }
    return leaders or None


def to_schedule_game(event):
    """ESPN event → ScheduleGame dict. None if the event lacks two sides."""
    parts = _competitors(event)
    if not parts:
        return None
    comp, away, home = parts

    status = _status_type(comp)
    state = status.get("state", "pre")
    has_score = state in ("in", "post")

    broadcasts = []
    for b in comp.get("broadcasts") or []:
        broadcasts.extend(b.get("names") or [])

    def side(c):
        team = c.get("team") or {}
        record = next(
            (r.get("summary") for r in c.get("records") or [] if r.get("type") == "total"),
            None,
        )
        return {
            "id": c.get("id", ""),
            "name": team.get("displayName", ""),
            "abbreviation": team.get("abbreviation", ""),
            "logo": team.get("logo", ""),
            "score": _to_int(c.get("score")) if has_score else None,
            "rank": _rank(c),
            "record": record,
        }

    venue = None
    if comp.get("venue"):
        address = comp["venue"].get("address") or {}
        venue = {
            "name": comp["venue"].get("fullName", ""),
            "city": address.get("city"),
            "state": address.get("state"),
        }

    note = next(
        (n.get("headline") for n in comp.get("notes") or [] if n.get("type") == "event"),
        None,
    )

    return {
        "id": event.get("id", ""),
        "date": event.get("date", ""),
        "name": event.get("name", ""),
        "shortName": event.get("shortName", ""),
        "venue": venue,
        "broadcasts": broadcasts,
        "awayTeam": side(away),
        "homeTeam": side(home),
        "status": {
            "state": state,
            "detail": status.get("detail", ""),
            "shortDetail": status.get("shortDetail", ""),
            "completed": bool(status.get("completed", False)),
        },
        "isConferenceGame": bool(comp.get("conferenceCompetition", False)),
        "leaders": _game_leaders(comp),
        "note": note,
    }


def _schedule_games(data):
    games = (to_schedule_game(e) for e in data.get("events") or [])
    return [g for g in games if g]


def fetch_schedule(dates=None, group=config.DEFAULT_GROUP):
    """Schedule games for today (or ``dates``, YYYYMMDD / YYYY-MM-DD)."""
    data = fetch_scoreboard(dates=dates, groups=group, limit=config.SCOREBOARD_LIMIT)
    return _schedule_games(data)


def fetch_schedule_by_week(week, season_type=2, group=config.DEFAULT_GROUP):
    """Schedule games for one week slice (seasontype 2 = regular, 3 = postseason)."""
    data = fetch_scoreboard(
        groups=group, limit=config.SCOREBOARD_LIMIT, week=week, season_type=season_type,
    )
    return _schedule_games(data)


def season_week_slices():
    """Every (week, seasontype) pair that makes up a full season."""
    return (
        [(week, 2) for week in config.REGULAR_SEASON_WEEKS]
        + [(week, 3) for week in config.POSTSEASON_WEEKS]
    )


def fetch_season_schedule(group=config.DEFAULT_GROUP):
    """Every game of the season for a division group, de-duplicated by id.

    Week slices are fetched in parallel, SCHEDULE_BATCH_SIZE at a time. A
    failed slice is skipped; if every slice fails the whole fetch fails so
    the caller can keep serving what it had.
    """
    slices = season_week_slices()
    log.info(f"Fetching full season schedule for group {group} ({len(slices)} week slices)...")

    results = {}
    failed = 0
    with ThreadPoolExecutor(max_workers=config.SCHEDULE_BATCH_SIZE) as executor:
        future_to_slice = {
            executor.submit(fetch_schedule_by_week, week, season_type, group): (week, season_type)
            for week, season_type in slices
        }
        for future in as_completed(future_to_slice):
            week, season_type = future_to_slice[future]
            try:
                results[(week, season_type)] = future.result()
            except Exception as e:
                failed += 1
                log.debug(f"Schedule slice week={week} seasontype={season_type} failed: {e}")

    if failed == len(slices):
        raise UpstreamError(f"All {failed} schedule slices failed for group {group}")

    # Merge in season order; a repeated id keeps its first position, last copy wins
    merged = {}
    for key in slices:
        for game in results.get(key, []):
            merged[game["id"]] = game

    games = list(merged.values())
    log.info(f"Fetched {len(games)} games for group {group} ({failed}/{len(slices)} slices failed)")
    return games


_STATE_ORDER = {"in": 0, "pre": 1, "post": 2}


def sort_schedule_games(games):
    """Live first, then upcoming, then completed; each by start time."""
    far_future = datetime.max.replace(tzinfo=timezone.utc)
    return sorted(
        games,
        key=lambda g: (
            _STATE_ORDER.get(g["status"]["state"], 1),
            parse_espn_date(g.get("date")) or far_future,
        ),
    )


# ═══════════════════════════════════════
# STANDINGS
# ═══════════════════════════════════════

def _parse_record(display_value):
    """'7-2' → (7, 2). Anything else → (0, 0)."""
    if not display_value or "-" not in display_value:
        return 0, 0
    parts = display_value.split("-")
    return _to_int(parts[0]), _to_int(parts[1])


def _standings_teams(entries):
    result = []
    for entry in entries or []:
        team = entry.get("team")
        if not team:
            continue
        stats = {s.get("name"): s.get("displayValue", "") for s in entry.get("stats") or []}
        wins, losses = _parse_record(stats.get("overall"))
        conf_wins, conf_losses = _parse_record(stats.get("vs. Conf."))
        logos = team.get("logos") or [{}]
        result.append({
            "id": team.get("id", ""),
            "name": team.get("displayName") or team.get("name", ""),
            "abbreviation": team.get("abbreviation", ""),
            "logo": logos[0].get("href", ""),
            "wins": wins,
            "losses": losses,
            "conferenceWins": conf_wins,
            "conferenceLosses": conf_losses,
            "streak": stats.get("streak", ""),
            "homeRecord": stats.get("Home", ""),
            "awayRecord": stats.get("Away", ""),
        })
    result.sort(key=lambda t: (-t["conferenceWins"], t["conferenceLosses"], -t["wins"]))
    return result


def _standings_block(node, fallback_id=""):
    return {
        "id": node.get("id") or fallback_id,
        "name": node.get("name", ""),
        "shortName": node.get("shortName") or node.get("abbreviation", ""),
        "teams": _standings_teams((node.get("standings") or {}).get("entries")),
    }


def fetch_standings(group=config.DEFAULT_GROUP, season=None):
    """Conference standings; conferences with divisions are split per division."""
    season = season or current_season()
    data = get_json(config.ESPN_STANDINGS_URL, params={"group": group, "season": season})
    if not isinstance(data, dict):
        raise UpstreamError("Standings payload is not an object")

    conferences = []
    for conference in data.get("children") or []:
        divisions = conference.get("children")
        if isinstance(divisions, list):
            blocks = [
                _standings_block(d, f"{conference.get('id', '')}-{d.get('name', '')}")
                for d in divisions
            ]
        else:
            blocks = [_standings_block(conference)]
        conferences.extend(b for b in blocks if b["teams"])

    conferences.sort(key=lambda c: c["name"])
    return conferences


# ═══════════════════════════════════════
# RANKINGS
# ═══════════════════════════════════════

def fetch_rankings():
    """Current polls (AP, Coaches, CFP) reshaped to a flat, frontend-friendly form."""
    data = get_json(f"{config.ESPN_SITE_URL}/rankings")
    if not isinstance(data, dict):
        raise UpstreamError("Rankings payload is not an object")

    polls = []
    for poll in data.get("rankings") or []:
        ranks = []
        for r in poll.get("ranks") or []:
            team = r.get("team") or {}
            ranks.append({
                "current": r.get("current"),
                "previous": r.get("previous"),
                "team": {
                    "id": team.get("id"),
                    "displayName": team.get("displayName") or team.get("location"),
                    "shortDisplayName": team.get("shortDisplayName"),
                    "logo": team.get("logo"),
                    "nickname": team.get("nickname"),
                },
                "record": r.get("recordSummary"),
            })
        polls.append({
            "name": poll.get("name") or poll.get("shortName") or "Unknown",
            "shortName": poll.get("shortName") or poll.get("name"),
            "type": poll.get("type"),
            "ranks": ranks,
        })
    return polls


# ═══════════════════════════════════════
# TEAM ROSTER
# ═══════════════════════════════════════

def _format_height(athlete):
    if athlete.get("displayHeight"):
        return athlete["displayHeight"]
    height = athlete.get("height")
    if height:
        return f"{int(height // 12)}' {int(round(height % 12))}\""
    return "-"


def transform_athlete(athlete):
    """ESPN roster athlete → roster row."""
    birthplace = athlete.get("birthPlace") or {}
    hometown = ", ".join(p for p in (birthplace.get("city"), birthplace.get("state")) if p) or "-"
    weight = athlete.get("displayWeight") or (f"{athlete['weight']} lbs" if athlete.get("weight") else "-")
    return {
        "id": str(athlete.get("id", "")),
        "name": athlete.get("displayName") or athlete.get("fullName", ""),
        "firstName": athlete.get("firstName", ""),
        "lastName": athlete.get("lastName", ""),
        "jersey": athlete.get("jersey") or "-",
        "position": (athlete.get("position") or {}).get("abbreviation") or "-",
        "positionName": (athlete.get("position") or {}).get("name") or "",
        "height": _format_height(athlete),
        "weight": weight,
        "class": (athlete.get("experience") or {}).get("displayValue") or "-",
        "hometown": hometown,
        "headshot": (athlete.get("headshot") or {}).get("href"),
    }


def fetch_team_roster(espn_id):
    """Flattened roster (all position groups) plus head coach for one team."""
    data = get_json(f"{config.ESPN_SITE_URL}/teams/{espn_id}/roster")
    if not isinstance(data, dict):
        raise UpstreamError(f"Roster payload for team {espn_id} is not an object")

    roster = []
    for group in data.get("athletes") or []:
        for athlete in group.get("items") or []:
            roster.append(transform_athlete(athlete))

    coaches = data.get("coach") or []
    head_coach = None
    if coaches:
        head_coach = f"{coaches[0].get('firstName', '')} {coaches[0].get('lastName', '')}".strip() or None

    return {"roster": roster, "headCoach": head_coach}


# ═══════════════════════════════════════
# TEAM SCHEDULE
# ═══════════════════════════════════════

def _team_schedule_row(event, team):
    comps = event.get("competitions") or []
    if not comps:
        return None
    comp = comps[0]
    competitors = comp.get("competitors") or []
    ours = next((c for c in competitors if str((c.get("team") or {}).get("id")) == team["espnId"]), None)
    theirs = next((c for c in competitors if str((c.get("team") or {}).get("id")) != team["espnId"]), None)
    if not ours or not theirs or not theirs.get("team"):
        return None

    opp = theirs["team"]
    opp_team = teams.get_team_by_espn_id(opp.get("id")) or teams.get_team_by_name(opp.get("displayName"))
    is_home = ours.get("homeAway") == "home"
    completed = bool(_status_type(comp).get("completed", False))
    is_postseason = (event.get("season") or {}).get("type") == 3

    result = None
    score = None
    if completed and ours.get("score") and theirs.get("score"):
        ours_pts = (ours["score"] or {}).get("value", 0)
        theirs_pts = (theirs["score"] or {}).get("value", 0)
        score = {"team": ours_pts, "opponent": theirs_pts}
        result = "W" if ours_pts > theirs_pts else "L" if ours_pts < theirs_pts else "T"

    game_dt = parse_espn_date(event.get("date"))
    week = (event.get("week") or {}).get("number")
    broadcasts = comp.get("broadcasts") or []
    tv = ((broadcasts[0] or {}).get("names") or [None])[0] if broadcasts else None

    return {
        "week": week if week is not None else (99 if is_postseason else 0),
        "date": f"{game_dt:%b} {game_dt.day}" if game_dt else "",
        "rawDate": game_dt.isoformat() if game_dt else "",
        "opponent": opp.get("displayName", ""),
        "opponentLogo": ((opp.get("logos") or [{}])[0].get("href")) or opp.get("logo")
                        or config.ESPN_LOGO_URL.format(espn_id=opp.get("id", "")),
        "opponentSlug": opp_team["slug"] if opp_team else None,
        "isHome": is_home,
        "isConference": bool(opp_team and opp_team["conference"] == team["conference"]),
        "isPostseason": is_postseason,
        "bowlName": (event.get("name") or event.get("shortName") or "Postseason") if is_postseason else None,
        "time": f"{game_dt:%H:%M} UTC" if game_dt and not completed else None,
        "tv": tv,
        "venue": (comp.get("venue") or {}).get("fullName") or ("Home" if is_home else "Away"),
        "result": result,
        "score": score,
        "isBye": False,
    }


def _bye_week(week):
    return {
        "week": week, "date": "", "rawDate": "", "opponent": "BYE WEEK",
        "opponentLogo": "", "opponentSlug": "", "isHome": True,
        "isConference": False, "isPostseason": False, "bowlName": None,
        "time": "", "tv": "", "venue": "", "result": None, "score": None,
        "isBye": True,
    }


def fetch_team_schedule(team, season=None):
    """Regular season (with bye weeks filled in) followed by postseason by date."""
    season = season or current_season()
    url = f"{config.ESPN_SITE_URL}/teams/{team['espnId']}/schedule"
    regular = get_json(url, params={"season": season})
    if not isinstance(regular, dict):
        raise UpstreamError(f"Schedule payload for {team['slug']} is not an object")
    try:
        post = get_json(url, params={"season": season, "seasontype": 3})
    except UpstreamError as e:
        log.debug(f"Postseason schedule for {team['slug']} unavailable: {e}")
        post = {}

    seen = set()
    rows = []
    for event in (regular.get("events") or []) + (post.get("events") or []):
        if event.get("id") in seen:
            continue
        seen.add(event.get("id"))
        row = _team_schedule_row(event, team)
        if row:
            rows.append(row)

    regular_rows = [r for r in rows if not r["isPostseason"]]
    post_rows = [r for r in rows if r["isPostseason"]]

    played = {r["week"] for r in regular_rows}
    if played:
        for week in range(min(played), max(played) + 1):
            if week not in played:
                regular_rows.append(_bye_week(week))

    regular_rows.sort(key=lambda r: r["week"])
    post_rows.sort(key=lambda r: r["rawDate"])
    return regular_rows + post_rows


# ═══════════════════════════════════════
# TEAM STATS
# ═══════════════════════════════════════

def _stat_lookup(categories):
    """(category, stat) name pairs, lowercased → ESPN stat dict."""
    index = {}
    for category in categories:
        if not isinstance(category, dict):
            continue
        cat_name = (category.get("name") or "").lower()
        for stat in category.get("stats") or []:
            if isinstance(stat, dict) and stat.get("name"):
                index[(cat_name, stat["name"].lower())] = stat
    return index


def summarize_team_stats(categories):
    """ESPN statistics categories → offense / defense / specialTeams summary."""
    index = _stat_lookup(categories)

    def value(category, name):
        v = index.get((category.lower(), name.lower()), {}).get("value")
        return v if isinstance(v, (int, float)) and v else 0

    passing_ypg = value("passing", "netPassingYardsPerGame")
    rushing_ypg = value("rushing", "rushingYardsPerGame")
    def_ints = value("defensiveInterceptions", "interceptions")
    fumbles_recovered = value("general", "fumblesRecovered")

    return {
        "offense": {
            "pointsPerGame": value("scoring", "totalPointsPerGame"),
            "yardsPerGame": passing_ypg + rushing_ypg,
            "passingYardsPerGame": passing_ypg,
            "rushingYardsPerGame": rushing_ypg,
            "passingTouchdowns": value("passing", "passingTouchdowns"),
            "rushingTouchdowns": value("rushing", "rushingTouchdowns"),
            "completionPct": value("passing", "completionPct"),
            "yardsPerAttempt": value("passing", "yardsPerPassAttempt"),
            "yardsPerRush": value("rushing", "yardsPerRushAttempt"),
            "thirdDownPct": value("miscellaneous", "thirdDownConvPct"),
            "redzonePct": value("miscellaneous", "redzoneScoringPct"),
            "firstDowns": value("miscellaneous", "firstDowns"),
            "turnovers": value("passing", "interceptions") + value("miscellaneous", "fumblesLost"),
        },
        "defense": {
            "sacks": value("defensive", "sacks"),
            "tacklesForLoss": value("defensive", "tacklesForLoss"),
            "interceptions": def_ints,
            "passesDefended": value("defensive", "passesDefended"),
            "fumblesForced": value("general", "fumblesForced"),
            "fumblesRecovered": fumbles_recovered,
            "totalTackles": value("defensive", "totalTackles"),
            "takeaways": def_ints + fumbles_recovered,
        },
        "specialTeams": {
            "fieldGoalPct": value("kicking", "fieldGoalPct"),
            "fieldGoals": f"{value('kicking', 'fieldGoalsMade')}/{value('kicking', 'fieldGoalAttempts')}",
            "puntAvg": value("punting", "grossAvgPuntYards"),
            "kickReturnAvg": value("returning", "yardsPerKickReturn"),
            "puntReturnAvg": value("returning", "yardsPerPuntReturn"),
        },
        "rankings": {
            "offenseRank": index.get(("scoring", "totalpointspergame"), {}).get("rank"),
        },
    }


def fetch_team_leaders(espn_id, season=None):
    """Top player in each of the team's first few leader categories.

    Best effort: an unavailable leaders feed or athlete yields fewer entries,
    never an error.
    """
    season = season or current_season()
    try:
        data = get_json(f"{config.ESPN_CORE_URL}/seasons/{season}/types/2/teams/{espn_id}/leaders")
    except UpstreamError as e:
        log.warning(f"Team leaders for {espn_id} unavailable: {e}")
        return []
    categories = data.get("categories") if isinstance(data, dict) else None
    categories = [c for c in categories or [] if isinstance(c, dict)][:config.TEAM_LEADER_CATEGORIES]
    resolve = RefResolver()

    def top_leader(category):
        entries = category.get("leaders") or []
        if not entries or not isinstance(entries[0], dict):
            return None
        athlete = resolve(entries[0].get("athlete"))
        if not athlete:
            return None
        return {
            "category": category.get("displayName") or category.get("name"),
            "categoryAbbr": category.get("abbreviation"),
            "playerName": athlete.get("displayName"),
            "position": (athlete.get("position") or {}).get("abbreviation") or "",
            "value": entries[0].get("displayValue"),
            "headshot": (athlete.get("headshot") or {}).get("href"),
        }

    if not categories:
        return []
    with ThreadPoolExecutor(max_workers=config.TEAM_LEADER_CATEGORIES) as executor:
        return [leader for leader in executor.map(top_leader, categories) if leader]


def fetch_team_stats(team, season=None):
    """Season stat summary plus top player per leader category for one team."""
    data = get_json(f"{config.ESPN_SITE_URL}/teams/{team['espnId']}/statistics")
    if not isinstance(data, dict):
        raise UpstreamError(f"Statistics payload for {team['slug']} is not an object")
    categories = ((data.get("results") or {}).get("stats") or {}).get("categories") or []
    return {
        "stats": summarize_team_stats(categories),
        "playerLeaders": fetch_team_leaders(team["espnId"], season),
    }


# ═══════════════════════════════════════
# STAT LEADERS
# ═══════════════════════════════════════

# (key, display name, group); key is also ESPN's category name
STAT_CATEGORIES = [
    ("passingYards", "Passing Yards", "passing"),
    ("passingTouchdowns", "Passing TDs", "passing"),
    ("completionPct", "Completion %", "passing"),
    ("yardsPerPassAttempt", "Yards/Attempt", "passing"),
    ("QBRating", "Passer Rating", "passing"),
    ("interceptions", "INTs Thrown", "passing"),
    ("rushingYards", "Rushing Yards", "rushing"),
    ("rushingTouchdowns", "Rushing TDs", "rushing"),
    ("yardsPerRushAttempt", "Yards/Carry", "rushing"),
    ("longRushing", "Longest Rush", "rushing"),
    ("receivingYards", "Receiving Yards", "receiving"),
    ("receivingTouchdowns", "Receiving TDs", "receiving"),
    ("receptions", "Receptions", "receiving"),
    ("yardsPerReception", "Yards/Reception", "receiving"),
    ("longReception", "Longest Reception", "receiving"),
    ("totalTackles", "Tackles", "defense"),
    ("sacks", "Sacks", "defense"),
    ("defensiveInterceptions", "Interceptions", "defense"),
    ("tacklesForLoss", "Tackles for Loss", "defense"),
    ("forcedFumbles", "Forced Fumbles", "defense"),
    ("passesDefended", "Passes Defended", "defense"),
    ("puntReturnYards", "Punt Return Yards", "specialTeams"),
    ("kickReturnYards", "Kick Return Yards", "specialTeams"),
    ("puntReturnTouchdowns", "Punt Return TDs", "specialTeams"),
    ("kickReturnTouchdowns", "Kick Return TDs", "specialTeams"),
    ("fieldGoalPct", "Field Goal %", "specialTeams"),
]
_STAT_CATEGORIES_BY_NAME = {key.lower(): (key, name, group) for key, name, group in STAT_CATEGORIES}

STAT_TYPES = ("total", "perGame")

_TEAM_REF_RE = re.compile(r"teams/(\d+)")
_CLASS_YEARS = {1: "FR", 2: "SO", 3: "JR", 4: "SR"}


class RefResolver:
    """Follows ESPN core-API ``{"$ref": url}`` links, fetching each url once.

    Unreachable links resolve to None. Safe to share across worker threads.
    """

    def __init__(self):
        self._resolved = {}
        self._lock = threading.Lock()

    def __call__(self, node):
        ref = node.get("$ref") if isinstance(node, dict) else None
        if not ref:
            return None
        with self._lock:
            if ref in self._resolved:
                return self._resolved[ref]
        try:
            data = get_json(ref)
        except UpstreamError as e:
            log.debug(f"Could not resolve {ref}: {e}")
            data = None
        if not isinstance(data, dict):
            data = None
        with self._lock:
            self._resolved[ref] = data
        return data


def _ref_team_id(node):
    ref = node.get("$ref") if isinstance(node, dict) else None
    match = _TEAM_REF_RE.search(ref or "")
    return match.group(1) if match else ""


def fetch_division_team_ids(group, season):
    """ESPN ids of every team in a division group. Empty (no filtering) when unavailable."""
    url = f"{config.ESPN_CORE_URL}/seasons/{season}/types/2/groups/{group}/teams"
    try:
        data = get_json(url, params={"limit": 200})
    except UpstreamError as e:
        log.warning(f"Team list for group {group} unavailable, leaders not filtered: {e}")
        return set()
    items = data.get("items") if isinstance(data, dict) else None
    return {team_id for team_id in map(_ref_team_id, items or []) if team_id}


def _class_year(experience):
    if not isinstance(experience, dict):
        return ""
    year = experience.get("year")
    abbreviation = experience.get("abbreviation") or ""
    if year in _CLASS_YEARS:
        return _CLASS_YEARS[year]
    if abbreviation in _CLASS_YEARS.values():
        return abbreviation
    if isinstance(year, int) and year >= 5:
        return "SR"
    return abbreviation


def _games_played(statistics):
    for category in ((statistics or {}).get("splits") or {}).get("categories") or []:
        for stat in category.get("stats") or []:
            if stat.get("name") == "gamesPlayed":
                value = stat.get("value")
                if isinstance(value, (int, float)) and value > 0:
                    return value
    return config.DEFAULT_GAMES_PLAYED


def _conference(groups):
    for group in (groups or {}).get("items") or []:
        if isinstance(group, dict) and group.get("isConference"):
            return group.get("shortName") or group.get("name") or "", str(group.get("id") or "")
    return "", ""


def to_stat_leader(entry, resolve, division_ids, stat_type="total"):
    """One ESPN leader entry → StatLeader dict, or None for a team outside the division."""
    athlete = entry.get("athlete")
    if not isinstance(athlete, dict):
        return None
    team_id = _ref_team_id(entry.get("team"))
    if division_ids and team_id and team_id not in division_ids:
        return None

    athlete = resolve(athlete) or athlete
    team = athlete.get("team") or {}
    team = resolve(team) or team
    final_team_id = str(team.get("id") or team_id)
    if division_ids and final_team_id and final_team_id not in division_ids:
        return None

    games_played = _games_played(resolve(entry.get("statistics")))
    try:
        numeric = float(entry.get("value") or 0)
    except (TypeError, ValueError):
        numeric = 0.0
    display = entry.get("displayValue") or str(entry.get("value", ""))
    if stat_type == "perGame":
        numeric = numeric / games_played
        display = f"{numeric:.1f}"

    conference, conference_id = _conference(resolve(team.get("groups")))
    logos = team.get("logos") or [{}]
    return {
        "playerId": str(athlete.get("id") or ""),
        "name": athlete.get("displayName") or athlete.get("fullName") or "Unknown",
        "value": display,
        "numericValue": numeric,
        "position": (athlete.get("position") or {}).get("abbreviation") or "N/A",
        "teamId": final_team_id,
        "teamName": team.get("displayName") or team.get("name") or "Unknown",
        "teamAbbreviation": team.get("abbreviation") or "",
        "teamLogo": logos[0].get("href") or "",
        "conference": conference,
        "conferenceId": conference_id,
        "gamesPlayed": int(games_played),
        "classYear": _class_year(athlete.get("experience")),
    }


def _leader_categories(data, division_ids, stat_type):
    resolve = RefResolver()
    batch = config.STAT_LEADERS_MAX_WORKERS
    categories = []
    with ThreadPoolExecutor(max_workers=batch) as executor:
        for espn_category in data.get("categories") or []:
            if not isinstance(espn_category, dict):
                continue
            known = _STAT_CATEGORIES_BY_NAME.get((espn_category.get("name") or "").lower())
            if not known:
                continue
            key, name, group = known

            entries = [e for e in (espn_category.get("leaders") or [])[:config.STAT_LEADERS_FETCH_LIMIT]
                       if isinstance(e, dict)]
            leaders = []
            # Batches keep order and stop early once the category is full
            for start in range(0, len(entries), batch):
                chunk = entries[start:start + batch]
                for leader in executor.map(lambda e: to_stat_leader(e, resolve, division_ids, stat_type), chunk):
                    if leader:
                        leaders.append(leader)
                if len(leaders) >= config.STAT_LEADERS_PER_CATEGORY:
                    break
            leaders = leaders[:config.STAT_LEADERS_PER_CATEGORY]
            if not leaders:
                continue
            if stat_type == "perGame":
                leaders.sort(key=lambda leader: leader["numericValue"], reverse=True)
            categories.append({"name": key, "displayName": name, "group": group, "leaders": leaders})
    return categories


def fetch_stat_leaders(group=config.DEFAULT_GROUP, stat_type="total", season=None):
    """Individual stat leaders per category, limited to one division group.

    Tries the current season, then the previous one when the current season
    has no leaders yet. Raises UpstreamError only when no season's leaders
    feed could be read at all.
    """
    season = season or current_season()
    last_error = None
    fetched = False
    for year in (season, season - 1):
        try:
            data = get_json(
                f"{config.ESPN_CORE_URL}/seasons/{year}/types/2/leaders",
                params={"limit": config.STAT_LEADERS_FETCH_LIMIT},
            )
        except UpstreamError as e:
            log.warning(f"Stat leaders for season {year} unavailable: {e}")
            last_error = e
            continue
        if not isinstance(data, dict):
            last_error = UpstreamError(f"Stat leaders payload for season {year} is not an object")
            continue
        fetched = True
        if not data.get("categories"):
            continue

        log.info(f"Building {stat_type} stat leaders for group {group}, season {year}...")
        categories = _leader_categories(data, fetch_division_team_ids(group, year), stat_type)
        if categories:
            log.info(f"Built {len(categories)} stat leader categories for group {group}")
            return categories

    if not fetched and last_error is not None:
        raise last_error
    return []
