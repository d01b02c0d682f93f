"""
CFB HQ: Flask Server
JSON API for the college football hub: players directory, transfer portal,
schedule and scores, standings, rankings, stat leaders, team pages,
articles and spring games.

Every expensive upstream read sits behind a SingleFlightCache, so a burst of
requests after expiry costs one upstream fan-out, and an upstream outage keeps
serving the last good data.
"""

import logging
import os
import re
import threading
from datetime import datetime, timedelta, timezone

from flask import Flask, jsonify, request
from flask_cors import CORS

from cfbhq import articles, config, espn, players, spring_games, teams, transfer_portal
from cfbhq.cache import SingleFlightCache
from cfbhq.upstream import UpstreamError, UpstreamTimeout

# ─── Setup ───
app = Flask(__name__, static_folder=None)
CORS(app)
logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
log = logging.getLogger("cfb-hq")

# ─── Caches ───
player_index_cache = SingleFlightCache("player-index", config.PLAYER_INDEX_TTL_SECONDS, dict)
player_list_cache = SingleFlightCache("player-list", config.PLAYER_LIST_TTL_SECONDS, list)
transfer_portal_cache = SingleFlightCache("transfer-portal", config.TRANSFER_PORTAL_TTL_SECONDS, dict)
season_schedule_cache = SingleFlightCache("season-schedule", config.SEASON_SCHEDULE_TTL_SECONDS, list)
standings_cache = SingleFlightCache("standings", config.STANDINGS_TTL_SECONDS, list)
rankings_cache = SingleFlightCache("rankings", config.RANKINGS_TTL_SECONDS, list)
team_roster_cache = SingleFlightCache("team-roster", config.TEAM_ROSTER_TTL_SECONDS, dict, maxsize=256)
team_schedule_cache = SingleFlightCache("team-schedule", config.TEAM_SCHEDULE_TTL_SECONDS, list, maxsize=256)
articles_cache = SingleFlightCache("articles", config.ARTICLES_TTL_SECONDS, list)
stat_leaders_cache = SingleFlightCache("stat-leaders", config.STAT_LEADERS_TTL_SECONDS, list)
team_stats_cache = SingleFlightCache("team-stats", config.TEAM_STATS_TTL_SECONDS, dict, maxsize=256)
spring_games_cache = SingleFlightCache("spring-games", config.SPRING_GAMES_TTL_SECONDS, list)

ALL_CACHES = [
    player_index_cache,
    player_list_cache,
    transfer_portal_cache,
    season_schedule_cache,
    standings_cache,
    rankings_cache,
    team_roster_cache,
    team_schedule_cache,
    articles_cache,
    stat_leaders_cache,
    team_stats_cache,
    spring_games_cache,
]

_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")

# List fields of the wrapper dicts some caches hold
_RECORD_FIELDS = ("players", "roster")


# ═══════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════

def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def _item_count(value):
    """Number of records in a cached value, looking inside wrapper dicts."""
    if isinstance(value, dict):
        for field in _RECORD_FIELDS:
            if isinstance(value.get(field), list):
                return len(value[field])
    return len(value) if hasattr(value, "__len__") else "?"


def _load(cache, key, populate):
    """cache.lookup() plus the logging the cache itself doesn't do."""
    result = cache.lookup(key, populate)
    if result.outcome == "miss":
        size = _item_count(result.value)
        log.info(f"Cached {cache.name}[{key}] ({size} items)")
    elif result.outcome == "stale":
        log.warning(f"{cache.name}[{key}] refresh failed, serving stale data: {result.error}")
    elif result.outcome == "default":
        log.warning(f"{cache.name}[{key}] fetch failed with nothing cached: {result.error}")
    return result


def _json(payload, max_age):
    resp = jsonify(payload)
    resp.headers["Cache-Control"] = f"public, s-maxage={max_age}, stale-while-revalidate"
    return resp


def _upstream_error(message, error, **empty):
    """502 (504 on timeout) with the route's empty collection(s)."""
    status = 504 if isinstance(error, UpstreamTimeout) else 502
    body = {"error": message}
    body.update(empty)
    return jsonify(body), status


def _group_arg():
    group = request.args.get("group", config.DEFAULT_GROUP)
    return group if group in config.VALID_GROUPS else config.DEFAULT_GROUP


def _int_arg(name, default=None):
    value = request.args.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


# ═══════════════════════════════════════
# PLAYERS
# ═══════════════════════════════════════

def load_player_list():
    return _load(player_list_cache, "all", players.fetch_all_rosters)


def _populate_player_index():
    # Reuses the list cache so the index never triggers a second roster fan-out
    result = load_player_list()
    if result.outcome == "default":
        raise result.error
    return players.build_player_index(result.value)


def load_player_index():
    return _load(player_index_cache, "all", _populate_player_index)


@app.route("/api/players")
def api_players():
    """Paginated, filterable players directory."""
    result = load_player_list()
    if result.outcome == "default":
        _, pagination = players.paginate([], 1, request.args.get("limit"))
        return _upstream_error("Failed to fetch players", result.error, players=[], pagination=pagination)

    filtered = players.filter_players(
        result.value,
        search=request.args.get("search", ""),
        team=request.args.get("team", "all"),
        position=request.args.get("position", "all"),
        conference=request.args.get("conference", "all"),
    )
    page, pagination = players.paginate(
        filtered,
        request.args.get("page", 1),
        request.args.get("limit", config.PLAYERS_DEFAULT_LIMIT),
    )
    return _json({"players": page, "pagination": pagination}, config.MAX_AGE_STATIC)


@app.route("/api/players/<slug>")
def api_player(slug):
    """One player's profile, looked up by slug."""
    result = load_player_index()
    if result.outcome == "default":
        return _upstream_error("Failed to fetch player data", result.error)

    player = result.value.get(slug.lower())
    if not player:
        return jsonify({"error": "Player not found"}), 404
    return _json(players.player_profile(player), config.MAX_AGE_STATIC)


# ═══════════════════════════════════════
# TRANSFER PORTAL
# ═══════════════════════════════════════

def load_transfer_portal():
    return _load(transfer_portal_cache, "all", transfer_portal.fetch_transfer_portal)


@app.route("/api/transfer-portal")
def api_transfer_portal():
    """All portal entries, or only those leaving/joining ``?team=<slug>``."""
    team_slug = request.args.get("team")
    team = None
    if team_slug:
        team = teams.get_team_by_slug(team_slug)
        if not team:
            return jsonify({"error": "Team not found"}), 404

    result = load_transfer_portal()
    if result.outcome == "default":
        return _upstream_error(
            "Failed to fetch transfer portal data", result.error, players=[], updatedTime=None,
        )

    entries = result.value["players"]
    if team:
        entries = transfer_portal.players_for_team(entries, team)
    return _json({
        "players": entries,
        "updatedTime": result.value["updatedTime"],
        "totalPlayers": len(entries),
    }, config.MAX_AGE_SCORES)


# ═══════════════════════════════════════
# SCHEDULE & SCORES
# ═══════════════════════════════════════

def load_season_schedule(group):
    return _load(season_schedule_cache, group, lambda: espn.fetch_season_schedule(group))


@app.route("/api/cfb/schedule")
def api_schedule():
    """Schedule games by week, date, month or the whole season."""
    group = _group_arg()
    week = _int_arg("week")
    date = request.args.get("date")
    month = request.args.get("month")
    fetch_all = request.args.get("fetchAll") == "true"

    if month and not _MONTH_RE.match(month):
        return jsonify({"error": "month must be YYYY-MM"}), 400

    if fetch_all or month:
        result = load_season_schedule(group)
        if result.outcome == "default":
            return _upstream_error("Failed to fetch schedule", result.error, games=[])
        games = result.value
        if month:
            games = [g for g in games if (g.get("date") or "").startswith(month)]
    else:
        try:
            if week is not None:
                season_type = _int_arg("seasonType", 2)
                if season_type not in (2, 3):
                    season_type = 2
                games = espn.fetch_schedule_by_week(week, season_type, group)
            elif date:
                games = espn.fetch_schedule(dates=date, group=group)
            else:
                games = espn.fetch_schedule(group=group)
        except UpstreamError as e:
            log.warning(f"Schedule fetch failed: {e}")
            return _upstream_error("Failed to fetch schedule", e, games=[])

    games = espn.sort_schedule_games(games)
    has_live = any(g["status"]["state"] == "in" for g in games)
    return _json({
        "games": games,
        "totalGames": len(games),
        "hasLiveGames": has_live,
        "lastUpdated": _now_iso(),
    }, config.MAX_AGE_LIVE if has_live else config.MAX_AGE_SCORES)


def _ticker_sort_key(game):
    started = espn.parse_espn_date(game["startDate"])
    ts = started.timestamp() if started else 0
    if game["isLive"]:
        return (0, ts)
    if not game["isFinal"]:
        return (1, ts)
    return (2, -ts)


def recent_ticker_games(games, now=None):
    """Drop games that started more than a week ago, then order for the ticker."""
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=config.TICKER_MAX_AGE_DAYS)
    recent = []
    for game in games:
        started = espn.parse_espn_date(game["startDate"])
        if started and started >= cutoff:
            recent.append(game)
    return sorted(recent, key=_ticker_sort_key)


@app.route("/api/cfb/espn-scoreboard")
def api_espn_scoreboard():
    """Score ticker games for today or ``?date=``."""
    try:
        games = espn.fetch_ticker_games(dates=request.args.get("date"))
    except UpstreamError as e:
        log.warning(f"Scoreboard fetch failed: {e}")
        return _upstream_error("Failed to fetch ESPN data", e, games=[])

    games = recent_ticker_games(games)
    has_live = any(g["isLive"] for g in games)
    return _json({
        "games": games,
        "totalGames": len(games),
        "hasLiveGames": has_live,
        "lastUpdated": _now_iso(),
    }, config.MAX_AGE_LIVE if has_live else config.MAX_AGE_SCORES)


# ═══════════════════════════════════════
# STANDINGS & RANKINGS
# ═══════════════════════════════════════

@app.route("/api/cfb/standings")
def api_standings():
    group = _group_arg()
    result = _load(standings_cache, group, lambda: espn.fetch_standings(group))
    if result.outcome == "default":
        return _upstream_error("Failed to fetch standings", result.error, conferences=[])
    return _json({
        "conferences": result.value,
        "totalConferences": len(result.value),
        "lastUpdated": _now_iso(),
    }, config.MAX_AGE_STANDINGS)


@app.route("/api/cfb/rankings")
def api_rankings():
    result = _load(rankings_cache, "all", espn.fetch_rankings)
    if result.outcome == "default":
        return _upstream_error("Failed to fetch rankings", result.error, rankings=[])
    return _json({"rankings": result.value}, config.MAX_AGE_STATIC)


# ═══════════════════════════════════════
# TEAM PAGES
# ═══════════════════════════════════════

@app.route("/api/teams/roster/<slug>")
def api_team_roster(slug):
    team = teams.get_team_by_slug(slug)
    if not team:
        return jsonify({"error": "Team not found"}), 404

    result = _load(team_roster_cache, team["slug"], lambda: espn.fetch_team_roster(team["espnId"]))
    if result.outcome == "default":
        return _upstream_error("Failed to fetch roster", result.error, roster=[])
    return _json({
        "team": team,
        "roster": result.value["roster"],
        "totalPlayers": len(result.value["roster"]),
        "headCoach": result.value["headCoach"],
    }, config.MAX_AGE_STATIC)


@app.route("/api/teams/schedule/<slug>")
def api_team_schedule(slug):
    team = teams.get_team_by_slug(slug)
    if not team:
        return jsonify({"error": "Team not found"}), 404

    result = _load(team_schedule_cache, team["slug"], lambda: espn.fetch_team_schedule(team))
    if result.outcome == "default":
        return _upstream_error("Failed to fetch schedule", result.error, schedule=[])
    return _json({"team": team, "schedule": result.value}, config.MAX_AGE_SCORES)


@app.route("/api/teams/stats/<slug>")
def api_team_stats(slug):
    """Season stat summary and top players for one team."""
    team = teams.get_team_by_slug(slug)
    if not team:
        return jsonify({"error": "Team not found"}), 404

    result = _load(team_stats_cache, team["slug"], lambda: espn.fetch_team_stats(team))
    if result.outcome == "default":
        return _upstream_error("Failed to fetch team stats", result.error, stats=None, playerLeaders=[])
    return _json({
        "team": team["name"],
        "stats": result.value["stats"],
        "playerLeaders": result.value["playerLeaders"],
    }, config.MAX_AGE_STATIC)


# ═══════════════════════════════════════
# STAT LEADERS
# ═══════════════════════════════════════

@app.route("/api/cfb/stat-leaders")
def api_stat_leaders():
    """Individual leaders per stat category, ``?group=80|81&statType=total|perGame``."""
    group = _group_arg()
    stat_type = request.args.get("statType", "total")
    if stat_type not in espn.STAT_TYPES:
        stat_type = "total"

    result = _load(
        stat_leaders_cache, (group, stat_type), lambda: espn.fetch_stat_leaders(group, stat_type),
    )
    if result.outcome == "default":
        return _upstream_error("Failed to fetch stat leaders", result.error, categories=[])
    return _json({
        "categories": result.value,
        "totalCategories": len(result.value),
        "lastUpdated": _now_iso(),
    }, config.MAX_AGE_STATIC)


# ═══════════════════════════════════════
# SPRING GAMES
# ═══════════════════════════════════════

@app.route("/api/cfb/spring-games")
def api_spring_games():
    result = _load(spring_games_cache, "all", spring_games.fetch_spring_games)
    if result.outcome == "default":
        return _upstream_error("Failed to fetch spring game schedule", result.error, games=[])
    return _json({"games": result.value}, config.MAX_AGE_SCORES)


# ═══════════════════════════════════════
# ARTICLES
# ═══════════════════════════════════════

@app.route("/api/cfb/articles")
def api_articles():
    result = _load(articles_cache, "all", articles.fetch_articles)
    if result.outcome == "default":
        return _upstream_error(
            "Failed to fetch CFB articles", result.error, success=False, articles=[], count=0,
        )
    return _json({
        "success": True,
        "articles": result.value,
        "count": len(result.value),
        "source": articles.ARTICLES_SOURCE,
    }, config.MAX_AGE_STATIC)


# ═══════════════════════════════════════
# STATUS & ERRORS
# ═══════════════════════════════════════

@app.route("/api/status")
def api_status():
    """Health check: freshness of every cache."""
    return jsonify({
        "ok": True,
        "caches": [cache.status() for cache in ALL_CACHES],
        "timestamp": _now_iso(),
    })


@app.errorhandler(404)
def not_found(e):
    return jsonify({"error": "Not found"}), 404


@app.errorhandler(500)
def internal_error(e):
    original = getattr(e, "original_exception", None)
    log.exception(f"Unhandled error on {request.path}: {original or e}")
    return jsonify({"error": "Internal server error"}), 500


# ═══════════════════════════════════════
# CACHE PRE-WARM
# ═══════════════════════════════════════

def _prewarm_caches():
    """Pre-populate the slow caches in background so first API calls return instantly."""
    import time
    time.sleep(1)  # let server finish binding

    log.info("Pre-warming caches (background)...")
    load_player_index()
    load_transfer_portal()
    load_season_schedule(config.DEFAULT_GROUP)
    _load(rankings_cache, "all", espn.fetch_rankings)
    _load(articles_cache, "all", articles.fetch_articles)
    log.info("Cache pre-warm complete")


# ═══════════════════════════════════════
# STARTUP
# ═══════════════════════════════════════

if __name__ == "__main__":
    log.info("=" * 50)
    log.info("CFB HQ: starting server")
    log.info(f"Teams: {len(teams.ALL_TEAMS)} across {len(teams.all_conferences())} conferences")
    log.info(f"ESPN source: {config.ESPN_SITE_URL}")
    log.info(f"Server: http://localhost:{config.SERVER_PORT}")
    log.info("=" * 50)

    # Pre-warm caches in background thread (only in actual server process, not reloader)
    if config.PREWARM_CACHES and (os.environ.get("WERKZEUG_RUN_MAIN") == "true" or not config.DEBUG):
        threading.Thread(target=_prewarm_caches, daemon=True).start()

    app.run(
        host=config.SERVER_HOST,
        port=config.SERVER_PORT,
        debug=config.DEBUG,
        threaded=True,  # the roster fan-out blocks for several seconds
    )
