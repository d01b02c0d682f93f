"""
CFB HQ configuration
Edit this file to point the service at different upstreams or tune caching.
"""

# ═══════════════════════════════════════
# UPSTREAMS
# ═══════════════════════════════════════

ESPN_SITE_URL = "https://site.api.espn.com/apis/site/v2/sports/football/college-football"
ESPN_STANDINGS_URL = "https://site.api.espn.com/apis/v2/sports/football/college-football/standings"
ESPN_LOGO_URL = "https://a.espncdn.com/i/teamlogos/ncaa/500/{espn_id}.png"
ESPN_CORE_URL = "https://sports.core.api.espn.com/v2/sports/football/leagues/college-football"

TRANSFER_PORTAL_URL = (
    "https://staticj.profootballnetwork.com/assets/sheets/tools/"
    "cfb-transfer-portal-tracker/transferPortalTrackerData.json"
)
ARTICLES_RSS_URL = "https://www.profootballnetwork.com/tag/college-football/feed/"

# Spring game schedule, a published Google Sheet (program, conference, date)
SPRING_GAMES_SHEET_ID = "2PACX-1vSyMzJ7vYG7nmAS5pMowBs3c0kY2G2_F3EdYAWmxwTyrUAt5r7Hpmd_WEUBZKsGhS8UNW0rRUi355QB"
SPRING_GAMES_SHEET_GID = "0"

USER_AGENT = "Mozilla/5.0 (compatible; CFB-HQ/1.0)"

DEFAULT_GROUP = "80"                 # 80 = FBS, 81 = FCS
VALID_GROUPS = ("80", "81")


# ═══════════════════════════════════════
# CACHE TTLS (seconds)
# ═══════════════════════════════════════

PLAYER_INDEX_TTL_SECONDS = 300
PLAYER_LIST_TTL_SECONDS = 600
TRANSFER_PORTAL_TTL_SECONDS = 600
SEASON_SCHEDULE_TTL_SECONDS = 300
STANDINGS_TTL_SECONDS = 300
RANKINGS_TTL_SECONDS = 3600
TEAM_ROSTER_TTL_SECONDS = 3600
TEAM_SCHEDULE_TTL_SECONDS = 1800
ARTICLES_TTL_SECONDS = 3600
STAT_LEADERS_TTL_SECONDS = 3600
TEAM_STATS_TTL_SECONDS = 1800
SPRING_GAMES_TTL_SECONDS = 300


# ═══════════════════════════════════════
# FAN-OUT / TIMEOUTS
# ═══════════════════════════════════════

ESPN_TIMEOUT_SECONDS = 10
TRANSFER_PORTAL_TIMEOUT_SECONDS = 10
RSS_TIMEOUT_SECONDS = 15
SHEET_TIMEOUT_SECONDS = 15

RETRY_ATTEMPTS = 2
RETRY_BACKOFF_SECONDS = 0.5

ROSTER_MAX_WORKERS = 10              # concurrent roster fetches across all teams
SCHEDULE_BATCH_SIZE = 5              # week slices fetched at once
REGULAR_SEASON_WEEKS = range(0, 17)  # weeks 0-16, seasontype=2
POSTSEASON_WEEKS = range(1, 6)       # weeks 1-5, seasontype=3
SCOREBOARD_LIMIT = 100
TICKER_LIMIT = 50
TICKER_MAX_AGE_DAYS = 7
STAT_LEADERS_FETCH_LIMIT = 100      # leaders requested per category
STAT_LEADERS_PER_CATEGORY = 50
STAT_LEADERS_MAX_WORKERS = 10        # concurrent athlete/team lookups
TEAM_LEADER_CATEGORIES = 8
DEFAULT_GAMES_PLAYED = 13


# ═══════════════════════════════════════
# PLAYERS DIRECTORY
# ═══════════════════════════════════════

PLAYERS_DEFAULT_LIMIT = 24
PLAYERS_MAX_LIMIT = 100


# ═══════════════════════════════════════
# HTTP CACHE HEADERS (Cache-Control max-age, seconds)
# ═══════════════════════════════════════

MAX_AGE_LIVE = 30
MAX_AGE_SCORES = 300
MAX_AGE_STANDINGS = 300
MAX_AGE_STATIC = 3600


# ═══════════════════════════════════════
# SERVER
# ═══════════════════════════════════════

SERVER_HOST = "0.0.0.0"
SERVER_PORT = 5000
DEBUG = True
PREWARM_CACHES = True
