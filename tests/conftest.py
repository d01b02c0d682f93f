"""Shared test fixtures."""

import pytest

from cfbhq import app as app_module
from cfbhq import teams


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def clear_caches():
    for cache in app_module.ALL_CACHES:
        cache.clear()
    yield
    for cache in app_module.ALL_CACHES:
        cache.clear()


@pytest.fixture
def client():
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c


@pytest.fixture
def alabama():
    return teams.get_team_by_slug("alabama-crimson-tide")


def make_player(name, team_slug="alabama-crimson-tide", position="QB", **overrides):
    """CachedPlayer dict with sensible defaults."""
    from cfbhq.players import slugify

    team = teams.get_team_by_slug(team_slug)
    player = {
        "id": overrides.pop("id", slugify(name)),
        "name": name,
        "slug": slugify(name),
        "firstName": name.split()[0],
        "lastName": name.split()[-1],
        "jerseyNumber": "1",
        "position": position,
        "positionName": "",
        "class": "Junior",
        "height": "6' 2\"",
        "weight": "210 lbs",
        "hometown": "Austin, TX",
        "teamId": team["id"],
        "teamName": team["name"],
        "teamSlug": team["slug"],
        "teamLogo": team["logo"],
        "conference": team["conference"],
        "headshot": None,
    }
    player.update(overrides)
    return player


def make_event(event_id, state="pre", date="2025-09-06T16:00Z", away=("BAMA", "333"),
               home=("UGA", "61"), away_score="0", home_score="0", **extra):
    """Minimal ESPN scoreboard event."""
    event = {
        "id": event_id,
        "date": date,
        "name": f"{away[0]} at {home[0]}",
        "shortName": f"{away[0]} @ {home[0]}",
        "competitions": [{
            "status": {"type": {"state": state, "completed": state == "post",
                                "detail": "", "shortDetail": state.upper()}},
            "competitors": [
                {"id": away[1], "homeAway": "away", "score": away_score,
                 "team": {"id": away[1], "abbreviation": away[0], "displayName": away[0],
                          "logo": f"{away[0]}.png"}},
                {"id": home[1], "homeAway": "home", "score": home_score,
                 "team": {"id": home[1], "abbreviation": home[0], "displayName": home[0],
                          "logo": f"{home[0]}.png"}},
            ],
        }],
    }
    event.update(extra)
    return event
