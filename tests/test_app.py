"""Route tests: response shapes, cache behavior and upstream error mapping."""

import json
import logging
from datetime import datetime, timedelta, timezone
from unittest import mock

import pytest

from cfbhq import app as app_module
from cfbhq.upstream import UpstreamError, UpstreamTimeout

from conftest import make_player

PLAYERS = [
    make_player("Ty Simpson", position="QB"),
    make_player("Kadyn Proctor", position="OT"),
    make_player("Gunner Stockton", "georgia-bulldogs", position="QB"),
]


# ─── Players ───

def test_players_paginated_and_filtered(client):
    with mock.patch("cfbhq.players.fetch_all_rosters", return_value=PLAYERS):
        resp = client.get("/api/players?position=QB&limit=1&page=2")

    assert resp.status_code == 200
    body = resp.get_json()
    assert [p["name"] for p in body["players"]] == ["Gunner Stockton"]
    assert body["pagination"]["totalPlayers"] == 2
    assert body["pagination"]["hasPrevPage"] is True
    assert "s-maxage=3600" in resp.headers["Cache-Control"]


def test_players_fan_out_runs_once_across_requests(client):
    with mock.patch("cfbhq.players.fetch_all_rosters", return_value=PLAYERS) as fetch:
        client.get("/api/players")
        client.get("/api/players?team=georgia-bulldogs")
        client.get("/api/players/ty-simpson")
    assert fetch.call_count == 1


def test_players_upstream_failure_with_nothing_cached(client):
    with mock.patch("cfbhq.players.fetch_all_rosters", side_effect=UpstreamError("down")):
        resp = client.get("/api/players")

    assert resp.status_code == 502
    body = resp.get_json()
    assert body["players"] == []
    assert body["pagination"]["totalPlayers"] == 0
    assert "error" in body


def test_players_serves_stale_list_when_refresh_fails(client):
    with mock.patch("cfbhq.players.fetch_all_rosters", return_value=PLAYERS):
        client.get("/api/players")

    # Force expiry without waiting out the TTL
    app_module.player_list_cache.expire()
    with mock.patch("cfbhq.players.fetch_all_rosters", side_effect=UpstreamError("down")):
        resp = client.get("/api/players")

    assert resp.status_code == 200
    assert resp.get_json()["pagination"]["totalPlayers"] == 3


def test_player_profile(client):
    with mock.patch("cfbhq.players.fetch_all_rosters", return_value=PLAYERS):
        resp = client.get("/api/players/Ty-Simpson")
    assert resp.status_code == 200
    assert resp.get_json()["team"]["slug"] == "alabama-crimson-tide"


def test_player_not_found_is_not_cached(client):
    with mock.patch("cfbhq.players.fetch_all_rosters", return_value=PLAYERS):
        assert client.get("/api/players/nobody-here").status_code == 404

    late_signing = PLAYERS + [make_player("Nobody Here")]
    for cache in app_module.ALL_CACHES:
        cache.expire()
    with mock.patch("cfbhq.players.fetch_all_rosters", return_value=late_signing):
        assert client.get("/api/players/nobody-here").status_code == 200


def test_player_profile_upstream_failure(client):
    with mock.patch("cfbhq.players.fetch_all_rosters", side_effect=UpstreamTimeout("slow")):
        resp = client.get("/api/players/ty-simpson")
    assert resp.status_code == 504


# ─── Transfer portal ───

PORTAL = {
    "players": [
        {"name": "John Mateer", "formerSchool": "Washington State", "newSchool": "Oklahoma"},
        {"name": "Sam Leavitt", "formerSchool": "Arizona State", "newSchool": None},
    ],
    "updatedTime": "2025-12-14T10:00:00Z",
}


def test_transfer_portal(client):
    with mock.patch("cfbhq.transfer_portal.fetch_transfer_portal", return_value=PORTAL):
        body = client.get("/api/transfer-portal").get_json()
    assert body["totalPlayers"] == 2
    assert body["updatedTime"] == "2025-12-14T10:00:00Z"


def test_transfer_portal_team_filter(client):
    with mock.patch("cfbhq.transfer_portal.fetch_transfer_portal", return_value=PORTAL):
        body = client.get("/api/transfer-portal?team=oklahoma-sooners").get_json()
    assert [p["name"] for p in body["players"]] == ["John Mateer"]


def test_transfer_portal_unknown_team(client):
    with mock.patch("cfbhq.transfer_portal.fetch_transfer_portal") as fetch:
        resp = client.get("/api/transfer-portal?team=hogwarts")
    assert resp.status_code == 404
    fetch.assert_not_called()


@pytest.mark.parametrize("error, status", [(UpstreamError("bad"), 502), (UpstreamTimeout("slow"), 504)])
def test_transfer_portal_never_fetched(client, error, status):
    with mock.patch("cfbhq.transfer_portal.fetch_transfer_portal", side_effect=error):
        resp = client.get("/api/transfer-portal")
    assert resp.status_code == status
    assert resp.get_json()["players"] == []


def test_transfer_portal_empty_feed_is_not_an_error(client):
    empty = {"players": [], "updatedTime": "t"}
    with mock.patch("cfbhq.transfer_portal.fetch_transfer_portal", return_value=empty):
        resp = client.get("/api/transfer-portal")
    assert resp.status_code == 200
    assert resp.get_json()["totalPlayers"] == 0


def test_transfer_portal_load_logs_player_count(client, caplog):
    portal = {"players": [{"name": "A"}, {"name": "B"}, {"name": "C"}], "updatedTime": "t"}
    caplog.set_level(logging.INFO, logger="cfb-hq")
    with mock.patch("cfbhq.transfer_portal.fetch_transfer_portal", return_value=portal):
        client.get("/api/transfer-portal")
    assert "Cached transfer-portal[all] (3 items)" in caplog.text


def _reject_constant(name):
    raise ValueError(f"non-standard JSON constant {name}")


def test_transfer_portal_nan_grade_is_valid_json(client):
    row = ["2026", "Test Player", "Entered", "SO", "WR", "SEC", "Texas", "", "", "nan", "2025-12-10"]
    feed = {"collections": [{"data": [row]}], "updatedTime": "t"}
    with mock.patch("cfbhq.transfer_portal.get_json", return_value=feed):
        resp = client.get("/api/transfer-portal")

    body = json.loads(resp.get_data(as_text=True), parse_constant=_reject_constant)
    assert body["players"][0]["rating"] is None


# ─── Schedule & scoreboard ───

def _schedule_game(game_id, state, date="2025-09-06T16:00Z"):
    return {"id": game_id, "date": date, "status": {"state": state}}


def test_schedule_today(client):
    games = [_schedule_game("1", "post"), _schedule_game("2", "pre")]
    with mock.patch("cfbhq.espn.fetch_schedule", return_value=games) as fetch:
        resp = client.get("/api/cfb/schedule?group=99")

    fetch.assert_called_once_with(group="80")
    body = resp.get_json()
    assert [g["id"] for g in body["games"]] == ["2", "1"]
    assert body["hasLiveGames"] is False
    assert "s-maxage=300" in resp.headers["Cache-Control"]


def test_schedule_live_games_shorten_cache(client):
    with mock.patch("cfbhq.espn.fetch_schedule", return_value=[_schedule_game("1", "in")]):
        resp = client.get("/api/cfb/schedule?date=2025-09-06")
    assert resp.get_json()["hasLiveGames"] is True
    assert "s-maxage=30," in resp.headers["Cache-Control"]


def test_schedule_by_week(client):
    with mock.patch("cfbhq.espn.fetch_schedule_by_week", return_value=[]) as fetch:
        client.get("/api/cfb/schedule?week=3&seasonType=3&group=81")
    fetch.assert_called_once_with(3, 3, "81")


def test_schedule_fetch_all_uses_season_cache(client):
    games = [_schedule_game("1", "post", "2025-09-06T16:00Z"), _schedule_game("2", "pre", "2025-10-04T16:00Z")]
    with mock.patch("cfbhq.espn.fetch_season_schedule", return_value=games) as fetch:
        all_games = client.get("/api/cfb/schedule?fetchAll=true").get_json()
        october = client.get("/api/cfb/schedule?month=2025-10").get_json()

    assert fetch.call_count == 1
    assert all_games["totalGames"] == 2
    assert [g["id"] for g in october["games"]] == ["2"]


def test_schedule_bad_month(client):
    assert client.get("/api/cfb/schedule?month=October").status_code == 400


def test_schedule_upstream_failure(client):
    with mock.patch("cfbhq.espn.fetch_schedule", side_effect=UpstreamTimeout("slow")):
        resp = client.get("/api/cfb/schedule")
    assert resp.status_code == 504
    assert resp.get_json()["games"] == []


def _ticker_game(game_id, start, live=False, final=False):
    return {"id": game_id, "startDate": start.strftime("%Y-%m-%dT%H:%MZ"), "isLive": live, "isFinal": final}


def test_scoreboard_orders_and_drops_old_games(client):
    now = datetime.now(timezone.utc)
    games = [
        _ticker_game("old-final", now - timedelta(days=8), final=True),
        _ticker_game("final-1", now - timedelta(days=2), final=True),
        _ticker_game("final-2", now - timedelta(days=1), final=True),
        _ticker_game("upcoming", now + timedelta(days=1)),
        _ticker_game("live", now - timedelta(hours=1), live=True),
    ]
    with mock.patch("cfbhq.espn.fetch_ticker_games", return_value=games):
        resp = client.get("/api/cfb/espn-scoreboard")

    body = resp.get_json()
    assert [g["id"] for g in body["games"]] == ["live", "upcoming", "final-2", "final-1"]
    assert body["hasLiveGames"] is True
    assert "s-maxage=30," in resp.headers["Cache-Control"]


def test_scoreboard_upstream_failure(client):
    with mock.patch("cfbhq.espn.fetch_ticker_games", side_effect=UpstreamError("down")):
        assert client.get("/api/cfb/espn-scoreboard?date=20250906").status_code == 502


# ─── Standings, rankings, team pages ───

def test_standings_cached_per_group(client):
    with mock.patch("cfbhq.espn.fetch_standings", return_value=[{"name": "SEC", "teams": []}]) as fetch:
        client.get("/api/cfb/standings")
        client.get("/api/cfb/standings?group=80")
        body = client.get("/api/cfb/standings?group=81").get_json()

    assert fetch.call_count == 2
    assert body["totalConferences"] == 1


def test_rankings_failure(client):
    with mock.patch("cfbhq.espn.fetch_rankings", side_effect=UpstreamError("down")):
        resp = client.get("/api/cfb/rankings")
    assert resp.status_code == 502
    assert resp.get_json()["rankings"] == []


def test_team_roster(client):
    roster = {"roster": [{"name": "Ty Simpson"}], "headCoach": "Kalen DeBoer"}
    with mock.patch("cfbhq.espn.fetch_team_roster", return_value=roster) as fetch:
        body = client.get("/api/teams/roster/alabama-crimson-tide").get_json()

    fetch.assert_called_once_with("333")
    assert body["team"]["name"] == "Alabama Crimson Tide"
    assert body["totalPlayers"] == 1
    assert body["headCoach"] == "Kalen DeBoer"


def test_team_roster_unknown_team(client):
    assert client.get("/api/teams/roster/hogwarts").status_code == 404


def test_team_schedule(client):
    with mock.patch("cfbhq.espn.fetch_team_schedule", return_value=[{"week": 1}]):
        body = client.get("/api/teams/schedule/texas-longhorns").get_json()
    assert body["team"]["slug"] == "texas-longhorns"
    assert body["schedule"] == [{"week": 1}]


def test_team_schedule_failure_defaults_to_empty_list(client):
    with mock.patch("cfbhq.espn.fetch_team_schedule", side_effect=UpstreamError("down")):
        resp = client.get("/api/teams/schedule/texas-longhorns")
    assert resp.status_code == 502
    assert resp.get_json()["schedule"] == []
    result = app_module.team_schedule_cache.lookup("texas-longhorns", mock.Mock(side_effect=UpstreamError("down")))
    assert result.outcome == "default"
    assert result.value == []


def test_team_stats(client):
    summary = {"stats": {"offense": {"pointsPerGame": 35.1}}, "playerLeaders": [{"playerName": "Ty Simpson"}]}
    with mock.patch("cfbhq.espn.fetch_team_stats", return_value=summary) as fetch:
        resp = client.get("/api/teams/stats/alabama-crimson-tide")
        client.get("/api/teams/stats/Alabama-Crimson-Tide")

    assert fetch.call_count == 1
    assert fetch.call_args.args[0]["slug"] == "alabama-crimson-tide"
    body = resp.get_json()
    assert body["team"] == "Alabama Crimson Tide"
    assert body["stats"]["offense"]["pointsPerGame"] == 35.1
    assert body["playerLeaders"] == [{"playerName": "Ty Simpson"}]
    assert "s-maxage=3600" in resp.headers["Cache-Control"]


def test_team_stats_unknown_team_and_failure(client):
    assert client.get("/api/teams/stats/hogwarts").status_code == 404
    with mock.patch("cfbhq.espn.fetch_team_stats", side_effect=UpstreamTimeout("slow")):
        resp = client.get("/api/teams/stats/texas-longhorns")
    assert resp.status_code == 504
    assert resp.get_json()["playerLeaders"] == []


# ─── Stat leaders & spring games ───

def test_stat_leaders_cached_per_group_and_type(client):
    categories = [{"name": "passingYards", "leaders": []}]
    with mock.patch("cfbhq.espn.fetch_stat_leaders", return_value=categories) as fetch:
        resp = client.get("/api/cfb/stat-leaders?group=81&statType=perGame")
        client.get("/api/cfb/stat-leaders?group=81&statType=perGame")
        client.get("/api/cfb/stat-leaders?statType=bogus")

    assert fetch.call_args_list == [mock.call("81", "perGame"), mock.call("80", "total")]
    body = resp.get_json()
    assert body["categories"] == categories
    assert body["totalCategories"] == 1
    assert "lastUpdated" in body
    assert "s-maxage=3600" in resp.headers["Cache-Control"]


def test_stat_leaders_failure(client):
    with mock.patch("cfbhq.espn.fetch_stat_leaders", side_effect=UpstreamError("down")):
        resp = client.get("/api/cfb/stat-leaders")
    assert resp.status_code == 502
    assert resp.get_json()["categories"] == []


def test_spring_games(client):
    games = [{"program": "Alabama", "conference": "SEC", "date": "April 11"}]
    with mock.patch("cfbhq.spring_games.fetch_spring_games", return_value=games):
        resp = client.get("/api/cfb/spring-games")
    assert resp.get_json() == {"games": games}
    assert "s-maxage=300" in resp.headers["Cache-Control"]


def test_spring_games_failure(client):
    with mock.patch("cfbhq.spring_games.fetch_spring_games", side_effect=UpstreamError("down")):
        resp = client.get("/api/cfb/spring-games")
    assert resp.status_code == 502
    assert resp.get_json()["games"] == []


# ─── Articles, status, errors ───

def test_articles(client):
    with mock.patch("cfbhq.articles.fetch_articles", return_value=[{"title": "A"}]):
        body = client.get("/api/cfb/articles").get_json()
    assert body == {"success": True, "articles": [{"title": "A"}], "count": 1, "source": "PFSN CFB RSS Feed"}


def test_articles_failure(client):
    with mock.patch("cfbhq.articles.fetch_articles", side_effect=UpstreamError("down")):
        resp = client.get("/api/cfb/articles")
    assert resp.status_code == 502
    assert resp.get_json()["success"] is False


def test_status(client):
    with mock.patch("cfbhq.espn.fetch_rankings", return_value=[1, 2]):
        client.get("/api/cfb/rankings")
    body = client.get("/api/status").get_json()

    by_name = {c["name"]: c for c in body["caches"]}
    assert by_name["rankings"]["keys"]["all"]["fresh"] is True
    assert by_name["rankings"]["keys"]["all"]["size"] == 2
    assert by_name["player-list"]["keys"] == {}


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Not found"}


def test_unexpected_error_is_json_500(client, monkeypatch):
    monkeypatch.setitem(app_module.app.config, "PROPAGATE_EXCEPTIONS", False)
    with mock.patch("cfbhq.espn.fetch_ticker_games", side_effect=RuntimeError("bug")):
        resp = client.get("/api/cfb/espn-scoreboard")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal server error"}
