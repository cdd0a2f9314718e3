"""
Tests for admin operations: teams/pool config, entry lock, paid/notes,
season reset, import and export.
"""
from __future__ import annotations

import csv
from io import StringIO

import pytest

from backend.catalog import load_catalog
from backend.config_store import MemoryConfigStore
from backend.errors import ConfigIncomplete, EntryNotFound, PlayerNotFound, ValidationError
from backend.persistence.repositories import EntryRepository, ScoreRepository
from backend.services.admin_service import EXPORT_HEADER, AdminService, infer_kicker_team
from backend.services.entry_service import EntryService
from backend.services.scoring_service import ScoringService
from conftest import TEAMS, sample_pool


@pytest.fixture
def admin():
    return AdminService()


def _import_payload(store, name="Imported", email="imp@example.com", **extra):
    players = [
        {"name": p.name, "team": p.team, "position": p.position}
        for p in load_catalog(store)
        if p.position == "QB"
    ]
    return dict({"entryName": name, "email": email, "players": players}, **extra)


# ---------- Settings ----------


def test_entries_open_by_default(admin):
    assert admin.get_settings(MemoryConfigStore()).entries_open is True


def test_toggle_entries(admin, store):
    assert admin.set_entries_open(store, False).entries_open is False
    assert store.load_settings() == {"entriesOpen": False}
    assert admin.set_entries_open(store, True).to_dict() == {"entriesOpen": True}


# ---------- Teams & pool ----------


def test_set_playoff_teams_normalizes(admin):
    store = MemoryConfigStore()
    teams = admin.set_playoff_teams(store, [t.lower() for t in TEAMS])
    assert teams == TEAMS
    assert admin.get_playoff_teams(store) == TEAMS


def test_get_playoff_teams_when_unset(admin):
    assert admin.get_playoff_teams(MemoryConfigStore()) == []


@pytest.mark.parametrize("teams", [
    TEAMS[:13],
    TEAMS[:13] + ["BUF"],
    TEAMS[:13] + [""],
    TEAMS[:13] + ["N-O"],
])
def test_set_playoff_teams_rejects_bad_input(admin, teams):
    with pytest.raises(ValidationError):
        admin.set_playoff_teams(MemoryConfigStore(), teams)


def test_pool_requires_teams(admin):
    with pytest.raises(ConfigIncomplete):
        admin.set_player_pool(MemoryConfigStore(), sample_pool())


def test_set_pool_regenerates_catalog(admin):
    store = MemoryConfigStore()
    admin.set_playoff_teams(store, TEAMS)
    assert load_catalog(store) is None
    players = admin.set_player_pool(store, sample_pool())
    assert len(players) == 38
    assert load_catalog(store) == players
    assert admin.get_player_pool(store) == {"teams": TEAMS, "pool": sample_pool()}


def test_invalid_pool_not_saved(admin, store):
    bad = sample_pool()
    bad["QB"]["KC"].append({"name": "Carson Wentz"})
    with pytest.raises(ValidationError, match="Team KC must have exactly 1 QB"):
        admin.set_player_pool(store, bad)
    assert store.load_pool() == sample_pool()


def test_pool_failing_generation_leaves_pool_and_catalog_alone(admin, store):
    catalog_before = store.load_catalog()
    bad = sample_pool()
    bad["RB"]["BUF"] = [{"name": "James Cook"}, {"name": "James  Cook"}]
    with pytest.raises(ValidationError, match="Duplicate player id"):
        admin.set_player_pool(store, bad)
    assert store.load_pool() == sample_pool()
    assert store.load_catalog() == catalog_before


def test_pool_with_quoted_name_not_saved(admin, store):
    catalog_before = store.load_catalog()
    bad = sample_pool()
    bad["WR"]["MIN"] = [{"name": 'Justin "JJ" Jefferson'}]
    with pytest.raises(ValidationError, match="quotes or line breaks"):
        admin.set_player_pool(store, bad)
    assert store.load_pool() == sample_pool()
    assert store.load_catalog() == catalog_before


def test_changing_teams_prunes_pool_and_regenerates(admin, store):
    new_teams = [t for t in TEAMS if t != "PHI"] + ["SEA"]
    admin.set_playoff_teams(store, new_teams)
    pool = store.load_pool()
    assert "PHI" not in pool["QB"]
    assert "PHI" not in pool["WR"]
    ids = {p.player_id for p in load_catalog(store)}
    assert "WR_PHI_AJBrown" not in ids
    assert "K_SEA_SEAK" in ids


# ---------- Entries ----------


def test_update_entry_paid_and_notes(db_conn, store, picks, admin):
    entry = EntryService().submit_entry(db_conn, store, "Team A", "fan@example.com", picks)
    updated = admin.update_entry(db_conn, entry.id, paid=True, notes="venmo 1/10")
    assert updated.paid is True
    assert updated.notes == "venmo 1/10"
    updated = admin.update_entry(db_conn, entry.id, notes="")
    assert updated.paid is True
    assert updated.notes == ""


def test_update_unknown_entry(db_conn, admin):
    with pytest.raises(EntryNotFound):
        admin.update_entry(db_conn, "missing", paid=True)


def test_reset_season_clears_everything(db_conn, store, picks, admin):
    EntryService().submit_entry(db_conn, store, "Team A", "fan@example.com", picks)
    ScoringService().record_score(db_conn, picks[0]["id"], wildcard=4)
    admin.reset_season(db_conn)
    assert EntryRepository().count_all(db_conn) == (0, 0)
    assert ScoreRepository().list_all(db_conn) == []
    # config is untouched
    assert load_catalog(store)


def test_list_entries_includes_picks(db_conn, store, picks, admin):
    EntryService().submit_entry(db_conn, store, "Team A", "fan@example.com", picks)
    entries = admin.list_entries(db_conn)
    assert len(entries) == 1
    assert len(entries[0].players) == 14


# ---------- Import ----------


def test_import_resolves_picks_by_name_team_position(db_conn, store, admin):
    payload = _import_payload(store, paid=True, notes="cash", createdAt="2026-01-05T12:00:00Z")
    payload["players"][0]["name"] = "josh allen"
    created = admin.import_entries(db_conn, store, [payload])
    assert len(created) == 1
    stored = EntryRepository().get(db_conn, created[0].id)
    assert stored.players[0].player_id == "QB_BUF_JoshAllen"
    assert stored.players[0].player_name == "Josh Allen"
    assert stored.paid is True
    assert stored.notes == "cash"
    assert stored.created_at.isoformat() == "2026-01-05T12:00:00+00:00"


def test_import_infers_kicker_team(db_conn, store, admin):
    payload = _import_payload(store)
    payload["players"][-1] = {"name": "GBK", "team": "", "position": "K"}
    created = admin.import_entries(db_conn, store, [payload])
    stored = EntryRepository().get(db_conn, created[0].id)
    assert stored.players[-1].player_id == "K_GB_GBK"


def test_infer_kicker_team():
    assert infer_kicker_team("bufK") == "BUF"
    assert infer_kicker_team("K") == ""
    assert infer_kicker_team("Tyler Bass") == ""


def test_import_unknown_player_aborts_whole_import(db_conn, store, admin):
    good = _import_payload(store, name="Good", email="good@example.com")
    bad = _import_payload(store, name="Bad", email="bad@example.com")
    bad["players"][5]["name"] = "Nobody Special"
    with pytest.raises(PlayerNotFound, match="Nobody Special"):
        admin.import_entries(db_conn, store, [good, bad])
    assert EntryRepository().count_all(db_conn) == (0, 0)


def test_import_ignores_quota_and_lock(db_conn, store, admin):
    store.save_settings({"entriesOpen": False})
    payloads = [_import_payload(store, name=f"E{i}") for i in range(6)]
    created = admin.import_entries(db_conn, store, payloads)
    assert [e.entry_name for e in created] == [f"E{i}" for i in range(6)]


def test_import_requires_14_players(db_conn, store, admin):
    payload = _import_payload(store)
    payload["players"] = payload["players"][:10]
    with pytest.raises(ValidationError, match="exactly 14"):
        admin.import_entries(db_conn, store, [payload])


@pytest.mark.parametrize("raw,expected", [
    ("false", False),
    ("No", False),
    ("Yes", True),
    ("TRUE", True),
    (True, True),
    ("", False),
    (None, False),
])
def test_import_paid_values(db_conn, store, admin, raw, expected):
    created = admin.import_entries(db_conn, store, [_import_payload(store, paid=raw)])
    assert EntryRepository().get(db_conn, created[0].id).paid is expected


@pytest.mark.parametrize("raw", ["maybe", 1, "0"])
def test_import_rejects_unclear_paid(db_conn, store, admin, raw):
    with pytest.raises(ValidationError, match="paid"):
        admin.import_entries(db_conn, store, [_import_payload(store, paid=raw)])
    assert EntryRepository().count_all(db_conn) == (0, 0)


def test_import_players_must_be_a_list_of_objects(db_conn, store, admin):
    payload = _import_payload(store)
    payload["players"] = "QB_BUF_JoshAllen," * 14
    with pytest.raises(ValidationError, match="list of player objects"):
        admin.import_entries(db_conn, store, [payload])
    payload["players"] = ["Josh Allen"] * 14
    with pytest.raises(ValidationError, match="list of player objects"):
        admin.import_entries(db_conn, store, [payload])
    with pytest.raises(ValidationError, match=r"entries\[0\] must be an object"):
        admin.import_entries(db_conn, store, ["not an entry"])


# ---------- Export ----------


def test_export_csv_quotes_every_field(db_conn, store, picks, admin):
    entry = EntryService().submit_entry(db_conn, store, "Team A", "fan@example.com", picks)
    admin.update_entry(db_conn, entry.id, paid=True, notes='paid, "cash"')
    text = admin.export_entries_csv(db_conn)
    lines = text.splitlines()
    assert lines[0] == '"Entry Name","Email","Paid","Notes","Created At"'
    assert lines[1].startswith('"Team A","fan@example.com","Yes","paid, ""cash""","')
    rows = list(csv.reader(StringIO(text)))
    assert tuple(rows[0]) == EXPORT_HEADER
    assert rows[1][3] == 'paid, "cash"'
