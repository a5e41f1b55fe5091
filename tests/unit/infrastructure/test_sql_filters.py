"""Predicate compilation: SQL results agree with in-memory evaluation on the same rows."""

from datetime import datetime, timedelta, timezone

import pytest

from opsconsole.domain.models.asset import Asset, AssetCategory, AssetStatus
from opsconsole.infrastructure.database.asset_repository_db import DbAssetRepository
from opsconsole.infrastructure.database.filters import to_clause
from opsconsole.infrastructure.database.models import AssetRow
from opsconsole.security.predicates import (
    FieldEquals,
    FieldIn,
    FieldIsNull,
    FieldRange,
    MatchAll,
    MatchNone,
    Predicate,
    TextSearch,
    all_of,
    any_of,
    field_in,
)

NOW = datetime.now(timezone.utc)

ASSETS = [
    Asset(id="as-1", name="Dev laptop", category=AssetCategory.HARDWARE, created_by="m-eng", assigned_to="e-1",
          status=AssetStatus.IN_USE, serial_number="SN_100", warranty_expiry=NOW + timedelta(days=10),
          current_value=900.0),
    Asset(id="as-2", name="Spare monitor", category=AssetCategory.HARDWARE, created_by="e-2",
          location="Floor 3", current_value=150.0),
    Asset(id="as-3", name="CRM seat", category=AssetCategory.SOFTWARE, created_by="s-1", assigned_to="s-1",
          status=AssetStatus.IN_USE, warranty_expiry=NOW + timedelta(days=90), current_value=50.0),
    Asset(id="as-4", name="Old desk", category=AssetCategory.FURNITURE, created_by="a-1",
          status=AssetStatus.RETIRED),
]

TEAM = frozenset({"m-eng", "e-1", "e-2"})

CASES = {
    "match_all": MatchAll(),
    "match_none": MatchNone(),
    "equals": FieldEquals("category", "hardware"),
    "equals_none": FieldEquals("assigned_to", None),
    "in": field_in("assigned_to", ["e-1", "s-1"]),
    "in_empty": FieldIn("assigned_to", frozenset()),
    "is_null": FieldIsNull("assigned_to"),
    "team_scope": any_of(
        field_in("assigned_to", TEAM),
        all_of(FieldIsNull("assigned_to"), field_in("created_by", TEAM)),
    ),
    "search": TextSearch(("name", "serial_number", "location"), "floor"),
    "search_underscore_literal": TextSearch(("serial_number",), "N_1"),
    "search_wildcard_literal": TextSearch(("name",), "_"),
    "narrowed": all_of(FieldEquals("status", "in-use"), field_in("created_by", TEAM)),
}


@pytest.fixture
async def repo(session):
    repo = DbAssetRepository(session)
    for asset in ASSETS:
        await repo.add(asset)
    return repo


def _expected(predicate: Predicate) -> set:
    return {a.id for a in ASSETS if predicate.matches(a.to_record())}


@pytest.mark.parametrize("name", sorted(CASES))
async def test_sql_agrees_with_memory(repo, name):
    predicate = CASES[name]
    found = await repo.find(predicate)
    assert {a.id for a in found} == _expected(predicate)


def test_team_scope_rows():
    assert _expected(CASES["team_scope"]) == {"as-1", "as-2"}


async def test_range_on_datetime_column(repo):
    soon = await repo.find(FieldRange("warranty_expiry", NOW, NOW + timedelta(days=30)))
    assert [a.id for a in soon] == ["as-1"]
    open_upper = await repo.find(FieldRange("warranty_expiry", NOW + timedelta(days=30)))
    assert [a.id for a in open_upper] == ["as-3"]


async def test_sum_current_value_respects_predicate(repo):
    assert await repo.sum_current_value(MatchAll()) == 1100.0
    assert await repo.sum_current_value(FieldEquals("category", "hardware")) == 1050.0
    assert await repo.sum_current_value(MatchNone()) == 0.0


def test_unknown_column_rejected():
    with pytest.raises(ValueError):
        to_clause(FieldEquals("no_such_column", 1), AssetRow)
