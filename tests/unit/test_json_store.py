"""
Unit tests for the JSON file store and repositories.

Tests cover:
- Missing, empty and corrupt data files
- Atomic writes leave no temp files
- Upsert semantics
- Round trip of Decimal and datetime fields
- Bounded user action log
"""

import json
from decimal import Decimal

import pytest

from portfolio_tracker.core.exceptions import StorageError
from portfolio_tracker.domain.models import Portfolio, UserAction, UserActionType
from portfolio_tracker.repositories.json_store import (
    JsonFileStore,
    JsonPortfolioRepository,
    JsonUserActionRepository,
)
from portfolio_tracker.repositories.json_store.store import PORTFOLIOS, STOCKS

from tests.conftest import eastern_datetime


class TestJsonFileStore:
    """Tests for the raw store."""

    def test_missing_file_reads_as_empty(self, json_store: JsonFileStore):
        assert json_store.read_all(PORTFOLIOS) == []

    def test_empty_file_reads_as_empty(self, json_store: JsonFileStore):
        json_store.path_for(PORTFOLIOS).write_text("   ", encoding="utf-8")
        assert json_store.read_all(PORTFOLIOS) == []

    def test_corrupt_file_raises_storage_error(self, json_store: JsonFileStore):
        json_store.path_for(PORTFOLIOS).write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError):
            json_store.read_all(PORTFOLIOS)

    def test_non_array_file_raises_storage_error(self, json_store: JsonFileStore):
        json_store.path_for(PORTFOLIOS).write_text('{"id": "x"}', encoding="utf-8")

        with pytest.raises(StorageError):
            json_store.read_all(PORTFOLIOS)

    def test_append_writes_pretty_json_without_temp_files(self, json_store: JsonFileStore):
        json_store.append(PORTFOLIOS, {"id": "a"})
        json_store.append(PORTFOLIOS, {"id": "b"})

        path = json_store.path_for(PORTFOLIOS)
        assert json.loads(path.read_text(encoding="utf-8")) == [{"id": "a"}, {"id": "b"}]
        assert [p.name for p in json_store.data_dir.iterdir()] == [path.name]

    def test_update_missing_record_returns_none(self, json_store: JsonFileStore):
        assert json_store.update(PORTFOLIOS, "nope", {"name": "x"}) is None

    def test_upsert_inserts_then_updates(self, json_store: JsonFileStore):
        json_store.upsert(STOCKS, "AAPL", {"symbol": "AAPL", "last_price": "1"}, id_field="symbol")
        json_store.upsert(STOCKS, "AAPL", {"symbol": "AAPL", "last_price": "2"}, id_field="symbol")

        assert json_store.read_all(STOCKS) == [{"symbol": "AAPL", "last_price": "2"}]


class TestRepositories:
    """Tests for domain round trips through JSON."""

    def test_portfolio_round_trip_keeps_decimals_and_dates(self, json_store: JsonFileStore):
        repo = JsonPortfolioRepository(json_store)
        created_at = eastern_datetime(2024, 1, 2, 9, 30)
        repo.create(
            Portfolio(
                id="p1",
                name="Main",
                currency="USD",
                country="USA",
                cash_position=Decimal("1000.10"),
                xirr=Decimal("12.34"),
                created_at=created_at,
            )
        )

        loaded = repo.get_by_id("p1")

        assert loaded.cash_position == Decimal("1000.10")
        assert loaded.xirr == Decimal("12.34")
        assert loaded.created_at == created_at
        assert loaded.deleted is False

    def test_user_action_log_is_bounded(self, json_store: JsonFileStore):
        """
        GIVEN a log limited to 3 entries
        WHEN 5 actions are appended
        THEN only the newest 3 are kept, newest first
        """
        repo = JsonUserActionRepository(json_store, max_entries=3)
        for i in range(5):
            repo.append(
                UserAction(
                    id=f"a{i}",
                    action=UserActionType.UPDATE_CASH,
                    entity_id="p1",
                    timestamp=eastern_datetime(2024, 1, 1 + i),
                )
            )

        recent = repo.list_recent(limit=10)

        assert [a.id for a in recent] == ["a4", "a3", "a2"]
        assert recent[0].action == UserActionType.UPDATE_CASH
