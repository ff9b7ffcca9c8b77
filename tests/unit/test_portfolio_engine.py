"""
Unit tests for PortfolioEngine.

Tests cover:
- Average-cost holdings after BUY/SELL
- Fees in cost basis and realized P&L
- Allocation and ordering of holdings
- Stale pricing when quotes fail
- Holdings cache and invalidation on ledger mutations
- Portfolio totals in the portfolio currency
"""

from decimal import Decimal

import pytest

from portfolio_tracker.domain.models import Portfolio, TransactionAction
from portfolio_tracker.services import LedgerService, PortfolioEngine, ResultCache
from portfolio_tracker.services.portfolio_engine import fold_transactions, sort_transactions

from tests.conftest import (
    DeterministicQuoteProvider,
    assert_decimal_equal,
    create_buy_data,
    create_sell_data,
    eastern_datetime,
    make_transaction,
)

BUY = TransactionAction.BUY
SELL = TransactionAction.SELL


# =============================================================================
# LEDGER FOLD
# =============================================================================


class TestFoldTransactions:
    """Tests for the pure average-cost replay."""

    def test_average_price_is_weighted_by_quantity(self):
        """
        GIVEN two BUYs of 10 @ 150 and 10 @ 170
        WHEN the ledger is folded
        THEN the average buy price is 160 over 20 shares
        """
        fold = fold_transactions([
            make_transaction(BUY, "10", "150", eastern_datetime(2024, 1, 2)),
            make_transaction(BUY, "10", "170", eastern_datetime(2024, 2, 2)),
        ])

        acc = fold.positions["AAPL"]
        assert acc.quantity == Decimal("20")
        assert acc.avg_buy_price == Decimal("160")
        assert fold.realized_pl == Decimal("0")

    def test_sell_keeps_average_price_and_realizes_gain(self):
        """
        GIVEN BUY 10 @ 100 and BUY 10 @ 200
        WHEN 5 shares are sold @ 180
        THEN realized P&L is 5 x (180 - 150) = 150 and the average stays 150
        """
        fold = fold_transactions([
            make_transaction(BUY, "10", "100", eastern_datetime(2024, 1, 2)),
            make_transaction(BUY, "10", "200", eastern_datetime(2024, 1, 3)),
            make_transaction(SELL, "5", "180", eastern_datetime(2024, 1, 4)),
        ])

        acc = fold.positions["AAPL"]
        assert fold.realized_pl == Decimal("150")
        assert acc.quantity == Decimal("15")
        assert acc.total_cost == Decimal("2250")
        assert acc.avg_buy_price == Decimal("150")

    def test_buy_fees_raise_cost_basis_and_sell_fees_reduce_gain(self):
        """
        GIVEN BUY 10 @ 100 with fee 10 and SELL 4 @ 120 with fee 5
        WHEN the ledger is folded
        THEN average is 101 and realized is 4 x 19 - 5 = 71
        """
        fold = fold_transactions([
            make_transaction(BUY, "10", "100", eastern_datetime(2024, 1, 2), fees="10"),
            make_transaction(SELL, "4", "120", eastern_datetime(2024, 1, 3), fees="5"),
        ])

        assert fold.positions["AAPL"].avg_buy_price == Decimal("101")
        assert fold.realized_pl == Decimal("71")

    def test_round_trip_with_sell_fee(self):
        """
        GIVEN BUY 10 @ 100 without fees
        WHEN all 10 are sold @ 150 with a 5 fee
        THEN realized P&L is 10 x 50 - 5 = 495
        """
        fold = fold_transactions([
            make_transaction(BUY, "10", "100", eastern_datetime(2024, 1, 2)),
            make_transaction(SELL, "10", "150", eastern_datetime(2024, 1, 3), fees="5"),
        ])

        assert fold.positions == {}
        assert fold.realized_pl == Decimal("495")

    def test_fully_sold_position_is_removed(self):
        """
        GIVEN a position that is bought and then sold completely
        WHEN the ledger is folded
        THEN the ticker has no open position but the gain is kept
        """
        fold = fold_transactions([
            make_transaction(BUY, "10", "100", eastern_datetime(2024, 1, 2)),
            make_transaction(SELL, "10", "110", eastern_datetime(2024, 1, 3)),
        ])

        assert "AAPL" not in fold.positions
        assert fold.realized_pl == Decimal("100")

    def test_replay_follows_dates_not_insertion_order(self):
        """
        GIVEN a SELL stored before the BUY it depends on
        WHEN the ledger is folded
        THEN the BUY is applied first
        """
        fold = fold_transactions([
            make_transaction(SELL, "5", "120", eastern_datetime(2024, 3, 1)),
            make_transaction(BUY, "10", "100", eastern_datetime(2024, 1, 1)),
        ])

        assert fold.positions["AAPL"].quantity == Decimal("5")
        assert fold.realized_pl == Decimal("100")

    def test_equal_dates_keep_insertion_order(self):
        same = eastern_datetime(2024, 1, 2)
        first = make_transaction(BUY, "1", "100", same, txn_id="first")
        second = make_transaction(BUY, "2", "100", same, txn_id="second")

        ordered = sort_transactions([first, second])

        assert [t.id for t in ordered] == ["first", "second"]

    def test_deleted_transactions_are_ignored(self):
        fold = fold_transactions([
            make_transaction(BUY, "10", "100", eastern_datetime(2024, 1, 2)),
            make_transaction(BUY, "10", "300", eastern_datetime(2024, 1, 3), deleted=True),
        ])

        assert fold.positions["AAPL"].quantity == Decimal("10")
        assert fold.positions["AAPL"].avg_buy_price == Decimal("100")

    def test_sell_without_position_is_skipped(self):
        fold = fold_transactions([
            make_transaction(SELL, "5", "120", eastern_datetime(2024, 1, 2)),
        ])

        assert fold.positions == {}
        assert fold.realized_pl == Decimal("0")

    def test_oversold_remainder_is_discarded(self):
        """
        GIVEN legacy data selling 15 shares out of 10
        WHEN the ledger is folded
        THEN the position closes and the sale's gain is still realized
        """
        fold = fold_transactions([
            make_transaction(BUY, "10", "100", eastern_datetime(2024, 1, 2)),
            make_transaction(SELL, "15", "110", eastern_datetime(2024, 1, 3)),
        ])

        assert "AAPL" not in fold.positions
        assert fold.realized_pl == Decimal("150")


# =============================================================================
# HOLDINGS
# =============================================================================


class TestCalculateHoldings:
    """Tests for holdings derived through the ledger."""

    def test_empty_portfolio_has_no_holdings(
        self,
        portfolio_engine: PortfolioEngine,
        sample_portfolio: Portfolio,
    ):
        assert portfolio_engine.calculate_holdings(sample_portfolio.id) == []

    def test_unknown_portfolio_yields_empty_list(self, portfolio_engine: PortfolioEngine):
        """
        GIVEN no portfolio with the requested ID
        WHEN I calculate holdings
        THEN the result is empty instead of an error
        """
        assert portfolio_engine.calculate_holdings("does-not-exist") == []

    def test_live_pricing_values_position(
        self,
        ledger_service: LedgerService,
        portfolio_engine: PortfolioEngine,
        sample_portfolio: Portfolio,
    ):
        """
        GIVEN BUY 10 AAPL @ 150 and BUY 10 AAPL @ 170
        WHEN I calculate holdings with live prices (AAPL 185.50, prev 184.25)
        THEN value, P&L and daily change follow the quote
        """
        pid = sample_portfolio.id
        ledger_service.add_transaction(create_buy_data(pid, price=Decimal("150")))
        ledger_service.add_transaction(
            create_buy_data(pid, price=Decimal("170"), date=eastern_datetime(2024, 2, 1))
        )

        [holding] = portfolio_engine.calculate_holdings(pid)

        assert holding.ticker == "AAPL"
        assert holding.name == "Apple Inc."
        assert holding.sector == "Technology"
        assert holding.quantity == Decimal("20")
        assert holding.avg_buy_price == Decimal("160")
        assert holding.current_price == Decimal("185.50")
        assert_decimal_equal(holding.current_value, Decimal("3710.00"))
        assert_decimal_equal(holding.invested_value, Decimal("3200.00"))
        assert_decimal_equal(holding.unrealized_pl, Decimal("510.00"))
        assert_decimal_equal(holding.unrealized_pl_percent, Decimal("15.94"))
        assert_decimal_equal(holding.daily_change, Decimal("25.00"))
        assert_decimal_equal(holding.allocation, Decimal("100"))
        assert holding.is_price_stale is False

    def test_book_pricing_uses_average_price(
        self,
        ledger_service: LedgerService,
        portfolio_engine: PortfolioEngine,
        sample_portfolio: Portfolio,
        quote_provider: DeterministicQuoteProvider,
    ):
        ledger_service.add_transaction(create_buy_data(sample_portfolio.id, price=Decimal("150")))

        [holding] = portfolio_engine.calculate_holdings(
            sample_portfolio.id, use_real_time_pricing=False
        )

        assert holding.current_price == Decimal("150")
        assert holding.unrealized_pl == Decimal("0")
        assert quote_provider.calls == []

    def test_holdings_sorted_by_value_and_allocation_sums_to_100(
        self,
        ledger_service: LedgerService,
        portfolio_engine: PortfolioEngine,
        sample_portfolio: Portfolio,
    ):
        """
        GIVEN AAPL worth 1855 and MSFT worth 1891.25
        WHEN I calculate holdings
        THEN MSFT comes first and allocations add up to 100%
        """
        pid = sample_portfolio.id
        ledger_service.add_transaction(create_buy_data(pid, "AAPL", Decimal("10"), Decimal("100")))
        ledger_service.add_transaction(create_buy_data(pid, "MSFT", Decimal("5"), Decimal("300")))

        holdings = portfolio_engine.calculate_holdings(pid)

        assert [h.ticker for h in holdings] == ["MSFT", "AAPL"]
        total = sum(h.allocation for h in holdings)
        assert abs(total - Decimal("100")) < Decimal("0.0001")

    def test_quote_failure_marks_holding_stale_at_cost(
        self,
        ledger_service: LedgerService,
        portfolio_engine: PortfolioEngine,
        sample_portfolio: Portfolio,
    ):
        """
        GIVEN a holding in a symbol the provider does not know
        WHEN I calculate holdings
        THEN it is priced at average cost and flagged stale
        """
        ledger_service.add_transaction(
            create_buy_data(sample_portfolio.id, "ZZZZ", Decimal("3"), Decimal("42"))
        )

        [holding] = portfolio_engine.calculate_holdings(sample_portfolio.id)

        assert holding.current_price == Decimal("42")
        assert holding.is_price_stale is True
        assert holding.daily_change == Decimal("0")

    def test_indian_listing_uses_exchange_suffix_and_native_currency(
        self,
        ledger_service: LedgerService,
        portfolio_engine: PortfolioEngine,
        portfolio_factory,
        quote_provider: DeterministicQuoteProvider,
    ):
        portfolio = portfolio_factory(name="India", country="India")
        ledger_service.add_transaction(
            create_buy_data(portfolio.id, "RELIANCE", Decimal("10"), Decimal("2900"), exchange="NSE")
        )

        [holding] = portfolio_engine.calculate_holdings(portfolio.id)

        assert "RELIANCE.NS" in quote_provider.calls
        assert holding.ticker == "RELIANCE"
        assert holding.currency == "INR"
        assert holding.current_price == Decimal("2950.00")


# =============================================================================
# REALIZED P&L
# =============================================================================


class TestRealizedPL:
    """Tests for realized P&L per portfolio and overall."""

    def test_realized_pl_for_one_portfolio(
        self,
        ledger_service: LedgerService,
        portfolio_engine: PortfolioEngine,
        sample_portfolio: Portfolio,
    ):
        pid = sample_portfolio.id
        ledger_service.add_transaction(create_buy_data(pid, quantity=Decimal("10"), price=Decimal("100")))
        ledger_service.add_transaction(create_sell_data(pid, quantity=Decimal("4"), price=Decimal("120")))

        assert portfolio_engine.calculate_realized_pl(pid) == Decimal("80")

    def test_realized_pl_summed_across_portfolios(
        self,
        ledger_service: LedgerService,
        portfolio_engine: PortfolioEngine,
        portfolio_factory,
    ):
        """
        GIVEN two portfolios each with a realized gain
        WHEN I ask for realized P&L without a portfolio
        THEN the gains are summed
        """
        first = portfolio_factory(name="One")
        second = portfolio_factory(name="Two")
        for pid in (first.id, second.id):
            ledger_service.add_transaction(create_buy_data(pid, quantity=Decimal("10"), price=Decimal("100")))
            ledger_service.add_transaction(create_sell_data(pid, quantity=Decimal("5"), price=Decimal("110")))

        assert portfolio_engine.calculate_realized_pl() == Decimal("100")

    def test_unknown_portfolio_has_zero_realized(self, portfolio_engine: PortfolioEngine):
        assert portfolio_engine.calculate_realized_pl("nope") == Decimal("0")


# =============================================================================
# CACHING AND TOTALS
# =============================================================================


class TestHoldingsCacheAndTotals:
    """Tests for get_holdings caching and persisted portfolio totals."""

    def test_get_holdings_caches_result(
        self,
        ledger_service: LedgerService,
        portfolio_engine: PortfolioEngine,
        sample_portfolio: Portfolio,
        result_cache: ResultCache,
    ):
        ledger_service.add_transaction(create_buy_data(sample_portfolio.id))

        first = portfolio_engine.get_holdings(sample_portfolio.id)
        second = portfolio_engine.get_holdings(sample_portfolio.id)

        assert first is second
        assert result_cache.get(f"holdings:{sample_portfolio.id}:live") is first

    def test_new_transaction_invalidates_cached_holdings(
        self,
        ledger_service: LedgerService,
        portfolio_engine: PortfolioEngine,
        sample_portfolio: Portfolio,
    ):
        """
        GIVEN cached holdings
        WHEN a transaction is added
        THEN the next read reflects it
        """
        pid = sample_portfolio.id
        ledger_service.add_transaction(create_buy_data(pid, quantity=Decimal("10")))
        portfolio_engine.get_holdings(pid)

        ledger_service.add_transaction(
            create_buy_data(pid, quantity=Decimal("5"), date=eastern_datetime(2024, 2, 1))
        )
        [holding] = portfolio_engine.get_holdings(pid)

        assert holding.quantity == Decimal("15")

    def test_totals_converted_into_portfolio_currency(
        self,
        ledger_service: LedgerService,
        portfolio_engine: PortfolioEngine,
        sample_portfolio: Portfolio,
    ):
        """
        GIVEN a USD portfolio holding an INR-priced stock
        WHEN holdings are fetched
        THEN the stored totals are in USD at 0.012 per rupee
        """
        ledger_service.add_transaction(
            create_buy_data(
                sample_portfolio.id, "RELIANCE", Decimal("10"), Decimal("2900"),
                exchange="NSE", currency="INR",
            )
        )

        portfolio_engine.get_holdings(sample_portfolio.id)
        portfolio = ledger_service.get_portfolio(sample_portfolio.id)

        assert portfolio.current_value == Decimal("354.00")
        assert portfolio.total_invested == Decimal("348.00")
        assert portfolio.unrealized_pl == Decimal("6.00")

    def test_totals_include_realized_and_xirr(
        self,
        ledger_service: LedgerService,
        portfolio_engine: PortfolioEngine,
        sample_portfolio: Portfolio,
    ):
        pid = sample_portfolio.id
        ledger_service.add_transaction(create_buy_data(pid, quantity=Decimal("10"), price=Decimal("100")))
        ledger_service.add_transaction(create_sell_data(pid, quantity=Decimal("5"), price=Decimal("120")))

        portfolio = portfolio_engine.update_portfolio_totals(pid)

        assert portfolio.realized_pl == Decimal("100")
        assert_decimal_equal(portfolio.current_value, Decimal("927.50"))
        assert_decimal_equal(portfolio.total_return, Decimal("527.50"))
        assert portfolio.xirr is not None
        assert portfolio.xirr > 0

    def test_update_totals_unknown_portfolio_raises(self, portfolio_engine: PortfolioEngine):
        from portfolio_tracker.core.exceptions import NotFoundError

        with pytest.raises(NotFoundError):
            portfolio_engine.update_portfolio_totals("missing")
