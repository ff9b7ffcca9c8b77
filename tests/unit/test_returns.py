"""Unit tests for the XIRR solver."""

from decimal import Decimal

from portfolio_tracker.services.returns import CashFlow, calculate_xirr

from tests.conftest import eastern_datetime


class TestXirr:
    """Tests for calculate_xirr."""

    def test_ten_percent_over_one_year(self):
        """
        GIVEN 1000 invested and 1100 received 365 days later
        WHEN XIRR is solved
        THEN the annual rate is 10%
        """
        flows = [
            CashFlow(eastern_datetime(2023, 1, 1), Decimal("-1000")),
            CashFlow(eastern_datetime(2024, 1, 1), Decimal("1100")),
        ]

        rate = calculate_xirr(flows)

        assert rate is not None
        assert abs(rate - Decimal("0.1")) < Decimal("0.000001")

    def test_negative_return(self):
        flows = [
            CashFlow(eastern_datetime(2023, 1, 1), Decimal("-1000")),
            CashFlow(eastern_datetime(2024, 1, 1), Decimal("800")),
        ]

        rate = calculate_xirr(flows)

        assert rate is not None
        assert abs(rate - Decimal("-0.2")) < Decimal("0.000001")

    def test_flow_order_does_not_matter(self):
        flows = [
            CashFlow(eastern_datetime(2024, 1, 1), Decimal("1100")),
            CashFlow(eastern_datetime(2023, 1, 1), Decimal("-1000")),
        ]

        assert calculate_xirr(flows) is not None

    def test_single_flow_has_no_rate(self):
        assert calculate_xirr([CashFlow(eastern_datetime(2023, 1, 1), Decimal("-1000"))]) is None

    def test_flows_without_sign_change_have_no_rate(self):
        flows = [
            CashFlow(eastern_datetime(2023, 1, 1), Decimal("-1000")),
            CashFlow(eastern_datetime(2023, 6, 1), Decimal("-500")),
        ]

        assert calculate_xirr(flows) is None
