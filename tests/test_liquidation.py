"""
Tests for liquidation and annualized return calculations.
"""

import pytest
from datetime import date

from portfolio_engine.calculations.irr import (
    calculate_xirr,
    calculate_xnpv,
    equity_multiple,
)
from portfolio_engine.calculations.liquidation import (
    calculate_liquidation,
    liquidate_property,
)
from portfolio_engine.exceptions import InvalidInput
from portfolio_engine.models import Property


class TestXIRR:
    """Test the annualized return solver."""

    def test_calculate_xirr(self):
        """Test XIRR over one non-leap year."""
        dates = [date(2021, 1, 1), date(2022, 1, 1)]
        xirr = calculate_xirr([-100, 110], dates)
        assert abs(xirr - 0.10) < 0.001

    def test_xirr_multi_period(self):
        """Test XIRR with intermediate inflows."""
        dates = [date(2025, 1, 1), date(2026, 1, 1), date(2027, 1, 1)]
        xirr = calculate_xirr([-100, 50, 60], dates)
        assert 0 < xirr < 0.20

    def test_xirr_negative_returns(self):
        """Test XIRR with a loss."""
        dates = [date(2021, 1, 1), date(2022, 1, 1)]
        assert calculate_xirr([-100, 80], dates) < 0

    def test_xnpv_at_xirr_is_zero(self):
        """Test the solved rate discounts the flows to zero."""
        dates = [date(2021, 1, 1), date(2021, 7, 1), date(2023, 1, 1)]
        flows = [-1000, 100, 1100]
        rate = calculate_xirr(flows, dates)
        assert abs(calculate_xnpv(flows, dates, rate)) < 1e-4

    def test_xirr_requires_both_signs(self):
        """Test flows without an inflow cannot be solved."""
        with pytest.raises(ValueError):
            calculate_xirr([-100, -10], [date(2021, 1, 1), date(2022, 1, 1)])

    def test_xirr_length_mismatch(self):
        """Test flows and dates must pair up."""
        with pytest.raises(ValueError):
            calculate_xirr([-100, 110], [date(2021, 1, 1)])

    def test_xirr_half_loss(self):
        """Test a 50% one-year loss solves even though Newton overshoots -100%."""
        dates = [date(2021, 1, 1), date(2022, 1, 1)]
        assert calculate_xirr([-100, 50], dates) == pytest.approx(-0.5, abs=1e-6)

    def test_xirr_deep_loss(self):
        """Test a 71% one-year loss converges instead of failing."""
        dates = [date(2021, 1, 1), date(2022, 1, 1)]
        xirr = calculate_xirr([-350000, 100000], dates)
        assert xirr == pytest.approx(100000 / 350000 - 1, abs=1e-6)

    def test_xirr_long_hold_loss(self):
        """Test a heavy loss spread over ten years."""
        dates = [date(2011, 1, 1), date(2021, 1, 1)]
        years = (dates[1] - dates[0]).days / 365.0
        xirr = calculate_xirr([-350000, 50000], dates)
        assert xirr == pytest.approx((50000 / 350000) ** (1 / years) - 1, abs=1e-6)

    def test_equity_multiple(self):
        """Test equity multiple."""
        assert equity_multiple([-100, 20, 180]) == 2.0

    def test_equity_multiple_counts_every_outflow(self):
        """Test later outflows add to the money invested."""
        assert equity_multiple([-100, -100, 300]) == 1.5

    def test_multiple_without_investment(self):
        """Test a multiple needs an outflow."""
        with pytest.raises(ValueError):
            equity_multiple([10, 20])


class TestCalculateLiquidation:
    """Test sale profit figures."""

    def test_gross_profit(self):
        """Test profit is sale value minus cost basis."""
        result = calculate_liquidation(sale_value=420000, cost_basis=350000)
        assert result.gross_profit == 70000
        assert result.net_profit == 70000
        assert not result.includes_operations

    def test_sale_only_and_with_operations(self):
        """Test both figures are reported whichever one is selected."""
        sale_only = calculate_liquidation(420000, 350000, operating_cash_flow=12000)
        with_ops = calculate_liquidation(
            420000, 350000, operating_cash_flow=12000, include_operations=True
        )

        assert sale_only.sale_plus_operations == with_ops.sale_plus_operations == 82000
        assert sale_only.net_profit == 70000
        assert with_ops.net_profit == 82000

    def test_loss(self):
        """Test a sale below cost gives a negative profit."""
        assert calculate_liquidation(300000, 350000).gross_profit == -50000

    def test_zero_sale_value_allowed(self):
        """Test a zero sale is a valid, if painful, input."""
        assert calculate_liquidation(0, 100).gross_profit == -100

    def test_negative_sale_value(self):
        """Test a negative sale value is rejected."""
        with pytest.raises(InvalidInput):
            calculate_liquidation(-1, 350000)

    @pytest.mark.parametrize("cost_basis", [None, 0, -10])
    def test_invalid_cost_basis(self, cost_basis):
        """Test a missing or non-positive cost basis is rejected."""
        with pytest.raises(InvalidInput):
            calculate_liquidation(420000, cost_basis)

    def test_sale_before_acquisition(self):
        """Test the holding period cannot be negative."""
        with pytest.raises(InvalidInput):
            calculate_liquidation(
                420000,
                350000,
                acquisition_date=date(2023, 1, 1),
                sale_date=date(2022, 1, 1),
            )

    def test_annualized_return(self):
        """Test the holding-period return is annualized in percent units."""
        result = calculate_liquidation(
            110000,
            100000,
            acquisition_date=date(2021, 1, 1),
            sale_date=date(2022, 1, 1),
        )
        assert result.annualized_return == pytest.approx(10.0, abs=0.01)

    def test_annualized_return_without_dates(self):
        """Test no dates means no annualized return."""
        assert calculate_liquidation(110000, 100000).annualized_return is None

    def test_annualized_return_unsolvable(self):
        """Test a worthless sale degrades to no annualized return."""
        result = calculate_liquidation(
            0,
            100000,
            acquisition_date=date(2021, 1, 1),
            sale_date=date(2022, 1, 1),
        )
        assert result.annualized_return is None
        assert result.gross_profit == -100000


class TestLiquidateProperty:
    """Test liquidation derived from property records."""

    def test_cost_basis_includes_acquisition_costs(self):
        """Test registration costs are part of the basis."""
        prop = Property(id="p", purchase_value=350000, acquisition_costs=14000)
        result = liquidate_property(prop, 420000)

        assert result.cost_basis == 364000
        assert result.gross_profit == 56000
        assert result.property_id == "p"

    def test_operations_from_transactions(self, sample_properties, sample_transactions):
        """Test operating cash flow is the net of the property's transactions."""
        result = liquidate_property(
            sample_properties[0],
            420000,
            sample_transactions,
            include_operations=True,
        )

        assert result.gross_profit == 70000
        assert result.operating_cash_flow == 2950
        assert result.net_profit == 72950

    def test_transactions_after_sale_ignored(self, sample_properties, sample_transactions):
        """Test only transactions up to the sale date count."""
        result = liquidate_property(
            sample_properties[0],
            420000,
            sample_transactions,
            include_operations=True,
            sale_date=date(2023, 5, 31),
        )

        assert result.operating_cash_flow == 2500 - 800
        assert result.annualized_return is not None
        assert result.annualized_return > 0

    def test_transactions_before_acquisition_ignored(
        self, sample_properties, sample_transactions
    ):
        """Test only transactions inside the holding period count."""
        prop = sample_properties[0].model_copy(update={"acquisition_date": date(2023, 6, 1)})
        result = liquidate_property(
            prop, 420000, sample_transactions, include_operations=True
        )

        assert result.operating_cash_flow == 2500 - 800 - 450
        assert result.net_profit == 70000 + 1250

    def test_equity_multiple_from_dated_operations(
        self, sample_properties, sample_transactions
    ):
        """Test operating expenses count as money invested in the multiple."""
        result = liquidate_property(
            sample_properties[0],
            420000,
            sample_transactions,
            include_operations=True,
        )
        assert result.equity_multiple == pytest.approx((420000 + 5000) / (350000 + 2050))


class TestLiquidationMultiple:
    """Test the equity multiple reported with each liquidation."""

    def test_sale_only(self):
        """Test the multiple of a sale without operations."""
        result = calculate_liquidation(420000, 350000, operating_cash_flow=12000)
        assert result.equity_multiple == pytest.approx(1.2)

    def test_with_operating_total(self):
        """Test an undated operating result joins the returned money."""
        result = calculate_liquidation(
            420000, 350000, operating_cash_flow=12000, include_operations=True
        )
        assert result.equity_multiple == pytest.approx(432000 / 350000)

    def test_worthless_sale(self):
        """Test a zero sale returns nothing per unit invested."""
        assert calculate_liquidation(0, 100000).equity_multiple == 0.0

    def test_one_year_losses_annualize(self):
        """Test heavy one-year losses still report an annualized return."""
        half = calculate_liquidation(
            175000, 350000, acquisition_date=date(2021, 1, 1), sale_date=date(2022, 1, 1)
        )
        deep = calculate_liquidation(
            100000, 350000, acquisition_date=date(2021, 1, 1), sale_date=date(2022, 1, 1)
        )

        assert half.annualized_return == pytest.approx(-50.0, abs=1e-3)
        assert deep.annualized_return == pytest.approx(-71.4286, abs=1e-3)
        assert deep.equity_multiple == pytest.approx(100000 / 350000)
