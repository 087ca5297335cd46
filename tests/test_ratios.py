from datetime import date
from decimal import Decimal

import pytest

from smb_finprofile.engine import build_extracted_data
from smb_finprofile.models import BalanceSheetInputs, Loan, Transaction
from smb_finprofile.ratios import (
    calculate_financial_features,
    calculate_health_score,
    calculate_risk_score,
    compute_ratios,
    compute_trends,
    ratio_results,
)


def _data(revenue: str, expenses: str, balance_sheet=None):
    txns = []
    if Decimal(revenue):
        txns.append(
            Transaction(date(2024, 1, 1), "Sale", Decimal(revenue), "income", "Sales")
        )
    if Decimal(expenses):
        txns.append(
            Transaction(date(2024, 1, 2), "Rent", Decimal(expenses), "expense", "Rent")
        )
    return build_extracted_data(txns, balance_sheet=balance_sheet)


def test_worked_example_without_balance_sheet() -> None:
    """
    Revenue 100000, expenses 70000, no balance-sheet inputs.

    profit margin 0.30 is not > 0.30, so it scores +20 (not +25); cash flow
    ratio 0.30 gives +15; expense ratio 0.70 is neutral.
    """
    features = calculate_financial_features(_data("100000", "70000"))
    r = features.ratios

    assert r.profit_margin == pytest.approx(0.30)
    assert r.expense_ratio == pytest.approx(0.70)
    assert r.current_ratio is None
    assert r.quick_ratio is None
    assert r.debt_to_equity is None
    assert r.return_on_assets is None
    assert features.health_score == 85
    assert features.risk_score == 20


def test_margin_above_thirty_percent_scores_top_band() -> None:
    features = calculate_financial_features(_data("100000", "69000"))

    # +25 margin, +15 cash flow, +5 expense ratio < 0.70
    assert features.health_score == 95


def test_zero_revenue_defaults() -> None:
    features = calculate_financial_features(_data("0", "0"))

    assert features.ratios.profit_margin == 0.0
    assert features.ratios.expense_ratio == 1.0
    # 50 - 20 (margin) - 15 (no positive cash flow) - 5 (expense ratio > 0.9)
    assert features.health_score == 10
    # 30 + 15 (margin < 0.05) + 15 (expense ratio > 0.9)
    assert features.risk_score == 60


def test_scores_are_clamped() -> None:
    assert (
        calculate_health_score(
            profit_margin=-1.0,
            expense_ratio=2.0,
            cash_flow_net=Decimal("-1"),
            revenue_total=Decimal("1"),
            current_ratio=0.1,
        )
        == 0
    )
    assert (
        calculate_risk_score(
            profit_margin=-1.0,
            expense_ratio=2.0,
            cash_flow_net=Decimal("-1"),
            debt_to_equity=5.0,
            current_ratio=0.1,
        )
        == 100
    )
    assert (
        calculate_health_score(
            profit_margin=0.5,
            expense_ratio=0.1,
            cash_flow_net=Decimal("50"),
            revenue_total=Decimal("100"),
            current_ratio=3.0,
        )
        == 100
    )


def test_features_are_deterministic() -> None:
    data = _data("120000", "95000")

    assert calculate_financial_features(data) == calculate_financial_features(data)


def test_liquidity_ratios_with_receivables_and_payables() -> None:
    bs = BalanceSheetInputs(
        accounts_receivable=Decimal("20000"), accounts_payable=Decimal("10000")
    )
    data = _data("100000", "70000", bs)
    features = calculate_financial_features(data)

    # (20000 + 30000) / 10000
    assert features.ratios.current_ratio == pytest.approx(5.0)
    assert features.ratios.quick_ratio == pytest.approx(2.0)
    # 85 + 15 for current ratio >= 2
    assert features.health_score == 100
    # 20 - 5 for current ratio > 2
    assert features.risk_score == 15


@pytest.mark.parametrize(
    "receivables, payables",
    [
        (Decimal("20000"), None),
        (None, Decimal("10000")),
        (Decimal("0"), Decimal("10000")),
        (Decimal("20000"), Decimal("0")),
    ],
)
def test_current_ratio_needs_receivables_and_positive_payables(
    receivables, payables
) -> None:
    bs = BalanceSheetInputs(accounts_receivable=receivables, accounts_payable=payables)

    assert compute_ratios(_data("100", "50", bs)).current_ratio is None


def test_debt_to_equity_uses_net_profit_as_equity() -> None:
    bs = BalanceSheetInputs(
        loans=(Loan(amount=Decimal("40000")), Loan(amount=Decimal("20000")))
    )

    assert compute_ratios(_data("100000", "70000", bs)).debt_to_equity == pytest.approx(
        2.0
    )
    # No positive equity proxy: not computable.
    assert compute_ratios(_data("100000", "120000", bs)).debt_to_equity is None


def test_return_on_assets() -> None:
    bs = BalanceSheetInputs(total_assets=Decimal("200000"))

    assert compute_ratios(_data("100000", "70000", bs)).return_on_assets == pytest.approx(
        0.15
    )


def test_uncomputable_ratios_are_omitted_from_dict() -> None:
    out = calculate_financial_features(_data("100000", "70000")).to_dict()

    assert set(out["ratios"]) == {"profitMargin", "expenseRatio"}
    assert out["trends"] == {}
    assert out["healthScore"] == 85


def test_trends_against_prior_period() -> None:
    current = _data("120000", "80000")
    prior = _data("100000", "100000")

    trends = compute_trends(current, prior)

    assert trends.revenue_growth == pytest.approx(0.20)
    assert trends.expense_growth == pytest.approx(-0.20)
    # Prior profit is zero: growth is not computable.
    assert trends.profit_growth is None


def test_profit_growth_from_a_loss_is_positive() -> None:
    trends = compute_trends(_data("100", "50"), _data("100", "150"))

    # (50 - (-50)) / 50
    assert trends.profit_growth == pytest.approx(2.0)


def test_trends_absent_without_prior() -> None:
    features = calculate_financial_features(_data("100", "50"))

    assert features.trends.revenue_growth is None
    assert features.trends.to_dict() == {}


def test_ratio_results_keep_uncomputable_rows() -> None:
    rows = ratio_results(calculate_financial_features(_data("100000", "70000")))
    by_key = {r.key: r for r in rows}

    assert by_key["current_ratio"].value is None
    assert by_key["health_score"].value == 85.0
    assert by_key["profit_margin"].unit == "percent"
