# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Financial ratios and composite scores for SMB FinProfile.

This module complements the aggregation engine (engine.py) by deriving:

1. Ratios
   -------
   - profit_margin  = (revenue - expenses) / revenue   (0 when revenue == 0)
   - expense_ratio  = expenses / revenue               (1 when revenue == 0)
   - current_ratio  = (receivables + max(net cash flow, 0)) / payables
   - quick_ratio    = receivables / payables
   - debt_to_equity = total loans / (revenue - expenses)
   - return_on_assets = (revenue - expenses) / total_assets

   The last four are optional: they are ``None`` whenever their inputs
   (receivables and payables, loans with a positive equity proxy, total
   assets) are not supplied. Callers must read ``None`` as "not
   computable", never as zero.

2. Trends
   -------
   Period-over-period growth of revenue, expenses and profit, computed
   against prior-period aggregates when those are supplied and non-zero.
   Profit growth is relative to ``abs(prior profit)`` so that a move from
   a loss to a profit reads as positive growth.

3. Scores
   -------
   - health score: 0-100, additive from a base of 50, higher is better;
   - risk score:   0-100, additive from a base of 30, higher is riskier.

   Both are deterministic pure functions of the ratios and cash flow,
   clamped to [0, 100].

``calculate_financial_features()`` bundles everything into a
``FinancialFeatures`` record.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .models import (
    ZERO,
    ExtractedData,
    FinancialFeatures,
    Ratios,
    Trends,
)

HEALTH_BASE = 50
RISK_BASE = 30


@dataclass(frozen=True)
class RatioResult:
    """
    Ratio or score prepared for display.

    Attributes:
        key: Internal identifier (e.g. 'profit_margin').
        label: Human-readable label for display.
        value: Numeric value, or None if not computable.
        unit: Unit hint ('percent', 'ratio', 'score').
        notes: Optional human-readable notes.
    """

    key: str
    label: str
    value: Optional[float]
    unit: str
    notes: str = ""


def _div(numerator: Decimal, denominator: Decimal) -> float:
    return float(numerator / denominator)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


# ---------------------------------------------------------------------------
# Ratios & trends
# ---------------------------------------------------------------------------


def compute_ratios(data: ExtractedData) -> Ratios:
    """Compute profitability, liquidity and leverage ratios for ``data``."""
    revenue = data.revenue.total
    expenses = data.expenses.total
    net_cash = data.cash_flow.net
    bs = data.balance_sheet

    profit_margin = _div(revenue - expenses, revenue) if revenue > 0 else 0.0
    expense_ratio = _div(expenses, revenue) if revenue > 0 else 1.0

    current_ratio: Optional[float] = None
    quick_ratio: Optional[float] = None
    receivables = bs.accounts_receivable
    payables = bs.accounts_payable
    if receivables and payables is not None and payables > 0:
        current_assets = receivables + max(net_cash, ZERO)
        current_ratio = _div(current_assets, payables)
        # Simplified: no separate inventory / cash breakdown is available.
        quick_ratio = _div(receivables, payables)

    debt_to_equity: Optional[float] = None
    if bs.loans:
        total_debt = sum((loan.amount for loan in bs.loans), ZERO)
        # Net profit stands in for equity.
        equity = revenue - expenses
        if equity > 0:
            debt_to_equity = _div(total_debt, equity)

    return_on_assets: Optional[float] = None
    if bs.total_assets is not None and bs.total_assets > 0:
        return_on_assets = _div(revenue - expenses, bs.total_assets)

    return Ratios(
        profit_margin=profit_margin,
        expense_ratio=expense_ratio,
        current_ratio=current_ratio,
        quick_ratio=quick_ratio,
        debt_to_equity=debt_to_equity,
        return_on_assets=return_on_assets,
    )


def compute_trends(current: ExtractedData, prior: Optional[ExtractedData]) -> Trends:
    """Compute growth rates of ``current`` relative to ``prior``."""
    if prior is None:
        return Trends()

    revenue_growth: Optional[float] = None
    expense_growth: Optional[float] = None
    profit_growth: Optional[float] = None

    prior_revenue = prior.revenue.total
    prior_expenses = prior.expenses.total
    if prior_revenue > 0:
        revenue_growth = _div(current.revenue.total - prior_revenue, prior_revenue)
    if prior_expenses > 0:
        expense_growth = _div(current.expenses.total - prior_expenses, prior_expenses)

    prior_profit = prior.net_profit
    if prior_profit != 0:
        profit_growth = _div(current.net_profit - prior_profit, abs(prior_profit))

    return Trends(
        revenue_growth=revenue_growth,
        expense_growth=expense_growth,
        profit_growth=profit_growth,
    )


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------


def calculate_health_score(
    profit_margin: float,
    expense_ratio: float,
    cash_flow_net: Decimal,
    revenue_total: Decimal,
    current_ratio: Optional[float] = None,
) -> int:
    """Return the 0-100 financial health score (higher is better)."""
    score = HEALTH_BASE

    # Profit margin: up to +25, -20 when not profitable.
    if profit_margin > 0.30:
        score += 25
    elif profit_margin > 0.20:
        score += 20
    elif profit_margin > 0.10:
        score += 15
    elif profit_margin > 0:
        score += 10
    else:
        score -= 20

    # Liquidity: up to +15.
    if current_ratio is not None:
        if current_ratio >= 2:
            score += 15
        elif current_ratio >= 1.5:
            score += 12
        elif current_ratio >= 1:
            score += 8
        else:
            score -= 10

    # Cash flow: up to +15, scaled by net cash flow over revenue.
    if cash_flow_net > 0:
        cash_flow_ratio = _div(cash_flow_net, revenue_total)
        if cash_flow_ratio > 0.20:
            score += 15
        elif cash_flow_ratio > 0.10:
            score += 10
        else:
            score += 5
    else:
        score -= 15

    if expense_ratio < 0.70:
        score += 5
    elif expense_ratio > 0.90:
        score -= 5

    return int(_clamp(score, 0, 100))


def calculate_risk_score(
    profit_margin: float,
    expense_ratio: float,
    cash_flow_net: Decimal,
    debt_to_equity: Optional[float] = None,
    current_ratio: Optional[float] = None,
) -> int:
    """Return the 0-100 financial risk score (higher is riskier)."""
    risk = RISK_BASE

    if profit_margin < 0:
        risk += 25
    elif profit_margin < 0.05:
        risk += 15
    elif profit_margin > 0.20:
        risk -= 10

    if debt_to_equity is not None:
        if debt_to_equity > 2:
            risk += 20
        elif debt_to_equity > 1:
            risk += 10
        elif debt_to_equity < 0.5:
            risk -= 5

    if current_ratio is not None:
        if current_ratio < 1:
            risk += 15
        elif current_ratio < 1.5:
            risk += 8
        elif current_ratio > 2:
            risk -= 5

    if expense_ratio > 0.90:
        risk += 15
    elif expense_ratio > 0.80:
        risk += 8

    if cash_flow_net < 0:
        risk += 20

    return int(_clamp(risk, 0, 100))


def calculate_financial_features(
    data: ExtractedData,
    prior: Optional[ExtractedData] = None,
) -> FinancialFeatures:
    """
    Derive ratios, trends, health score and risk score from extracted data.

    Args:
        data: Aggregates (and optional balance-sheet inputs) of the period.
        prior: Optional aggregates of the previous period, used for trends.

    Returns:
        A new FinancialFeatures record. Calling this twice with the same
        inputs yields equal records.
    """
    ratios = compute_ratios(data)

    health = calculate_health_score(
        profit_margin=ratios.profit_margin,
        expense_ratio=ratios.expense_ratio,
        cash_flow_net=data.cash_flow.net,
        revenue_total=data.revenue.total,
        current_ratio=ratios.current_ratio,
    )
    risk = calculate_risk_score(
        profit_margin=ratios.profit_margin,
        expense_ratio=ratios.expense_ratio,
        cash_flow_net=data.cash_flow.net,
        debt_to_equity=ratios.debt_to_equity,
        current_ratio=ratios.current_ratio,
    )

    return FinancialFeatures(
        ratios=ratios,
        health_score=health,
        risk_score=risk,
        trends=compute_trends(data, prior),
    )


def ratio_results(features: FinancialFeatures) -> list[RatioResult]:
    """Flatten ratios, trends and scores into display rows.

    Ratios that are not computable keep ``value=None``.
    """
    r = features.ratios
    t = features.trends
    return [
        RatioResult("profit_margin", "Profit margin", r.profit_margin, "percent"),
        RatioResult("expense_ratio", "Expense ratio", r.expense_ratio, "percent"),
        RatioResult(
            "current_ratio",
            "Current ratio",
            r.current_ratio,
            "ratio",
            "Needs accounts receivable and payable.",
        ),
        RatioResult(
            "quick_ratio",
            "Quick ratio",
            r.quick_ratio,
            "ratio",
            "Receivables / payables.",
        ),
        RatioResult(
            "debt_to_equity",
            "Debt to equity",
            r.debt_to_equity,
            "ratio",
            "Net profit used as equity proxy.",
        ),
        RatioResult(
            "return_on_assets", "Return on assets", r.return_on_assets, "percent"
        ),
        RatioResult("revenue_growth", "Revenue growth", t.revenue_growth, "percent"),
        RatioResult("expense_growth", "Expense growth", t.expense_growth, "percent"),
        RatioResult("profit_growth", "Profit growth", t.profit_growth, "percent"),
        RatioResult("health_score", "Health score", float(features.health_score), "score"),
        RatioResult("risk_score", "Risk score", float(features.risk_score), "score"),
    ]
