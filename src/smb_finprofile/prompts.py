# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Prompt templates for the text-generation analysis tasks.

Every function here is a pure text template: it reads aggregates, ratios
and scores and returns a prompt string. Nothing is sent anywhere; the
prompt is handed to whatever ``generate(prompt) -> str`` callable the
caller provides (see generator.py).

Available prompts:

- create_analysis_prompt:           SWOT-style general analysis.
- create_forecast_prompt:           6-month forecast from monthly history.
- create_cost_optimization_prompt:  top-5 expense categories review.
- create_working_capital_prompt:    receivables / payables advice.
- create_industry_benchmark_prompt: comparison against sector benchmarks.

Currency values use a fixed locale-style grouping: Indian grouping
("12,34,567") by default, or western grouping ("1,234,567").
"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from .models import ExpenseData, ExtractedData, FinancialFeatures
from .periods import PeriodSummary

DEFAULT_CURRENCY_SYMBOL = "₹"
DEFAULT_GROUPING = "en-IN"
GROUPINGS: tuple[str, ...] = ("en-IN", "en-US")

Number = Union[Decimal, int, float]


def _group_digits(digits: str, grouping: str) -> str:
    if grouping == "en-IN":
        # Last three digits, then groups of two (lakh / crore).
        if len(digits) <= 3:
            return digits
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        return ",".join(groups + [tail])

    groups = []
    while len(digits) > 3:
        groups.insert(0, digits[-3:])
        digits = digits[:-3]
    groups.insert(0, digits)
    return ",".join(groups)


def format_number(value: Number, grouping: str = DEFAULT_GROUPING) -> str:
    """Format a number with digit grouping and at most three decimals.

    Trailing fractional zeros are dropped: 1234567.50 -> "12,34,567.5".

    Raises:
        ValueError: if ``grouping`` is not one of ``GROUPINGS``.
    """
    if grouping not in GROUPINGS:
        raise ValueError(
            f"Unknown grouping {grouping!r}. Expected one of: {', '.join(GROUPINGS)}."
        )

    number = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    number = number.quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)

    sign = "-" if number < 0 else ""
    integer_part, _, fraction = f"{abs(number):f}".partition(".")
    fraction = fraction.rstrip("0")

    text = _group_digits(integer_part, grouping)
    if fraction:
        text = f"{text}.{fraction}"
    return f"{sign}{text}"


def format_amount(
    value: Number,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    grouping: str = DEFAULT_GROUPING,
) -> str:
    """Format a monetary value, e.g. ``format_amount(150000)`` -> "₹1,50,000"."""
    text = format_number(value, grouping)
    if text.startswith("-"):
        return f"-{currency_symbol}{text[1:]}"
    return f"{currency_symbol}{text}"


def _optional_ratio(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:.2f}"


def create_analysis_prompt(
    data: ExtractedData,
    features: FinancialFeatures,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    grouping: str = DEFAULT_GROUPING,
) -> str:
    """Prompt for the general analysis (summary, SWOT, recommendations)."""

    def money(value: Number) -> str:
        return format_amount(value, currency_symbol, grouping)

    margin_pct = features.ratios.profit_margin * 100
    return f"""You are a financial analyst. Analyze the following business financial data and provide insights:

Revenue: {money(data.revenue.total)}
Expenses: {money(data.expenses.total)}
Net Profit: {money(data.net_profit)}
Profit Margin: {margin_pct:.2f}%
Cash Flow: {money(data.cash_flow.net)}
Health Score: {features.health_score}/100
Risk Score: {features.risk_score}/100

Provide a comprehensive analysis including:
1. Summary (2-3 sentences)
2. Key Strengths (3-4 points)
3. Key Weaknesses (3-4 points)
4. Opportunities for improvement (3-4 points)
5. Potential threats or risks (3-4 points)
6. Top 5 actionable recommendations with expected impact

Format your response clearly with these sections."""


def create_forecast_prompt(
    history: Sequence[PeriodSummary],
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    grouping: str = DEFAULT_GROUPING,
) -> str:
    """Prompt for a 6-month forecast from historical period totals."""

    def money(value: Number) -> str:
        return format_amount(value, currency_symbol, grouping)

    lines = "\n".join(
        f"Month {i} ({s.period.label}): Revenue {money(s.revenue)}, "
        f"Expenses {money(s.expenses)}"
        for i, s in enumerate(history, start=1)
    )
    return f"""Based on the following historical financial data, provide a 6-month forecast:

{lines}

Provide forecasted values for the next 6 months in this format:
Month 1: Revenue {currency_symbol}X, Expenses {currency_symbol}Y
Month 2: Revenue {currency_symbol}X, Expenses {currency_symbol}Y
...and so on.

Also explain the key trends and assumptions used for the forecast."""


def create_cost_optimization_prompt(
    expenses: ExpenseData,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    grouping: str = DEFAULT_GROUPING,
) -> str:
    """Prompt ranking the five largest expense categories."""

    def money(value: Number) -> str:
        return format_amount(value, currency_symbol, grouping)

    # sorted() is stable: equal amounts keep their breakdown order.
    top = sorted(expenses.categories, key=lambda c: c.amount, reverse=True)[:5]
    lines = "\n".join(f"{i}. {c.name}: {money(c.amount)}" for i, c in enumerate(top, 1))
    return f"""Analyze these top expense categories and suggest cost optimization strategies:

{lines}

Total Expenses: {money(expenses.total)}

Provide 5 specific, actionable cost optimization recommendations with:
- Category to optimize
- Specific action to take
- Expected savings (percentage or amount)
- Implementation difficulty (Easy/Medium/Hard)"""


def create_working_capital_prompt(
    data: ExtractedData,
    features: FinancialFeatures,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    grouping: str = DEFAULT_GROUPING,
) -> str:
    """Prompt for working-capital advice."""

    def money(value: Number) -> str:
        return format_amount(value, currency_symbol, grouping)

    bs = data.balance_sheet
    receivables = bs.accounts_receivable or 0
    payables = bs.accounts_payable or 0
    return f"""Analyze the working capital situation:

Accounts Receivable: {money(receivables)}
Accounts Payable: {money(payables)}
Cash Flow (Net): {money(data.cash_flow.net)}
Current Ratio: {_optional_ratio(features.ratios.current_ratio)}

Provide recommendations to optimize working capital including:
1. Strategies to improve cash conversion cycle
2. Receivables management tips
3. Payables optimization strategies
4. Inventory management suggestions (if applicable)
5. Short-term financing options if needed"""


def create_industry_benchmark_prompt(
    data: ExtractedData,
    features: FinancialFeatures,
    industry: str,
    region: str = "India",
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    grouping: str = DEFAULT_GROUPING,
) -> str:
    """Prompt comparing the business against its sector's benchmarks."""
    ratios = features.ratios
    revenue = format_amount(data.revenue.total, currency_symbol, grouping)
    return f"""Compare this {industry} business against industry benchmarks:

Business Metrics:
- Revenue: {revenue}
- Profit Margin: {ratios.profit_margin * 100:.2f}%
- Expense Ratio: {ratios.expense_ratio * 100:.2f}%
- Current Ratio: {_optional_ratio(ratios.current_ratio)}

Provide:
1. Typical industry benchmarks for {industry} sector in {region}
2. How this business compares (above/below average)
3. Key areas where the business excels
4. Key areas needing improvement
5. Industry-specific recommendations"""
