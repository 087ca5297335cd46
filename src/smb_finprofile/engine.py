# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core aggregation engine for SMB FinProfile.

This module reduces a set of classified transactions into the three
aggregates consumed by the scoring engine and the prompt builder:

1. Revenue
   --------
   ``aggregate_revenue()`` sums income transactions, grouped by category.
   Transactions with an empty category are grouped under "Other Revenue".

2. Expenses
   ---------
   ``aggregate_expenses()`` does the same for expense transactions, with
   "Other Expenses" as the default label.

   In both cases the breakdown keeps the order in which each category is
   first seen in the transaction set (it is not sorted), and the total is
   the exact Decimal sum of the breakdown amounts.

3. Cash flow
   ----------
   ``compute_cash_flow()`` produces a simplified breakdown where all
   activity is operating:

       operating = revenue.total - expenses.total
       investing = financing = 0
       net       = operating + investing + financing

   No attempt is made to classify individual transactions into investing
   or financing activity; the input schema carries no reliable signal for
   it.

``extract_all()`` chains column resolution, classification and the three
aggregations for one set of rows.
"""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any, Optional

from .classifier import (
    DEFAULT_CATEGORY_RULES,
    CategoryRule,
    extract_transactions,
)
from .columns import DEFAULT_COLUMN_ALIASES, ColumnAliases
from .models import (
    ZERO,
    BalanceSheetInputs,
    CashFlowData,
    ExpenseData,
    ExtractedData,
    RevenueData,
    Stream,
    Transaction,
)

DEFAULT_REVENUE_LABEL = "Other Revenue"
DEFAULT_EXPENSE_LABEL = "Other Expenses"


def _group_by_category(
    transactions: Iterable[Transaction], kind: str, default_label: str
) -> tuple[Decimal, tuple[Stream, ...]]:
    # dict preserves insertion order: first occurrence defines the position.
    amounts: dict[str, Decimal] = {}
    for t in transactions:
        if t.kind != kind:
            continue
        name = t.category or default_label
        amounts[name] = amounts.get(name, ZERO) + t.amount

    streams = tuple(Stream(name=name, amount=amt) for name, amt in amounts.items())
    total = sum((s.amount for s in streams), ZERO)
    return total, streams


def aggregate_revenue(transactions: Iterable[Transaction]) -> RevenueData:
    """Sum income transactions into a revenue total and per-stream breakdown."""
    total, streams = _group_by_category(transactions, "income", DEFAULT_REVENUE_LABEL)
    return RevenueData(total=total, streams=streams)


def aggregate_expenses(transactions: Iterable[Transaction]) -> ExpenseData:
    """Sum expense transactions into a total and per-category breakdown."""
    total, categories = _group_by_category(
        transactions, "expense", DEFAULT_EXPENSE_LABEL
    )
    return ExpenseData(total=total, categories=categories)


def compute_cash_flow(revenue: RevenueData, expenses: ExpenseData) -> CashFlowData:
    """Return the simplified (operating-only) cash-flow breakdown."""
    operating = revenue.total - expenses.total
    investing = ZERO
    financing = ZERO
    return CashFlowData(
        operating=operating,
        investing=investing,
        financing=financing,
        net=operating + investing + financing,
    )


def build_extracted_data(
    transactions: Iterable[Transaction],
    balance_sheet: Optional[BalanceSheetInputs] = None,
    rows_seen: Optional[int] = None,
    rows_skipped: int = 0,
) -> ExtractedData:
    """Aggregate an already-classified transaction set.

    Args:
        transactions: Classified transactions.
        balance_sheet: Optional receivables / payables / loans enrichments.
        rows_seen: Number of source rows (defaults to the transaction count).
        rows_skipped: Number of source rows dropped during classification.

    Returns:
        An ExtractedData record.
    """
    txns = tuple(transactions)
    revenue = aggregate_revenue(txns)
    expenses = aggregate_expenses(txns)
    return ExtractedData(
        transactions=txns,
        revenue=revenue,
        expenses=expenses,
        cash_flow=compute_cash_flow(revenue, expenses),
        balance_sheet=balance_sheet or BalanceSheetInputs(),
        rows_seen=len(txns) if rows_seen is None else rows_seen,
        rows_skipped=rows_skipped,
    )


def extract_all(
    rows: Iterable[Mapping[str, Any]],
    balance_sheet: Optional[BalanceSheetInputs] = None,
    aliases: ColumnAliases = DEFAULT_COLUMN_ALIASES,
    rules: tuple[CategoryRule, ...] = DEFAULT_CATEGORY_RULES,
) -> ExtractedData:
    """Run the full extraction pipeline on raw tabular rows.

    Steps:
        1. Resolve the dataset's columns onto the canonical schema.
        2. Classify each row into a transaction (unusable rows are dropped
           and counted).
        3. Aggregate revenue, expenses and cash flow.

    A dataset with no usable row is a valid outcome: the result then has
    zero totals and empty breakdowns.
    """
    extraction = extract_transactions(rows, aliases=aliases, rules=rules)
    return build_extracted_data(
        extraction.transactions,
        balance_sheet=balance_sheet,
        rows_seen=extraction.rows_seen,
        rows_skipped=extraction.rows_skipped,
    )
