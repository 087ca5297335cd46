# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Transaction classification for SMB FinProfile.

This module turns raw tabular rows into typed ``Transaction`` records in
two steps:

1) Validation
   ----------
   ``normalize_row()`` reads the resolved columns of one raw row and
   produces a ``CanonicalRow``: a date (or None), a description, and
   Decimal amounts for the amount / debit / credit columns (None when the
   cell is empty). Cells that are present but cannot be parsed are listed
   in ``CanonicalRow.invalid``.

2) Classification
   --------------
   ``TransactionClassifier.classify()`` applies the amount/kind policy:

   - if an ``amount`` column resolved and its cell is non-empty, the row is
     income when the value is strictly positive and expense otherwise; the
     magnitude is the absolute value;
   - else, if both ``debit`` and ``credit`` resolved, a non-empty debit gives
     an expense and otherwise a non-empty credit gives an income;
   - else the row yields no transaction.

   A row also needs a parseable date. Rows that fail are dropped (and
   counted by ``extract_transactions``), never raised.

Categorization uses the ``category`` column verbatim when it resolved,
otherwise the first matching keyword rule in ``DEFAULT_CATEGORY_RULES``
(case-insensitive substring match against the description), falling back
to "Other".
"""

import logging
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import pandas as pd

from .columns import DEFAULT_COLUMN_ALIASES, ColumnAliases, ColumnMap, resolve_columns
from .models import Transaction

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Other"
UNKNOWN_DESCRIPTION = "Unknown"


@dataclass(frozen=True)
class CategoryRule:
    """Assign ``category`` when the description contains any keyword."""

    category: str
    keywords: tuple[str, ...]

    def matches(self, description: str) -> bool:
        desc = description.lower()
        return any(k.lower() in desc for k in self.keywords)


# Checked in order; the first matching rule wins.
DEFAULT_CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule("Sales Revenue", ("sale", "revenue", "invoice")),
    CategoryRule("Service Revenue", ("service", "consulting")),
    CategoryRule("Salaries & Wages", ("salary", "wage", "payroll")),
    CategoryRule("Rent", ("rent", "lease")),
    CategoryRule("Utilities", ("utility", "electricity", "water")),
    CategoryRule("Marketing", ("marketing", "advertising")),
    CategoryRule("Inventory Purchase", ("inventory", "stock", "purchase")),
    CategoryRule("Loan Payment", ("loan", "emi", "interest")),
    CategoryRule("Taxes", ("tax", "gst")),
)


@dataclass(frozen=True)
class CanonicalRow:
    """One raw row after validation, keyed by canonical field.

    ``None`` means the resolved cell was empty (or the column is absent).
    ``invalid`` lists fields whose cell was non-empty but unparseable.
    """

    date: Optional[date] = None
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    debit: Optional[Decimal] = None
    credit: Optional[Decimal] = None
    category: Optional[str] = None
    invalid: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ExtractionResult:
    transactions: tuple[Transaction, ...]
    rows_seen: int
    rows_skipped: int


# ---------------------------------------------------------------------------
# Cell parsing
# ---------------------------------------------------------------------------


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


# Currency tokens are removed before junk characters so that the dot of
# "Rs." is not read as a decimal point.
_CURRENCY = re.compile(r"\b(?:rs\.?|inr|usd|eur|gbp)|[₹$€£¥]", re.IGNORECASE)
_AMOUNT_JUNK = re.compile(r"[^0-9.\-+()]")


def parse_amount(value: Any) -> Optional[Decimal]:
    """Parse a monetary cell into a Decimal.

    Accepts numbers and strings such as "1,234.50", "₹ 500", "Rs. 500",
    "INR 1,000", "-20" or accounting negatives like "(75.00)".

    Returns:
        The parsed value, or None when the cell is empty.

    Raises:
        ValueError: if the cell is non-empty but not a number.
    """
    if _is_empty(value):
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        if math.isinf(value):
            raise ValueError(f"Invalid amount: {value!r}")
        return Decimal(repr(value))

    text = _CURRENCY.sub("", str(value)).strip()
    negative = text.startswith("(") and text.endswith(")")
    cleaned = _AMOUNT_JUNK.sub("", text).strip("()")
    if not cleaned:
        raise ValueError(f"Invalid amount: {value!r}")
    try:
        number = Decimal(cleaned)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc
    if not number.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return -number if negative else number


def parse_date(value: Any) -> Optional[date]:
    """Parse a date cell (ISO strings first, then pandas' parser).

    Returns:
        The calendar date, or None when the cell is empty.

    Raises:
        ValueError: if the cell is non-empty but not a date.
    """
    if _is_empty(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = _CURRENCY.sub("", str(value)).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass

    try:
        ts = pd.to_datetime(text, errors="raise")
    except (ValueError, TypeError, OverflowError) as exc:
        raise ValueError(f"Invalid date: {value!r}") from exc
    if pd.isna(ts):
        raise ValueError(f"Invalid date: {value!r}")
    return ts.date()


def normalize_row(row: Mapping[str, Any], columns: ColumnMap) -> CanonicalRow:
    """Validate one raw row against the resolved column map."""
    invalid: set[str] = set()
    values: dict[str, Any] = {}

    def cell(name: str) -> Any:
        header = columns.get(name)
        return row.get(header) if header is not None else None

    try:
        values["date"] = parse_date(cell("date"))
    except ValueError:
        invalid.add("date")

    for name in ("amount", "debit", "credit"):
        try:
            values[name] = parse_amount(cell(name))
        except ValueError:
            invalid.add(name)

    for name in ("description", "category"):
        raw = cell(name)
        values[name] = None if _is_empty(raw) else str(raw).strip()

    return CanonicalRow(invalid=frozenset(invalid), **values)


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransactionClassifier:
    """Classify canonical rows into transactions.

    Attributes:
        columns: Column map resolved for the dataset being classified.
        rules: Ordered keyword rules used when no category column resolved.
    """

    columns: ColumnMap
    rules: tuple[CategoryRule, ...] = field(default=DEFAULT_CATEGORY_RULES)

    def categorize(self, description: str) -> str:
        for rule in self.rules:
            if rule.matches(description):
                return rule.category
        return DEFAULT_CATEGORY

    def _resolve_amount(self, row: CanonicalRow) -> Optional[tuple[Decimal, str]]:
        """Return (magnitude, kind) or None when no amount can be resolved."""
        has_amount_cell = row.amount is not None or "amount" in row.invalid
        if self.columns.amount is not None and has_amount_cell:
            if row.amount is None:
                return None
            kind = "income" if row.amount > 0 else "expense"
            return abs(row.amount), kind

        if self.columns.debit is not None and self.columns.credit is not None:
            if "debit" in row.invalid:
                return None
            # A zero debit is still non-empty; classify() drops it as zero.
            if row.debit is not None:
                return abs(row.debit), "expense"
            if "credit" in row.invalid:
                return None
            if row.credit is not None:
                return abs(row.credit), "income"

        return None

    def classify(self, row: CanonicalRow) -> Optional[Transaction]:
        """Return the transaction for ``row``, or None if it must be dropped."""
        if row.date is None:
            return None

        resolved = self._resolve_amount(row)
        if resolved is None:
            return None
        amount, kind = resolved
        if amount == 0:
            return None

        description = row.description or UNKNOWN_DESCRIPTION
        if self.columns.category is not None:
            category = row.category or ""
        else:
            category = self.categorize(row.description or "")

        return Transaction(
            date=row.date,
            description=description,
            amount=amount,
            kind=kind,  # type: ignore[arg-type]
            category=category,
        )


def extract_transactions(
    rows: Iterable[Mapping[str, Any]],
    aliases: ColumnAliases = DEFAULT_COLUMN_ALIASES,
    rules: tuple[CategoryRule, ...] = DEFAULT_CATEGORY_RULES,
) -> ExtractionResult:
    """Resolve columns and classify every row of a dataset.

    Columns are resolved once, from the keys of the first row, as the rows
    are expected to be uniformly shaped.

    Args:
        rows: Tabular records (one mapping per document row).
        aliases: Column alias table used for resolution.
        rules: Keyword rules used for categorization.

    Returns:
        An ExtractionResult with the transactions in input order and the
        number of rows read and dropped.
    """
    rows = list(rows)
    if not rows:
        return ExtractionResult(transactions=(), rows_seen=0, rows_skipped=0)

    columns = resolve_columns(rows[0].keys(), aliases)
    classifier = TransactionClassifier(columns=columns, rules=rules)
    logger.debug("Resolved columns: %s", columns.resolved())

    transactions: list[Transaction] = []
    skipped = 0
    for index, raw in enumerate(rows):
        txn = classifier.classify(normalize_row(raw, columns))
        if txn is None:
            skipped += 1
            logger.debug("Row %d skipped: no usable date or amount", index)
            continue
        transactions.append(txn)

    if skipped:
        logger.info("Skipped %d of %d rows without usable date/amount", skipped, len(rows))

    return ExtractionResult(
        transactions=tuple(transactions),
        rows_seen=len(rows),
        rows_skipped=skipped,
    )
