# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Column resolution for SMB FinProfile.

Uploaded statements and ledgers rarely agree on column names: a bank
export may say "Txn Date / Narration / Withdrawal / Deposit" while an
accounting export says "Date / Description / Amount / Category". This
module maps whatever headers a dataset exposes onto the canonical fields
used by the rest of the pipeline:

    date, description, amount, debit, credit, balance, category

Resolution rules
----------------
- Each canonical field holds an ordered tuple of accepted aliases.
- Headers are compared case-insensitively after trimming whitespace.
- For a given field, the first alias (in alias order) that is present in
  the header set wins. Alias order is the tie-break priority; header order
  is irrelevant.
- A header can satisfy at most one field. Fields are resolved in table
  order and headers already claimed by an earlier field are skipped.
- A field with no matching alias resolves to ``None`` ("absent").
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Optional

CANONICAL_FIELDS: tuple[str, ...] = (
    "date",
    "description",
    "amount",
    "debit",
    "credit",
    "balance",
    "category",
)

# Ordered association list: canonical field -> aliases, highest priority first.
ColumnAliases = tuple[tuple[str, tuple[str, ...]], ...]

DEFAULT_COLUMN_ALIASES: ColumnAliases = (
    ("date", ("date", "transaction date", "txn date", "posting date", "value date")),
    (
        "description",
        ("description", "narration", "particulars", "details", "transaction details"),
    ),
    ("amount", ("amount", "value", "transaction amount", "txn amount")),
    ("debit", ("debit", "withdrawal", "dr", "paid out")),
    ("credit", ("credit", "deposit", "cr", "received")),
    ("balance", ("balance", "closing balance", "available balance")),
    ("category", ("category", "type", "expense type", "income type")),
)


@dataclass(frozen=True)
class ColumnMap:
    """Resolved header for each canonical field (``None`` when absent)."""

    date: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[str] = None
    debit: Optional[str] = None
    credit: Optional[str] = None
    balance: Optional[str] = None
    category: Optional[str] = None

    def get(self, field_name: str) -> Optional[str]:
        return getattr(self, field_name)

    def resolved(self) -> dict[str, str]:
        """Return only the fields that resolved to a header."""
        out: dict[str, str] = {}
        for name in CANONICAL_FIELDS:
            header = self.get(name)
            if header is not None:
                out[name] = header
        return out


def _normalize(header: str) -> str:
    return str(header).strip().lower()


def build_column_aliases(
    overrides: Mapping[str, Iterable[str]],
    base: ColumnAliases = DEFAULT_COLUMN_ALIASES,
) -> ColumnAliases:
    """Return a new alias table where the given fields use custom aliases.

    Fields absent from ``overrides`` keep their ``base`` aliases.

    Raises:
        ValueError: if an override names an unknown field or has no alias.
    """
    unknown = set(overrides) - set(CANONICAL_FIELDS)
    if unknown:
        raise ValueError(
            f"Unknown column field(s) in aliases: {sorted(unknown)}. "
            f"Expected one of: {', '.join(CANONICAL_FIELDS)}."
        )

    table: list[tuple[str, tuple[str, ...]]] = []
    for name, aliases in base:
        if name in overrides:
            custom = tuple(str(a).strip() for a in overrides[name] if str(a).strip())
            if not custom:
                raise ValueError(f"Column aliases for {name!r} cannot be empty.")
            table.append((name, custom))
        else:
            table.append((name, aliases))
    return tuple(table)


def resolve_columns(
    headers: Iterable[str],
    aliases: ColumnAliases = DEFAULT_COLUMN_ALIASES,
) -> ColumnMap:
    """Resolve canonical fields against the headers of a dataset.

    Args:
        headers: Header names as they appear in the source (any order).
        aliases: Ordered alias table, see ``DEFAULT_COLUMN_ALIASES``.

    Returns:
        A ColumnMap giving, for each canonical field, the original header
        string it resolved to, or ``None``.
    """
    # Normalized header -> original header. When two headers normalize to
    # the same text, the smallest original wins so the outcome does not
    # depend on header order.
    col_map: dict[str, str] = {}
    for header in sorted(str(h) for h in headers):
        col_map.setdefault(_normalize(header), header)

    claimed: set[str] = set()
    resolved: dict[str, str] = {}
    for name, candidates in aliases:
        for cand in candidates:
            header = col_map.get(_normalize(cand))
            if header is not None and header not in claimed:
                resolved[name] = header
                claimed.add(header)
                break

    return ColumnMap(**resolved)
