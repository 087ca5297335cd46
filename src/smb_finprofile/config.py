# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for SMB FinProfile.

This module is responsible for:
- loading the application configuration from a TOML file,
- validating balance-sheet inputs, classification overrides, text
  generator settings and display options,
- exposing typed dataclasses used by the rest of the application.

Expected sections (all optional)
--------------------------------
[inputs.balance_sheet]
    accounts_receivable, accounts_payable, total_assets

[[inputs.loans]]
    type, amount, interest_rate, emi

[classification]
    column_aliases = { date = ["booking date", "date"], ... }
    [[classification.category_rules]]
        category = "Software", keywords = ["saas", "subscription"]

[generator]
    model, base_url, api_key_env, timeout_seconds, max_new_tokens,
    temperature, top_p

[display]
    mode ("table" | "csv" | "both"), currency_symbol,
    grouping ("en-IN" | "en-US"), ratio_decimals
"""

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

from .classifier import DEFAULT_CATEGORY_RULES, CategoryRule
from .columns import DEFAULT_COLUMN_ALIASES, ColumnAliases, build_column_aliases
from .generator import DEFAULT_MODEL, HF_API_URL
from .models import BalanceSheetInputs, Loan
from .prompts import DEFAULT_CURRENCY_SYMBOL, DEFAULT_GROUPING, GROUPINGS

DEFAULT_CONFIG_FILE = "smb_finprofile_config.toml"
DISPLAY_MODES: tuple[str, ...] = ("table", "csv", "both")


@dataclass(frozen=True)
class GeneratorConfig:
    """Settings of the Hugging Face text generator."""

    model: str = DEFAULT_MODEL
    base_url: str = HF_API_URL
    api_key_env: str = "HUGGINGFACE_API_KEY"
    timeout_seconds: float = 60.0
    max_new_tokens: int = 1000
    temperature: float = 0.7
    top_p: float = 0.95

    def api_key(self) -> Optional[str]:
        """Read the API key from the configured environment variable."""
        return os.environ.get(self.api_key_env) or None


@dataclass(frozen=True)
class DisplayConfig:
    mode: str = "table"
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    grouping: str = DEFAULT_GROUPING
    ratio_decimals: int = 2


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for SMB FinProfile.

    This aggregates:
    - balance-sheet enrichments used by the liquidity / leverage ratios,
    - the column alias and category keyword tables,
    - the text generator settings,
    - display options for tables and prompts.
    """

    balance_sheet: BalanceSheetInputs = field(default_factory=BalanceSheetInputs)
    column_aliases: ColumnAliases = DEFAULT_COLUMN_ALIASES
    category_rules: tuple[CategoryRule, ...] = DEFAULT_CATEGORY_RULES
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(parent: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = parent.get(name) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"Config entry [{name}] must be a table.")
    return value


def _to_decimal(value: Any, name: str) -> Decimal:
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid numeric value for {name!r}: {value!r}") from exc
    if not number.is_finite():
        raise ValueError(f"Invalid numeric value for {name!r}: {value!r}")
    return number


def _optional_decimal(section: Mapping[str, Any], name: str) -> Optional[Decimal]:
    value = section.get(name)
    if value is None or value == "":
        return None
    return _to_decimal(value, name)


def _parse_balance_sheet(inputs: Mapping[str, Any]) -> BalanceSheetInputs:
    bs = _section(inputs, "balance_sheet")

    raw_loans = inputs.get("loans") or []
    if not isinstance(raw_loans, list):
        raise ValueError("Config entry [[inputs.loans]] must be an array of tables.")

    loans: list[Loan] = []
    for i, raw in enumerate(raw_loans):
        if not isinstance(raw, Mapping) or "amount" not in raw:
            raise ValueError(f"Loan #{i + 1} must be a table with an 'amount'.")
        try:
            interest_rate = float(raw.get("interest_rate", 0.0))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid interest_rate for loan #{i + 1}.") from exc
        loans.append(
            Loan(
                amount=_to_decimal(raw["amount"], "amount"),
                interest_rate=interest_rate,
                emi=_to_decimal(raw.get("emi", 0), "emi"),
                type=str(raw.get("type", "")),
            )
        )

    return BalanceSheetInputs(
        accounts_receivable=_optional_decimal(bs, "accounts_receivable"),
        accounts_payable=_optional_decimal(bs, "accounts_payable"),
        loans=tuple(loans),
        total_assets=_optional_decimal(bs, "total_assets"),
    )


def _parse_classification(
    raw: Mapping[str, Any],
) -> tuple[ColumnAliases, tuple[CategoryRule, ...]]:
    section = _section(raw, "classification")

    aliases = DEFAULT_COLUMN_ALIASES
    overrides = section.get("column_aliases")
    if overrides:
        if not isinstance(overrides, Mapping) or not all(
            isinstance(v, list) for v in overrides.values()
        ):
            raise ValueError(
                "[classification].column_aliases must map fields to lists of names."
            )
        aliases = build_column_aliases(overrides)

    rules = DEFAULT_CATEGORY_RULES
    raw_rules = section.get("category_rules")
    if raw_rules:
        if not isinstance(raw_rules, list):
            raise ValueError("[[classification.category_rules]] must be an array.")
        parsed: list[CategoryRule] = []
        for i, r in enumerate(raw_rules):
            if (
                not isinstance(r, Mapping)
                or not r.get("category")
                or not isinstance(r.get("keywords"), list)
                or not r["keywords"]
            ):
                raise ValueError(
                    f"Category rule #{i + 1} needs a 'category' and a "
                    "non-empty 'keywords' list."
                )
            parsed.append(
                CategoryRule(
                    category=str(r["category"]),
                    keywords=tuple(str(k) for k in r["keywords"]),
                )
            )
        rules = tuple(parsed)

    return aliases, rules


def _parse_generator(raw: Mapping[str, Any]) -> GeneratorConfig:
    section = _section(raw, "generator")
    defaults = GeneratorConfig()
    try:
        return GeneratorConfig(
            model=str(section.get("model", defaults.model)),
            base_url=str(section.get("base_url", defaults.base_url)),
            api_key_env=str(section.get("api_key_env", defaults.api_key_env)),
            timeout_seconds=float(
                section.get("timeout_seconds", defaults.timeout_seconds)
            ),
            max_new_tokens=int(section.get("max_new_tokens", defaults.max_new_tokens)),
            temperature=float(section.get("temperature", defaults.temperature)),
            top_p=float(section.get("top_p", defaults.top_p)),
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid value in [generator] section: {exc}") from exc


def _parse_display(raw: Mapping[str, Any]) -> DisplayConfig:
    section = _section(raw, "display")

    mode = str(section.get("mode", "table"))
    if mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid display.mode {mode!r}, expected one of: {', '.join(DISPLAY_MODES)}."
        )

    grouping = str(section.get("grouping", DEFAULT_GROUPING))
    if grouping not in GROUPINGS:
        raise ValueError(
            f"Invalid display.grouping {grouping!r}, expected one of: "
            f"{', '.join(GROUPINGS)}."
        )

    raw_decimals = section.get("ratio_decimals", 2)
    if isinstance(raw_decimals, bool) or not isinstance(raw_decimals, int):
        raise ValueError(
            f"Invalid display.ratio_decimals {raw_decimals!r}, expected an integer."
        )
    if raw_decimals < 0:
        raise ValueError("display.ratio_decimals must be >= 0.")
    ratio_decimals = raw_decimals

    return DisplayConfig(
        mode=mode,
        currency_symbol=str(section.get("currency_symbol", DEFAULT_CURRENCY_SYMBOL)),
        grouping=grouping,
        ratio_decimals=ratio_decimals,
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the SMB FinProfile configuration from a TOML file.

    When ``config_path`` is None, ``smb_finprofile_config.toml`` in the
    current directory is used if it exists; otherwise the built-in defaults
    are returned. An explicit path that does not exist is an error.

    Raises:
        FileNotFoundError: if an explicit config file does not exist.
        ValueError: if the file cannot be parsed or holds invalid values.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            return AppConfig()
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)

    # 1) Inputs: balance sheet and loans
    inputs = _section(raw, "inputs")
    balance_sheet = _parse_balance_sheet(inputs)

    # 2) Classification tables
    aliases, rules = _parse_classification(raw)

    # 3) Generator and display
    return AppConfig(
        balance_sheet=balance_sheet,
        column_aliases=aliases,
        category_rules=rules,
        generator=_parse_generator(raw),
        display=_parse_display(raw),
    )
