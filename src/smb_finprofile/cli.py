# SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for SMB FinProfile.

This module wires together the main building blocks of SMB FinProfile:

- configuration (balance-sheet inputs, classification tables, generator
  and display options),
- file reading (CSV / Excel, or text extracted from a PDF),
- extraction (column resolution, classification, aggregation),
- ratios and scores,
- prompt building and, optionally, the text-generation call and the
  parsing of its reply.

The CLI is intentionally thin: it does not implement financial logic
itself. It orchestrates the underlying modules based on command-line
arguments and the configuration file.


High-level pipeline
-------------------

1) Load the TOML configuration (``smb_finprofile_config.toml`` by default,
   built-in defaults when that file does not exist).

2) Read the input rows. With ``--pdf-text`` the input is a text file
   extracted from a PDF statement; otherwise it is a CSV or Excel file.

3) Extract transactions and aggregates (optionally restricted to one month
   with ``--month YYYY-MM``), then compute ratios, trends (when
   ``--prior`` provides the previous period) and scores.

4) Depending on ``--scope``:

   - ``profile`` (default): print aggregates, ratios and scores;
   - ``prompt``: print the prompt selected with ``--prompt``;
   - ``analysis``: send the analysis prompt to the Hugging Face inference
     API and print the parsed analysis;
   - ``all``: profile, then analysis.

5) With ``--display-mode csv`` or ``both``, tables are also written as
   timestamped CSV files into ``--output`` (default ``data/output``).


Examples
--------

    python -m smb_finprofile.cli statement.csv
    python -m smb_finprofile.cli ledger.xlsx --prior ledger_2024.xlsx
    python -m smb_finprofile.cli statement.csv --scope prompt --prompt cost
    python -m smb_finprofile.cli statement.txt --pdf-text --scope analysis

The API key used by ``--scope analysis`` is read from the environment
variable named by ``[generator].api_key_env`` (``HUGGINGFACE_API_KEY`` by
default).
"""

import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from . import __version__
from .config import AppConfig, load_app_config
from .engine import build_extracted_data, extract_all
from .generator import AnalysisGenerationError, HuggingFaceGenerator, generate_analysis
from .io import read_rows, rows_from_pdf_text
from .models import ExtractedData, FinancialFeatures
from .periods import filter_transactions_by_period, month_period, monthly_summaries
from .prompts import (
    create_analysis_prompt,
    create_cost_optimization_prompt,
    create_forecast_prompt,
    create_industry_benchmark_prompt,
    create_working_capital_prompt,
    format_amount,
)
from .ratios import calculate_financial_features, ratio_results
from .views import (
    analysis_to_text,
    breakdown_to_dataframe,
    ratios_to_dataframe,
    transactions_to_dataframe,
)


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m smb_finprofile.cli",
        description=(
            "SMB FinProfile - Financial profiling & AI-assisted analysis for SMBs. "
            "Reads transactions from a CSV/Excel file (or PDF text), computes "
            "aggregates, ratios, health and risk scores, and builds or runs "
            "analysis prompts."
        ),
    )

    ap.add_argument(
        "input_path",
        nargs="?",
        metavar="INPUT",
        help="CSV or Excel file with transactions (or PDF text with --pdf-text).",
    )
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of smb_finprofile and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'smb_finprofile_config.toml' in the current directory is used "
            "when present."
        ),
    )
    ap.add_argument(
        "--prior",
        dest="prior_path",
        help="File with the previous period's transactions, used for trends.",
    )
    ap.add_argument(
        "--pdf-text",
        dest="pdf_text",
        action="store_true",
        help="Treat input files as text extracted from PDF statements.",
    )
    ap.add_argument(
        "--month",
        metavar="YYYY-MM",
        help="Keep only the transactions of this calendar month of INPUT.",
    )
    ap.add_argument(
        "--scope",
        choices=["profile", "prompt", "analysis", "all"],
        default="profile",
        help=(
            "'profile' = aggregates, ratios and scores; "
            "'prompt' = print the selected prompt; "
            "'analysis' = run the analysis through the text generator; "
            "'all' = profile and analysis."
        ),
    )
    ap.add_argument(
        "--prompt",
        dest="prompt_kind",
        choices=["analysis", "forecast", "cost", "working-capital", "benchmark"],
        default="analysis",
        help="Prompt to print with --scope prompt (default: analysis).",
    )
    ap.add_argument(
        "--industry",
        default="retail",
        help="Industry name used by the benchmark prompt (default: retail).",
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help="Override the display.mode setting from the configuration file.",
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help="Output directory for CSV files (default: data/output).",
    )
    ap.add_argument(
        "--verbose",
        action="store_true",
        help="Log diagnostics (resolved columns, skipped rows) to stderr.",
    )
    return ap


def _load_extracted(path: Path, pdf_text: bool, config: AppConfig) -> ExtractedData:
    if pdf_text:
        if not path.is_file():
            raise FileNotFoundError(f"Input file not found: {path}")
        rows = rows_from_pdf_text(path.read_text(encoding="utf-8"))
    else:
        rows = read_rows(path)
    return extract_all(
        rows,
        balance_sheet=config.balance_sheet,
        aliases=config.column_aliases,
        rules=config.category_rules,
    )


def _restrict_to_month(data: ExtractedData, month: str) -> ExtractedData:
    """
    Re-aggregate ``data`` on the transactions of one 'YYYY-MM' month.

    Raises:
        ValueError: if ``month`` is not a valid 'YYYY-MM' value.
    """
    try:
        start = datetime.strptime(month, "%Y-%m")
    except ValueError as exc:
        raise ValueError(f"Invalid --month {month!r}, expected YYYY-MM.") from exc

    period = month_period(start.year, start.month)
    return build_extracted_data(
        filter_transactions_by_period(data.transactions, period),
        balance_sheet=data.balance_sheet,
        rows_seen=data.rows_seen,
        rows_skipped=data.rows_skipped,
    )


def _build_prompt(
    kind: str,
    data: ExtractedData,
    features: FinancialFeatures,
    config: AppConfig,
    industry: str,
) -> str:
    fmt = {
        "currency_symbol": config.display.currency_symbol,
        "grouping": config.display.grouping,
    }
    if kind == "forecast":
        return create_forecast_prompt(monthly_summaries(data.transactions), **fmt)
    if kind == "cost":
        return create_cost_optimization_prompt(data.expenses, **fmt)
    if kind == "working-capital":
        return create_working_capital_prompt(data, features, **fmt)
    if kind == "benchmark":
        return create_industry_benchmark_prompt(data, features, industry, **fmt)
    return create_analysis_prompt(data, features, **fmt)


def _print_profile(
    data: ExtractedData, features: FinancialFeatures, config: AppConfig
) -> None:
    display = config.display

    def money(value) -> str:
        return format_amount(value, display.currency_symbol, display.grouping)

    print(
        f"Rows read: {data.rows_seen} | transactions: {len(data.transactions)} "
        f"| skipped: {data.rows_skipped}"
    )
    if data.rows_seen and not data.transactions:
        print("Warning: no usable transactions (date and amount) were found.")

    print()
    print(f"Revenue:   {money(data.revenue.total)}")
    print(f"Expenses:  {money(data.expenses.total)}")
    print(f"Net cash flow: {money(data.cash_flow.net)}")

    if data.revenue.streams:
        print()
        print("=== Revenue streams ===")
        print(
            breakdown_to_dataframe(data.revenue.streams, data.revenue.total).to_string(
                index=False
            )
        )
    if data.expenses.categories:
        print()
        print("=== Expense categories ===")
        print(
            breakdown_to_dataframe(
                data.expenses.categories, data.expenses.total
            ).to_string(index=False)
        )

    print()
    print("=== Ratios & scores ===")
    ratios_df = ratios_to_dataframe(ratio_results(features), display.ratio_decimals)
    print(ratios_df.to_string(index=False))


def _write_csv(
    data: ExtractedData, features: FinancialFeatures, config: AppConfig, output: Path
) -> None:
    output.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")

    tables = {
        "transactions": transactions_to_dataframe(data.transactions),
        "revenue_streams": breakdown_to_dataframe(
            data.revenue.streams, data.revenue.total
        ),
        "expense_categories": breakdown_to_dataframe(
            data.expenses.categories, data.expenses.total
        ),
        "ratios": ratios_to_dataframe(
            ratio_results(features), config.display.ratio_decimals
        ),
    }
    for name, df in tables.items():
        path = output / f"{name}_{timestamp}.csv"
        df.to_csv(path, index=False)
        print(f"Wrote {path} ({len(df)} rows)")


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the SMB FinProfile CLI.

    Returns the process exit code: 0 on success, 1 when the analysis could
    not be generated.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"smb_finprofile version {__version__}")
        return 0

    if not args.input_path:
        parser.error("the INPUT file is required")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # 1) Configuration
    config = load_app_config(args.config_path)

    # 2) Extraction for the current (and optional prior) period
    try:
        data = _load_extracted(Path(args.input_path), args.pdf_text, config)
        prior = (
            _load_extracted(Path(args.prior_path), args.pdf_text, config)
            if args.prior_path
            else None
        )
        if args.month:
            data = _restrict_to_month(data, args.month)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    # 3) Ratios, trends and scores
    features = calculate_financial_features(data, prior)

    display_mode = args.display_mode or config.display.mode

    if args.scope in {"profile", "all"}:
        if display_mode in {"table", "both"}:
            _print_profile(data, features, config)
        if display_mode in {"csv", "both"}:
            output_dir = Path(args.output_dir) if args.output_dir else Path("data/output")
            _write_csv(data, features, config, output_dir)

    if args.scope == "prompt":
        print(_build_prompt(args.prompt_kind, data, features, config, args.industry))

    if args.scope in {"analysis", "all"}:
        gen_cfg = config.generator
        generator = HuggingFaceGenerator(
            api_key=gen_cfg.api_key(),
            model=gen_cfg.model,
            base_url=gen_cfg.base_url,
            timeout=gen_cfg.timeout_seconds,
            max_new_tokens=gen_cfg.max_new_tokens,
            temperature=gen_cfg.temperature,
            top_p=gen_cfg.top_p,
        )
        prompt = _build_prompt("analysis", data, features, config, args.industry)
        try:
            result = generate_analysis(data, features, generator, prompt=prompt)
        except AnalysisGenerationError as exc:
            print(f"Error: analysis generation failed: {exc}")
            return 1

        print()
        print("=== AI analysis ===")
        if result.is_empty:
            print("The generated reply contained no recognizable sections.")
        print(analysis_to_text(result))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
