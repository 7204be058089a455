#!/usr/bin/env python3
"""Standalone CLI to exercise edinet_facts against the live EDINET API.

Usage — run any of these from the project root (EDINET_API_KEY in .env):

  # Find a company's EDINET code
  python test_tools.py search "トヨタ"
  python test_tools.py search "Example Heavy Industries"

  # Financial facts for one fiscal year (named by its start year)
  python test_tools.py facts E02144 2023

  # Several fiscal years at once
  python test_tools.py years E02144 2020 2023
  python test_tools.py years E02144 2020 2023 4     # 4 worker threads

  # Raw submission list for a date
  python test_tools.py documents 2024-06-28

  # Subscription key / connectivity probe
  python test_tools.py ping

  # Full health check: config, API, search planning
  python test_tools.py health

Add -v anywhere on the command line for debug logging.
"""

from __future__ import annotations

import json
import logging
import os
import sys

# Ensure the src directory is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "src"))


def _fmt(val, indent=2):
    """Pretty-print a value."""
    if isinstance(val, dict):
        return json.dumps(val, indent=indent, default=str, ensure_ascii=False)
    if isinstance(val, list):
        return json.dumps(val[:20], indent=indent, default=str, ensure_ascii=False)  # Cap at 20 items
    return str(val)


def _header(title: str):
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}\n")


def _print_error(exc: Exception):
    from edinet_facts.disclosure import describe_error
    info = describe_error(exc)
    print(f"  ERROR [{info['category']}]: {info['message']}")
    if info.get("detail"):
        print(f"    {info['detail']}")


def _print_facts(facts):
    from edinet_facts.financials import fmt_amount

    meta = facts.metadata
    print(f"  Filer:      {meta.filer_name or '?'}")
    print(f"  Filing:     {meta.filing_id or '?'}  submitted {meta.submit_date or '?'}")
    print(f"  Found on:   {meta.found_date or '?'}")
    print(f"  Source:     {meta.source} ({meta.entry_name})")
    print(f"  Contexts:   instant={facts.contexts.get('instant')}  duration={facts.contexts.get('duration')}")

    for title, section in (
        ("Balance Sheet", facts.balance_sheet),
        ("Profit and Loss", facts.profit_loss),
        ("Cash Flow", facts.cash_flow),
    ):
        print(f"\n  {title}:")
        for k, v in section.items():
            src = facts.sources.get(k) or ""
            print(f"    {k:34s}  {fmt_amount(v):>16s}  {src}")
    print(f"\n  Resolved: {facts.resolved_count()} item(s)")


def cmd_search(query: str):
    """Search recent submissions for companies by name."""
    _header(f"Search: {query}")
    from edinet_facts.disclosure import resolve_company
    try:
        results = resolve_company(query)
    except Exception as exc:
        _print_error(exc)
        return
    if not results:
        print("  No results found.")
        return
    for r in results[:20]:
        sec = r.securities_code or "?"
        print(f"  {r.id:8s}  {sec:6s}  {r.legal_name}  (seen {r.last_seen_date})")
    print(f"\n  Total: {len(results)} result(s)")


def cmd_facts(company_id: str, year: int):
    """Extract normalized financial facts for one fiscal year."""
    _header(f"Facts: {company_id} | FY{year}")
    from edinet_facts.disclosure import get_fiscal_year_facts
    try:
        facts = get_fiscal_year_facts(company_id, year)
    except Exception as exc:
        _print_error(exc)
        return
    _print_facts(facts)


def cmd_years(company_id: str, start: int, end: int, workers: int = 1):
    """Extract facts for a range of fiscal years."""
    _header(f"Years: {company_id} | FY{start}-FY{end} | workers={workers}")
    from edinet_facts.disclosure import get_multi_year_facts
    from edinet_facts.financials import fmt_amount
    try:
        results = get_multi_year_facts(company_id, range(start, end + 1), max_workers=workers)
    except Exception as exc:
        _print_error(exc)
        return
    for r in results:
        if r.facts is None:
            print(f"  FY{r.year}  [X] {r.error}")
            continue
        assets = fmt_amount(r.facts.balance_sheet.get("total_assets"))
        sales = fmt_amount(r.facts.profit_loss.get("net_sales"))
        print(
            f"  FY{r.year}  [+] {r.facts.metadata.filing_id}  "
            f"assets={assets}  sales={sales}  ({r.dates_tried} date(s))"
        )


def cmd_documents(day: str, limit: int = 20):
    """List the submissions of one date."""
    _header(f"Documents: {day}")
    from edinet_facts.disclosure import list_documents
    try:
        docs = list_documents(day)
    except Exception as exc:
        _print_error(exc)
        return
    for d in docs[:limit]:
        xbrl = "xbrl" if d.xbrl_available else "    "
        print(f"  {d.filing_id:10s}  {d.company_id or '?':8s}  {d.form_code or '?':7s}  {xbrl}  {d.filer_name or ''}")
    if len(docs) > limit:
        print(f"  ... +{len(docs) - limit} more")
    print(f"\n  Total: {len(docs)} document(s)")


def cmd_ping():
    """Check the subscription key against the live API."""
    _header("EDINET Connection")
    from edinet_facts.disclosure import check_connection
    print(_fmt(check_connection()))


def cmd_health():
    """Full system health check."""
    _header("edinet-facts Health Check")
    from datetime import date

    checks = []

    # 1. Config
    print("  [1/3] Configuration...")
    try:
        from edinet_facts.config import get_config
        cfg = get_config()
        print(f"    EDINET_API_KEY: {'set' if cfg.edinet_api_key else 'not set'}")
        print(f"    EDINET_BASE_URL: {cfg.edinet_base_url}")
        print(f"    Rate: {cfg.requests_per_second}/s  timeout={cfg.request_timeout}s")
        checks.append(("Config", "PASS" if cfg.edinet_api_key else "WARN"))
    except Exception as e:
        print(f"    ERROR: {e}")
        checks.append(("Config", "FAIL"))

    # 2. Search planning (offline)
    print("\n  [2/3] Search planning...")
    try:
        from edinet_facts.search_planner import SearchWindowPlanner, Strategy
        planner = SearchWindowPlanner()
        fy = date.today().year - 2
        fiscal = planner.plan(Strategy.FISCAL, fiscal_year=fy)
        print(f"    FY{fy}: {len(fiscal)} fiscal date(s), first {fiscal[0] if fiscal else '-'}")
        checks.append(("Planner", "PASS" if fiscal else "WARN"))
    except Exception as e:
        print(f"    ERROR: {e}")
        checks.append(("Planner", "FAIL"))

    # 3. EDINET API
    print("\n  [3/3] EDINET API...")
    from edinet_facts.disclosure import check_connection
    result = check_connection()
    print(f"    {result['status']}: {result['message']} ({result['documents']} document(s) on {result['date']})")
    checks.append(("EDINET API", "PASS" if result["ok"] else "FAIL"))

    # Summary
    print(f"\n  {'='*40}")
    print("  SUMMARY:")
    for name, status in checks:
        icon = {"PASS": "+", "FAIL": "X", "WARN": "!", "SKIP": "-"}[status]
        print(f"    [{icon}] {name}: {status}")
    print()


COMMANDS = {
    "search": (cmd_search, "query"),
    "facts": (cmd_facts, "edinet_code year"),
    "years": (cmd_years, "edinet_code start_year end_year [workers]"),
    "documents": (cmd_documents, "YYYY-MM-DD [limit]"),
    "ping": (cmd_ping, ""),
    "health": (cmd_health, ""),
}


def main():
    args = [a for a in sys.argv[1:] if a not in ("-v", "--verbose")]
    verbose = len(args) != len(sys.argv) - 1
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    if not args or args[0] in ("-h", "--help", "help"):
        print("\nedinet-facts — Standalone Tool Tester")
        print("=" * 44)
        print("\nUsage: python test_tools.py <command> [args] [-v]\n")
        print("Commands:")
        for cmd, (_, usage) in COMMANDS.items():
            print(f"  {cmd:16s}  {usage}")
        print()
        print("Examples:")
        print("  python test_tools.py search 'Example Heavy Industries'")
        print("  python test_tools.py facts E00001 2023")
        print("  python test_tools.py years E00001 2019 2023 2")
        print("  python test_tools.py documents 2024-06-28")
        print("  python test_tools.py ping")
        return

    cmd_name = args[0].lower()
    if cmd_name not in COMMANDS:
        print(f"Unknown command: {cmd_name}")
        print(f"Available: {', '.join(COMMANDS.keys())}")
        return

    fn, usage = COMMANDS[cmd_name]

    # Parse arguments based on command
    try:
        if cmd_name == "search":
            fn(" ".join(args[1:]) if len(args) > 1 else "トヨタ")
        elif cmd_name == "facts":
            fn(args[1], int(args[2]))
        elif cmd_name == "years":
            workers = int(args[4]) if len(args) > 4 else 1
            fn(args[1], int(args[2]), int(args[3]), workers)
        elif cmd_name == "documents":
            limit = int(args[2]) if len(args) > 2 else 20
            fn(args[1], limit)
        else:
            fn()
    except (IndexError, ValueError):
        print(f"Usage: python test_tools.py {cmd_name} {usage}")


if __name__ == "__main__":
    main()
