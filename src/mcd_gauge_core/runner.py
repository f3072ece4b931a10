"""
mcd-gauge-core CLI Runner

Runs the comparative domain walkthroughs for every requested resource tier and
exports trial, variant and approach tables.

Usage:
    python -m mcd_gauge_core.runner --catalog tasks/walkthrough_catalog.json
    python -m mcd_gauge_core.runner --tiers Q1,Q4 --domains D1,spatial-navigation
"""

from __future__ import annotations

import argparse
import json
import sys
import traceback
from datetime import datetime
from functools import partial
from pathlib import Path

from dotenv import load_dotenv

from mcd_gauge_core.catalog_loader import DEFAULT_CATALOG_PATH, load_catalog
from mcd_gauge_core.domain.entities import DomainComparison
from mcd_gauge_core.harness_config import load_config
from mcd_gauge_core.infrastructure.model_clients import create_client, create_tier_client
from mcd_gauge_core.session import AnalysisSession
from mcd_gauge_core.use_cases.comparative import run_comparative_walkthrough
from mcd_gauge_core.use_cases.cross_domain import generate_performance_report
from mcd_gauge_core.use_cases.health_check import run_tier_health_check
from mcd_gauge_core.use_cases.summary import (
    build_approach_table,
    build_trial_table,
    build_variant_table,
    report_to_dict,
    summarize_by_tier,
)
from mcd_gauge_core.use_cases.validation import validate_execution_parameters


def _split_list(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [v.strip() for v in value.split(",") if v.strip()]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="mcd-gauge-core: Compare minimal-design prompts against alternative prompting approaches",
    )
    parser.add_argument(
        "--catalog",
        default=DEFAULT_CATALOG_PATH,
        help=f"Path to the walkthrough catalog JSON file (default: {DEFAULT_CATALOG_PATH})",
    )
    parser.add_argument(
        "--tiers",
        default=None,
        help="Comma-separated resource tiers, e.g. Q1,Q4 (default: HARNESS_TIERS from .env)",
    )
    parser.add_argument(
        "--domains",
        default=None,
        help="Comma-separated domain ids or aliases (default: HARNESS_DOMAINS from .env)",
    )
    parser.add_argument(
        "--output-dir",
        default="results",
        help="Directory for output CSV and JSON files (default: results)",
    )
    parser.add_argument(
        "--run-id",
        default=None,
        help="Run ID used in output file names (default: current timestamp)",
    )
    return parser.parse_args(argv)


def _print_rankings(comparisons: list[DomainComparison]) -> None:
    print("=== Approach Rankings ===\n")
    print(f"  {'Domain':<6} {'Tier':<5} {'MCD score':>9}  Rankings")
    print(f"  {'-'*6} {'-'*5} {'-'*9}  {'-'*40}")
    for c in comparisons:
        rankings = " > ".join(a.value for a in c.analysis.overall_rankings) or "(no data)"
        print(f"  {c.domain_id:<6} {c.tier:<5} {c.mcd_score:>9}  {rankings}")
    print()


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = parse_args(argv)

    # Load config
    config = load_config()
    tiers = _split_list(args.tiers) or config.execution.tiers
    domains = _split_list(args.domains) or config.execution.domains
    run_id = args.run_id if args.run_id else datetime.now().strftime("%Y%m%d_%H%M%S")

    # Output paths
    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    trial_path = output_dir / f"trial_results_{run_id}.csv"
    variant_path = output_dir / f"variant_results_{run_id}.csv"
    approach_path = output_dir / f"approach_summary_{run_id}.csv"
    report_path = output_dir / f"report_{run_id}.json"

    # Load catalog
    print(f"\n=== Loading catalog: {args.catalog} ===\n")
    catalog = load_catalog(args.catalog)
    walkthroughs = catalog.walkthroughs
    print(f"  Catalog: {catalog.catalog_name}")
    print(f"  Domains: {[w.id for w in walkthroughs]}")
    print(f"  Tiers: {tiers}")
    print(f"  Run ID: {run_id}")
    print()

    session = AnalysisSession(config.session)
    session.initialize(walkthroughs)

    # Step 1: Health check
    available_tiers = run_tier_health_check(
        tiers,
        config.tier_models,
        partial(create_client, config=config),
    )
    if not available_tiers:
        print("ERROR: No tier models available. Exiting.")
        sys.exit(1)

    # Step 2: Comparative walkthroughs
    comparisons: list[DomainComparison] = []
    executed_ids: list[str] = []
    for tier in available_tiers:
        client = create_tier_client(tier, config)
        client_factory = partial(create_tier_client, tier, config) if config.execution.new_client_per_variant else None
        for domain in domains:
            report = validate_execution_parameters(walkthroughs, domain, tier)
            if not report.is_valid:
                for error in report.errors:
                    print(f"  ERROR: {error}")
                continue
            for warning in report.warnings:
                print(f"  WARNING: {warning}")

            walkthrough = report.walkthrough
            try:
                comparison = run_comparative_walkthrough(
                    walkthrough,
                    tier,
                    client,
                    session=session,
                    thresholds=config.advantage,
                    client_factory=client_factory,
                )
                comparisons.append(comparison)
                if walkthrough.id not in executed_ids:
                    executed_ids.append(walkthrough.id)
            except Exception as e:
                print(f"  ERROR: {walkthrough.id} [{tier}] failed: {e}")
                session.record_execution(walkthrough.id, tier, False, 0)
                traceback.print_exc()

    if not comparisons:
        print("ERROR: No comparative walkthrough completed. Exiting.")
        sys.exit(1)

    _print_rankings(comparisons)

    # Step 3: Cross-domain report
    executed = [w for w in walkthroughs if w.id in executed_ids]
    performance_report = generate_performance_report(executed)
    print("=== Cross-Domain Report ===\n")
    print(f"  MCD effectiveness: {performance_report.mcd_effectiveness}")
    for finding in performance_report.key_findings:
        print(f"  - {finding}")
    print()

    healthy, issues = session.validate_health()
    if not healthy:
        print("=== Session Health (WARNING) ===\n")
        for issue in issues:
            print(f"  WARNING: {issue}")
        print()

    # Step 4: Save CSV / JSON
    trial_df = build_trial_table(comparisons, run_id)
    variant_df = build_variant_table(comparisons, run_id)
    approach_df = build_approach_table(comparisons, run_id)
    trial_df.to_csv(trial_path, index=False)
    variant_df.to_csv(variant_path, index=False)
    approach_df.to_csv(approach_path, index=False)
    with open(report_path, "w", encoding="utf-8") as f:
        json.dump(report_to_dict(performance_report, comparisons, run_id), f, ensure_ascii=False, indent=2)

    print("=== Success Rate by Tier ===\n")
    print(summarize_by_tier(variant_df).to_string())
    print()

    print("=== Output ===\n")
    print(f"  Trial results:    {trial_path}")
    print(f"  Variant results:  {variant_path}")
    print(f"  Approach summary: {approach_path}")
    print(f"  Report:           {report_path}")
    print()


if __name__ == "__main__":
    main()
