"""
Result Tables

Flattens comparative runs into pandas DataFrames for CSV export and for the
viewer.
"""

from dataclasses import asdict

import pandas as pd

from mcd_gauge_core.domain.entities import DomainComparison, PerformanceReport


TRIAL_COLUMNS = [
    "run_id", "domain_id", "domain", "tier", "variant_id", "approach", "test_id",
    "difficulty", "user_input", "output", "input_tokens", "output_tokens", "latency_ms",
    "success", "accuracy", "performance_tier", "mcd_aligned", "failure_reasons", "timestamp",
]

VARIANT_COLUMNS = [
    "run_id", "domain_id", "domain", "tier", "variant_id", "approach", "success_rate",
    "successes", "total_trials", "avg_tokens", "avg_latency", "avg_accuracy",
    "mcd_alignment_rate", "efficiency", "error_details",
]

APPROACH_COLUMNS = [
    "run_id", "domain_id", "domain", "tier", "approach", "rank", "success_rate",
    "avg_tokens", "avg_latency", "efficiency", "success_ratio", "token_efficiency_ratio",
    "latency_ratio", "baseline_is_fallback", "mcd_score", "mcd_validated",
]


def build_trial_table(comparisons: list[DomainComparison], run_id: str) -> pd.DataFrame:
    """One row per executed trial"""
    rows = []
    for comparison in comparisons:
        for result in comparison.results.all_results():
            for trial in result.trials:
                actual = trial.actual_results
                if actual is None:
                    continue
                rows.append({
                    "run_id": run_id,
                    "domain_id": comparison.domain_id,
                    "domain": comparison.domain,
                    "tier": comparison.tier,
                    "variant_id": result.variant_id,
                    "approach": result.approach.value,
                    "test_id": trial.test_id,
                    "difficulty": trial.difficulty,
                    "user_input": trial.user_input,
                    "output": actual.output,
                    "input_tokens": actual.token_breakdown.input,
                    "output_tokens": actual.token_breakdown.output,
                    "latency_ms": actual.latency_ms,
                    "success": actual.success,
                    "accuracy": actual.accuracy,
                    "performance_tier": actual.performance_tier,
                    "mcd_aligned": actual.mcd_aligned,
                    "failure_reasons": "; ".join(actual.failure_reasons),
                    "timestamp": actual.timestamp,
                })
    return pd.DataFrame(rows, columns=TRIAL_COLUMNS)


def build_variant_table(comparisons: list[DomainComparison], run_id: str) -> pd.DataFrame:
    """One row per executed variant (error variants included with "0/0")"""
    rows = []
    for comparison in comparisons:
        for result in comparison.results.all_results():
            rows.append({
                "run_id": run_id,
                "domain_id": comparison.domain_id,
                "domain": comparison.domain,
                "tier": comparison.tier,
                "variant_id": result.variant_id,
                "approach": result.approach.value,
                "success_rate": str(result.success_rate),
                "successes": result.success_rate.successes,
                "total_trials": result.success_rate.total,
                "avg_tokens": result.avg_tokens,
                "avg_latency": result.avg_latency,
                "avg_accuracy": result.avg_accuracy,
                "mcd_alignment_rate": result.mcd_alignment_rate,
                "efficiency": result.efficiency,
                "error_details": result.error_details or "",
            })
    return pd.DataFrame(rows, columns=VARIANT_COLUMNS)


def build_approach_table(comparisons: list[DomainComparison], run_id: str) -> pd.DataFrame:
    """One row per ranked approach of each (domain, tier) comparison"""
    rows = []
    for comparison in comparisons:
        analysis = comparison.analysis
        advantage = analysis.mcd_advantage
        for rank, approach in enumerate(analysis.overall_rankings, start=1):
            metrics = analysis.approach_metrics[approach]
            rows.append({
                "run_id": run_id,
                "domain_id": comparison.domain_id,
                "domain": comparison.domain,
                "tier": comparison.tier,
                "approach": approach.value,
                "rank": rank,
                "success_rate": metrics.success_rate,
                "avg_tokens": metrics.avg_tokens,
                "avg_latency": metrics.avg_latency,
                "efficiency": metrics.efficiency,
                "success_ratio": analysis.success_ratios[approach],
                "token_efficiency_ratio": analysis.token_efficiency_ratios[approach],
                "latency_ratio": analysis.latency_ratios[approach],
                "baseline_is_fallback": analysis.baseline_is_fallback,
                "mcd_score": comparison.mcd_score,
                "mcd_validated": bool(advantage and advantage.validated),
            })
    return pd.DataFrame(rows, columns=APPROACH_COLUMNS)


def summarize_by_tier(variant_df: pd.DataFrame) -> pd.DataFrame:
    """
    Pooled success rate and averages per (tier, approach).

    Variants without data (total_trials == 0) are left out.

    Args:
        variant_df: Output of build_variant_table

    Returns:
        pd.DataFrame indexed by tier and approach
    """
    measured = variant_df[variant_df["total_trials"] > 0]
    if measured.empty:
        return pd.DataFrame(columns=["successes", "total_trials", "success_rate", "avg_tokens", "avg_latency"])

    grouped = measured.groupby(["tier", "approach"]).agg(
        successes=("successes", "sum"),
        total_trials=("total_trials", "sum"),
        avg_tokens=("avg_tokens", "mean"),
        avg_latency=("avg_latency", "mean"),
    )
    grouped["success_rate"] = grouped["successes"] / grouped["total_trials"]
    return grouped[["successes", "total_trials", "success_rate", "avg_tokens", "avg_latency"]]


def report_to_dict(report: PerformanceReport, comparisons: list[DomainComparison], run_id: str) -> dict:
    """JSON-serializable run report"""
    return {
        "run_id": run_id,
        "comparisons": [
            {
                "domain_id": c.domain_id,
                "domain": c.domain,
                "tier": c.tier,
                "rankings": [a.value for a in c.analysis.overall_rankings],
                "mcd_score": c.mcd_score,
                "mcd_advantage": asdict(c.analysis.mcd_advantage) if c.analysis.mcd_advantage else None,
                "recommendations": c.recommendations,
                "summary": c.summary,
                "duration_ms": c.duration_ms,
            }
            for c in comparisons
        ],
        "cross_domain_analysis": asdict(report.cross_domain_analysis),
        "consistency_patterns": [asdict(p) for p in report.consistency_patterns],
        "mcd_effectiveness": report.mcd_effectiveness,
        "key_findings": report.key_findings,
    }
