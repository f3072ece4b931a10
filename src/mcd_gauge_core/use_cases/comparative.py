"""
Comparative Analysis

Ranks the prompting approaches of a domain against the conversational
baseline, validates the expected MCD advantage and orchestrates a complete
comparative walkthrough run.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from mcd_gauge_core.domain.entities import (
    ApproachMetrics,
    ComparativeAnalysis,
    ComparativeResults,
    DomainComparison,
    DomainWalkthrough,
    MCDAdvantage,
    VariantExecutionResult,
)
from mcd_gauge_core.domain.value_objects import ApproachCategory, NON_MCD_APPROACHES
from mcd_gauge_core.harness_config import AdvantageConfig
from mcd_gauge_core.infrastructure.model_clients.base import ModelClient
from mcd_gauge_core.use_cases.variant_execution import (
    categorize_variant_approach,
    create_error_variant_result,
    execute_variant,
)

logger = logging.getLogger(__name__)

# Used when a domain has no conversational variant to compare against
FALLBACK_BASELINE = ApproachMetrics(success_rate=0.3, avg_tokens=80, avg_latency=600, efficiency=0.0)

# Token count one efficiency unit is normalised to
EFFICIENCY_TOKEN_BASELINE = 50


def _with_data(results: list[VariantExecutionResult]) -> list[VariantExecutionResult]:
    """Variant results that carry measurements (error and zero-trial results excluded)"""
    return [r for r in results if r.has_data]


def average_success_rate(results: list[VariantExecutionResult]) -> float:
    """Mean per-variant success fraction (0.0 for an empty list)"""
    if not results:
        return 0.0
    return sum(r.success_rate.fraction for r in results) / len(results)


def calculate_approach_metrics(results: list[VariantExecutionResult]) -> ApproachMetrics | None:
    """
    Aggregate metrics of one approach bucket.

    Returns:
        ApproachMetrics, or None when no variant of the bucket produced data
    """
    measured = _with_data(results)
    if not measured:
        return None

    success_rate = average_success_rate(measured)
    avg_tokens = sum(r.avg_tokens for r in measured) / len(measured)
    avg_latency = sum(r.avg_latency for r in measured) / len(measured)
    return ApproachMetrics(
        success_rate=success_rate,
        avg_tokens=avg_tokens,
        avg_latency=avg_latency,
        efficiency=success_rate / max(1, avg_tokens / EFFICIENCY_TOKEN_BASELINE),
    )


def calculate_comparative_analysis(results: ComparativeResults) -> ComparativeAnalysis:
    """
    Compute per-approach ratios relative to the conversational baseline.

    successRatio = sr / max(0.01, baseline sr)
    tokenEfficiency = baseline tokens / max(1, tokens)
    latency = baseline latency / max(1, latency)

    Approaches are ranked by the mean of the three ratios, descending.

    Args:
        results: Variant results bucketed by approach

    Returns:
        ComparativeAnalysis (approaches without data are left out)
    """
    metrics: dict[ApproachCategory, ApproachMetrics] = {}
    for approach in ApproachCategory:
        approach_metrics = calculate_approach_metrics(results.get(approach))
        if approach_metrics is not None:
            metrics[approach] = approach_metrics

    baseline = metrics.get(ApproachCategory.CONVERSATIONAL)
    baseline_is_fallback = baseline is None
    if baseline is None:
        baseline = FALLBACK_BASELINE

    success_ratios = {}
    token_ratios = {}
    latency_ratios = {}
    for approach, m in metrics.items():
        success_ratios[approach] = m.success_rate / max(0.01, baseline.success_rate)
        token_ratios[approach] = baseline.avg_tokens / max(1, m.avg_tokens)
        latency_ratios[approach] = baseline.avg_latency / max(1, m.avg_latency)

    def combined(approach: ApproachCategory) -> float:
        return (success_ratios[approach] + token_ratios[approach] + latency_ratios[approach]) / 3

    rankings = sorted(metrics, key=combined, reverse=True)

    return ComparativeAnalysis(
        approach_metrics=metrics,
        success_ratios=success_ratios,
        token_efficiency_ratios=token_ratios,
        latency_ratios=latency_ratios,
        overall_rankings=rankings,
        baseline_is_fallback=baseline_is_fallback,
    )


def validate_mcd_advantage(
    results: ComparativeResults,
    thresholds: AdvantageConfig | None = None,
) -> MCDAdvantage:
    """
    Check that MCD variants outperform the non-MCD approaches as expected.

    Non-MCD pools few-shot, system-role and conversational variants. MCD must
    reach the configured success advantage (default 1.5x) and token advantage
    (default 1.3x); pass rates that are high on both sides are flagged as an
    evaluation integrity concern. The latency advantage is reported only.

    Args:
        results: Variant results bucketed by approach
        thresholds: Acceptance thresholds (defaults when None)

    Returns:
        MCDAdvantage
    """
    thresholds = thresholds or AdvantageConfig()
    mcd_results = _with_data(results.get(ApproachCategory.MCD))
    non_mcd_results = _with_data([r for a in NON_MCD_APPROACHES for r in results.get(a)])

    if not mcd_results:
        return MCDAdvantage(
            validated=False,
            concerns=["No MCD results available for comparison"],
            recommendations=["Add MCD variants to domains"],
        )

    concerns = []
    recommendations = []

    mcd_success = average_success_rate(mcd_results)
    non_mcd_success = average_success_rate(non_mcd_results)
    success_advantage = mcd_success / max(0.01, non_mcd_success)
    if success_advantage < thresholds.min_success_advantage:
        concerns.append(
            f"MCD success advantage below expected ({success_advantage:.2f}x vs expected "
            f"{thresholds.min_success_advantage}x+)"
        )
        recommendations.append("Review MCD implementation or adjust evaluation criteria")

    mcd_tokens = sum(r.avg_tokens for r in mcd_results) / len(mcd_results)
    non_mcd_tokens = (
        sum(r.avg_tokens for r in non_mcd_results) / len(non_mcd_results) if non_mcd_results else 0.0
    )
    token_advantage = non_mcd_tokens / max(1, mcd_tokens)
    if token_advantage < thresholds.min_token_advantage:
        concerns.append(
            f"Token efficiency advantage below expected ({token_advantage:.2f}x vs expected "
            f"{thresholds.min_token_advantage}x+)"
        )
        recommendations.append("Verify MCD prompt design for token efficiency")

    if (
        mcd_success > thresholds.integrity_mcd_pass_rate
        and non_mcd_success > thresholds.integrity_non_mcd_pass_rate
    ):
        concerns.append("Both approaches showing unrealistically high pass rates")
        recommendations.append("Increase evaluation stringency to better discriminate performance")

    mcd_latency = sum(r.avg_latency for r in mcd_results) / len(mcd_results)
    non_mcd_latency = (
        sum(r.avg_latency for r in non_mcd_results) / len(non_mcd_results) if non_mcd_results else 0.0
    )
    latency_advantage = non_mcd_latency / max(1, mcd_latency)

    validated = len(concerns) == 0
    if validated:
        confidence = "high"
    elif len(concerns) == 1:
        confidence = "medium"
    else:
        confidence = "low"

    return MCDAdvantage(
        validated=validated,
        concerns=concerns,
        recommendations=recommendations,
        success_advantage=success_advantage,
        token_advantage=token_advantage,
        latency_advantage=latency_advantage,
        confidence=confidence,
    )


def calculate_mcd_score(analysis: ComparativeAnalysis) -> int:
    """
    Score MCD's standing in a comparison on a 0-100 scale.

    First place scores 100, each further place 20 less; a validated advantage
    adds 10 and each concern costs 5. MCD missing from the rankings scores 0.
    """
    rankings = analysis.overall_rankings
    if ApproachCategory.MCD not in rankings:
        return 0

    position = rankings.index(ApproachCategory.MCD) + 1
    score = max(0, 120 - position * 20)
    advantage = analysis.mcd_advantage
    if advantage is not None:
        if advantage.validated:
            score += 10
        score -= len(advantage.concerns) * 5
    return max(0, min(100, score))


def generate_recommendations(analysis: ComparativeAnalysis) -> list[str]:
    """Practical recommendations derived from the rankings and the MCD advantage check"""
    rankings = analysis.overall_rankings
    recommendations = []

    def ranks_above(a: ApproachCategory, b: ApproachCategory) -> bool:
        return a in rankings and b in rankings and rankings.index(a) < rankings.index(b)

    if rankings and rankings[0] == ApproachCategory.MCD:
        recommendations.append("Use MCD for highest reliability in resource-constrained scenarios")
    if ranks_above(ApproachCategory.FEW_SHOT, ApproachCategory.CONVERSATIONAL):
        recommendations.append("Few-shot approaches provide viable alternative with structured examples")
    if ranks_above(ApproachCategory.SYSTEM_ROLE, ApproachCategory.CONVERSATIONAL):
        recommendations.append(
            "System role prompting effective for professional contexts requiring expertise framing"
        )
    if ApproachCategory.HYBRID in rankings[:2]:
        recommendations.append("Hybrid MCD+few-shot may achieve optimal performance across domains")
    if len(rankings) > 1 and rankings[-1] == ApproachCategory.CONVERSATIONAL:
        recommendations.append("Avoid pure conversational approaches in resource-constrained edge deployments")

    if analysis.mcd_advantage is not None:
        for recommendation in analysis.mcd_advantage.recommendations:
            if recommendation not in recommendations:
                recommendations.append(recommendation)
    return recommendations


def generate_comparative_summary(domain: str, analysis: ComparativeAnalysis, duration_ms: float) -> str:
    """Human-readable summary of one comparison"""
    rankings = [a.value for a in analysis.overall_rankings]
    top_performer = rankings[0] if rankings else "unknown"

    summary = f"{domain} Comparative Analysis ({round(duration_ms)}ms):\n"
    summary += f"Best Performer: {top_performer}\n"
    summary += f"Rankings: {' > '.join(rankings)}\n"

    advantage = analysis.mcd_advantage
    if advantage is not None and advantage.validated:
        summary += "MCD advantages validated\n"
    else:
        concerns = advantage.concerns if advantage is not None else []
        summary += f"MCD advantages questioned: {', '.join(concerns)}\n"
    return summary


def run_comparative_walkthrough(
    walkthrough: DomainWalkthrough,
    tier: str,
    client: ModelClient,
    session=None,
    thresholds: AdvantageConfig | None = None,
    client_factory: Callable[[], ModelClient] | None = None,
) -> DomainComparison:
    """
    Execute every variant of every scenario of a domain and compare the approaches.

    A variant that fails as a whole is recorded as an error result ("0/0" with
    error details) and the remaining variants still run.

    Args:
        walkthrough: Domain walkthrough to execute
        tier: Resource tier (Q1 / Q4 / Q8)
        client: Inference capability serving the tier
        session: AnalysisSession used for caching and statistics (optional)
        thresholds: MCD advantage thresholds (defaults when None)
        client_factory: When given, a fresh client is created for every variant

    Returns:
        DomainComparison
    """
    if session is not None:
        cached = session.get_cached(walkthrough.id, tier)
        if cached is not None:
            print(f"  Using cached comparison for {walkthrough.id} [{tier}]")
            return cached

    print(f"=== Comparative Walkthrough: {walkthrough.domain} [{tier}] ===")
    start_time = time.time()
    results = ComparativeResults()

    for scenario in walkthrough.scenarios:
        for variant in scenario.variants:
            approach = categorize_variant_approach(variant)
            print(f"  {variant.id} ({approach.value}): {variant.name}")
            try:
                variant_client = client_factory() if client_factory is not None else client
                result = execute_variant(variant, variant_client)
            except Exception as e:
                print(f"  Failed to execute variant {variant.id}: {e}")
                result = create_error_variant_result(variant, e)
            results.add(result)
            print(f"  -> {result.success_rate} | tokens {result.avg_tokens} | {result.avg_latency}ms")

    analysis = calculate_comparative_analysis(results)
    analysis.mcd_advantage = validate_mcd_advantage(results, thresholds)
    if analysis.baseline_is_fallback:
        logger.warning("No conversational results for %s, using the fallback baseline", walkthrough.id)

    duration_ms = round((time.time() - start_time) * 1000)
    comparison = DomainComparison(
        domain_id=walkthrough.id,
        domain=walkthrough.domain,
        tier=tier,
        results=results,
        analysis=analysis,
        summary=generate_comparative_summary(walkthrough.domain, analysis, duration_ms),
        mcd_score=calculate_mcd_score(analysis),
        recommendations=generate_recommendations(analysis),
        duration_ms=duration_ms,
    )

    if session is not None:
        session.record_execution(walkthrough.id, tier, analysis.mcd_advantage.validated, duration_ms)
        session.cache(comparison)

    print(comparison.summary)
    return comparison
