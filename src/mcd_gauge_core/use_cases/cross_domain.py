"""
Cross-Domain Analysis

Pools the performance profiles of every domain into an MCD vs non-MCD
comparison, measures how consistently MCD properties hold across domains and
assembles the overall performance report.

Significance labels are a heuristic banding of the relative difference
between two values, not the result of a statistical test.
"""

from __future__ import annotations

import logging
import math
from numbers import Real

from mcd_gauge_core.domain.constants import COMMON_FALLBACK_TRIGGERS, DOMAIN_IDS
from mcd_gauge_core.domain.entities import (
    OPTIONAL_PROFILE_FIELDS,
    ConsistencyPattern,
    CrossDomainAnalysis,
    DomainWalkthrough,
    PerformanceProfile,
    PerformanceReport,
)
from mcd_gauge_core.domain.value_objects import MetricComparison, SuccessRate

logger = logging.getLogger(__name__)

_REQUIRED_PROFILE_FIELDS = ("avg_latency", "avg_tokens")

# Actionable output when no profile declares a token efficiency
DEFAULT_MCD_ACTIONABLE = 90
DEFAULT_NON_MCD_ACTIONABLE = 15


def _round(value: float) -> int:
    """Round half up"""
    return math.floor(value + 0.5)


def clamp_value(value: float, low: float, high: float) -> int:
    """Round and clamp; a missing or zero value becomes the lower bound"""
    return max(low, min(high, _round(value or low)))


def _clamp_known(value: float | None, low: float, high: float) -> int | None:
    return None if value is None else clamp_value(value, low, high)


def clamp_percentage(value: float) -> int:
    return max(0, min(100, _round(value or 0)))


def format_safe_ratio(numerator: float, denominator: float) -> str:
    """
    Format numerator / denominator as "x.xx:1".

    Zero, missing or non-finite operands give "N/A"; ratios above 100 give
    ">100:1" and ratios below 0.01 give "<0.01:1".
    """
    if not numerator or not denominator or math.isnan(numerator) or math.isnan(denominator):
        return "N/A"
    ratio = numerator / denominator
    if ratio == 0 or not math.isfinite(ratio):
        return "N/A"
    if ratio > 100:
        return ">100:1"
    if ratio < 0.01:
        return "<0.01:1"
    return f"{ratio:.2f}:1"


def heuristic_significance_band(a: float, b: float) -> str:
    """
    Band the relative difference |a - b| / max(a, b, 1) into a p-value label.

    > 0.8 -> "p < 0.001", > 0.5 -> "p < 0.01", > 0.3 -> "p < 0.05",
    otherwise "p > 0.05 (n.s.)". A missing value gives "N/A".
    """
    if a is None or b is None:
        return "N/A"
    ratio = abs(a - b) / max(a, b, 1)
    if ratio > 0.8:
        return "p < 0.001"
    if ratio > 0.5:
        return "p < 0.01"
    if ratio > 0.3:
        return "p < 0.05"
    return "p > 0.05 (n.s.)"


def _is_measurement(value) -> bool:
    return not isinstance(value, bool) and isinstance(value, Real) and not math.isnan(value) and value >= 0


def is_valid_profile(profile: PerformanceProfile | None) -> bool:
    """
    Latency and tokens are non-negative numbers, CPU and memory are either
    unknown (None) or non-negative numbers, and the success rate is a "k/n"
    string.
    """
    if profile is None:
        return False
    if not all(_is_measurement(getattr(profile, name, None)) for name in _REQUIRED_PROFILE_FIELDS):
        return False
    for name in OPTIONAL_PROFILE_FIELDS:
        value = getattr(profile, name, None)
        if value is not None and not _is_measurement(value):
            return False
    return isinstance(profile.success_rate, str) and "/" in profile.success_rate


def collect_profiles(
    walkthroughs: list[DomainWalkthrough],
) -> tuple[list[PerformanceProfile], list[PerformanceProfile]]:
    """
    Split the valid variant profiles into MCD and non-MCD.

    The measured profile of a variant takes precedence over the expected one.

    Returns:
        tuple: (MCD profiles, non-MCD profiles)
    """
    mcd_profiles = []
    non_mcd_profiles = []
    for walkthrough in walkthroughs:
        for variant in walkthrough.variants:
            profile = variant.profile
            if not is_valid_profile(profile):
                continue
            if variant.type == "MCD":
                mcd_profiles.append(profile)
            else:
                non_mcd_profiles.append(profile)
    return mcd_profiles, non_mcd_profiles


def pooled_success_percentage(profiles: list[PerformanceProfile]) -> float:
    """Sum of successes over sum of trials, in percent ("0/0" and malformed rates are skipped)"""
    successes = 0
    total = 0
    for profile in profiles:
        rate = SuccessRate.try_parse(profile.success_rate)
        if rate is None or not rate.has_data:
            continue
        successes += rate.successes
        total += rate.total
    return successes / total * 100 if total > 0 else 0.0


def _mean_field(profiles: list[PerformanceProfile], name: str) -> float | None:
    """Mean over the profiles that know the metric, None when none does"""
    values = [getattr(p, name) for p in profiles if _is_measurement(getattr(p, name))]
    return sum(values) / len(values) if values else None


def create_fallback_analysis() -> CrossDomainAnalysis:
    """Reference analysis returned when the catalog lacks MCD or non-MCD profiles"""
    return CrossDomainAnalysis(
        task_completion=MetricComparison(85, 25, "3.40:1"),
        token_efficiency=MetricComparison(45, 85, "1.89:1"),
        latency_performance=MetricComparison(1, 1, "1.20:1"),
        memory_utilization=MetricComparison(25, 45, "1.80:1"),
        cpu_efficiency=MetricComparison(25, 40, "1.60:1"),
        actionable_output=MetricComparison(75, 20, "3.75:1"),
        statistical_significance={
            "task_completion": "p < 0.01",
            "token_efficiency": "p < 0.05",
            "latency_performance": "p < 0.05",
            "memory_utilization": "p < 0.01",
            "cpu_efficiency": "p < 0.05",
            "actionable_output": "p < 0.001",
        },
        is_fallback=True,
    )


def calculate_cross_domain_analysis(walkthroughs: list[DomainWalkthrough]) -> CrossDomainAnalysis:
    """
    Compare MCD and non-MCD variants pooled across all domains.

    Token, latency, memory and CPU ratios are non-MCD over MCD (higher is
    better for MCD); completion and actionable output are MCD over non-MCD.
    CPU and memory values are None, with ratio and significance "N/A", when
    no profile on that side knows them.

    Args:
        walkthroughs: Catalog walkthroughs (measured profiles used where present)

    Returns:
        CrossDomainAnalysis, or the fallback analysis (is_fallback=True) when
        either side has no valid profile
    """
    mcd, non_mcd = collect_profiles(walkthroughs)
    if not mcd or not non_mcd:
        logger.warning(
            "Cross-domain analysis needs MCD and non-MCD profiles (got %d / %d), using the fallback analysis",
            len(mcd),
            len(non_mcd),
        )
        return create_fallback_analysis()

    mcd_completion = pooled_success_percentage(mcd)
    non_mcd_completion = pooled_success_percentage(non_mcd)
    mcd_tokens = _mean_field(mcd, "avg_tokens")
    non_mcd_tokens = _mean_field(non_mcd, "avg_tokens")
    mcd_latency = _mean_field(mcd, "avg_latency")
    non_mcd_latency = _mean_field(non_mcd, "avg_latency")
    mcd_memory = _mean_field(mcd, "avg_memory_kb")
    non_mcd_memory = _mean_field(non_mcd, "avg_memory_kb")
    mcd_cpu = _mean_field(mcd, "avg_cpu_usage")
    non_mcd_cpu = _mean_field(non_mcd, "avg_cpu_usage")

    mcd_efficiency = [p.token_efficiency for p in mcd if p.token_efficiency is not None]
    non_mcd_efficiency = [p.token_efficiency for p in non_mcd if p.token_efficiency is not None]
    mcd_actionable = (sum(mcd_efficiency) / len(mcd_efficiency) if mcd_efficiency else 0) or DEFAULT_MCD_ACTIONABLE
    non_mcd_actionable = (
        (sum(non_mcd_efficiency) / len(non_mcd_efficiency) if non_mcd_efficiency else 0)
        or DEFAULT_NON_MCD_ACTIONABLE
    )

    return CrossDomainAnalysis(
        task_completion=MetricComparison(
            clamp_percentage(mcd_completion),
            clamp_percentage(non_mcd_completion),
            format_safe_ratio(mcd_completion, non_mcd_completion),
        ),
        token_efficiency=MetricComparison(
            clamp_value(mcd_tokens, 1, 500),
            clamp_value(non_mcd_tokens, 1, 500),
            format_safe_ratio(non_mcd_tokens, mcd_tokens),
        ),
        latency_performance=MetricComparison(
            clamp_value(_round(mcd_latency / 1000), 0, 10),
            clamp_value(_round(non_mcd_latency / 1000), 0, 10),
            format_safe_ratio(non_mcd_latency, mcd_latency),
        ),
        memory_utilization=MetricComparison(
            _clamp_known(mcd_memory, 1, 200),
            _clamp_known(non_mcd_memory, 1, 200),
            format_safe_ratio(non_mcd_memory, mcd_memory),
        ),
        cpu_efficiency=MetricComparison(
            _clamp_known(mcd_cpu, 1, 100),
            _clamp_known(non_mcd_cpu, 1, 100),
            format_safe_ratio(non_mcd_cpu, mcd_cpu),
        ),
        actionable_output=MetricComparison(
            clamp_percentage(mcd_actionable),
            clamp_percentage(non_mcd_actionable),
            format_safe_ratio(mcd_actionable, non_mcd_actionable),
        ),
        statistical_significance={
            "task_completion": heuristic_significance_band(mcd_completion, non_mcd_completion),
            "token_efficiency": heuristic_significance_band(non_mcd_tokens, mcd_tokens),
            "latency_performance": heuristic_significance_band(non_mcd_latency, mcd_latency),
            "memory_utilization": heuristic_significance_band(non_mcd_memory, mcd_memory),
            "cpu_efficiency": heuristic_significance_band(non_mcd_cpu, mcd_cpu),
            "actionable_output": heuristic_significance_band(mcd_actionable, non_mcd_actionable),
        },
    )


# --- Consistency patterns ---


def calculate_consistency_score(values: list[float]) -> str:
    """round(max(0, 1 - population stddev) * 100) as a percentage string"""
    if not values:
        return "0%"
    average = sum(values) / len(values)
    variance = sum((v - average) ** 2 for v in values) / len(values)
    return f"{_round(max(0.0, 1 - math.sqrt(variance)) * 100)}%"


def _band(value: float, good: float, fair: float) -> float:
    if value <= good:
        return 0.9
    if value <= fair:
        return 0.7
    return 0.5


def _level_label(value: float) -> str:
    if value >= 0.8:
        return "High"
    if value >= 0.6:
        return "Medium"
    return "Low"


def _latency_label(latency_ms: float) -> str:
    if latency_ms <= 500:
        return "<500ms"
    if latency_ms <= 1000:
        return "<1s"
    return ">1s"


def _memory_label(memory_kb: float) -> str:
    if memory_kb <= 25:
        return "<25KB"
    if memory_kb <= 50:
        return "<50KB"
    return ">50KB"


def _degradation_label(value: float) -> str:
    if value >= 0.8:
        return "Yes"
    if value >= 0.5:
        return "Limited"
    return "No"


def supports_graceful_degradation(walkthrough: DomainWalkthrough) -> bool:
    """Every scenario declares at least three fallback triggers, one of them common"""
    return all(
        len(s.fallback_triggers) >= 3
        and any(t in COMMON_FALLBACK_TRIGGERS for t in s.fallback_triggers)
        for s in walkthrough.scenarios
    )


def get_failsafe_consistency_patterns(domain_ids: list[str] | None = None) -> list[ConsistencyPattern]:
    """Neutral patterns reported when no domain has MCD profile data"""
    domain_ids = domain_ids or list(DOMAIN_IDS)

    def pattern(pattern_type: str, value: str, score: str) -> ConsistencyPattern:
        return ConsistencyPattern(pattern_type, {d: value for d in domain_ids}, score)

    return [
        pattern("Token Efficiency", "Medium", "70%"),
        pattern("Response Latency", "<1s", "70%"),
        pattern("Memory Footprint", "<50KB", "70%"),
        pattern("Success Rate", "75%", "75%"),
        pattern("Graceful Degradation", "Limited", "70%"),
    ]


def calculate_consistency_patterns(walkthroughs: list[DomainWalkthrough]) -> list[ConsistencyPattern]:
    """
    Measure how uniformly MCD properties hold across domains.

    For each domain with valid MCD profiles, token, latency and memory
    averages are banded to 0.9 / 0.7 / 0.5, success is the mean success
    fraction and graceful degradation is 0.9 or 0.6. The consistency score
    of a property is 1 - stddev of its per-domain values. A domain without
    memory data is labelled "unknown" and left out of the memory score,
    which is "N/A" when no domain has memory data.

    Args:
        walkthroughs: Catalog walkthroughs

    Returns:
        list[ConsistencyPattern]: One pattern per property, labels keyed by domain id
    """
    token_values, latency_values, memory_values, success_values, degradation_values = {}, {}, {}, {}, {}
    token_labels, latency_labels, memory_labels, success_labels, degradation_labels = {}, {}, {}, {}, {}

    for walkthrough in walkthroughs:
        profiles = [
            v.profile for v in walkthrough.variants
            if v.type == "MCD" and is_valid_profile(v.profile)
        ]
        if not profiles:
            continue
        domain_id = walkthrough.id

        avg_tokens = _mean_field(profiles, "avg_tokens")
        token_values[domain_id] = _band(avg_tokens, 50, 100)
        token_labels[domain_id] = _level_label(token_values[domain_id])

        avg_latency = _mean_field(profiles, "avg_latency")
        latency_values[domain_id] = _band(avg_latency, 500, 1000)
        latency_labels[domain_id] = _latency_label(avg_latency)

        avg_memory = _mean_field(profiles, "avg_memory_kb")
        if avg_memory is None:
            memory_labels[domain_id] = "unknown"
        else:
            memory_values[domain_id] = _band(avg_memory, 25, 50)
            memory_labels[domain_id] = _memory_label(avg_memory)

        fractions = [
            rate.fraction for rate in (SuccessRate.try_parse(p.success_rate) for p in profiles)
            if rate is not None
        ]
        success_values[domain_id] = sum(fractions) / len(fractions) if fractions else 0.0
        success_labels[domain_id] = f"{_round(success_values[domain_id] * 100)}%"

        degradation_values[domain_id] = 0.9 if supports_graceful_degradation(walkthrough) else 0.6
        degradation_labels[domain_id] = _degradation_label(degradation_values[domain_id])

    if not token_values:
        logger.warning("No MCD profiles available, using failsafe consistency patterns")
        return get_failsafe_consistency_patterns([w.id for w in walkthroughs] or None)

    return [
        ConsistencyPattern("Token Efficiency", token_labels, calculate_consistency_score(list(token_values.values()))),
        ConsistencyPattern("Response Latency", latency_labels, calculate_consistency_score(list(latency_values.values()))),
        ConsistencyPattern(
            "Memory Footprint",
            memory_labels,
            calculate_consistency_score(list(memory_values.values())) if memory_values else "N/A",
        ),
        ConsistencyPattern("Success Rate", success_labels, calculate_consistency_score(list(success_values.values()))),
        ConsistencyPattern(
            "Graceful Degradation", degradation_labels, calculate_consistency_score(list(degradation_values.values()))
        ),
    ]


# --- Report ---


def _pooled_counts(profiles: list[PerformanceProfile]) -> SuccessRate:
    successes = 0
    total = 0
    for profile in profiles:
        rate = SuccessRate.try_parse(profile.success_rate)
        if rate is not None:
            successes += rate.successes
            total += rate.total
    return SuccessRate(successes, total)


def _describe(rate: SuccessRate) -> str:
    return f"{rate} ({_round(rate.fraction * 100)}%)"


def generate_performance_report(walkthroughs: list[DomainWalkthrough]) -> PerformanceReport:
    """
    Combine the cross-domain analysis and the consistency patterns into a report.

    Args:
        walkthroughs: Catalog walkthroughs

    Returns:
        PerformanceReport
    """
    analysis = calculate_cross_domain_analysis(walkthroughs)
    patterns = calculate_consistency_patterns(walkthroughs)
    mcd, non_mcd = collect_profiles(walkthroughs)

    mcd_rate = _pooled_counts(mcd)
    non_mcd_rate = _pooled_counts(non_mcd)
    effectiveness = f"{_describe(mcd_rate)} vs Non-MCD: {_describe(non_mcd_rate)}"

    findings = []
    if analysis.is_fallback:
        findings.append("Insufficient MCD and non-MCD profile data; reference values reported")
    else:
        findings.append(
            f"MCD task completion {analysis.task_completion.mcd}% vs "
            f"{analysis.task_completion.non_mcd}% for non-MCD approaches "
            f"({analysis.task_completion.ratio}, {analysis.statistical_significance['task_completion']})"
        )
        findings.append(
            f"Non-MCD approaches used {analysis.token_efficiency.ratio} the tokens of MCD "
            f"({analysis.token_efficiency.non_mcd} vs {analysis.token_efficiency.mcd})"
        )
        latency_finding = f"Non-MCD to MCD latency ratio {analysis.latency_performance.ratio}"
        if analysis.memory_utilization.mcd is not None and analysis.memory_utilization.non_mcd is not None:
            latency_finding += f", memory ratio {analysis.memory_utilization.ratio}"
        findings.append(latency_finding)

    for pattern in patterns:
        # A property unknown for some domain is never reported as consistent
        if pattern.consistency_score == "100%" and "unknown" not in pattern.domain_values.values():
            findings.append(f"{pattern.pattern_type} is fully consistent across domains")

    return PerformanceReport(
        cross_domain_analysis=analysis,
        consistency_patterns=patterns,
        mcd_effectiveness=effectiveness,
        key_findings=findings,
    )
