"""
Trial scoring

Scores a single response against a trial's success criteria: requirement
coverage, prohibited-element violations, token efficiency and content quality
are combined into a functional score, which is classified into a performance
tier. Structural compliance is assessed separately.

All functions are pure and never perform I/O.
"""

from __future__ import annotations

import re

from mcd_gauge_core.domain.constants import (
    DEFAULT_DOMAIN_ID,
    TIER_MIN_OUTPUT_LENGTH,
    TIER_MIN_REQUIRED_RATIO,
    TIER_THRESHOLDS,
)
from mcd_gauge_core.domain.entities import TrialSpecification
from mcd_gauge_core.domain.value_objects import TrialEvaluationResult, TrialMetrics
from mcd_gauge_core.scoring.domain_criteria import get_domain_adjusted_criteria, resolve_domain_id
from mcd_gauge_core.scoring.requirement_matcher import contains_prohibited, contains_requirement
from mcd_gauge_core.scoring.tokens import count_tokens

# Prefix of the placeholder output recorded for failed executions
ERROR_SENTINEL_PREFIX = "ERROR:"

_WEEKDAYS = r"(monday|tuesday|wednesday|thursday|friday|saturday|sunday)"

# On-topic vocabulary per domain
_QUALITY_PATTERNS: dict[str, list[re.Pattern]] = {
    "D1": [
        re.compile(r"\b(cardiology|dentist|dermatology)\b"),
        re.compile(rf"\b{_WEEKDAYS}\b"),
        re.compile(r"\b\d{1,2}(am|pm)\b"),
    ],
    "D2": [
        re.compile(r"\b(north|south|east|west)\b"),
        re.compile(r"\b\d+m?\b"),
        re.compile(r"\b(elevator|stairs|hallway|exit)\b"),
    ],
    "D3": [
        re.compile(r"\b(port|service|network|config)\b"),
        re.compile(r"\b(smtp|database|server|firewall)\b"),
        re.compile(r"\b(status|logs|queue)\b"),
    ],
}

_ACTIONABLE_PATTERN = re.compile(r"\b(check|verify|confirm|test|inspect|book|schedule|navigate|go|fix)\b")

# Domain-characteristic response shape; "concise" is checked against the token budget
_STRUCTURAL_PATTERNS: dict[str, list[re.Pattern]] = {
    "D1": [
        re.compile(rf"\b(cardiology|dentist|dermatology|appointment)\b.*\b{_WEEKDAYS}\b.*\b\d{{1,2}}(am|pm)\b"),
        re.compile(r"\b(confirmed|booked|scheduled|missing|need|require)\b"),
    ],
    "D2": [
        re.compile(r"\b(north|south|east|west)\b.*\b\d+\s*m?\b"),
        re.compile(r"\b(go|navigate|head|proceed|avoid)\b"),
    ],
    "D3": [
        re.compile(r"\b(check|verify|test|inspect|examine)\b"),
        re.compile(r"\b(port|service|network|logs|config|status)\b"),
    ],
}
_STRUCTURAL_PASS_RATIO = 0.6
_CONCISE_BUDGET_FACTOR = 1.1


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def calculate_content_quality(output: str, domain_id: str) -> float:
    """
    Content quality in [0, 1]

    Starts at 0.5, adds up to 0.3 for the fraction of the domain's vocabulary
    patterns present (0.5 fraction for domains without patterns) and 0.2 when
    the response contains an actionable verb.
    """
    output_lower = output.lower()
    patterns = _QUALITY_PATTERNS.get(domain_id, [])
    if patterns:
        matched = sum(1 for p in patterns if p.search(output_lower))
        pattern_ratio = matched / len(patterns)
    else:
        pattern_ratio = 0.5

    quality = 0.5 + pattern_ratio * 0.3
    if _ACTIONABLE_PATTERN.search(output_lower):
        quality += 0.2
    return _clamp(quality)


def determine_tier(
    functional_score: float,
    required_ratio: float,
    output_length: int,
    prohibited_found: int,
    domain_id: str,
) -> str:
    """
    Classify a scored trial into excellent / good / acceptable / poor

    Each band is gated by the domain's score threshold, a minimum required
    ratio and a minimum output length; excellent and good also require zero
    prohibited violations.
    """
    thresholds = TIER_THRESHOLDS.get(domain_id, TIER_THRESHOLDS[DEFAULT_DOMAIN_ID])

    for tier in ("excellent", "good", "acceptable"):
        if tier != "acceptable" and prohibited_found > 0:
            continue
        if (
            functional_score >= thresholds[tier]
            and required_ratio >= TIER_MIN_REQUIRED_RATIO[tier]
            and output_length >= TIER_MIN_OUTPUT_LENGTH[tier]
        ):
            return tier
    return "poor"


def assess_structural_compliance(output: str, trial: TrialSpecification, domain_id: str | None = None) -> bool:
    """
    Check whether the response has the domain's characteristic shape

    At least 60% of the domain's checks (its structural patterns plus token
    count within 110% of the adjusted budget) must pass. Unknown domains are
    never compliant.
    """
    domain_id = domain_id or resolve_domain_id(trial)
    patterns = _STRUCTURAL_PATTERNS.get(domain_id)
    if not patterns:
        return False

    output_lower = output.lower()
    passed = sum(1 for p in patterns if p.search(output_lower))

    budget = get_domain_adjusted_criteria(trial).max_token_budget
    if count_tokens(output) <= budget * _CONCISE_BUDGET_FACTOR:
        passed += 1

    checks = len(patterns) + 1
    return passed / checks >= _STRUCTURAL_PASS_RATIO


def _unusable_output_result(output: str, trial: TrialSpecification) -> TrialEvaluationResult:
    """Poor result for empty or error-sentinel output"""
    failures = [f"Missing required element: {r}" for r in trial.success_criteria.required_elements]
    if output.strip():
        failures.insert(0, f"Execution error output: {output.strip()}")
    else:
        failures.insert(0, "Empty output")
    return TrialEvaluationResult(
        success=False,
        tier="poor",
        accuracy=0.0,
        mcd_compliant=False,
        failures=failures,
        metrics=TrialMetrics(
            required_elements_ratio=0.0,
            prohibited_elements_ratio=1.0,
            token_efficiency=0.0,
            functional_score=0.0,
        ),
    )


def evaluate_trial(output: str, trial: TrialSpecification) -> TrialEvaluationResult:
    """
    Score a response against a trial's success criteria

    functional = 0.5 * required_ratio + 0.2 * token_efficiency
                 + 0.2 * content_quality + 0.1 * (no prohibited violations)
                 - 0.15 * prohibited_violations

    Args:
        output: Model response
        trial: Trial specification

    Returns:
        TrialEvaluationResult (accuracy is the functional score clamped to [0, 1])
    """
    output = output or ""
    if not output.strip() or output.strip().startswith(ERROR_SENTINEL_PREFIX):
        return _unusable_output_result(output, trial)

    criteria = trial.success_criteria
    domain_id = resolve_domain_id(trial)
    adjusted = get_domain_adjusted_criteria(trial)
    failures: list[str] = []

    required_found = 0
    for required in criteria.required_elements:
        if contains_requirement(output, required, domain_id):
            required_found += 1
        else:
            failures.append(f"Missing required element: {required}")
    total_required = len(criteria.required_elements)
    required_ratio = required_found / total_required if total_required > 0 else 1.0

    prohibited_found = 0
    for prohibited in criteria.prohibited_elements:
        if contains_prohibited(output, prohibited):
            prohibited_found += 1
            failures.append(f"Contains prohibited element: {prohibited}")

    token_count = count_tokens(output)
    token_efficiency = min(1.0, adjusted.max_token_budget / token_count) if token_count > 0 else 1.0

    content_quality = calculate_content_quality(output, domain_id)

    functional_score = (
        required_ratio * 0.5
        + token_efficiency * 0.2
        + content_quality * 0.2
        + (0.1 if prohibited_found == 0 else 0.0)
    ) - prohibited_found * 0.15

    tier = determine_tier(
        functional_score,
        required_ratio,
        len(output.strip()),
        prohibited_found,
        domain_id,
    )

    return TrialEvaluationResult(
        success=tier != "poor",
        tier=tier,
        accuracy=_clamp(functional_score),
        mcd_compliant=assess_structural_compliance(output, trial, domain_id),
        failures=failures,
        metrics=TrialMetrics(
            required_elements_ratio=required_ratio,
            prohibited_elements_ratio=1.0 if prohibited_found == 0 else 0.0,
            token_efficiency=token_efficiency,
            functional_score=functional_score,
        ),
    )
