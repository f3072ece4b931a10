"""
Scoring sub-package

Provides token counting, requirement matching, domain threshold adjustment
and the rule-based trial scorer.
"""

from mcd_gauge_core.domain.value_objects import TrialEvaluationResult, TrialMetrics
from mcd_gauge_core.scoring.tokens import count_tokens
from mcd_gauge_core.scoring.requirement_matcher import (
    DOMAIN_ABBREVIATIONS,
    DOMAIN_SYNONYMS,
    FUNCTIONAL_PATTERNS,
    contains_prohibited,
    contains_requirement,
    has_functional_equivalent,
)
from mcd_gauge_core.scoring.domain_criteria import (
    ensure_trial_defaults,
    extract_domain_from_trial_id,
    get_domain_adjusted_criteria,
    get_domain_complexity_multiplier,
    resolve_domain_id,
)
from mcd_gauge_core.scoring.trial_scorer import (
    ERROR_SENTINEL_PREFIX,
    assess_structural_compliance,
    calculate_content_quality,
    determine_tier,
    evaluate_trial,
)

__all__ = [
    # value objects (re-exported from domain)
    "TrialEvaluationResult",
    "TrialMetrics",
    # tokens
    "count_tokens",
    # requirement matcher
    "DOMAIN_ABBREVIATIONS",
    "DOMAIN_SYNONYMS",
    "FUNCTIONAL_PATTERNS",
    "contains_prohibited",
    "contains_requirement",
    "has_functional_equivalent",
    # domain criteria
    "ensure_trial_defaults",
    "extract_domain_from_trial_id",
    "get_domain_adjusted_criteria",
    "get_domain_complexity_multiplier",
    "resolve_domain_id",
    # trial scorer
    "ERROR_SENTINEL_PREFIX",
    "assess_structural_compliance",
    "calculate_content_quality",
    "determine_tier",
    "evaluate_trial",
]
