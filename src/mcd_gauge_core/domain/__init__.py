"""
Domain Layer

Defines constants, entities, and value objects that form the core of the business logic.
Has no dependencies on external libraries.
"""

from mcd_gauge_core.domain.constants import (
    COMMON_FALLBACK_TRIGGERS,
    DOMAIN_IDS,
    DOMAIN_TYPES,
    PERFORMANCE_TIERS,
    SUPPORTED_TIERS,
)
from mcd_gauge_core.domain.entities import (
    ActualResults,
    ComparativeAnalysis,
    ComparativeResults,
    CrossDomainAnalysis,
    DomainComparison,
    DomainWalkthrough,
    HealthCheckResult,
    MCDAdvantage,
    SuccessCriteria,
    TrialSpecification,
    VariantExecutionResult,
    WalkthroughScenario,
    WalkthroughVariant,
)
from mcd_gauge_core.domain.value_objects import (
    ApproachCategory,
    DomainCriteria,
    ModelResponse,
    SuccessRate,
    TrialEvaluationResult,
)

__all__ = [
    # constants
    "COMMON_FALLBACK_TRIGGERS",
    "DOMAIN_IDS",
    "DOMAIN_TYPES",
    "PERFORMANCE_TIERS",
    "SUPPORTED_TIERS",
    # entities
    "ActualResults",
    "ComparativeAnalysis",
    "ComparativeResults",
    "CrossDomainAnalysis",
    "DomainComparison",
    "DomainWalkthrough",
    "HealthCheckResult",
    "MCDAdvantage",
    "SuccessCriteria",
    "TrialSpecification",
    "VariantExecutionResult",
    "WalkthroughScenario",
    "WalkthroughVariant",
    # value objects
    "ApproachCategory",
    "DomainCriteria",
    "ModelResponse",
    "SuccessRate",
    "TrialEvaluationResult",
]
