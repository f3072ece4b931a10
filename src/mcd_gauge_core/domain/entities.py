"""
Domain Entities

Defines the catalog structures (domains, scenarios, variants, trials) and the
records produced while executing and analysing them.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from mcd_gauge_core.domain.constants import (
    VALID_DIFFICULTIES,
    VALID_EVALUATION_METHODS,
    VALID_VARIANT_TYPES,
)
from mcd_gauge_core.domain.value_objects import (
    ApproachCategory,
    MetricComparison,
    SuccessRate,
)


# --- Catalog ---


@dataclass
class SuccessCriteria:
    """Objective pass criteria of a trial"""
    required_elements: list[str]
    prohibited_elements: list[str]
    task_completion_expected: bool = True
    max_token_budget: int = 50
    max_latency_ms: int = 500
    min_accuracy: float | None = None  # filled from the difficulty table when missing


@dataclass
class ReferenceBenchmark:
    """Reference measurements kept for reporting only"""
    expected_output: str
    expected_latency: float = 0.0
    expected_cpu_usage: float = 0.0
    expected_memory_kb: float = 0.0
    slot_accuracy: str | None = None
    notes: str = ""


@dataclass
class TokenBreakdown:
    input: int = 0
    process: int = 0
    output: int = 0


@dataclass
class ActualResults:
    """Measured outcome of an executed trial"""
    output: str
    token_breakdown: TokenBreakdown
    latency_ms: int
    success: bool
    accuracy: float
    performance_tier: str
    failure_reasons: list[str]
    timestamp: str
    mcd_aligned: bool
    # Not observable through the inference capability; None when unmeasured
    cpu_usage: float | None = None
    memory_kb: float | None = None


@dataclass
class TrialSpecification:
    """A single fixed (input, success criteria) test case"""
    test_id: str
    user_input: str
    success_criteria: SuccessCriteria
    evaluation_method: str
    difficulty: str
    category: str = ""
    notes: str = ""
    domain_id: str | None = None  # falls back to the D<n> prefix of test_id
    reference_benchmark: ReferenceBenchmark | None = None
    actual_results: ActualResults | None = None

    def __post_init__(self):
        if self.difficulty not in VALID_DIFFICULTIES:
            raise ValueError(f"Invalid difficulty: {self.difficulty}. Valid values: {VALID_DIFFICULTIES}")
        if self.evaluation_method not in VALID_EVALUATION_METHODS:
            raise ValueError(
                f"Invalid evaluation method: {self.evaluation_method}. "
                f"Valid values: {VALID_EVALUATION_METHODS}"
            )


@dataclass
class PerformanceProfile:
    """Expected (advisory) performance of a variant"""
    avg_latency: float
    avg_tokens: float
    avg_cpu_usage: float | None
    avg_memory_kb: float | None
    success_rate: str
    token_efficiency: float | None = None


# Profile metrics that may be unknown
OPTIONAL_PROFILE_FIELDS = ("avg_cpu_usage", "avg_memory_kb")


@dataclass
class MeasuredProfile(PerformanceProfile):
    """Performance measured after executing a variant"""
    actual_success_count: int = 0
    total_trials: int = 0
    variance_latency: float = 0.0
    timestamp: str = ""
    approach_effectiveness: float | None = None


@dataclass
class WalkthroughVariant:
    """A named prompting strategy with its trials"""
    id: str
    type: str  # MCD / Non-MCD / Hybrid
    name: str
    prompt: str
    architecture: str
    trials: list[TrialSpecification]
    expected_profile: PerformanceProfile | None = None
    measured_profile: MeasuredProfile | None = None

    def __post_init__(self):
        if self.type not in VALID_VARIANT_TYPES:
            raise ValueError(f"Invalid variant type: {self.type}. Valid values: {VALID_VARIANT_TYPES}")

    @property
    def profile(self) -> PerformanceProfile | None:
        """
        Measured profile when available, otherwise the expected one.

        Resource metrics a run could not measure (None) are taken from the
        expected profile.
        """
        if self.measured_profile is None:
            return self.expected_profile
        if self.expected_profile is None:
            return self.measured_profile
        unmeasured = {
            name: getattr(self.expected_profile, name)
            for name in OPTIONAL_PROFILE_FIELDS
            if getattr(self.measured_profile, name) is None
        }
        return replace(self.measured_profile, **unmeasured) if unmeasured else self.measured_profile


@dataclass
class DomainOutcome:
    success_criteria: str
    performance_target: str
    fallback_behavior: str


@dataclass
class WalkthroughScenario:
    """Static grouping of variants under a domain"""
    step: int
    context: str
    domain: str
    model: str
    subsystem: str
    variants: list[WalkthroughVariant]
    mcd_principles: list[str] = field(default_factory=list)
    expected_behavior: str = ""
    fallback_triggers: list[str] = field(default_factory=list)
    quality_metrics: list[str] = field(default_factory=list)
    token_budget: int | None = None
    memory_constraint: int | None = None  # KB


@dataclass
class DomainWalkthrough:
    """A task domain with its scenarios and per-tier expected outcomes"""
    id: str
    domain: str
    title: str
    description: str
    scenarios: list[WalkthroughScenario]
    mcd_principles: list[str] = field(default_factory=list)
    expected_outcomes: dict[str, DomainOutcome] = field(default_factory=dict)

    @property
    def variants(self) -> list[WalkthroughVariant]:
        return [v for s in self.scenarios for v in s.variants]


# --- Execution ---


@dataclass
class VariantExecutionResult:
    """Aggregate statistics of one executed variant"""
    variant_id: str
    approach: ApproachCategory
    success_rate: SuccessRate
    avg_tokens: int
    avg_latency: int
    avg_accuracy: float
    mcd_alignment_rate: float
    efficiency: float
    trials: list[TrialSpecification] = field(default_factory=list)
    error_details: str | None = None

    @property
    def has_data(self) -> bool:
        return self.success_rate.has_data


@dataclass
class ApproachResults:
    """Variant results of a single approach bucket"""
    approach: ApproachCategory
    results: list[VariantExecutionResult] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.results)


@dataclass
class ComparativeResults:
    """Variant results grouped into one bucket per approach category"""
    buckets: dict[ApproachCategory, ApproachResults] = field(
        default_factory=lambda: {a: ApproachResults(a) for a in ApproachCategory}
    )

    def add(self, result: VariantExecutionResult) -> None:
        self.buckets[result.approach].results.append(result)

    def get(self, approach: ApproachCategory) -> list[VariantExecutionResult]:
        return self.buckets[approach].results

    def all_results(self) -> list[VariantExecutionResult]:
        return [r for a in ApproachCategory for r in self.buckets[a].results]


@dataclass
class HealthCheckResult:
    """Health check result"""
    model_name: str
    success: bool
    latency_ms: int | None
    error: str | None


# --- Analysis ---


@dataclass
class ApproachMetrics:
    success_rate: float
    avg_tokens: float
    avg_latency: float
    efficiency: float


@dataclass
class MCDAdvantage:
    """Outcome of the MCD advantage acceptance test"""
    validated: bool
    concerns: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    success_advantage: float | None = None
    token_advantage: float | None = None
    latency_advantage: float | None = None
    confidence: str = "low"  # high / medium / low


@dataclass
class ComparativeAnalysis:
    """Cross-variant ratios (relative to the conversational baseline) and rankings"""
    approach_metrics: dict[ApproachCategory, ApproachMetrics]
    success_ratios: dict[ApproachCategory, float]
    token_efficiency_ratios: dict[ApproachCategory, float]
    latency_ratios: dict[ApproachCategory, float]
    overall_rankings: list[ApproachCategory]
    baseline_is_fallback: bool = False
    mcd_advantage: MCDAdvantage | None = None


@dataclass
class DomainComparison:
    """Comparative walkthrough result of one domain at one resource tier"""
    domain_id: str
    domain: str
    tier: str
    results: ComparativeResults
    analysis: ComparativeAnalysis
    summary: str
    mcd_score: int
    recommendations: list[str] = field(default_factory=list)
    duration_ms: int = 0


@dataclass
class CrossDomainAnalysis:
    """MCD vs non-MCD comparison pooled across every domain"""
    task_completion: MetricComparison
    token_efficiency: MetricComparison
    latency_performance: MetricComparison
    memory_utilization: MetricComparison
    cpu_efficiency: MetricComparison
    actionable_output: MetricComparison
    statistical_significance: dict[str, str]
    is_fallback: bool = False


@dataclass
class ConsistencyPattern:
    """How uniformly one MCD property holds across domains"""
    pattern_type: str
    domain_values: dict[str, str]
    consistency_score: str


@dataclass
class PerformanceReport:
    cross_domain_analysis: CrossDomainAnalysis
    consistency_patterns: list[ConsistencyPattern]
    mcd_effectiveness: str
    key_findings: list[str]


@dataclass
class ValidationReport:
    """Outcome of validating catalog data or execution parameters"""
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    walkthrough: DomainWalkthrough | None = None
