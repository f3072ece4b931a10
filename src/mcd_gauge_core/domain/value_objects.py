"""
Domain Value Objects

Defines immutable data structures representing values such as model responses,
success-rate fractions, domain thresholds and per-trial scoring results.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

_SUCCESS_RATE_PATTERN = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")


class ApproachCategory(str, Enum):
    """Prompting approach a variant belongs to"""
    MCD = "mcd"
    FEW_SHOT = "fewShot"
    SYSTEM_ROLE = "systemRole"
    HYBRID = "hybrid"
    CONVERSATIONAL = "conversational"


# Buckets pooled as "non-MCD" when validating the MCD advantage
NON_MCD_APPROACHES = (
    ApproachCategory.FEW_SHOT,
    ApproachCategory.SYSTEM_ROLE,
    ApproachCategory.CONVERSATIONAL,
)


@dataclass
class ModelResponse:
    """Model response"""
    output: str
    latency_ms: int
    model_name: str
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(frozen=True)
class SuccessRate:
    """Success fraction rendered as "k/n"

    A denominator of zero means no data, which is distinct from "0/n".
    """

    successes: int
    total: int

    def __post_init__(self):
        if self.successes < 0:
            raise ValueError("successes must be non-negative")
        if self.total < 0:
            raise ValueError("total must be non-negative")

    @classmethod
    def parse(cls, text: str) -> "SuccessRate":
        """
        Parse a "k/n" string

        Raises:
            ValueError: If the text is not of the form "k/n"
        """
        if not isinstance(text, str):
            raise ValueError(f"Success rate must be a string: {text!r}")
        match = _SUCCESS_RATE_PATTERN.match(text)
        if match is None:
            raise ValueError(f"Invalid success rate: {text!r} (expected 'k/n')")
        return cls(int(match.group(1)), int(match.group(2)))

    @classmethod
    def try_parse(cls, text) -> "SuccessRate | None":
        """Parse a "k/n" string, returning None when it is malformed"""
        try:
            return cls.parse(text)
        except ValueError:
            return None

    @property
    def has_data(self) -> bool:
        return self.total > 0

    @property
    def fraction(self) -> float:
        """successes / total, 0.0 when there is no data"""
        if self.total == 0:
            return 0.0
        return self.successes / self.total

    def __str__(self) -> str:
        return f"{self.successes}/{self.total}"


@dataclass(frozen=True)
class DomainCriteria:
    """Domain-adjusted thresholds for a trial"""
    min_accuracy: float
    max_token_budget: int
    max_latency_ms: int


@dataclass(frozen=True)
class GenerationParams:
    """Parameters passed to the inference capability"""
    max_tokens: int
    temperature: float


@dataclass
class TrialMetrics:
    """Metrics bundle of a scored trial"""
    required_elements_ratio: float
    prohibited_elements_ratio: float
    token_efficiency: float
    functional_score: float


@dataclass
class TrialEvaluationResult:
    """Result of scoring one response against a trial's success criteria"""
    success: bool
    tier: str  # excellent / good / acceptable / poor
    accuracy: float
    mcd_compliant: bool
    failures: list[str] = field(default_factory=list)
    metrics: TrialMetrics | None = None


@dataclass(frozen=True)
class MetricComparison:
    """MCD vs non-MCD value pair with a formatted ratio (None when the metric has no data)"""
    mcd: float | None
    non_mcd: float | None
    ratio: str
