"""
Domain criteria adjustment

Maps a trial to its domain and scales the base thresholds of that domain by its
complexity multiplier. New domains are added by editing the tables in
domain.constants, not the scorer.
"""

from __future__ import annotations

import math
import re

from mcd_gauge_core.domain.constants import (
    BASE_DOMAIN_CRITERIA,
    DEFAULT_COMPLEXITY_MULTIPLIER,
    DEFAULT_DOMAIN_ID,
    DEFAULT_MIN_ACCURACY,
    DIFFICULTY_MIN_ACCURACY,
    DOMAIN_COMPLEXITY_MULTIPLIERS,
)
from mcd_gauge_core.domain.entities import TrialSpecification
from mcd_gauge_core.domain.value_objects import DomainCriteria

_DOMAIN_PREFIX = re.compile(r"^D(\d+)")


def extract_domain_from_trial_id(test_id: str) -> str:
    """Derive "D<n>" from the test id prefix, defaulting to the first domain"""
    match = _DOMAIN_PREFIX.match(test_id or "")
    return f"D{match.group(1)}" if match else DEFAULT_DOMAIN_ID


def resolve_domain_id(trial: TrialSpecification) -> str:
    """Explicit domain_id of the trial, or the one encoded in its test id"""
    if trial.domain_id:
        return trial.domain_id
    return extract_domain_from_trial_id(trial.test_id)


def get_domain_complexity_multiplier(domain_id: str) -> float:
    return DOMAIN_COMPLEXITY_MULTIPLIERS.get(domain_id, DEFAULT_COMPLEXITY_MULTIPLIER)


def get_domain_adjusted_criteria(trial: TrialSpecification) -> DomainCriteria:
    """
    Resolve the domain-adjusted thresholds for a trial

    Token budget = round(base budget x complexity multiplier); latency and
    minimum accuracy come straight from the domain's base row.

    Args:
        trial: Trial specification

    Returns:
        DomainCriteria
    """
    domain_id = resolve_domain_id(trial)
    multiplier = get_domain_complexity_multiplier(domain_id)
    base = BASE_DOMAIN_CRITERIA.get(domain_id, BASE_DOMAIN_CRITERIA[DEFAULT_DOMAIN_ID])

    return DomainCriteria(
        min_accuracy=base["min_accuracy"],
        max_token_budget=math.floor(base["max_token_budget"] * multiplier + 0.5),
        max_latency_ms=base["max_latency_ms"],
    )


def ensure_trial_defaults(trial: TrialSpecification) -> TrialSpecification:
    """Fill a missing minimum accuracy from the difficulty table (in place)"""
    if trial.success_criteria.min_accuracy is None:
        trial.success_criteria.min_accuracy = DIFFICULTY_MIN_ACCURACY.get(
            trial.difficulty, DEFAULT_MIN_ACCURACY
        )
    return trial
