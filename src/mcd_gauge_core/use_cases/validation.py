"""
Catalog Validation

Checks domain walkthroughs for structural completeness and resolves the
(domain, tier) parameters of an execution request.
"""

import logging

from mcd_gauge_core.domain.constants import (
    COMMON_FALLBACK_TRIGGERS,
    DOMAIN_ALIASES,
    DOMAIN_SPECIFIC_TRIGGERS,
    SUPPORTED_TIERS,
)
from mcd_gauge_core.domain.entities import DomainWalkthrough, ValidationReport

logger = logging.getLogger(__name__)

# A scenario needs MCD plus at least two alternatives to be compared meaningfully
MIN_COMPARATIVE_VARIANTS = 3


def validate_domain_walkthrough(walkthrough: DomainWalkthrough) -> ValidationReport:
    """
    Validate the structure of a domain walkthrough.

    Errors: missing id/domain/title, no scenarios, a scenario without
    variants, missing domain-specific fallback triggers, a missing expected
    outcome for any supported tier. Missing common fallback triggers are
    reported as warnings.

    Args:
        walkthrough: Walkthrough to validate

    Returns:
        ValidationReport
    """
    errors = []
    warnings = []

    if not walkthrough.id or not walkthrough.domain or not walkthrough.title:
        errors.append("Missing required fields: id, domain, or title")

    if not walkthrough.scenarios:
        errors.append("At least one scenario is required")
    else:
        expected_triggers = DOMAIN_SPECIFIC_TRIGGERS.get(walkthrough.domain, [])
        for idx, scenario in enumerate(walkthrough.scenarios):
            if not scenario.variants:
                errors.append(f"Scenario {idx} failed structural validation: no variants")

            missing_common = [t for t in COMMON_FALLBACK_TRIGGERS if t not in scenario.fallback_triggers]
            if missing_common:
                warnings.append(
                    f"Scenario {idx} missing recommended fallback triggers: {', '.join(missing_common)}"
                )

            missing_domain = [t for t in expected_triggers if t not in scenario.fallback_triggers]
            if missing_domain:
                errors.append(
                    f"Scenario {idx} missing domain-specific fallback triggers: {', '.join(missing_domain)}"
                )

    for tier in SUPPORTED_TIERS:
        if tier not in walkthrough.expected_outcomes:
            errors.append(f"Missing expected outcome for tier {tier}")

    for warning in warnings:
        logger.warning("%s: %s", walkthrough.id, warning)

    return ValidationReport(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
        walkthrough=walkthrough,
    )


def resolve_domain_id(domain: str) -> str:
    """Map an alias such as "appointment-booking" to its domain id"""
    return DOMAIN_ALIASES.get(domain.lower(), domain)


def find_walkthrough(walkthroughs: list[DomainWalkthrough], domain: str) -> DomainWalkthrough | None:
    """Look up a walkthrough by id or alias"""
    domain_id = resolve_domain_id(domain)
    for walkthrough in walkthroughs:
        if walkthrough.id == domain_id:
            return walkthrough
    return None


def validate_execution_parameters(
    walkthroughs: list[DomainWalkthrough],
    domain: str,
    tier: str,
) -> ValidationReport:
    """
    Validate the (domain, tier) of an execution request.

    Args:
        walkthroughs: Loaded catalog walkthroughs
        domain: Domain id or alias
        tier: Resource tier

    Returns:
        ValidationReport carrying the resolved walkthrough when valid
    """
    if tier not in SUPPORTED_TIERS:
        return ValidationReport(
            is_valid=False,
            errors=[f"Unsupported tier: {tier}. Supported tiers: {', '.join(SUPPORTED_TIERS)}"],
        )

    walkthrough = find_walkthrough(walkthroughs, domain)
    if walkthrough is None:
        available = ", ".join(w.id for w in walkthroughs)
        return ValidationReport(
            is_valid=False,
            errors=[f"Domain not found: {domain}. Available domains: {available}"],
        )

    structure = validate_domain_walkthrough(walkthrough)
    if not structure.is_valid:
        return ValidationReport(
            is_valid=False,
            errors=[f"Invalid domain structure for {domain}: {', '.join(structure.errors)}"],
            warnings=structure.warnings,
        )

    warnings = list(structure.warnings)
    if not any(len(s.variants) >= MIN_COMPARATIVE_VARIANTS for s in walkthrough.scenarios):
        warnings.append(f"Domain {domain} may have limited comparative testing variants")
    if tier not in walkthrough.expected_outcomes:
        warnings.append(f"No specific outcome defined for tier {tier} in domain {domain}")

    return ValidationReport(is_valid=True, warnings=warnings, walkthrough=walkthrough)
