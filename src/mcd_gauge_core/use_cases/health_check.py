"""
Tier Health Check

Verifies that the model serving each resource tier answers before a run
starts. Tiers sharing a model are probed once.
"""

from __future__ import annotations

from typing import Callable

from mcd_gauge_core.domain.entities import HealthCheckResult
from mcd_gauge_core.harness_config import TierModelConfig
from mcd_gauge_core.infrastructure.model_clients.base import ModelClient


PROBE_PROMPT = "Reply with only 'OK' if you can read this message."
PROBE_MAX_TOKENS = 5
ERROR_DISPLAY_CHARS = 100


def probe_model(
    model_name: str,
    create_client_fn: Callable[[str], ModelClient],
) -> HealthCheckResult:
    """Send one short prompt to a model; failures are reported, not raised"""
    try:
        client = create_client_fn(model_name)
        response = client.generate(PROBE_PROMPT, max_tokens=PROBE_MAX_TOKENS, temperature=0.0)
    except Exception as e:
        return HealthCheckResult(model_name=model_name, success=False, latency_ms=None, error=str(e))
    return HealthCheckResult(model_name=model_name, success=True, latency_ms=response.latency_ms, error=None)


def check_tier_models(
    tiers: list[str],
    tier_models: TierModelConfig,
    create_client_fn: Callable[[str], ModelClient],
) -> dict[str, HealthCheckResult]:
    """
    Probe the model of every tier.

    Args:
        tiers: Resource tiers to check
        tier_models: Model configured for each tier
        create_client_fn: Function to create a model client

    Returns:
        dict: Probe result per tier (tiers sharing a model share one result)
    """
    probes: dict[str, HealthCheckResult] = {}
    results = {}
    for tier in tiers:
        model_name = tier_models.model_for_tier(tier)
        if model_name not in probes:
            probes[model_name] = probe_model(model_name, create_client_fn)
        results[tier] = probes[model_name]
    return results


def _print_result(tier: str, result: HealthCheckResult) -> None:
    if result.success:
        print(f"  {tier} {result.model_name}: OK ({result.latency_ms}ms)")
        return
    error = (result.error or "Unknown error")[:ERROR_DISPLAY_CHARS]
    print(f"  {tier} {result.model_name}: FAILED")
    print(f"    Error: {error}")


def run_tier_health_check(
    tiers: list[str],
    tier_models: TierModelConfig,
    create_client_fn: Callable[[str], ModelClient] | None = None,
) -> list[str]:
    """
    Check the tier models and report which tiers can run.

    Uses mcd_gauge_core.infrastructure.model_clients.create_client if
    create_client_fn is not specified.

    Returns:
        list[str]: Tiers whose model responded, in request order
    """
    if create_client_fn is None:
        from mcd_gauge_core.infrastructure.model_clients import create_client
        create_client_fn = create_client

    print("=== Tier Model Health Check ===\n")
    results = check_tier_models(tiers, tier_models, create_client_fn)
    for tier, result in results.items():
        _print_result(tier, result)
    print()
    return [t for t in tiers if results[t].success]
