"""
Variant Execution

Runs every trial of a walkthrough variant against the inference capability,
scores each response and aggregates the trial outcomes into per-variant
statistics.
"""

from __future__ import annotations

import copy
import logging
import re
import statistics
import time
from datetime import datetime

from mcd_gauge_core.domain.constants import (
    APPROACH_TEMPERATURES,
    COMPLEX_TRIAL_TEMPERATURE,
    SIMPLE_TRIAL_MAX_TOKENS,
)
from mcd_gauge_core.domain.entities import (
    ActualResults,
    MeasuredProfile,
    TokenBreakdown,
    TrialSpecification,
    VariantExecutionResult,
    WalkthroughVariant,
)
from mcd_gauge_core.domain.value_objects import (
    ApproachCategory,
    GenerationParams,
    SuccessRate,
    TrialEvaluationResult,
)
from mcd_gauge_core.infrastructure.model_clients.base import ModelClient
from mcd_gauge_core.scoring.tokens import count_tokens
from mcd_gauge_core.scoring.trial_scorer import evaluate_trial

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\[.*?\]")


def categorize_variant_approach(variant: WalkthroughVariant) -> ApproachCategory:
    """
    Map a variant to its prompting approach.

    The variant type decides MCD and Hybrid; everything else is classified by
    keywords in the variant name. Unrecognised names fall back to
    conversational.

    Args:
        variant: Walkthrough variant

    Returns:
        ApproachCategory: The approach bucket of the variant
    """
    if variant.type == "MCD":
        return ApproachCategory.MCD
    if variant.type == "Hybrid":
        return ApproachCategory.HYBRID

    name = variant.name.lower()
    if "few-shot" in name or "pattern" in name:
        return ApproachCategory.FEW_SHOT
    if "system role" in name or "expert" in name or "role" in name:
        return ApproachCategory.SYSTEM_ROLE
    if "conversational" in name or "natural" in name:
        return ApproachCategory.CONVERSATIONAL

    logger.warning(
        "Could not categorize variant '%s' (%s), treating it as conversational", variant.id, variant.name
    )
    return ApproachCategory.CONVERSATIONAL


def build_trial_prompt(template: str, user_input: str) -> str:
    """
    Render a variant prompt template for one trial.

    Every bracketed placeholder ("[type]", "[date]", ...) is replaced by the
    whole user input. A template without placeholders gets the input appended
    on a new line.
    """
    if _PLACEHOLDER.search(template) is None:
        return f"{template}\n{user_input}"
    return _PLACEHOLDER.sub(lambda _: user_input, template)


def generation_params(variant: WalkthroughVariant, trial: TrialSpecification) -> GenerationParams:
    """
    Generation parameters for a trial.

    Temperature follows the approach of the variant, except that complex
    trials run at 0.0 for MCD and 0.3 for every other approach. Simple trials
    cap the output budget at 50 tokens.
    """
    approach = categorize_variant_approach(variant)
    if trial.difficulty == "complex":
        temperature = 0.0 if approach == ApproachCategory.MCD else COMPLEX_TRIAL_TEMPERATURE
    else:
        temperature = APPROACH_TEMPERATURES[approach.value]

    max_tokens = trial.success_criteria.max_token_budget
    if trial.difficulty == "simple":
        max_tokens = min(max_tokens, SIMPLE_TRIAL_MAX_TOKENS)

    return GenerationParams(max_tokens=max_tokens, temperature=temperature)


def execute_trial(
    trial: TrialSpecification,
    variant: WalkthroughVariant,
    model_client: ModelClient,
) -> TrialEvaluationResult | None:
    """
    Execute a single trial and store its ActualResults on the trial.

    Model failures do not propagate: they are recorded as an error result
    (empty output, success False, tier poor).

    Args:
        trial: Trial to execute (mutated in place)
        variant: Variant providing the prompt template
        model_client: Inference capability

    Returns:
        TrialEvaluationResult of the response, or None when the call failed
    """
    prompt = build_trial_prompt(variant.prompt, trial.user_input)
    params = generation_params(variant, trial)
    start_time = time.time()

    try:
        response = model_client.generate(
            prompt, max_tokens=params.max_tokens, temperature=params.temperature
        )
    except Exception as e:
        latency_ms = int((time.time() - start_time) * 1000)
        trial.actual_results = ActualResults(
            output="",
            token_breakdown=TokenBreakdown(),
            latency_ms=latency_ms,
            success=False,
            accuracy=0.0,
            performance_tier="poor",
            failure_reasons=[f"Execution error: {e}"],
            timestamp=datetime.now().isoformat(),
            mcd_aligned=False,
        )
        print(f"    {trial.test_id}: EXECUTION FAILED - {e}")
        return None

    evaluation = evaluate_trial(response.output, trial)
    trial.actual_results = ActualResults(
        output=response.output,
        token_breakdown=TokenBreakdown(
            input=count_tokens(prompt),
            process=0,
            output=count_tokens(response.output),
        ),
        latency_ms=response.latency_ms,
        success=evaluation.success,
        accuracy=evaluation.accuracy,
        performance_tier=evaluation.tier,
        failure_reasons=list(evaluation.failures),
        timestamp=datetime.now().isoformat(),
        mcd_aligned=evaluation.mcd_compliant if variant.type == "MCD" else False,
    )
    print(
        f"    {trial.test_id}: {'PASS' if evaluation.success else 'FAIL'} "
        f"({evaluation.tier}, {response.latency_ms}ms)"
    )
    return evaluation


def calculate_variant_efficiency(success_fraction: float, avg_latency: float, avg_tokens: float) -> float:
    """
    Composite efficiency of a variant.

    0.5 * success rate + 0.3 * latency headroom below 2000 ms
    + 0.2 * token headroom below 100 tokens.
    """
    latency_score = max(0.0, 1 - avg_latency / 2000)
    token_score = max(0.0, 1 - avg_tokens / 100)
    return 0.5 * success_fraction + 0.3 * latency_score + 0.2 * token_score


def create_error_variant_result(variant: WalkthroughVariant, error: Exception | str) -> VariantExecutionResult:
    """Result of a variant whose execution failed as a whole ("0/0", no data)"""
    return VariantExecutionResult(
        variant_id=variant.id,
        approach=categorize_variant_approach(variant),
        success_rate=SuccessRate(0, 0),
        avg_tokens=0,
        avg_latency=0,
        avg_accuracy=0.0,
        mcd_alignment_rate=0.0,
        efficiency=0.0,
        trials=[],
        error_details=str(error),
    )


def _measured_profile(
    trials: list[TrialSpecification],
    evaluations: list[TrialEvaluationResult],
    success_rate: SuccessRate,
    avg_tokens: int,
    avg_latency: int,
    efficiency: float,
) -> MeasuredProfile:
    latencies = [t.actual_results.latency_ms for t in trials]
    memory = [t.actual_results.memory_kb for t in trials if t.actual_results.memory_kb is not None]
    cpu = [t.actual_results.cpu_usage for t in trials if t.actual_results.cpu_usage is not None]
    # Token efficiency on a 0-100 scale, over the trials that produced a response
    scored = [e.metrics.token_efficiency for e in evaluations if e.metrics is not None]
    token_efficiency = round(statistics.mean(scored) * 100) if scored else None

    return MeasuredProfile(
        avg_latency=avg_latency,
        avg_tokens=avg_tokens,
        avg_cpu_usage=statistics.mean(cpu) if cpu else None,
        avg_memory_kb=statistics.mean(memory) if memory else None,
        success_rate=str(success_rate),
        token_efficiency=token_efficiency,
        actual_success_count=success_rate.successes,
        total_trials=success_rate.total,
        variance_latency=statistics.pvariance(latencies),
        timestamp=datetime.now().isoformat(),
        approach_effectiveness=efficiency,
    )


def execute_variant(variant: WalkthroughVariant, model_client: ModelClient) -> VariantExecutionResult:
    """
    Execute every trial of a variant sequentially and aggregate the outcomes.

    A failing trial is recorded as an error result and does not abort the
    variant. The measured profile is written back onto the variant when at
    least one trial ran.

    Args:
        variant: Variant to execute
        model_client: Inference capability

    Returns:
        VariantExecutionResult: Aggregate statistics ("0/0" when the variant has no trials)
    """
    approach = categorize_variant_approach(variant)
    trials = variant.trials
    if not trials:
        return VariantExecutionResult(
            variant_id=variant.id,
            approach=approach,
            success_rate=SuccessRate(0, 0),
            avg_tokens=0,
            avg_latency=0,
            avg_accuracy=0.0,
            mcd_alignment_rate=0.0,
            efficiency=0.0,
            trials=[],
        )

    evaluations = []
    for trial in trials:
        evaluation = execute_trial(trial, variant, model_client)
        if evaluation is not None:
            evaluations.append(evaluation)

    results = [t.actual_results for t in trials]
    count = len(results)
    success_rate = SuccessRate(sum(1 for r in results if r.success), count)
    avg_tokens = round(sum(r.token_breakdown.output for r in results) / count)
    avg_latency = round(sum(r.latency_ms for r in results) / count)
    avg_accuracy = sum(r.accuracy for r in results) / count
    mcd_alignment_rate = sum(1 for r in results if r.mcd_aligned) / count
    efficiency = calculate_variant_efficiency(success_rate.fraction, avg_latency, avg_tokens)

    variant.measured_profile = _measured_profile(
        trials, evaluations, success_rate, avg_tokens, avg_latency, efficiency
    )

    return VariantExecutionResult(
        variant_id=variant.id,
        approach=approach,
        success_rate=success_rate,
        avg_tokens=avg_tokens,
        avg_latency=avg_latency,
        avg_accuracy=avg_accuracy,
        mcd_alignment_rate=mcd_alignment_rate,
        efficiency=efficiency,
        # Snapshot of this pass; the next run overwrites the catalog trials
        trials=copy.deepcopy(trials),
    )
