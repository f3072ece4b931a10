"""
Use Cases Layer

Aggregates business logic and provides use cases called from the runner.
"""

from mcd_gauge_core.use_cases.variant_execution import (
    categorize_variant_approach,
    build_trial_prompt,
    generation_params,
    execute_trial,
    execute_variant,
    calculate_variant_efficiency,
    create_error_variant_result,
)
from mcd_gauge_core.use_cases.comparative import (
    calculate_approach_metrics,
    calculate_comparative_analysis,
    validate_mcd_advantage,
    calculate_mcd_score,
    generate_recommendations,
    generate_comparative_summary,
    run_comparative_walkthrough,
)
from mcd_gauge_core.use_cases.cross_domain import (
    format_safe_ratio,
    heuristic_significance_band,
    calculate_cross_domain_analysis,
    calculate_consistency_patterns,
    generate_performance_report,
)
from mcd_gauge_core.use_cases.validation import (
    validate_domain_walkthrough,
    validate_execution_parameters,
    find_walkthrough,
)
from mcd_gauge_core.use_cases.health_check import (
    PROBE_PROMPT,
    probe_model,
    check_tier_models,
    run_tier_health_check,
)
from mcd_gauge_core.use_cases.summary import (
    build_trial_table,
    build_variant_table,
    build_approach_table,
    summarize_by_tier,
    report_to_dict,
)

__all__ = [
    # variant_execution
    "categorize_variant_approach",
    "build_trial_prompt",
    "generation_params",
    "execute_trial",
    "execute_variant",
    "calculate_variant_efficiency",
    "create_error_variant_result",
    # comparative
    "calculate_approach_metrics",
    "calculate_comparative_analysis",
    "validate_mcd_advantage",
    "calculate_mcd_score",
    "generate_recommendations",
    "generate_comparative_summary",
    "run_comparative_walkthrough",
    # cross_domain
    "format_safe_ratio",
    "heuristic_significance_band",
    "calculate_cross_domain_analysis",
    "calculate_consistency_patterns",
    "generate_performance_report",
    # validation
    "validate_domain_walkthrough",
    "validate_execution_parameters",
    "find_walkthrough",
    # health_check
    "PROBE_PROMPT",
    "probe_model",
    "check_tier_models",
    "run_tier_health_check",
    # summary
    "build_trial_table",
    "build_variant_table",
    "build_approach_table",
    "summarize_by_tier",
    "report_to_dict",
]
