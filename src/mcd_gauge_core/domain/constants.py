"""
Domain Constants

Centrally manages the domain tables, resource tiers and thresholds shared
across the evaluation engine.
"""

# Resource tiers (quantization levels)
SUPPORTED_TIERS = ["Q1", "Q4", "Q8"]

# Task domains
DOMAIN_IDS = ["D1", "D2", "D3"]
DEFAULT_DOMAIN_ID = "D1"

DOMAIN_TYPES = {
    "D1": "Appointment Booking",
    "D2": "Spatial Navigation",
    "D3": "Failure Diagnostics",
}

# Alternative identifiers accepted when selecting a domain for execution
DOMAIN_ALIASES = {
    "appointment-booking": "D1",
    "spatial-navigation": "D2",
    "failure-diagnostics": "D3",
    "appointmentbooking": "D1",
    "spatialnavigation": "D2",
    "failurediagnostics": "D3",
}

# Fallback triggers every scenario is expected to declare
COMMON_FALLBACK_TRIGGERS = [
    "execution_failure",
    "timeout_error",
    "validation_failed",
    "resource_exhausted",
    "unknown_error",
]

# Fallback triggers required per domain (keyed by domain name)
DOMAIN_SPECIFIC_TRIGGERS = {
    "Appointment Booking": ["missing_slots", "ambiguous_input"],
    "Spatial Navigation": ["unknown_location", "blocked_path"],
    "Failure Diagnostics": ["complexity_overload", "analysis_paralysis"],
}

# Token allowance multiplier per domain (verbose domains get more room)
DOMAIN_COMPLEXITY_MULTIPLIERS = {
    "D1": 1.2,
    "D2": 1.0,
    "D3": 1.4,
}
DEFAULT_COMPLEXITY_MULTIPLIER = 1.1

# Base thresholds per domain (unknown domains use the D1 row)
BASE_DOMAIN_CRITERIA = {
    "D1": {"min_accuracy": 0.75, "max_token_budget": 60, "max_latency_ms": 450},
    "D2": {"min_accuracy": 0.70, "max_token_budget": 50, "max_latency_ms": 400},
    "D3": {"min_accuracy": 0.80, "max_token_budget": 80, "max_latency_ms": 500},
}

# Functional-score bands per domain (unknown domains use the D1 row)
TIER_THRESHOLDS = {
    "D1": {"excellent": 0.85, "good": 0.70, "acceptable": 0.55},
    "D2": {"excellent": 0.90, "good": 0.75, "acceptable": 0.60},  # navigation is more precise
    "D3": {"excellent": 0.80, "good": 0.65, "acceptable": 0.50},  # diagnostics is more complex
}

# Performance tiers, best first
PERFORMANCE_TIERS = ["excellent", "good", "acceptable", "poor"]

# Minimum required-element ratio and output length per performance tier
TIER_MIN_REQUIRED_RATIO = {"excellent": 0.85, "good": 0.70, "acceptable": 0.50}
TIER_MIN_OUTPUT_LENGTH = {"excellent": 15, "good": 12, "acceptable": 8}

# Default minimum accuracy by trial difficulty
DIFFICULTY_MIN_ACCURACY = {
    "simple": 0.9,
    "moderate": 0.8,
    "complex": 0.7,
}
DEFAULT_MIN_ACCURACY = 0.8

VALID_DIFFICULTIES = ["simple", "moderate", "complex"]
VALID_EVALUATION_METHODS = [
    "keyword_match",
    "semantic_similarity",
    "task_completion",
    "slot_extraction",
]
VALID_VARIANT_TYPES = ["MCD", "Non-MCD", "Hybrid"]

# Sampling temperature by approach category
APPROACH_TEMPERATURES = {
    "mcd": 0.0,
    "fewShot": 0.3,
    "systemRole": 0.2,
    "hybrid": 0.1,
    "conversational": 0.7,
}
COMPLEX_TRIAL_TEMPERATURE = 0.3
SIMPLE_TRIAL_MAX_TOKENS = 50

# Default model per resource tier (local quantized models served by LMStudio)
DEFAULT_TIER_MODELS = {
    "Q1": "lmstudio/qwen2-0.5b-instruct-q4_0",
    "Q4": "lmstudio/phi-2-q4_k_m",
    "Q8": "lmstudio/llama-3.2-1b-instruct-q8_0",
}
