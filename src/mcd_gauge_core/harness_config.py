"""
Evaluation Harness Configuration

Manages loading from environment variables and default values.
"""

import os
from dataclasses import dataclass, field, asdict

from mcd_gauge_core.domain.constants import DEFAULT_TIER_MODELS, DOMAIN_IDS, SUPPORTED_TIERS


def _env_bool(key: str, default: bool) -> bool:
    """Convert an environment variable to bool"""
    val = os.environ.get(key)
    if val is None:
        return default
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int) -> int:
    """Convert an environment variable to int"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to an integer.")


def _env_float(key: str, default: float) -> float:
    """Convert an environment variable to float"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to a number.")


def _env_str(key: str, default: str) -> str:
    """Get an environment variable as a string"""
    return os.environ.get(key, default)


def _env_str_list(key: str, default: list[str]) -> list[str]:
    """Convert an environment variable to a comma-separated list of strings"""
    val = os.environ.get(key)
    if val is None:
        return default
    items = [x.strip() for x in val.split(",") if x.strip()]
    if not items:
        raise ValueError(f"The value '{val}' of environment variable '{key}' does not contain any items.")
    return items


@dataclass
class ExecutionConfig:
    """Which tiers and domains a run covers"""
    tiers: list[str] = field(default_factory=lambda: list(SUPPORTED_TIERS))
    domains: list[str] = field(default_factory=lambda: list(DOMAIN_IDS))
    new_client_per_variant: bool = False


@dataclass
class TierModelConfig:
    """Model served for each resource tier"""
    q1_model: str = DEFAULT_TIER_MODELS["Q1"]
    q4_model: str = DEFAULT_TIER_MODELS["Q4"]
    q8_model: str = DEFAULT_TIER_MODELS["Q8"]

    def model_for_tier(self, tier: str) -> str:
        """Model name for a tier (Q1 / Q4 / Q8)"""
        models = {"Q1": self.q1_model, "Q4": self.q4_model, "Q8": self.q8_model}
        if tier not in models:
            raise ValueError(f"Unsupported tier: {tier}. Supported tiers: {', '.join(SUPPORTED_TIERS)}")
        return models[tier]


@dataclass
class IsolationConfig:
    """Model call isolation configuration"""
    timeout_seconds: int = 120
    max_retries: int = 3
    retry_delay_seconds: float = 1.0


@dataclass
class AdvantageConfig:
    """Acceptance thresholds of the MCD advantage validation"""
    min_success_advantage: float = 1.5
    min_token_advantage: float = 1.3
    integrity_mcd_pass_rate: float = 0.95
    integrity_non_mcd_pass_rate: float = 0.8


@dataclass
class SessionConfig:
    """Analysis session cache configuration"""
    cache_ttl_seconds: int = 1800
    max_cache_entries: int = 50


@dataclass
class LMStudioConfig:
    """LMStudio (OpenAI-compatible local LLM) configuration"""
    base_url: str = "http://localhost:1234/v1"
    api_key: str = "lm-studio"


@dataclass
class HarnessConfig:
    """Overall evaluation harness configuration"""
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    tier_models: TierModelConfig = field(default_factory=TierModelConfig)
    isolation: IsolationConfig = field(default_factory=IsolationConfig)
    advantage: AdvantageConfig = field(default_factory=AdvantageConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    lmstudio: LMStudioConfig = field(default_factory=LMStudioConfig)

    def to_dict(self) -> dict:
        """Convert to dictionary format"""
        return {"harness_config": asdict(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "HarnessConfig":
        """Create from dictionary (handles presence/absence of harness_config key)"""
        config_data = data.get("harness_config", data)
        return cls(
            execution=ExecutionConfig(**config_data.get("execution", {})),
            tier_models=TierModelConfig(**config_data.get("tier_models", {})),
            isolation=IsolationConfig(**config_data.get("isolation", {})),
            advantage=AdvantageConfig(**config_data.get("advantage", {})),
            session=SessionConfig(**config_data.get("session", {})),
            lmstudio=LMStudioConfig(**config_data.get("lmstudio", {})),
        )


def load_config() -> HarnessConfig:
    """
    Load configuration from environment variables

    Uses default values when environment variables are not set.

    Returns:
        HarnessConfig
    """
    execution = ExecutionConfig(
        tiers=_env_str_list("HARNESS_TIERS", list(SUPPORTED_TIERS)),
        domains=_env_str_list("HARNESS_DOMAINS", list(DOMAIN_IDS)),
        new_client_per_variant=_env_bool("HARNESS_NEW_CLIENT_PER_VARIANT", False),
    )
    tier_models = TierModelConfig(
        q1_model=_env_str("HARNESS_MODEL_Q1", DEFAULT_TIER_MODELS["Q1"]),
        q4_model=_env_str("HARNESS_MODEL_Q4", DEFAULT_TIER_MODELS["Q4"]),
        q8_model=_env_str("HARNESS_MODEL_Q8", DEFAULT_TIER_MODELS["Q8"]),
    )
    isolation = IsolationConfig(
        timeout_seconds=_env_int("HARNESS_TIMEOUT_SECONDS", 120),
        max_retries=_env_int("HARNESS_MAX_RETRIES", 3),
        retry_delay_seconds=_env_float("HARNESS_RETRY_DELAY_SECONDS", 1.0),
    )
    advantage = AdvantageConfig(
        min_success_advantage=_env_float("HARNESS_MCD_SUCCESS_ADVANTAGE", 1.5),
        min_token_advantage=_env_float("HARNESS_MCD_TOKEN_ADVANTAGE", 1.3),
        integrity_mcd_pass_rate=_env_float("HARNESS_MCD_INTEGRITY_PASS_RATE", 0.95),
        integrity_non_mcd_pass_rate=_env_float("HARNESS_NON_MCD_INTEGRITY_PASS_RATE", 0.8),
    )
    session = SessionConfig(
        cache_ttl_seconds=_env_int("HARNESS_CACHE_TTL_SECONDS", 1800),
        max_cache_entries=_env_int("HARNESS_CACHE_MAX_ENTRIES", 50),
    )
    lmstudio = LMStudioConfig(
        base_url=_env_str("LMSTUDIO_BASE_URL", "http://localhost:1234/v1"),
        api_key=_env_str("LMSTUDIO_API_KEY", "lm-studio"),
    )
    return HarnessConfig(
        execution=execution,
        tier_models=tier_models,
        isolation=isolation,
        advantage=advantage,
        session=session,
        lmstudio=lmstudio,
    )
