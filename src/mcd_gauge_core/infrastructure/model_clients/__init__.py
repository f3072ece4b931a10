"""
Model client package

Provides a unified interface to each LLM provider.
"""

from mcd_gauge_core.infrastructure.model_clients.base import ModelClient
from mcd_gauge_core.infrastructure.model_clients.factory import create_client, create_tier_client
from mcd_gauge_core.domain.value_objects import ModelResponse

__all__ = ["ModelClient", "ModelResponse", "create_client", "create_tier_client"]
