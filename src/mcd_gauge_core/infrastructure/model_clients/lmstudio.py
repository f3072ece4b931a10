"""
LMStudio (OpenAI-compatible API) model client

Serves the quantized local models of each resource tier.
"""

import os

import openai
from openai import OpenAI

from mcd_gauge_core.infrastructure.model_clients.base import Completion, ProviderClient


class LMStudioClient(ProviderClient):
    """Local quantized model behind LMStudio's OpenAI-compatible endpoint"""

    retryable_exceptions = (openai.APIConnectionError, openai.RateLimitError, openai.APIStatusError)

    def __init__(
        self,
        model_name: str,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout_seconds: int = 120,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        max_tokens: int = 256,
    ):
        """
        Args:
            model_name: "lmstudio/<model>" (the prefix is stripped for the API)
            base_url: Endpoint, LMSTUDIO_BASE_URL when not given
            api_key: Key, LMSTUDIO_API_KEY when not given (LMStudio ignores it)
        """
        super().__init__(model_name, max_retries, retry_delay_seconds, max_tokens)
        self.api_model_name = model_name.removeprefix("lmstudio/")
        self.base_url = base_url or os.environ.get("LMSTUDIO_BASE_URL", "http://localhost:1234/v1")
        api_key = api_key or os.environ.get("LMSTUDIO_API_KEY", "lm-studio")
        self.client = OpenAI(base_url=self.base_url, api_key=api_key, timeout=timeout_seconds)

    def _complete(self, prompt: str, max_tokens: int, temperature: float) -> Completion:
        response = self.client.chat.completions.create(
            model=self.api_model_name,
            messages=[{"role": "user", "content": prompt}],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        usage = response.usage
        return Completion(
            text=response.choices[0].message.content or "",
            input_tokens=(usage.prompt_tokens or 0) if usage else 0,
            output_tokens=(usage.completion_tokens or 0) if usage else 0,
        )
