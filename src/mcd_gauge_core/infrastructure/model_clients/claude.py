"""
Anthropic Claude model client
"""

import os

from anthropic import Anthropic, APIConnectionError, RateLimitError, APIStatusError

from mcd_gauge_core.infrastructure.model_clients.base import Completion, ProviderClient


class ClaudeClient(ProviderClient):
    """Claude through the Anthropic Messages API"""

    retryable_exceptions = (APIConnectionError, RateLimitError, APIStatusError)

    def __init__(
        self,
        model_name: str,
        api_key: str | None = None,
        timeout_seconds: int = 120,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        max_tokens: int = 256,
    ):
        """
        Raises:
            ValueError: If no API key is given and ANTHROPIC_API_KEY is unset
        """
        super().__init__(model_name, max_retries, retry_delay_seconds, max_tokens)
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise ValueError("ANTHROPIC_API_KEY is not set")
        self.client = Anthropic(api_key=self.api_key, timeout=timeout_seconds)

    def _complete(self, prompt: str, max_tokens: int, temperature: float) -> Completion:
        response = self.client.messages.create(
            model=self.model_name,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        return Completion(
            text=response.content[0].text if response.content else "",
            input_tokens=getattr(response.usage, "input_tokens", 0) or 0,
            output_tokens=getattr(response.usage, "output_tokens", 0) or 0,
        )
