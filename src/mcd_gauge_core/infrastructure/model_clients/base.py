"""
Model client base classes

ModelClient is the inference capability the evaluation engine depends on.
ProviderClient implements it once for every SDK-backed provider: timing,
defaults and retry live here, each provider only issues the request.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

from mcd_gauge_core.domain.value_objects import ModelResponse


class RetryMixin:
    """Exponential backoff retry. Subclasses set self.max_retries and self.retry_delay_seconds."""

    max_retries: int = 3
    retry_delay_seconds: float = 1.0

    def _with_retry(self, fn, retryable_exceptions=(Exception,)):
        """
        Execute fn, retrying on retryable_exceptions.

        The n-th retry waits retry_delay_seconds * 2 ** (n - 1) seconds.

        Raises:
            ValueError: If max_retries is less than 1
            Exception: The last exception once every attempt failed
        """
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1.")

        last_exception: Exception | None = None
        for attempt in range(self.max_retries):
            try:
                return fn()
            except retryable_exceptions as e:
                last_exception = e
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_delay_seconds * 2 ** attempt)

        assert last_exception is not None
        raise last_exception


class ModelClient(ABC):
    """Abstract base class for model clients (the inference capability)"""

    @abstractmethod
    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> ModelResponse:
        """
        Send a prompt and retrieve the response

        Args:
            prompt: Rendered prompt
            max_tokens: Maximum output tokens (client default when None)
            temperature: Sampling temperature (0.0 when None)
        """
        pass


@dataclass
class Completion:
    """Raw provider answer before timing is attached"""
    text: str
    input_tokens: int = 0
    output_tokens: int = 0


class ProviderClient(RetryMixin, ModelClient):
    """Shared generate() of the SDK-backed clients"""

    # Provider exceptions worth another attempt
    retryable_exceptions: tuple = (Exception,)

    def __init__(self, model_name: str, max_retries: int, retry_delay_seconds: float, max_tokens: int):
        self.model_name = model_name
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.max_tokens = max_tokens

    @abstractmethod
    def _complete(self, prompt: str, max_tokens: int, temperature: float) -> Completion:
        """Issue one request to the provider"""

    def generate(
        self,
        prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> ModelResponse:
        max_tokens = max_tokens or self.max_tokens
        temperature = 0.0 if temperature is None else temperature

        def _call():
            start_time = time.time()
            completion = self._complete(prompt, max_tokens, temperature)
            latency_ms = int((time.time() - start_time) * 1000)
            return ModelResponse(
                output=(completion.text or "").strip(),
                latency_ms=latency_ms,
                model_name=self.model_name,
                input_tokens=completion.input_tokens,
                output_tokens=completion.output_tokens,
            )

        return self._with_retry(_call, retryable_exceptions=self.retryable_exceptions)
