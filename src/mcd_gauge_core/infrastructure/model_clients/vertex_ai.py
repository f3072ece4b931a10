"""
Vertex AI (Google GenAI SDK) model client
"""

import os

from google import genai
from google.api_core import exceptions as google_exceptions
from google.genai.types import GenerateContentConfig, HttpOptions

from mcd_gauge_core.infrastructure.model_clients.base import Completion, ProviderClient


class VertexAIClient(ProviderClient):
    """Gemini models served through Vertex AI"""

    retryable_exceptions = (
        google_exceptions.DeadlineExceeded,
        google_exceptions.ServiceUnavailable,
        google_exceptions.ResourceExhausted,
    )

    def __init__(
        self,
        model_name: str,
        project_id: str | None = None,
        location: str | None = None,
        timeout_seconds: int = 30,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        max_tokens: int = 256,
    ):
        """
        Args:
            model_name: Model name (e.g. gemini-2.5-flash)
            project_id: GCP project, GCP_PROJECT_ID when not given
            location: Region (defaults to "global")

        Raises:
            ValueError: If no project id is available
        """
        super().__init__(model_name, max_retries, retry_delay_seconds, max_tokens)
        self.project_id = project_id or os.environ.get("GCP_PROJECT_ID")
        self.location = location or "global"
        if not self.project_id:
            raise ValueError("GCP_PROJECT_ID is not set")

        # HttpOptions takes milliseconds
        self.client = genai.Client(
            vertexai=True,
            project=self.project_id,
            location=self.location,
            http_options=HttpOptions(timeout=timeout_seconds * 1000),
        )

    def _complete(self, prompt: str, max_tokens: int, temperature: float) -> Completion:
        response = self.client.models.generate_content(
            model=self.model_name,
            contents=prompt,
            config=GenerateContentConfig(temperature=temperature, max_output_tokens=max_tokens),
        )
        usage = getattr(response, "usage_metadata", None)
        return Completion(
            text=response.text or "",
            input_tokens=(getattr(usage, "prompt_token_count", 0) or 0) if usage else 0,
            output_tokens=(getattr(usage, "candidates_token_count", 0) or 0) if usage else 0,
        )
