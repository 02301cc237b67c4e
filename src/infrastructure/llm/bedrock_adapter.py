"""
Infrastructure adapter: Amazon Bedrock (ChatBedrock) → ILanguageModel.

All ChatBedrock / langchain_aws details are confined here, including the
translation of provider failures into the domain's RateLimitedError and
UpstreamError. Tracing callbacks come from the injected IObservabilityHandler.
"""

import logging
import os
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError
from langchain_aws import ChatBedrock

from src.domain.errors import RateLimitedError, UpstreamError
from src.domain.ports.llm_port import ILanguageModel
from src.domain.ports.observability_port import IObservabilityHandler, NullObservabilityHandler

logger = logging.getLogger(__name__)

_THROTTLING_CODES = {
    "ThrottlingException",
    "TooManyRequestsException",
    "ServiceQuotaExceededException",
}
_THROTTLING_MARKERS = ("throttl", "too many requests", "429", "quota")
_NOT_FOUND_MARKERS = ("resourcenotfound", "not found", "404")


class BedrockChatAdapter(ILanguageModel):
    """Wraps ChatBedrock and exposes the ILanguageModel interface."""

    MODEL_ID = "us.amazon.nova-pro-v1:0"

    def __init__(
        self,
        model_id: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        region: Optional[str] = None,
        observability: Optional[IObservabilityHandler] = None,
        _runnable: Any = None,
    ) -> None:
        """
        Args:
            model_id:      Bedrock model or inference-profile id; MODEL_ID by default.
            temperature:   Sampling temperature.
            max_tokens:    Upper bound on generated tokens.
            region:        AWS region; AWS_DEFAULT_REGION or us-east-1 by default.
            observability: Source of tracing callbacks (no tracing when omitted).
            _runnable:     Optional pre-configured Runnable, used by tests to
                           avoid constructing ChatBedrock.
        """
        self.model_id = model_id or self.MODEL_ID
        self._observability = observability or NullObservabilityHandler()
        if _runnable is not None:
            self._llm = _runnable
        else:
            self._llm = ChatBedrock(
                model=self.model_id,
                model_kwargs={"temperature": temperature, "max_tokens": max_tokens},
                region_name=region or os.environ.get("AWS_DEFAULT_REGION", "us-east-1"),
            )

    def generate(self, prompt: str) -> str:
        try:
            response = self._llm.invoke(
                prompt, config={"callbacks": self._observability.callbacks()}
            )
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code in _THROTTLING_CODES:
                raise RateLimitedError(f"Bedrock throttled the request: {code}") from exc
            raise UpstreamError(f"Bedrock request failed: {exc}") from exc
        except (BotoCoreError, ValueError) as exc:
            # langchain_aws re-raises service errors as ValueError with the boto text
            message = str(exc)
            if any(marker in message.lower() for marker in _THROTTLING_MARKERS):
                raise RateLimitedError(f"Bedrock throttled the request: {message}") from exc
            if any(marker in message.lower() for marker in _NOT_FOUND_MARKERS):
                logger.error("Bedrock model %s not found", self.model_id)
            raise UpstreamError(f"Bedrock request failed: {message}") from exc

        text = self._extract_text(response)
        if not text.strip():
            raise UpstreamError("Invalid or empty response from Bedrock")
        return text

    @staticmethod
    def _extract_text(response: Any) -> str:
        content = getattr(response, "content", response)
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts = [
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            ]
            return "".join(parts)
        return str(content or "")
