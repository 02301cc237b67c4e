"""
Infrastructure adapter: Langfuse → IObservabilityHandler.

Langfuse is imported lazily inside the methods so the module can be loaded
even when LANGFUSE_* environment variables are not yet set (e.g. during testing).
When SECRETS_ARN is configured, the composition root loads those variables
from Secrets Manager before this adapter is constructed.
"""

from typing import Any

from src.domain.ports.observability_port import IObservabilityHandler


class LangfuseObservabilityHandler(IObservabilityHandler):
    """Wraps the Langfuse LangChain CallbackHandler."""

    def __init__(self) -> None:
        from langfuse.langchain import CallbackHandler
        self._handler = CallbackHandler()

    def callbacks(self) -> list[Any]:
        """Return the Langfuse CallbackHandler for use in LangChain invoke configs."""
        return [self._handler]

    def flush(self) -> None:
        """Flush pending traces to the Langfuse backend before the process exits."""
        from langfuse import get_client
        get_client().flush()
