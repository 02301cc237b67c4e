"""
Port (interface) for LLM tracing handlers.
Infrastructure adapters (e.g. LangfuseObservabilityHandler) must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Any


class IObservabilityHandler(ABC):
    @abstractmethod
    def callbacks(self) -> list[Any]:
        """Return the LangChain callback objects to attach to a model invocation."""
        ...

    @abstractmethod
    def flush(self) -> None:
        """Flush any buffered traces to the remote backend."""
        ...


class NullObservabilityHandler(IObservabilityHandler):
    """Used when tracing is not configured."""

    def callbacks(self) -> list[Any]:
        return []

    def flush(self) -> None:
        return None
