"""
Port (interface) for generative-language providers.
Infrastructure adapters (e.g. BedrockChatAdapter) must implement this interface.
"""

from abc import ABC, abstractmethod


class ILanguageModel(ABC):
    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Return the model's text completion for *prompt*.

        Raises:
            RateLimitedError: the provider throttled the request.
            UpstreamError:    any other provider failure, including an empty answer.
        """
        ...
