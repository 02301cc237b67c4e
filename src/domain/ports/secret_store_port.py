"""
Port (interface) for secret stores.
Infrastructure adapters (e.g. SecretsManagerAdapter) must implement this interface.
"""

from abc import ABC, abstractmethod


class ISecretStore(ABC):
    @abstractmethod
    def get_secret(self, secret_id: str) -> dict:
        """Fetch and deserialize a secret. Returns the key-value pairs."""
        ...

    @abstractmethod
    def load_into_env(self, secret_id: str, overwrite: bool = False) -> list[str]:
        """Export the secret's key-value pairs as environment variables.

        Returns the names of the variables that were set.
        """
        ...
