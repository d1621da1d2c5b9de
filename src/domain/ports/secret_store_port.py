"""
Port (interface) for secret stores holding upstream credentials.
Infrastructure adapters (e.g. SecretsManagerAdapter) must implement this interface.
"""

from abc import ABC, abstractmethod


class ISecretStore(ABC):
    @abstractmethod
    def get_secret(self, secret_arn: str) -> dict:
        """Fetch a JSON secret by ARN and return its key-value pairs."""
        ...

    @abstractmethod
    def load_into_env(self, secret_arn: str) -> list[str]:
        """Export the secret's key-value pairs as environment variables."""
        ...
