"""
Infrastructure adapter: AWS Secrets Manager → ISecretStore.

load_into_env() is called once by the composition root, before the Bedrock
and Langfuse adapters are built, so credentials such as LANGFUSE_SECRET_KEY
or MONGODB_URI can live in a single JSON secret.
"""

import json
import logging
import os
from typing import Any, Optional

import boto3

from src.domain.ports.secret_store_port import ISecretStore

logger = logging.getLogger(__name__)


class SecretsManagerAdapter(ISecretStore):
    """Fetches and deserializes secrets from AWS Secrets Manager."""

    def __init__(self, region: Optional[str] = None, client: Any = None) -> None:
        self._client = client or boto3.client(
            "secretsmanager",
            region_name=region or os.environ.get("AWS_DEFAULT_REGION", "us-east-1"),
        )

    def get_secret(self, secret_id: str) -> dict:
        """Fetch and deserialize a JSON secret by ARN or name."""
        response = self._client.get_secret_value(SecretId=secret_id)
        return json.loads(response["SecretString"])

    def load_into_env(self, secret_id: str, overwrite: bool = False) -> list[str]:
        """Inject the key-value pairs of a JSON secret into os.environ.

        Variables already present in the environment win unless *overwrite* is set,
        so a local .env can still override a deployed secret.
        """
        loaded: list[str] = []
        for key, value in self.get_secret(secret_id).items():
            if not overwrite and key in os.environ:
                continue
            os.environ[key] = str(value)
            loaded.append(key)
        logger.info("Loaded %d variables from secret store", len(loaded))
        return loaded
