"""
Infrastructure adapter: AWS Secrets Manager → ISecretStore.

load_into_env() is called once at startup, before Settings.from_env(), when
FINNHUB_SECRET_ARN is set. That way the Finnhub credential can be supplied
out-of-band instead of living in a .env file.
"""

import json
import logging
import os

import boto3

from src.domain.ports.secret_store_port import ISecretStore

logger = logging.getLogger(__name__)


class SecretsManagerAdapter(ISecretStore):
    """Fetches and deserializes JSON secrets from AWS Secrets Manager."""

    def __init__(self, region: str | None = None, client=None) -> None:
        self._client = client or boto3.client(
            "secretsmanager",
            region_name=region or os.environ.get("AWS_DEFAULT_REGION", "us-east-1"),
        )

    def get_secret(self, secret_arn: str) -> dict:
        response = self._client.get_secret_value(SecretId=secret_arn)
        return json.loads(response["SecretString"])

    def load_into_env(self, secret_arn: str) -> list[str]:
        """Copy the secret's key-value pairs into os.environ.

        Keys already set in the environment win, so a local override is
        always possible. Returns the names of the variables that were set.
        """
        loaded = []
        for key, value in self.get_secret(secret_arn).items():
            if key in os.environ:
                continue
            os.environ[key] = str(value)
            loaded.append(key)
        logger.info("Loaded %d variable(s) from Secrets Manager", len(loaded))
        return loaded
