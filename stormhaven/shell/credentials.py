"""Credential lookup - Imperative Shell.

Resolves the place search key and any other ${...} configuration
placeholders: ${secret:name} or ${secret:name:version} is read from Google
Cloud Secret Manager, ${NAME} from the environment.
"""

import logging
import os
import re
from dataclasses import dataclass

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import secretmanager


logger = logging.getLogger(__name__)


PLACEHOLDER_PATTERN = re.compile(
    r"^\$\{(?:secret:(?P<secret>[^}:]+)(?::(?P<version>[^}]+))?"
    r"|(?P<env>[A-Za-z_][A-Za-z0-9_]*))\}$"
)


@dataclass(frozen=True)
class SecretRef:
    """One version of a secret in a GCP project.

    Attributes:
        project_id: Project that owns the secret
        name: Secret name, e.g. "places-api-key"
        version: Version number or "latest"
    """
    project_id: str
    name: str
    version: str = "latest"

    @property
    def path(self) -> str:
        return f"projects/{self.project_id}/secrets/{self.name}/versions/{self.version}"


class CredentialStore:
    """Reads API credentials for one GCP project.

    The Secret Manager client is created on the first read, so a store that
    only ever resolves ${ENV} placeholders never talks to GCP.
    """

    def __init__(
        self,
        project_id: str,
        api: secretmanager.SecretManagerServiceClient | None = None,
    ) -> None:
        self.project_id = project_id
        self._api = api

    @property
    def api(self) -> secretmanager.SecretManagerServiceClient:
        if self._api is None:
            self._api = secretmanager.SecretManagerServiceClient()
        return self._api

    def read(self, name: str, version: str = "latest") -> str | None:
        """Read a secret, or None if it cannot be accessed.

        This method performs I/O.
        """
        ref = SecretRef(self.project_id, name, version)
        try:
            response = self.api.access_secret_version(request={"name": ref.path})
        except (GoogleAPIError, GoogleAuthError) as e:
            logger.error("Secret %s unavailable: %s", ref.path, e)
            return None

        logger.info("Read secret %s (version %s)", name, version)
        return response.payload.data.decode("UTF-8")

    def resolve(self, value: str) -> str:
        """Expand a whole-value ${secret:...} or ${NAME} placeholder.

        Anything else, and any placeholder that cannot be resolved, is
        returned unchanged.
        """
        match = PLACEHOLDER_PATTERN.match(value)
        if match is None:
            return value

        if match.group("secret"):
            secret = self.read(match.group("secret"), match.group("version") or "latest")
            return value if secret is None else secret

        env_value = os.environ.get(match.group("env"))
        if env_value:
            return env_value

        logger.warning("Environment variable %s not set", match.group("env"))
        return value

    def read_or_env(self, secret_name: str, env_var_name: str) -> str | None:
        """Read a secret, falling back to an environment variable.

        Returns:
            The secret, else the env var, else None
        """
        secret = self.read(secret_name)
        if secret:
            return secret

        env_value = os.environ.get(env_var_name)
        if env_value:
            logger.info("Secret %s unavailable; using $%s", secret_name, env_var_name)
            return env_value

        return None
