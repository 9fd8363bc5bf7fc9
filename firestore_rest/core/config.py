"""Client configuration (settings and environment).

Single source of truth for connection configuration. Uses pydantic-settings
with .env support; every variable is read with the FIRESTORE_ prefix
(e.g. FIRESTORE_PROJECT_ID, FIRESTORE_KEY_FILE_PATH).
"""

import json
from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from firestore_rest.core.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_DATABASE_ID,
    MAX_BATCH_OPERATIONS,
)


class Settings(BaseSettings):
    """Firestore client settings loaded from environment and .env.

    Credentials are resolved in order: service_account_key (full JSON
    string), key_file_path, then Application Default Credentials. The
    emulator needs none of them.
    """

    # Project
    project_id: str = ""
    database_id: str = DEFAULT_DATABASE_ID

    # Credentials: key (env JSON) or path (file). Neither = ADC.
    service_account_key: SecretStr | None = None
    key_file_path: str | None = None

    # Transport
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 5.0
    connect_timeout_seconds: float = 1.0

    # Emulator
    emulator_enabled: bool = False
    emulator_host: str = "localhost"
    emulator_port: int = 8080

    # Writes
    max_batch_operations: int = MAX_BATCH_OPERATIONS

    debug: bool = False

    model_config = SettingsConfigDict(
        env_prefix="FIRESTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_project_and_limits(self) -> "Settings":
        """Validate project id, emulator port, and batch limit.

        - project_id may be omitted only when the service account JSON carries one.
        - emulator_port must be a valid TCP port.
        - max_batch_operations must be positive.
        """
        if not self.project_id:
            key_project = self._project_id_from_key()
            if not key_project:
                raise ValueError(
                    "FIRESTORE_PROJECT_ID is required (or a FIRESTORE_SERVICE_ACCOUNT_KEY "
                    "containing 'project_id')."
                )
            self.project_id = key_project
        if not 0 < self.emulator_port < 65536:
            raise ValueError(
                f"emulator_port must be between 1 and 65535, got: {self.emulator_port}"
            )
        if self.max_batch_operations <= 0:
            raise ValueError(
                f"max_batch_operations must be positive, got: {self.max_batch_operations}"
            )
        return self

    def _project_id_from_key(self) -> str | None:
        if not self.service_account_key:
            return None
        try:
            key = json.loads(self.service_account_key.get_secret_value())
        except json.JSONDecodeError:
            return None
        return key.get("project_id") if isinstance(key, dict) else None

    @property
    def api_base_url(self) -> str:
        """REST base URL, pointing at the emulator when it is enabled."""
        if self.emulator_enabled:
            return f"http://{self.emulator_host}:{self.emulator_port}/v1"
        return self.base_url.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Return cached client settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
