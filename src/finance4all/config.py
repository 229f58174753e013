"""
Environment configuration for Finance4All.

Centralizes access to environment variables. Client keys keep the
``VITE_`` prefix so one ``.env`` file serves the web frontend and this
package; server keys (``DATABASE_URL``, ``FIREBASE_*``) are unprefixed.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_BACKEND_URL = "http://localhost:4000"
DEFAULT_API_TIMEOUT_MS = 30000
DEFAULT_AUTH_EMULATOR_HOST = "localhost:9099"


class FirebaseSettings(BaseModel):
    api_key: Optional[str] = None
    auth_domain: Optional[str] = None
    project_id: Optional[str] = None
    storage_bucket: Optional[str] = None
    messaging_sender_id: Optional[str] = None
    app_id: Optional[str] = None


class FeatureFlags(BaseModel):
    enable_analytics: bool = False
    enable_sentry: bool = False
    enable_debug_mode: bool = False


class Settings(BaseModel):
    """Resolved configuration values."""

    node_env: str = "development"

    # Backend API
    backend_url: str = DEFAULT_BACKEND_URL
    api_timeout: int = DEFAULT_API_TIMEOUT_MS  # milliseconds
    enable_api_logging: bool = False

    # Database
    database_url: Optional[str] = None

    # Emulators
    firestore_emulator_host: Optional[str] = None
    use_firestore_emulator: bool = False
    auth_emulator_host: Optional[str] = None

    firebase: FirebaseSettings = Field(default_factory=FirebaseSettings)
    features: FeatureFlags = Field(default_factory=FeatureFlags)

    @property
    def is_development(self) -> bool:
        return self.node_env == "development"

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    @property
    def graphql_endpoint(self) -> str:
        return f"{self.backend_url.rstrip('/')}/graphql"

    @property
    def api_timeout_seconds(self) -> float:
        return self.api_timeout / 1000


def _flag(value: Optional[str]) -> bool:
    return value == "true"


def _int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value else default
    except ValueError:
        logger.warning(f"Expected an integer, got {value!r}; using {default}")
        return default


def load_settings(
    env_file: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build settings from the environment.

    Args:
        env_file: Optional .env file to load first. Values already set in
                 the process environment win.
        environ: Mapping to read instead of ``os.environ`` (skips .env loading).

    Returns:
        Settings instance
    """
    if environ is None:
        load_dotenv(env_file)
        environ = os.environ

    backend_url = environ.get("VITE_BACKEND_URL") or environ.get("VITE_API_URL")
    if not backend_url:
        logger.warning(f"VITE_BACKEND_URL is not set. Using default: {DEFAULT_BACKEND_URL}")
        backend_url = DEFAULT_BACKEND_URL

    firestore_emulator_host = environ.get("VITE_FIRESTORE_EMULATOR_HOST") or environ.get(
        "FIRESTORE_EMULATOR_HOST"
    )
    use_emulator = _flag(environ.get("VITE_USE_FIRESTORE_EMULATOR")) or bool(
        environ.get("FIRESTORE_EMULATOR_HOST")
    )
    auth_emulator_host = environ.get("FIREBASE_AUTH_EMULATOR_HOST")
    if use_emulator and not auth_emulator_host:
        auth_emulator_host = DEFAULT_AUTH_EMULATOR_HOST

    return Settings(
        node_env=environ.get("VITE_NODE_ENV") or "development",
        backend_url=backend_url,
        api_timeout=_int(environ.get("VITE_API_TIMEOUT"), DEFAULT_API_TIMEOUT_MS),
        enable_api_logging=_flag(environ.get("VITE_ENABLE_API_LOGGING")),
        database_url=environ.get("DATABASE_URL"),
        firestore_emulator_host=firestore_emulator_host,
        use_firestore_emulator=use_emulator,
        auth_emulator_host=auth_emulator_host,
        firebase=FirebaseSettings(
            api_key=environ.get("VITE_FIREBASE_API_KEY") or environ.get("FIREBASE_API_KEY"),
            auth_domain=environ.get("VITE_FIREBASE_AUTH_DOMAIN"),
            project_id=environ.get("VITE_FIREBASE_PROJECT_ID")
            or environ.get("FIREBASE_PROJECT_ID"),
            storage_bucket=environ.get("VITE_FIREBASE_STORAGE_BUCKET"),
            messaging_sender_id=environ.get("VITE_FIREBASE_MESSAGING_SENDER_ID"),
            app_id=environ.get("VITE_FIREBASE_APP_ID"),
        ),
        features=FeatureFlags(
            enable_analytics=_flag(environ.get("VITE_ENABLE_ANALYTICS")),
            enable_sentry=_flag(environ.get("VITE_ENABLE_SENTRY")),
            enable_debug_mode=_flag(environ.get("VITE_ENABLE_DEBUG_MODE")),
        ),
    )
