"""Firestore client (REST-based, no firebase-admin).

Built at app startup from either FIREBASE_SERVICE_ACCOUNT_KEY (JSON string)
or FIREBASE_SERVICE_ACCOUNT_PATH (file path), or pointed at a local
emulator via FIRESTORE_EMULATOR_HOST. The lifespan owns the returned client
and closes it at shutdown; nothing here keeps module-level state.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from touristreview.core.config import Settings
from touristreview.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)

logger = logging.getLogger(__name__)


def load_service_account(settings: Settings) -> dict | None:
    """Return service account dict from env key or file path."""
    key_json = (
        settings.firebase_service_account_key.get_secret_value()
        if settings.firebase_service_account_key
        else None
    )
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            logger.warning(
                "FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: %s (resolved: %s)",
                path,
                resolved,
            )
            return None
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    return None


def create_firestore_client(settings: Settings) -> FirestoreRESTClient | None:
    """Build the Firestore client (REST API + google-auth).

    Returns None when Firestore is disabled. Credential problems raise, so a
    misconfigured deployment fails at startup instead of on first request.
    """
    if not settings.firestore_enabled:
        logger.info("Firestore disabled (FIRESTORE_ENABLED=false)")
        return None

    if settings.firestore_emulator_host:
        logger.info("Using Firestore emulator at %s", settings.firestore_emulator_host)
        return FirestoreRESTClient(
            settings.firebase_project_id or "",
            None,
            base_url=f"http://{settings.firestore_emulator_host}/v1",
            timeout=settings.firestore_timeout_seconds,
        )

    key_dict = load_service_account(settings)
    if not key_dict:
        raise ValueError("Firebase service account credentials could not be loaded")
    project_id = settings.firebase_project_id or key_dict.get("project_id")
    if not project_id:
        raise ValueError("Firebase service account JSON missing 'project_id'")

    client = FirestoreRESTClient(
        project_id,
        _get_credentials(key_dict),
        timeout=settings.firestore_timeout_seconds,
    )
    logger.info("Firestore client initialized for project %s", project_id)
    return client
