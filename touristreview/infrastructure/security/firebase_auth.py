"""Verify Firebase ID tokens with google-auth; the token's uid identifies the caller.

Sign-in itself happens client-side against Firebase Auth. Verification
fetches Google's public certificates (cached by google-auth) with a blocking
requests call, so it runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging

from google.auth import exceptions as google_auth_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from touristreview.domain.exceptions import AuthenticationException

logger = logging.getLogger(__name__)


class FirebaseTokenVerifier:
    """Checks signature, expiry, issuer and audience of Firebase ID tokens."""

    def __init__(self, project_id: str) -> None:
        self._project_id = project_id
        self._request = google_requests.Request()

    def _verify(self, token: str) -> dict:
        return id_token.verify_firebase_token(
            token, self._request, audience=self._project_id
        )

    async def verify(self, token: str) -> str:
        """Return the uid of a valid token; raise AuthenticationException otherwise."""
        try:
            claims = await asyncio.to_thread(self._verify, token)
        except (ValueError, google_auth_exceptions.GoogleAuthError) as e:
            logger.info("Rejected ID token: %s", e)
            raise AuthenticationException("Invalid or expired ID token") from e
        uid = (claims or {}).get("user_id") or (claims or {}).get("sub")
        if not uid:
            raise AuthenticationException("ID token has no subject")
        return uid
