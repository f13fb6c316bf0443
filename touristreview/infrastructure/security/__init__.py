"""Caller authentication (Firebase ID token verification)."""

from touristreview.infrastructure.security.firebase_auth import FirebaseTokenVerifier

__all__ = ["FirebaseTokenVerifier"]
