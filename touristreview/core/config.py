"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Firestore credentials and the storage backend are
validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    Everything has a default except the Firestore credentials, which are
    required unless firestore_enabled is False (tests, local tooling).
    """

    # App
    app_name: str = "touristreview"
    app_version: str = "1.0.0"
    debug: bool = False

    # CORS
    allowed_origins: str = "http://localhost:3000,http://localhost:8080"

    # Firebase / Firestore: use key (env) or path (file).
    firestore_enabled: bool = True
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None  # Path to JSON file
    # Firebase project that issues ID tokens; defaults to the service account's project_id.
    firebase_project_id: str | None = None
    # host:port of a local Firestore emulator; when set no credentials are needed.
    firestore_emulator_host: str | None = None
    firestore_timeout_seconds: float = 30.0
    # Commits that fail with ABORTED (contention) are retried up to this many attempts.
    transaction_max_attempts: int = 5

    # Storage (profile pictures)
    storage_backend: str = "local"
    storage_root: str = "/var/touristreview/storage"
    storage_base_url: str | None = None
    s3_bucket: str | None = None
    s3_region: str = "us-east-1"
    s3_endpoint_url: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: SecretStr | None = None
    profile_picture_prefix: str = "profilePics"
    max_profile_picture_size: int = 10 * 1024 * 1024  # 10MB, same cap the app used when reading back

    # Map search gateway (Nominatim-compatible geocoder)
    map_search_base_url: str = "https://nominatim.openstreetmap.org"
    map_search_user_agent: str = "touristreview/1.0"
    map_search_timeout_seconds: float = 10.0
    map_search_result_limit: int = 10
    # Region hint used when resolving stored places (meters across).
    place_region_span_meters: float = 1000.0

    # Fan-out resolution of stored place keys
    place_resolution_timeout_seconds: float = 15.0
    place_resolution_concurrency: int = 8

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_firestore_and_storage(self) -> "Settings":
        """Validate Firestore credentials and storage backend.

        - Firestore: FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH required
          when firestore_enabled is True, unless an emulator host (plus project id) is set.
        - Storage: 'local' or 's3'; s3 needs S3_BUCKET.
        """
        if self.firestore_enabled and self.firestore_emulator_host:
            if not self.firebase_project_id:
                raise ValueError(
                    "FIREBASE_PROJECT_ID is required when FIRESTORE_EMULATOR_HOST is set."
                )
        elif self.firestore_enabled:
            has_key = (
                self.firebase_service_account_key
                and self.firebase_service_account_key.get_secret_value()
            )
            if not has_key and not self.firebase_service_account_path:
                raise ValueError(
                    "Set FIREBASE_SERVICE_ACCOUNT_KEY (full JSON string) or "
                    "FIREBASE_SERVICE_ACCOUNT_PATH (path to JSON file), "
                    "or FIRESTORE_ENABLED=false to start without a document store."
                )
        if self.transaction_max_attempts < 1:
            raise ValueError("transaction_max_attempts must be at least 1")
        if self.place_resolution_concurrency < 1:
            raise ValueError("place_resolution_concurrency must be at least 1")
        if self.storage_backend == "s3":
            if not self.s3_bucket:
                raise ValueError(
                    "s3_bucket is required when storage_backend is 's3'. "
                    "Set S3_BUCKET environment variable or update .env file."
                )
        elif self.storage_backend != "local":
            raise ValueError(
                f"Invalid storage_backend '{self.storage_backend}'. "
                "Must be one of: 'local', 's3'"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
