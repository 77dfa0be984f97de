"""Firebase Realtime Database configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

DEFAULT_FIREBASE_COLLECTION = "sindicatos"
FIREBASE_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True, slots=True)
class FirebaseConfig:
    db_url: str
    secret: str
    collection: str
    resilience: ResilienceConfig


def get_firebase_config(*, resilience: ResilienceConfig | None = None) -> FirebaseConfig:
    values = require_env_vars(("FIREBASE_DB_URL", "FIREBASE_SECRET"))
    db_url = values["FIREBASE_DB_URL"].strip().rstrip("/")
    collection = (
        optional_env_var("FIREBASE_COLLECTION", DEFAULT_FIREBASE_COLLECTION)
        or DEFAULT_FIREBASE_COLLECTION
    )
    return FirebaseConfig(
        db_url=db_url,
        secret=values["FIREBASE_SECRET"].strip(),
        collection=collection,
        resilience=resilience
        or ResilienceConfig(
            name="firebase",
            base_url=db_url + "/",
            timeout_seconds=FIREBASE_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        ),
    )
