"""
Firebase initialization and helpers
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any
import base64
import os

import firebase_admin
from firebase_admin import credentials, firestore

from devevent.core.config import settings
from devevent.core.errors import ConfigurationError


def load_credentials_info() -> dict[str, Any] | None:
    """Read service account info from FIREBASE_CREDENTIALS_JSON, _B64 or _FILE, in that order."""
    if settings.FIREBASE_CREDENTIALS_JSON:
        return json.loads(settings.FIREBASE_CREDENTIALS_JSON)
    if settings.FIREBASE_CREDENTIALS_B64:
        decoded = base64.b64decode(settings.FIREBASE_CREDENTIALS_B64).decode("utf-8")
        return json.loads(decoded)
    if settings.FIREBASE_CREDENTIALS_FILE and os.path.exists(settings.FIREBASE_CREDENTIALS_FILE):
        with open(settings.FIREBASE_CREDENTIALS_FILE, "r", encoding="utf-8") as f:
            return json.load(f)
    return None


@lru_cache(maxsize=1)
def get_firestore_client():
    """Initialize the Firebase app once per process and return its Firestore client."""
    if not firebase_admin._apps:
        info = load_credentials_info()
        if not info:
            raise ConfigurationError(
                "Firebase credentials not provided. Set FIREBASE_CREDENTIALS_FILE, "
                "FIREBASE_CREDENTIALS_JSON, or FIREBASE_CREDENTIALS_B64"
            )

        cred = credentials.Certificate(info)
        firebase_admin.initialize_app(cred, {"projectId": settings.firestore_project})

    return firestore.client()
