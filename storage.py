"""
Assessment storage.

Two interchangeable backends share one interface: Firestore (see
firebase_service.py) and an in-process memory store used when Firebase is
not configured.
"""
from __future__ import annotations

import logging
import os
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

FIREBASE_CREDENTIAL_VARS = (
    "GOOGLE_APPLICATION_CREDENTIALS_JSON",
    "FIREBASE_ADMIN_SDK_JSON",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "FIREBASE_PROJECT_ID",
)


class StorageError(RuntimeError):
    """Raised when a storage backend cannot complete an operation."""


def summarize_platform_metrics(
    match_scores: List[float],
    explored_titles: List[str],
    ar_preview_count: int
) -> Dict[str, Any]:
    """Aggregate raw store contents into the platform metrics payload."""
    average = int(sum(match_scores) / len(match_scores) + 0.5) if match_scores else 0
    return {
        "students_helped": len(match_scores),
        "careers_explored": len(set(explored_titles)),
        "ar_previews_completed": ar_preview_count,
        "average_match_score": average,
        "last_updated": datetime.now(timezone.utc),
    }


class MemoryStorage:
    """Process-local store. Data is lost on restart."""

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[str, Dict[str, Any]] = {}
        self._assessments: Dict[str, Dict[str, Any]] = {}
        self._explorations: List[Dict[str, Any]] = []
        self._ar_previews: List[Dict[str, Any]] = []

    # Users

    def create_user(
        self,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
        firebase_uid: Optional[str] = None
    ) -> Dict[str, Any]:
        user = {
            "id": str(uuid.uuid4()),
            "email": email,
            "display_name": display_name,
            "photo_url": photo_url,
            "firebase_uid": firebase_uid,
            "created_at": datetime.now(timezone.utc),
        }
        with self._lock:
            self._users[user["id"]] = user
        return dict(user)

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        user = self._users.get(user_id)
        return dict(user) if user else None

    def get_user_by_firebase_uid(self, firebase_uid: str) -> Optional[Dict[str, Any]]:
        for user in list(self._users.values()):
            if user["firebase_uid"] == firebase_uid:
                return dict(user)
        return None

    # Assessments

    def create_assessment(
        self,
        user_id: Optional[str],
        answers: List[Dict[str, Any]],
        top_career: str,
        match_score: float
    ) -> Dict[str, Any]:
        assessment = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "answers": list(answers),
            "top_career": top_career,
            "match_score": match_score,
            "created_at": datetime.now(timezone.utc),
        }
        with self._lock:
            self._assessments[assessment["id"]] = assessment
        logger.info(f"Stored assessment {assessment['id']} (user={user_id}, top={top_career})")
        return dict(assessment)

    def get_assessment(self, assessment_id: str) -> Optional[Dict[str, Any]]:
        assessment = self._assessments.get(assessment_id)
        return dict(assessment) if assessment else None

    def get_assessments_by_user_id(self, user_id: str) -> List[Dict[str, Any]]:
        """Assessments for a user, newest first."""
        # Newest insertion first so equal timestamps still come back newest first
        matches = [dict(a) for a in reversed(list(self._assessments.values())) if a["user_id"] == user_id]
        matches.sort(key=lambda a: a["created_at"], reverse=True)
        return matches

    # Tracking

    def track_career_exploration(self, user_id: str, career_title: str) -> None:
        with self._lock:
            self._explorations.append({
                "user_id": user_id,
                "career_title": career_title,
                "timestamp": datetime.now(timezone.utc),
            })

    def track_ar_preview(self, user_id: str, career_title: str) -> None:
        with self._lock:
            self._ar_previews.append({
                "user_id": user_id,
                "career_title": career_title,
                "timestamp": datetime.now(timezone.utc),
            })

    def get_platform_metrics(self) -> Dict[str, Any]:
        with self._lock:
            scores = [a["match_score"] for a in self._assessments.values()]
            titles = [e["career_title"] for e in self._explorations]
            ar_count = len(self._ar_previews)
        return summarize_platform_metrics(scores, titles, ar_count)


def firebase_configured() -> bool:
    return any(os.getenv(name) for name in FIREBASE_CREDENTIAL_VARS)


# Singleton instance
_storage = None


def get_storage(backend: str = "auto"):
    """
    Get or create the storage backend.

    Args:
        backend: "firestore", "memory", or "auto" (Firestore when credentials
            are configured, memory otherwise)
    """
    global _storage
    if _storage is not None:
        return _storage

    backend = (backend or "auto").lower()
    if backend not in ("auto", "firestore", "memory"):
        raise ValueError(f"Unknown storage backend: {backend}")

    if backend == "firestore" or (backend == "auto" and firebase_configured()):
        from firebase_service import get_firebase_service
        _storage = get_firebase_service()
        logger.info("Using Firestore storage")
    else:
        _storage = MemoryStorage()
        logger.warning("Firebase not configured, using in-memory storage")
    return _storage


def reset_storage() -> None:
    global _storage
    _storage = None
