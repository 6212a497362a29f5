"""
Firebase service for storing quiz assessments and usage events in Firestore.
"""
from __future__ import annotations

import os
import json
import logging
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from storage import StorageError, summarize_platform_metrics

logger = logging.getLogger(__name__)


def _to_datetime(value: Any) -> datetime:
    # Firestore returns DatetimeWithNanoseconds, a datetime subclass
    if isinstance(value, datetime):
        return value
    return datetime.now(timezone.utc)


class FirebaseService:
    """Firestore-backed storage for users, assessments and tracking events."""

    _app = None
    _db = None

    def __init__(self, db=None):
        """
        Initialize Firebase Admin SDK.

        Args:
            db: Optional Firestore client to use instead of initializing the SDK
        """
        if db is not None:
            self.db = db
            return

        if FirebaseService._app is None:
            self._initialize_firebase()

        if FirebaseService._db is None:
            FirebaseService._db = firestore.client()
            logger.info("[Firebase] Firestore client created")

        self.db = FirebaseService._db

    def _initialize_firebase(self):
        """
        Initialize Firebase Admin SDK with credentials from environment variables.

        Priority:
        1. GOOGLE_APPLICATION_CREDENTIALS_JSON or FIREBASE_ADMIN_SDK_JSON (JSON string)
        2. GOOGLE_APPLICATION_CREDENTIALS (file path to JSON file)
        3. FIREBASE_PROJECT_ID (for Application Default Credentials)
        """
        try:
            FirebaseService._app = firebase_admin.get_app()
            logger.info("[Firebase] Firebase already initialized")
            return
        except ValueError:
            pass

        try:
            firebase_json = os.getenv("GOOGLE_APPLICATION_CREDENTIALS_JSON") or os.getenv("FIREBASE_ADMIN_SDK_JSON")
            if firebase_json:
                try:
                    cred_dict = json.loads(firebase_json)
                except json.JSONDecodeError as e:
                    raise ValueError(f"Invalid JSON in Firebase credentials variable: {str(e)}")
                FirebaseService._app = firebase_admin.initialize_app(credentials.Certificate(cred_dict))
                logger.info("[Firebase] Initialized from JSON credentials")
                return

            service_account_path = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
            if service_account_path:
                path_to_use = os.path.abspath(os.path.normpath(service_account_path))
                if not os.path.exists(path_to_use):
                    raise FileNotFoundError(f"Service account file not found: {path_to_use}")
                FirebaseService._app = firebase_admin.initialize_app(credentials.Certificate(path_to_use))
                logger.info(f"[Firebase] Initialized from service account file {path_to_use}")
                return

            project_id = os.getenv("FIREBASE_PROJECT_ID")
            if not project_id:
                raise ValueError(
                    "No Firebase credentials found. Please set one of:\n"
                    "  - GOOGLE_APPLICATION_CREDENTIALS_JSON or FIREBASE_ADMIN_SDK_JSON (JSON string)\n"
                    "  - GOOGLE_APPLICATION_CREDENTIALS (file path)\n"
                    "  - FIREBASE_PROJECT_ID (for Application Default Credentials)"
                )
            FirebaseService._app = firebase_admin.initialize_app(options={"projectId": project_id})
            logger.info(f"[Firebase] Initialized with project ID {project_id}")

        except Exception as e:
            if isinstance(e, (RuntimeError, ValueError, FileNotFoundError)):
                raise
            raise RuntimeError(f"Failed to initialize Firebase: {str(e)}")

    # Users

    @staticmethod
    def _user_from_doc(doc) -> Dict[str, Any]:
        data = doc.to_dict() or {}
        return {
            "id": doc.id,
            "email": data.get("email"),
            "display_name": data.get("displayName"),
            "photo_url": data.get("photoURL"),
            "firebase_uid": data.get("firebaseUid"),
            "created_at": _to_datetime(data.get("createdAt")),
        }

    def create_user(
        self,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
        firebase_uid: Optional[str] = None
    ) -> Dict[str, Any]:
        document_data = {
            "email": email,
            "displayName": display_name,
            "photoURL": photo_url,
            "firebaseUid": firebase_uid,
            "createdAt": datetime.now(timezone.utc),
        }
        try:
            _, doc_ref = self.db.collection("users").add(document_data)
        except Exception as e:
            raise StorageError(f"Failed to create user: {str(e)}")
        return {
            "id": doc_ref.id,
            "email": email,
            "display_name": display_name,
            "photo_url": photo_url,
            "firebase_uid": firebase_uid,
            "created_at": document_data["createdAt"],
        }

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            doc = self.db.collection("users").document(user_id).get()
        except Exception as e:
            raise StorageError(f"Failed to fetch user {user_id}: {str(e)}")
        return self._user_from_doc(doc) if doc.exists else None

    def get_user_by_firebase_uid(self, firebase_uid: str) -> Optional[Dict[str, Any]]:
        try:
            docs = list(
                self.db.collection("users")
                .where(filter=FieldFilter("firebaseUid", "==", firebase_uid))
                .limit(1)
                .stream()
            )
        except Exception as e:
            raise StorageError(f"Failed to fetch user by Firebase UID {firebase_uid}: {str(e)}")
        return self._user_from_doc(docs[0]) if docs else None

    # Assessments

    @staticmethod
    def _assessment_from_doc(doc) -> Dict[str, Any]:
        data = doc.to_dict() or {}
        return {
            "id": doc.id,
            "user_id": data.get("userId"),
            "answers": data.get("answers") or [],
            "top_career": data.get("topCareer", ""),
            "match_score": data.get("matchScore", 0),
            "created_at": _to_datetime(data.get("createdAt")),
        }

    def create_assessment(
        self,
        user_id: Optional[str],
        answers: List[Dict[str, Any]],
        top_career: str,
        match_score: float
    ) -> Dict[str, Any]:
        """
        Save a quiz result to the assessments collection.

        Args:
            user_id: Owner of the assessment, or None for anonymous users
            answers: Submitted answers as camelCase dicts
            top_career: Title of the best matching career
            match_score: Overall score of the top career

        Returns:
            The stored assessment including its document ID
        """
        document_data = {
            "userId": user_id,
            "answers": answers,
            "topCareer": top_career,
            "matchScore": match_score,
            "createdAt": datetime.now(timezone.utc),
        }
        try:
            _, doc_ref = self.db.collection("assessments").add(document_data)
        except Exception as e:
            raise StorageError(f"Failed to save assessment for user {user_id}: {str(e)}")

        logger.info(f"[Firebase] Saved assessment assessments/{doc_ref.id}")
        return {
            "id": doc_ref.id,
            "user_id": user_id,
            "answers": answers,
            "top_career": top_career,
            "match_score": match_score,
            "created_at": document_data["createdAt"],
        }

    def get_assessment(self, assessment_id: str) -> Optional[Dict[str, Any]]:
        try:
            doc = self.db.collection("assessments").document(assessment_id).get()
        except Exception as e:
            raise StorageError(f"Failed to fetch assessment {assessment_id}: {str(e)}")
        return self._assessment_from_doc(doc) if doc.exists else None

    def get_assessments_by_user_id(self, user_id: str) -> List[Dict[str, Any]]:
        """Assessments for a user, newest first."""
        try:
            docs = (
                self.db.collection("assessments")
                .where(filter=FieldFilter("userId", "==", user_id))
                .stream()
            )
            assessments = [self._assessment_from_doc(doc) for doc in docs]
        except Exception as e:
            raise StorageError(f"Failed to fetch assessments for user {user_id}: {str(e)}")

        # Sorted client-side, the query has no orderBy
        assessments.sort(key=lambda a: a["created_at"], reverse=True)
        return assessments

    # Tracking

    def _track(self, collection: str, user_id: str, career_title: str) -> None:
        try:
            self.db.collection(collection).add({
                "userId": user_id,
                "careerTitle": career_title,
                "timestamp": datetime.now(timezone.utc),
            })
        except Exception as e:
            raise StorageError(f"Failed to record {collection} event for user {user_id}: {str(e)}")

    def track_career_exploration(self, user_id: str, career_title: str) -> None:
        self._track("careerExplorations", user_id, career_title)

    def track_ar_preview(self, user_id: str, career_title: str) -> None:
        self._track("arPreviews", user_id, career_title)

    def get_platform_metrics(self) -> Dict[str, Any]:
        try:
            scores = [
                (doc.to_dict() or {}).get("matchScore", 0)
                for doc in self.db.collection("assessments").stream()
            ]
            titles = [
                (doc.to_dict() or {}).get("careerTitle")
                for doc in self.db.collection("careerExplorations").stream()
            ]
            ar_count = sum(1 for _ in self.db.collection("arPreviews").stream())
        except Exception as e:
            raise StorageError(f"Failed to compute platform metrics: {str(e)}")
        return summarize_platform_metrics(scores, [t for t in titles if t], ar_count)


# Singleton instance
_firebase_service: Optional[FirebaseService] = None


def get_firebase_service() -> FirebaseService:
    """Get or create the Firebase service instance."""
    global _firebase_service
    if _firebase_service is None:
        _firebase_service = FirebaseService()
    return _firebase_service
