from datetime import datetime
import logging

from fastapi import HTTPException, status
from google.cloud.firestore_v1.base_query import FieldFilter

from app.models.user import User, UserCreate, UserSummary
from app.utils.firestore_exception import handle_firestore_exceptions


logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db):
        self.db = db
        self.collection = db.collection("users")

    @handle_firestore_exceptions
    def create_user(self, data: UserCreate) -> User:
        logger.info(f"Creating user with email: {data.email}")
        doc_ref = self.collection.document()

        now = datetime.now()
        user_data = {
            **data.model_dump(mode="json"),
            "id": doc_ref.id,
            "role": "student",
            "created_at": now,
            "updated_at": now,
        }
        doc_ref.set(user_data)

        logger.info(
            f"Created user: id={doc_ref.id}, email={data.email}, firebase_uid={data.firebase_uid}"
        )
        return User(**user_data)

    @handle_firestore_exceptions
    def find_user(self, user_id: str) -> User | None:
        doc = self.collection.document(user_id).get()
        if not doc.exists:
            return None

        user_data = doc.to_dict()
        user_data["id"] = doc.id
        return User(**user_data)

    @handle_firestore_exceptions
    def get_user(self, user_id: str) -> User:
        user = self.find_user(user_id)
        if user is None:
            logger.warning(f"User not found: id={user_id}")
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User with ID '{user_id}' not found.",
            )
        return user

    @handle_firestore_exceptions
    def get_user_by_firebase_uid(self, firebase_uid: str) -> User | None:
        docs = (
            self.collection.where(filter=FieldFilter("firebase_uid", "==", firebase_uid))
            .limit(1)
            .get()
        )
        for doc in docs:
            user_data = doc.to_dict()
            user_data["id"] = doc.id
            return User(**user_data)
        return None

    @handle_firestore_exceptions
    def get_or_create_user(self, data: UserCreate) -> User:
        user = self.get_user_by_firebase_uid(data.firebase_uid)
        if user is not None:
            return user

        logger.info(f"No user for firebase_uid={data.firebase_uid}, creating one")
        return self.create_user(data)

    @handle_firestore_exceptions
    def get_user_summary(self, user_id: str) -> UserSummary:
        """Name and email for display; missing users yield an id-only summary."""
        doc = self.collection.document(user_id).get()
        if not doc.exists:
            return UserSummary(id=user_id)

        user_data = doc.to_dict()
        return UserSummary(id=user_id, name=user_data.get("name"), email=user_data.get("email"))
