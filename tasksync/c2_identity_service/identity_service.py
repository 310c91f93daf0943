"""Service layer for user registration, login and credential resolution."""

import logging
import re
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from tasksync.c1_database_session import DatabaseManager
from tasksync.c1_errors import InvalidInputError, NotFoundError
from tasksync.c1_user_models import User
from tasksync.c2_identity_service.passwords import (
    MAX_PASSWORD_BYTES,
    hash_password,
    verify_password,
)
from tasksync.c2_identity_service.tokens import TokenIssuer

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8
MAX_NAME_LENGTH = 100


class IdentityService:
    """Owns user identities and the credentials that resolve to them."""

    def __init__(self, db_manager: DatabaseManager, token_issuer: TokenIssuer, bcrypt_rounds: int = 12):
        """Initialize identity service.

        Args:
            db_manager: Database manager instance
            token_issuer: Signs and verifies bearer tokens
            bcrypt_rounds: Cost factor used when hashing new passwords
        """
        self.db_manager = db_manager
        self.token_issuer = token_issuer
        self.bcrypt_rounds = bcrypt_rounds

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------
    def issue_token(self, user_id: str) -> str:
        """Issue a credential for a user identity."""
        return self.token_issuer.issue(user_id)

    def resolve_token(self, token: Optional[str]) -> str:
        """Resolve a bearer credential to a stable user id.

        Raises:
            UnauthenticatedError: if the credential is missing or invalid
        """
        return self.token_issuer.resolve(token)

    # ------------------------------------------------------------------
    # Registration and login
    # ------------------------------------------------------------------
    def register(
        self, email: str, password: str, name: Optional[str] = None
    ) -> Tuple[Dict[str, Any], str]:
        """Create a user and return its public form with a fresh token.

        Raises:
            InvalidInputError: bad email, short password, long name, or email in use
        """
        email = (email or "").strip()
        if not EMAIL_PATTERN.match(email):
            raise InvalidInputError("Invalid email format")
        if password is None or len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInputError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise InvalidInputError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        if name is not None and len(name) > MAX_NAME_LENGTH:
            raise InvalidInputError(f"Name must be at most {MAX_NAME_LENGTH} characters")

        password_hash = hash_password(password, rounds=self.bcrypt_rounds)

        try:
            with self.db_manager.session_scope() as db:
                if db.query(User).filter_by(email=email).first():
                    raise InvalidInputError("Email already in use")
                user = User(
                    id=str(uuid.uuid4()),
                    email=email,
                    name=name or None,
                    password_hash=password_hash,
                )
                db.add(user)
                db.flush()
                user_data = user.to_dict()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            raise InvalidInputError("Email already in use")

        logger.info(f"Registered user {user_data['id']}")
        return user_data, self.issue_token(user_data["id"])

    def login(self, email: str, password: str) -> Tuple[Dict[str, Any], str]:
        """Verify credentials and return the user with a fresh token.

        Raises:
            InvalidInputError: on any credential mismatch
        """
        email = (email or "").strip()
        if not EMAIL_PATTERN.match(email):
            raise InvalidInputError("Invalid email format")

        with self.db_manager.session_scope() as db:
            user = db.query(User).filter_by(email=email).first()
            if not user or not verify_password(password or "", user.password_hash):
                logger.info("Rejected login attempt")
                raise InvalidInputError("Invalid credentials")
            user_data = user.to_dict()

        return user_data, self.issue_token(user_data["id"])

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------
    def get_user(self, user_id: str) -> Dict[str, Any]:
        """Public form of a user.

        Raises:
            NotFoundError: if no such user exists
        """
        with self.db_manager.session_scope() as db:
            user = db.query(User).filter_by(id=user_id).first()
            if not user:
                raise NotFoundError("User not found")
            return user.to_dict()

    def update_profile(self, user_id: str, name: str) -> Dict[str, Any]:
        """Change a user's display name."""
        name = (name or "").strip()
        if not name or len(name) > MAX_NAME_LENGTH:
            raise InvalidInputError(f"Name must be between 1 and {MAX_NAME_LENGTH} characters")

        with self.db_manager.session_scope() as db:
            user = db.query(User).filter_by(id=user_id).first()
            if not user:
                raise NotFoundError("User not found")
            user.name = name
            db.flush()
            return user.to_dict()

    def list_users(self) -> List[Dict[str, Any]]:
        """All users, oldest first (used to pick assignees)."""
        with self.db_manager.session_scope() as db:
            users = db.query(User).order_by(User.created_at.asc(), User.email.asc()).all()
            return [u.to_dict() for u in users]
