"""
ReportDesk Backend — Auth Service
===================================

What:  Registration and login against the credential store.
Who:   Called by routes/auth.py.

Register:
    1. Validate username (≥3), email format, password (≥6 chars, ≤72 bytes)
    2. Reject taken username/email with ConflictError (409)
    3. Store a bcrypt hash with role 'user'

Login:
    Unknown username and wrong password produce the same UnauthorizedError
    message, so the response never tells which part was wrong.
"""

import logging
import re
from typing import Tuple

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from reportdesk.exceptions import (
    ConflictError,
    DatabaseError,
    UnauthorizedError,
    ValidationError,
)
from reportdesk.models.user import Role, User
from reportdesk.security import (
    create_access_token,
    hash_password,
    verify_dummy_password,
    verify_password,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6
# bcrypt only accepts the first 72 bytes of input
MAX_PASSWORD_BYTES = 72

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """Stateless; receives the request's session on every call."""

    def validate_registration(self, username: str, email: str, password: str) -> None:
        if not username or not email or not password:
            raise ValidationError(message="Username, email and password are required")
        if len(username) < MIN_USERNAME_LENGTH:
            raise ValidationError(
                message=f"Username must be at least {MIN_USERNAME_LENGTH} characters",
                field="username",
            )
        if not EMAIL_PATTERN.match(email):
            raise ValidationError(message="Invalid email address", field="email")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="password",
            )
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                message=f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
                field="password",
            )

    async def register(
        self,
        db: AsyncSession,
        username: str,
        email: str,
        password: str,
    ) -> User:
        """
        Create a regular user account.

        Raises:
            ValidationError: missing or malformed field
            ConflictError: username or email already registered
            DatabaseError: insert failed for another reason
        """
        username = username.strip()
        email = email.strip()
        self.validate_registration(username, email, password)

        existing = await db.execute(
            select(User.id).where(or_(User.username == username, User.email == email))
        )
        if existing.first() is not None:
            raise ConflictError(message="A user with this username or email already exists")

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=Role.USER.value,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same name
            raise ConflictError(message="A user with this username or email already exists")
        except SQLAlchemyError as e:
            logger.error("Database error registering %s: %s", username, str(e))
            raise DatabaseError(
                message="Could not register the user. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Registered user %s (id=%s)", user.username, user.id)
        return user

    async def login(self, db: AsyncSession, username: str, password: str) -> Tuple[str, User]:
        """
        Check credentials and issue a bearer token.

        Returns:
            (token, user)

        Raises:
            ValidationError: username or password missing
            UnauthorizedError: unknown user or wrong password (same message)
        """
        if not username or not password:
            raise ValidationError(message="Username and password are required")

        result = await db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()

        if user is None:
            # Spend the same bcrypt time as a real check
            verify_dummy_password(password)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Failed login attempt for username %r", username)
            raise UnauthorizedError(message=INVALID_CREDENTIALS)

        token = create_access_token(user.id, user.role)
        logger.info("User %s logged in", user.username)
        return token, user


auth_service = AuthService()
