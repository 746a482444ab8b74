"""ORM model for application users (auth and RBAC)."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, String, func
from sqlalchemy.orm import validates

from stockroom.core.roles import DEFAULT_ROLE, has_role_at_least
from stockroom.core.security import is_password_hash
from stockroom.models.base import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'user', 'support', 'manager' or 'admin' (ascending privilege).
    password_hash only ever holds a bcrypt hash; set it through
    services.users.set_password.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=DEFAULT_ROLE.value, index=True)

    department = Column(String(50), nullable=True)
    position = Column(String(50), nullable=True)
    phone_number = Column(String(32), nullable=True)
    profile_picture = Column(String(1024), nullable=True)
    timezone = Column(String(64), nullable=False, default="UTC")
    language = Column(String(2), nullable=False, default="fr")

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    @validates("email")
    def _normalize_email(self, _key: str, value: str) -> str:
        return value.strip().lower() if value else value

    @validates("password_hash")
    def _reject_plaintext(self, _key: str, value: str) -> str:
        if not is_password_hash(value):
            raise ValueError("password_hash must be a bcrypt hash")
        return value

    def has_role(self, required: str) -> bool:
        """True if this user's role ranks at least as high as required."""
        return has_role_at_least(self.role, required)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role}>"
