# backend/clinic_api/credentials.py
import logging
import uuid
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from jose import jwt, JWTError
from passlib.hash import bcrypt
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models, schemas
from .config import JWT_ALGORITHM, Settings
from .errors import Conflict, ConfigError, InvalidInput, StorageError, Unauthorized
from .time_utils import now_utc

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials."

DEFAULT_STAFF_ID = "user01"
DEFAULT_STAFF_USERNAME = "atendente"
DEFAULT_STAFF_NAME = "Atendente Principal"


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.using(rounds=rounds).hash(password)


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    # compared against when the username is unknown, so a miss costs one bcrypt check too
    return hash_password("not-a-real-password", rounds)


def verify_password(password: str, stored: str) -> bool:
    try:
        return bcrypt.verify(password, stored)
    except (ValueError, TypeError):
        # malformed stored hash
        return False


def create_access_token(settings: Settings, staff_id: str, full_name: Optional[str]) -> str:
    issued = now_utc()
    payload = {
        "sub": staff_id,
        "staff_id": staff_id,
        "full_name": full_name,
        "iat": issued,
        "exp": issued + timedelta(hours=settings.jwt_expire_hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def verify_token(settings: Settings, token: Optional[str]) -> schemas.TokenClaims:
    """Check signature and expiry; any failure is Unauthorized."""
    if not token:
        raise Unauthorized("Not authenticated.")
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise Unauthorized("Invalid or expired token.")
    staff_id = payload.get("staff_id") or payload.get("sub")
    if not staff_id:
        raise Unauthorized("Invalid or expired token.")
    return schemas.TokenClaims(staff_id=staff_id, full_name=payload.get("full_name"), exp=payload.get("exp"))


class CredentialService:
    """Staff registration and login against the ``atendentes`` table."""

    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    def _find_by_username(self, username: str) -> Optional[models.Staff]:
        try:
            return self.db.query(models.Staff).filter(models.Staff.username == username).first()
        except SQLAlchemyError:
            logger.exception("Staff lookup failed")
            raise StorageError()

    def register(self, full_name: Optional[str], username: Optional[str], password: Optional[str]) -> str:
        if not full_name or not username or not password:
            raise InvalidInput("Full name, username and password are required.")

        if self._find_by_username(username):
            raise Conflict("This username is already in use.")

        staff = models.Staff(
            id=str(uuid.uuid4()),
            username=username,
            full_name=full_name,
            password_hash=hash_password(password, self.settings.bcrypt_rounds),
        )
        self.db.add(staff)
        try:
            self.db.commit()
        except IntegrityError:
            # lost a race with a concurrent registration of the same username
            self.db.rollback()
            raise Conflict("This username is already in use.")
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to register staff account %r", username)
            raise StorageError()
        logger.info("Registered staff account %r (%s)", username, staff.id)
        return staff.id

    def login(self, username: Optional[str], password: Optional[str]) -> dict:
        if not username or not password:
            raise InvalidInput("Username and password are required.")

        staff = self._find_by_username(username)
        stored = staff.password_hash if staff else _dummy_hash(self.settings.bcrypt_rounds)
        if not verify_password(password, stored) or not staff:
            logger.info("Failed login for %r", username)
            raise Unauthorized(INVALID_CREDENTIALS)

        token = create_access_token(self.settings, staff.id, staff.full_name)
        return {"token": token, "staff_id": staff.id, "full_name": staff.full_name}

    def verify_token(self, token: Optional[str]) -> schemas.TokenClaims:
        return verify_token(self.settings, token)


def ensure_default_staff(db: Session, settings: Settings) -> bool:
    """Create the bootstrap staff account on an empty table.

    Only runs when ``SEED_DEFAULT_STAFF`` is on, and never in production.
    Returns True when an account was created.
    """
    if not settings.seed_default_staff:
        return False
    if settings.is_production:
        raise ConfigError("SEED_DEFAULT_STAFF cannot be enabled when APP_ENV=production")

    if db.query(models.Staff).first():
        return False

    db.add(
        models.Staff(
            id=DEFAULT_STAFF_ID,
            username=DEFAULT_STAFF_USERNAME,
            full_name=DEFAULT_STAFF_NAME,
            password_hash=hash_password(settings.seed_staff_password, settings.bcrypt_rounds),
        )
    )
    db.commit()
    logger.warning("Seeded default staff account %r for development use", DEFAULT_STAFF_USERNAME)
    return True
