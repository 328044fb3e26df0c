# backend/clinic_api/deps.py
from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from . import database, schemas
from .config import Settings
from .credentials import CredentialService, verify_token
from .repositories import AggregateQuery, PatientRepository, RecordRepository

bearer = HTTPBearer(auto_error=False)

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_credentials(
    db: Session = Depends(database.get_db),
    settings: Settings = Depends(get_settings),
) -> CredentialService:
    return CredentialService(db, settings)

def get_patients(db: Session = Depends(database.get_db)) -> PatientRepository:
    return PatientRepository(db)

def get_records(db: Session = Depends(database.get_db)) -> RecordRepository:
    return RecordRepository(db)

def get_aggregate(db: Session = Depends(database.get_db)) -> AggregateQuery:
    return AggregateQuery(db)

def get_current_staff(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: Settings = Depends(get_settings),
) -> schemas.TokenClaims:
    """Verify the bearer token; raises Unauthorized when missing, forged or expired."""
    return verify_token(settings, creds.credentials if creds else None)

def require_staff(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: Settings = Depends(get_settings),
) -> Optional[schemas.TokenClaims]:
    # Router-level guard. With AUTH_REQUIRED off the data routes stay open,
    # matching the deployed behaviour; main.py logs a warning about it.
    if not settings.auth_required:
        return None
    return get_current_staff(creds, settings)
