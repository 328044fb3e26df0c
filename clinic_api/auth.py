# backend/clinic_api/auth.py
from fastapi import APIRouter, Depends, status

from . import schemas
from .credentials import CredentialService
from .deps import get_credentials, get_current_staff

router = APIRouter(prefix="/api/auth", tags=["auth"])

@router.post("/register", response_model=schemas.RegisterOut, status_code=status.HTTP_201_CREATED)
def register(payload: schemas.StaffRegister, service: CredentialService = Depends(get_credentials)):
    staff_id = service.register(payload.full_name, payload.username, payload.password)
    return {"message": "Staff account created.", "staff_id": staff_id}

@router.post("/login", response_model=schemas.LoginOut)
def login(payload: schemas.StaffLogin, service: CredentialService = Depends(get_credentials)):
    result = service.login(payload.username, payload.password)
    return {
        "success": True,
        "message": "Login successful.",
        "token": result["token"],
        "user": {"id": result["staff_id"], "name": result["full_name"]},
    }

@router.get("/me", response_model=schemas.TokenClaims)
def read_current_staff(current: schemas.TokenClaims = Depends(get_current_staff)):
    return current
