# backend/clinic_api/records.py
from typing import Optional
from fastapi import APIRouter, Depends, status

from . import schemas
from .deps import get_records, require_staff
from .repositories import RecordRepository

router = APIRouter(prefix="/api/patients/{patient_id}/records", tags=["records"], dependencies=[Depends(require_staff)])

# ---- List a patient's records; newest first unless sort=asc
@router.get("", response_model=list[schemas.RecordOut])
def list_records(
    patient_id: str,
    limit: Optional[str] = None,
    sort: Optional[str] = None,
    repo: RecordRepository = Depends(get_records),
):
    return repo.list_for_patient(patient_id, limit=limit, sort=sort)

# ---- Append a record; the path decides the patient
@router.post("", response_model=schemas.RecordOut, status_code=status.HTTP_201_CREATED)
def create_record(
    patient_id: str,
    payload: schemas.RecordCreate,
    repo: RecordRepository = Depends(get_records),
):
    return repo.create(patient_id, payload.model_dump())
