# backend/clinic_api/patients.py
from fastapi import APIRouter, Depends, status

from . import schemas
from .deps import get_patients, require_staff
from .repositories import PatientRepository

router = APIRouter(prefix="/api/patients", tags=["patients"], dependencies=[Depends(require_staff)])

# ---- List every patient, alphabetically
@router.get("", response_model=list[schemas.PatientOut])
def list_patients(repo: PatientRepository = Depends(get_patients)):
    return repo.list()

# ---- Register a patient
@router.post("", response_model=schemas.PatientOut, status_code=status.HTTP_201_CREATED)
def create_patient(payload: schemas.PatientCreate, repo: PatientRepository = Depends(get_patients)):
    return repo.create(payload.model_dump())

# ---- Get a single patient
@router.get("/{patient_id}", response_model=schemas.PatientOut)
def get_patient(patient_id: str, repo: PatientRepository = Depends(get_patients)):
    return repo.get(patient_id)

# ---- Partial update: only the keys present in the body change
@router.put("/{patient_id}", response_model=schemas.PatientOut)
def update_patient(
    patient_id: str,
    payload: schemas.PatientUpdate,
    repo: PatientRepository = Depends(get_patients),
):
    return repo.update(patient_id, payload.model_dump(exclude_unset=True))

# ---- Delete a patient and, through the store, all of their records
@router.delete("/{patient_id}", response_model=schemas.DeleteOut)
def delete_patient(patient_id: str, repo: PatientRepository = Depends(get_patients)):
    repo.delete(patient_id)
    return {"message": "success", "detail": f"Patient with ID {patient_id} deleted."}
