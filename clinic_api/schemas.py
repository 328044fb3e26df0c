# backend/clinic_api/schemas.py
from pydantic import BaseModel
from typing import Optional

# Staff auth
class StaffRegister(BaseModel):
    full_name: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

class StaffLogin(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None

class RegisterOut(BaseModel):
    message: str
    staff_id: str

class LoginUser(BaseModel):
    id: str
    name: Optional[str]

class LoginOut(BaseModel):
    success: bool = True
    message: str
    token: str
    user: LoginUser

class TokenClaims(BaseModel):
    staff_id: str
    full_name: Optional[str] = None
    exp: Optional[int] = None

# Patients
class PatientFields(BaseModel):
    full_name: Optional[str] = None
    primary_phone: Optional[str] = None
    birth_date: Optional[str] = None
    gender: Optional[str] = None
    national_id: Optional[str] = None
    email: Optional[str] = None
    postal_code: Optional[str] = None
    street: Optional[str] = None
    street_number: Optional[str] = None
    complement: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    referral_source: Optional[str] = None
    initial_reason: Optional[str] = None
    next_appointment_date: Optional[str] = None

class PatientCreate(PatientFields):
    pass

class PatientUpdate(PatientFields):
    # unknown keys are kept so the repository can tell "nothing recognized" apart from "empty body"
    class Config:
        extra = "allow"

class PatientOut(PatientFields):
    id: str
    full_name: str
    primary_phone: str
    created_at: str
    last_modified_at: str
    class Config:
        from_attributes = True

class DeleteOut(BaseModel):
    message: str
    detail: str

# Records
class RecordCreate(BaseModel):
    visit_datetime: Optional[str] = None
    chief_complaint: Optional[str] = None
    staff_id: Optional[str] = None
    visit_type: Optional[str] = None
    patient_account: Optional[str] = None
    staff_notes: Optional[str] = None
    interventions: Optional[str] = None
    referrals: Optional[str] = None
    next_session_plan: Optional[str] = None
    next_session_date: Optional[str] = None

class RecordOut(BaseModel):
    record_id: str
    patient_id: str
    staff_id: Optional[str]
    visit_datetime: str
    visit_type: Optional[str] = None
    chief_complaint: str
    patient_account: Optional[str] = None
    staff_notes: Optional[str] = None
    interventions: Optional[str] = None
    referrals: Optional[str] = None
    next_session_plan: Optional[str] = None
    next_session_date: Optional[str] = None
    created_at: str
    last_modified_at: str
    class Config:
        from_attributes = True

class EnrichedRecordOut(RecordOut):
    patient_name: str
    attendant_name: Optional[str] = None

