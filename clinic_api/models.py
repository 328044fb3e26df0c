# backend/clinic_api/models.py
from sqlalchemy import Column, String, Text, ForeignKey
from sqlalchemy.orm import relationship

from .database import Base


class Staff(Base):
    __tablename__ = "atendentes"

    id = Column(String(36), primary_key=True)
    username = Column(String(150), unique=True, nullable=False)
    password_hash = Column(String(128), nullable=False)
    full_name = Column(String(200))

    records = relationship("Record", back_populates="staff", passive_deletes=True)


class Patient(Base):
    __tablename__ = "pacientes"

    id = Column(String(36), primary_key=True)
    full_name = Column(String(200), nullable=False, index=True)
    birth_date = Column(String(10))
    gender = Column(String(50))
    national_id = Column(String(20), unique=True)
    primary_phone = Column(String(30), nullable=False)
    email = Column(String(255))
    postal_code = Column(String(20))
    street = Column(String(255))
    street_number = Column(String(20))
    complement = Column(String(255))
    neighborhood = Column(String(120))
    city = Column(String(120))
    state = Column(String(60))
    referral_source = Column(String(255))
    initial_reason = Column(Text)
    next_appointment_date = Column(String(10))
    created_at = Column(String(30), nullable=False)
    last_modified_at = Column(String(30), nullable=False)

    records = relationship("Record", back_populates="patient", passive_deletes=True)


class Record(Base):
    __tablename__ = "prontuarios"

    record_id = Column(String(36), primary_key=True)
    patient_id = Column(String(36), ForeignKey("pacientes.id", ondelete="CASCADE"), nullable=False, index=True)
    # required on insert; the store nulls it when the staff account is deleted
    staff_id = Column(String(36), ForeignKey("atendentes.id", ondelete="SET NULL"), nullable=True)
    visit_datetime = Column(String(30), nullable=False, index=True)
    visit_type = Column(String(100))
    chief_complaint = Column(Text, nullable=False)
    patient_account = Column(Text)
    staff_notes = Column(Text)
    interventions = Column(Text)
    referrals = Column(Text)
    next_session_plan = Column(Text)
    next_session_date = Column(String(10))
    created_at = Column(String(30), nullable=False)
    last_modified_at = Column(String(30), nullable=False)

    patient = relationship("Patient", back_populates="records")
    staff = relationship("Staff", back_populates="records")
