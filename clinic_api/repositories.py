# backend/clinic_api/repositories.py
"""Data access for patients, visit records and the cross-entity record view.

Each repository wraps one SQLAlchemy session handed in by the caller. Every
write is a single statement followed by one commit; store failures are
logged here and re-raised as ``StorageError`` so no raw database text
reaches the HTTP layer.
"""
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .errors import Conflict, InvalidInput, NotFound, StorageError
from .time_utils import normalize_date, normalize_timestamp, now_iso

logger = logging.getLogger(__name__)

PATIENT_FIELDS = (
    "full_name",
    "birth_date",
    "gender",
    "national_id",
    "primary_phone",
    "email",
    "postal_code",
    "street",
    "street_number",
    "complement",
    "neighborhood",
    "city",
    "state",
    "referral_source",
    "initial_reason",
    "next_appointment_date",
)
PATIENT_REQUIRED = ("full_name", "primary_phone")

RECORD_OPTIONAL_FIELDS = (
    "visit_type",
    "patient_account",
    "staff_notes",
    "interventions",
    "referrals",
    "next_session_plan",
)


def _is_unique_violation(exc: IntegrityError) -> bool:
    text = str(getattr(exc, "orig", exc)).lower()
    return "unique" in text or "duplicate" in text


def _parse_limit(limit: Any) -> Optional[int]:
    if limit is None:
        return None
    try:
        value = int(limit)
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


class PatientRepository:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, action: str):
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if _is_unique_violation(exc):
                raise Conflict("A patient with this national_id already exists.")
            logger.exception("Integrity error while trying to %s", action)
            raise StorageError()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Database error while trying to %s", action)
            raise StorageError()

    def list(self) -> List[models.Patient]:
        try:
            return self.db.query(models.Patient).order_by(models.Patient.full_name.asc()).all()
        except SQLAlchemyError:
            logger.exception("Failed to list patients")
            raise StorageError()

    def get(self, patient_id: str) -> models.Patient:
        try:
            patient = self.db.get(models.Patient, patient_id)
        except SQLAlchemyError:
            logger.exception("Failed to load patient %s", patient_id)
            raise StorageError()
        if not patient:
            raise NotFound(f"Patient with ID {patient_id} not found.")
        return patient

    def create(self, fields: Mapping[str, Any]) -> models.Patient:
        missing = [f for f in PATIENT_REQUIRED if not fields.get(f)]
        if missing:
            raise InvalidInput("The fields 'full_name' and 'primary_phone' are required.")

        # empty optional values are stored as NULL
        values = {f: (fields.get(f) or None) for f in PATIENT_FIELDS}
        now = now_iso()
        patient = models.Patient(id=str(uuid.uuid4()), created_at=now, last_modified_at=now, **values)
        self.db.add(patient)
        self._commit("create a patient")
        logger.info("Created patient %s", patient.id)
        return self.get(patient.id)

    def update(self, patient_id: str, fields: Mapping[str, Any]) -> models.Patient:
        if not fields:
            raise InvalidInput("No data supplied for update.")

        values: Dict[str, Any] = {}
        for name in PATIENT_FIELDS:
            if name not in fields:
                continue
            value = fields[name]
            # empty strings clear the column, as on create
            if value == "":
                value = None
            if name in PATIENT_REQUIRED and not value:
                raise InvalidInput(f"'{name}' cannot be empty.")
            values[name] = value
        if not values:
            raise InvalidInput("No valid field supplied for update. Check the field names sent.")

        values["last_modified_at"] = now_iso()
        try:
            changed = (
                self.db.query(models.Patient)
                .filter(models.Patient.id == patient_id)
                .update(values, synchronize_session=False)
            )
        except IntegrityError as exc:
            self.db.rollback()
            if _is_unique_violation(exc):
                raise Conflict("A patient with this national_id already exists.")
            logger.exception("Integrity error while updating patient %s", patient_id)
            raise StorageError()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to update patient %s", patient_id)
            raise StorageError()
        if changed == 0:
            self.db.rollback()
            raise NotFound(f"Patient with ID {patient_id} not found.")
        self._commit(f"update patient {patient_id}")
        logger.info("Updated patient %s (%s)", patient_id, ", ".join(sorted(values)))
        self.db.expire_all()
        return self.get(patient_id)

    def delete(self, patient_id: str) -> None:
        try:
            # the store cascades the delete to prontuarios
            deleted = (
                self.db.query(models.Patient)
                .filter(models.Patient.id == patient_id)
                .delete(synchronize_session=False)
            )
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to delete patient %s", patient_id)
            raise StorageError()
        if deleted == 0:
            self.db.rollback()
            raise NotFound(f"Patient with ID {patient_id} not found.")
        self._commit(f"delete patient {patient_id}")
        logger.info("Deleted patient %s", patient_id)


class RecordRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_for_patient(self, patient_id: str, limit: Any = None, sort: Optional[str] = None) -> List[models.Record]:
        column = models.Record.visit_datetime
        order = column.asc() if (sort or "").strip().lower() == "asc" else column.desc()
        query = (
            self.db.query(models.Record)
            .filter(models.Record.patient_id == patient_id)
            .order_by(order)
        )
        n = _parse_limit(limit)
        if n is not None:
            query = query.limit(n)
        try:
            return query.all()
        except SQLAlchemyError:
            logger.exception("Failed to list records of patient %s", patient_id)
            raise StorageError()

    def get(self, record_id: str) -> models.Record:
        try:
            record = self.db.get(models.Record, record_id)
        except SQLAlchemyError:
            logger.exception("Failed to load record %s", record_id)
            raise StorageError()
        if not record:
            raise NotFound(f"Record with ID {record_id} not found.")
        return record

    def create(self, patient_id: str, fields: Mapping[str, Any]) -> models.Record:
        """Append a visit record to ``patient_id``.

        The patient comes from the URL path only; a ``patient_id`` inside
        ``fields`` is never read.
        """
        if not fields.get("visit_datetime") or not fields.get("chief_complaint") or not fields.get("staff_id"):
            raise InvalidInput(
                "Missing required record fields (visit_datetime, chief_complaint, staff_id)."
            )
        visit_datetime = normalize_timestamp(fields["visit_datetime"], "visit_datetime")
        next_session_date = normalize_date(fields.get("next_session_date"), "next_session_date")

        try:
            patient = self.db.get(models.Patient, patient_id)
            staff = self.db.get(models.Staff, fields["staff_id"])
        except SQLAlchemyError:
            logger.exception("Failed to check references for a new record")
            raise StorageError()
        if not patient:
            raise NotFound(f"Patient with ID {patient_id} not found.")
        if not staff:
            raise InvalidInput("staff_id does not reference an existing staff account.")

        now = now_iso()
        record = models.Record(
            record_id=str(uuid.uuid4()),
            patient_id=patient_id,
            staff_id=staff.id,
            visit_datetime=visit_datetime,
            chief_complaint=fields["chief_complaint"],
            next_session_date=next_session_date,
            created_at=now,
            last_modified_at=now,
            **{f: (fields.get(f) or None) for f in RECORD_OPTIONAL_FIELDS},
        )
        self.db.add(record)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to insert record for patient %s", patient_id)
            raise StorageError()
        logger.info("Created record %s for patient %s", record.record_id, patient_id)
        return self.get(record.record_id)


class AggregateQuery:
    def __init__(self, db: Session):
        self.db = db

    def list_all_enriched(self) -> List[dict]:
        """Every record with its patient's name and, when still linked, its staff name."""
        try:
            rows = (
                self.db.query(
                    models.Record,
                    models.Patient.full_name.label("patient_name"),
                    models.Staff.full_name.label("attendant_name"),
                )
                .join(models.Patient, models.Record.patient_id == models.Patient.id)
                .outerjoin(models.Staff, models.Record.staff_id == models.Staff.id)
                .order_by(models.Record.visit_datetime.desc())
                .all()
            )
        except SQLAlchemyError:
            logger.exception("Failed to list enriched records")
            raise StorageError()

        out = []
        for record, patient_name, attendant_name in rows:
            item = {c.name: getattr(record, c.name) for c in models.Record.__table__.columns}
            item["patient_name"] = patient_name
            item["attendant_name"] = attendant_name
            out.append(item)
        return out
