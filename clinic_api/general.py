# backend/clinic_api/general.py
from fastapi import APIRouter, Depends

from . import schemas
from .deps import get_aggregate, require_staff
from .repositories import AggregateQuery

router = APIRouter(prefix="/api/general", tags=["general"], dependencies=[Depends(require_staff)])

@router.get("/all-records", response_model=list[schemas.EnrichedRecordOut])
def list_all_records(query: AggregateQuery = Depends(get_aggregate)):
    return query.list_all_enriched()
