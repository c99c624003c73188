from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from areuok.db.session import get_db
from areuok.models import Device
from areuok.schemas.devices import DeviceResponse
from areuok.services.identity import search_devices

router = APIRouter(prefix="/search", tags=["search"])


@router.get("/devices", response_model=list[DeviceResponse])
def search(
    q: str = Query(min_length=2, max_length=64),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    db: Session = Depends(get_db),
) -> list[Device]:
    return search_devices(db, q, limit)
