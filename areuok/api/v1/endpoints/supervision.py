from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from areuok.db.session import get_db
from areuok.models import SupervisionRelation, SupervisionRequest
from areuok.schemas.supervision import (
    SupervisionPair,
    SupervisionRelationResponse,
    SupervisionRequestResponse,
    SupervisorOverviewResponse,
)
from areuok.services import supervision
from areuok.services.status import SupervisorOverview, supervisor_overview

router = APIRouter(prefix="/supervision", tags=["supervision"])


@router.post("/request", response_model=SupervisionRequestResponse)
def request_supervision(payload: SupervisionPair, db: Session = Depends(get_db)) -> SupervisionRequest:
    return supervision.request_supervision(db, payload.supervisor_id, payload.target_id)


@router.get("/pending/{target_id}", response_model=list[SupervisionRequestResponse])
def list_pending(target_id: str, db: Session = Depends(get_db)) -> list[SupervisionRequest]:
    return supervision.list_pending(db, target_id)


@router.get("/outgoing/{supervisor_id}", response_model=list[SupervisionRequestResponse])
def list_outgoing(supervisor_id: str, db: Session = Depends(get_db)) -> list[SupervisionRequest]:
    return supervision.list_outgoing(db, supervisor_id)


@router.post("/accept", response_model=SupervisionRelationResponse)
def accept(payload: SupervisionPair, db: Session = Depends(get_db)) -> SupervisionRelation:
    return supervision.accept_request(db, payload.supervisor_id, payload.target_id)


@router.post("/reject")
def reject(payload: SupervisionPair, db: Session = Depends(get_db)) -> dict:
    supervision.reject_request(db, payload.supervisor_id, payload.target_id)
    return {"ok": True}


@router.post("/cancel")
def cancel(payload: SupervisionPair, db: Session = Depends(get_db)) -> dict:
    supervision.cancel_request(db, payload.supervisor_id, payload.target_id)
    return {"ok": True}


@router.get("/list/{device_id}", response_model=list[SupervisionRelationResponse])
def list_relations(device_id: str, db: Session = Depends(get_db)) -> list[SupervisionRelation]:
    return supervision.list_relations(db, device_id)


@router.get("/supervisors/{device_id}", response_model=list[SupervisionRelationResponse])
def list_supervisors(device_id: str, db: Session = Depends(get_db)) -> list[SupervisionRelation]:
    return supervision.list_supervisors(db, device_id)


@router.get("/overview/{supervisor_id}", response_model=SupervisorOverviewResponse)
def overview(supervisor_id: str, db: Session = Depends(get_db)) -> SupervisorOverview:
    return supervisor_overview(db, supervisor_id)


@router.delete("/{relation_id}")
def remove(relation_id: str, db: Session = Depends(get_db)) -> dict:
    supervision.remove_relation(db, relation_id)
    return {"ok": True}
