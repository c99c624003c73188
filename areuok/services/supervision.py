"""Supervision directory: requests between two devices and the relations they create.

A request leaves ``pending`` exactly once. Every resolution is a conditional
``UPDATE ... WHERE status = 'pending'``; a resolver that matches no row has lost
to a concurrent one and gets ``RequestAlreadyResolved``. Accepting updates the
request and inserts the relation in the same transaction.
"""

import logging
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from areuok.core.errors import (
    AlreadySupervising,
    DuplicateRequest,
    RelationNotFound,
    RequestAlreadyResolved,
    RequestNotFound,
    SelfSupervision,
)
from areuok.models import RequestStatus, SupervisionRelation, SupervisionRequest
from areuok.services import clock
from areuok.services.identity import get_device

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = {RequestStatus.accepted, RequestStatus.rejected, RequestStatus.cancelled}


def find_pending(db: Session, supervisor_id: str, target_id: str) -> Optional[SupervisionRequest]:
    return db.scalar(
        select(SupervisionRequest).where(
            SupervisionRequest.supervisor_id == supervisor_id,
            SupervisionRequest.target_id == target_id,
            SupervisionRequest.status == RequestStatus.pending,
        )
    )


def find_relation(db: Session, supervisor_id: str, target_id: str) -> Optional[SupervisionRelation]:
    return db.scalar(
        select(SupervisionRelation).where(
            SupervisionRelation.supervisor_id == supervisor_id,
            SupervisionRelation.target_id == target_id,
        )
    )


def request_supervision(db: Session, supervisor_id: str, target_id: str) -> SupervisionRequest:
    get_device(db, supervisor_id)
    get_device(db, target_id)
    if supervisor_id == target_id:
        raise SelfSupervision(device_id=supervisor_id)

    pending = find_pending(db, supervisor_id, target_id)
    if pending:
        raise DuplicateRequest(request_id=pending.id)
    relation = find_relation(db, supervisor_id, target_id)
    if relation:
        raise AlreadySupervising(relation_id=relation.id)

    request = SupervisionRequest(
        supervisor_id=supervisor_id,
        target_id=target_id,
        status=RequestStatus.pending,
        created_at=clock.utcnow(),
    )
    db.add(request)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("duplicate supervision request %s -> %s", supervisor_id, target_id)
        raise DuplicateRequest() from exc

    db.refresh(request)
    logger.info("supervision requested %s -> %s (%s)", supervisor_id, target_id, request.id)
    return request


def _require_pending(db: Session, supervisor_id: str, target_id: str) -> SupervisionRequest:
    request = find_pending(db, supervisor_id, target_id)
    if not request:
        raise RequestNotFound(supervisor_id=supervisor_id, target_id=target_id)
    return request


def resolve_pending(
    db: Session, request: SupervisionRequest, outcome: RequestStatus
) -> Optional[SupervisionRelation]:
    """Move ``request`` out of pending; returns the new relation when accepted."""
    if outcome not in TERMINAL_STATUSES:
        raise ValueError(f"not a terminal status: {outcome}")

    now = clock.utcnow()
    result = db.execute(
        update(SupervisionRequest)
        .where(SupervisionRequest.id == request.id, SupervisionRequest.status == RequestStatus.pending)
        .values(status=outcome, resolved_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        logger.warning("request %s already resolved, %s lost", request.id, outcome.value)
        raise RequestAlreadyResolved(request_id=request.id)

    relation = None
    if outcome == RequestStatus.accepted:
        relation = SupervisionRelation(
            supervisor_id=request.supervisor_id,
            target_id=request.target_id,
            created_at=now,
        )
        db.add(relation)

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("relation %s -> %s already exists", request.supervisor_id, request.target_id)
        raise AlreadySupervising() from exc

    db.refresh(request)
    if relation is not None:
        db.refresh(relation)
    logger.info("request %s %s", request.id, outcome.value)
    return relation


def accept_request(db: Session, supervisor_id: str, target_id: str) -> SupervisionRelation:
    request = _require_pending(db, supervisor_id, target_id)
    return resolve_pending(db, request, RequestStatus.accepted)


def reject_request(db: Session, supervisor_id: str, target_id: str) -> None:
    request = _require_pending(db, supervisor_id, target_id)
    resolve_pending(db, request, RequestStatus.rejected)


def cancel_request(db: Session, supervisor_id: str, target_id: str) -> None:
    request = _require_pending(db, supervisor_id, target_id)
    resolve_pending(db, request, RequestStatus.cancelled)


def list_pending(db: Session, target_id: str) -> list[SupervisionRequest]:
    return list(
        db.scalars(
            select(SupervisionRequest)
            .where(SupervisionRequest.target_id == target_id, SupervisionRequest.status == RequestStatus.pending)
            .order_by(SupervisionRequest.created_at.asc())
        ).all()
    )


def list_outgoing(db: Session, supervisor_id: str) -> list[SupervisionRequest]:
    return list(
        db.scalars(
            select(SupervisionRequest)
            .where(SupervisionRequest.supervisor_id == supervisor_id, SupervisionRequest.status == RequestStatus.pending)
            .order_by(SupervisionRequest.created_at.asc())
        ).all()
    )


def list_relations(db: Session, supervisor_id: str) -> list[SupervisionRelation]:
    return list(
        db.scalars(
            select(SupervisionRelation)
            .where(SupervisionRelation.supervisor_id == supervisor_id)
            .order_by(SupervisionRelation.created_at.asc())
        ).all()
    )


def list_supervisors(db: Session, target_id: str) -> list[SupervisionRelation]:
    return list(
        db.scalars(
            select(SupervisionRelation)
            .where(SupervisionRelation.target_id == target_id)
            .order_by(SupervisionRelation.created_at.asc())
        ).all()
    )


def remove_relation(db: Session, relation_id: str) -> None:
    result = db.execute(delete(SupervisionRelation).where(SupervisionRelation.id == relation_id))
    if result.rowcount != 1:
        db.rollback()
        raise RelationNotFound(relation_id=relation_id)
    db.commit()
    logger.info("relation %s removed", relation_id)
