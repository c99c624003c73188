from datetime import date, datetime
from typing import Optional

import strawberry

from areuok.core.errors import DeviceNotFound
from areuok.db.session import SessionLocal
from areuok.models import Device, SupervisionRelation, SupervisionRequest
from areuok.services import identity, status, supervision


@strawberry.type
class DeviceType:
    id: str
    device_name: str
    mode: str
    created_at: datetime
    last_seen_at: datetime


@strawberry.type
class DeviceStatusType:
    device_id: str
    device_name: str
    mode: str
    streak: int
    last_signin_date: Optional[date]
    signed_in_today: bool


@strawberry.type
class RequestType:
    id: str
    supervisor_id: str
    supervisor_name: str
    target_id: str
    target_name: str
    status: str
    created_at: datetime


@strawberry.type
class RelationType:
    id: str
    supervisor_id: str
    supervisor_name: str
    target_id: str
    target_name: str
    created_at: datetime


def _device(device: Device) -> DeviceType:
    return DeviceType(
        id=device.id,
        device_name=device.device_name,
        mode=device.mode.value,
        created_at=device.created_at,
        last_seen_at=device.last_seen_at,
    )


def _request(item: SupervisionRequest) -> RequestType:
    return RequestType(
        id=item.id,
        supervisor_id=item.supervisor_id,
        supervisor_name=item.supervisor_name,
        target_id=item.target_id,
        target_name=item.target_name,
        status=item.status.value,
        created_at=item.created_at,
    )


def _relation(item: SupervisionRelation) -> RelationType:
    return RelationType(
        id=item.id,
        supervisor_id=item.supervisor_id,
        supervisor_name=item.supervisor_name,
        target_id=item.target_id,
        target_name=item.target_name,
        created_at=item.created_at,
    )


@strawberry.type
class Query:
    @strawberry.field
    def device(self, id: str) -> Optional[DeviceType]:
        with SessionLocal() as db:
            found = db.get(Device, id)
            return _device(found) if found else None

    @strawberry.field
    def status(self, device_id: str) -> Optional[DeviceStatusType]:
        with SessionLocal() as db:
            try:
                view = status.get_status(db, device_id)
            except DeviceNotFound:
                return None
            return DeviceStatusType(
                device_id=view.device_id,
                device_name=view.device_name,
                mode=view.mode.value,
                streak=view.streak,
                last_signin_date=view.last_signin_date,
                signed_in_today=view.signed_in_today,
            )

    @strawberry.field
    def relations(self, device_id: str) -> list[RelationType]:
        with SessionLocal() as db:
            return [_relation(item) for item in supervision.list_relations(db, device_id)]

    @strawberry.field
    def pending_requests(self, target_id: str) -> list[RequestType]:
        with SessionLocal() as db:
            return [_request(item) for item in supervision.list_pending(db, target_id)]

    @strawberry.field
    def search(self, query: str, limit: int = 20) -> list[DeviceType]:
        if len(query.strip()) < 2:
            return []
        with SessionLocal() as db:
            return [_device(device) for device in identity.search_devices(db, query, min(limit, 100))]


schema = strawberry.Schema(query=Query)
