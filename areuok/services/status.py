from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from areuok.models import DeviceMode, SigninStreak, SupervisionRequest
from areuok.services import clock
from areuok.services.identity import get_device
from areuok.services.supervision import list_outgoing, list_relations


@dataclass
class DeviceStatus:
    device_id: str
    device_name: str
    mode: DeviceMode
    streak: int
    last_signin_date: Optional[date]
    signed_in_today: bool


@dataclass
class SupervisedDevice:
    relation_id: str
    status: DeviceStatus


@dataclass
class SupervisorOverview:
    supervisor_id: str
    supervised: list[SupervisedDevice] = field(default_factory=list)
    pending_requests: list[SupervisionRequest] = field(default_factory=list)


def get_status(db: Session, device_id: str) -> DeviceStatus:
    # read-only: unlike get_info this must not touch last_seen_at
    device = get_device(db, device_id)
    row = db.get(SigninStreak, device_id)
    last_signin_date = row.last_signin_date if row else None
    return DeviceStatus(
        device_id=device.id,
        device_name=device.device_name,
        mode=device.mode,
        streak=row.streak if row else 0,
        last_signin_date=last_signin_date,
        signed_in_today=last_signin_date is not None and last_signin_date == clock.today(),
    )


def supervisor_overview(db: Session, supervisor_id: str) -> SupervisorOverview:
    get_device(db, supervisor_id)
    supervised = [
        SupervisedDevice(relation_id=relation.id, status=get_status(db, relation.target_id))
        for relation in list_relations(db, supervisor_id)
    ]
    return SupervisorOverview(
        supervisor_id=supervisor_id,
        supervised=supervised,
        pending_requests=list_outgoing(db, supervisor_id),
    )
