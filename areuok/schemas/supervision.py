from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from areuok.models import RequestStatus
from areuok.schemas.devices import DeviceStatusResponse


class SupervisionPair(BaseModel):
    supervisor_id: str
    target_id: str


class SupervisionRequestResponse(BaseModel):
    request_id: str = Field(validation_alias="id")
    supervisor_id: str
    supervisor_name: Optional[str] = None
    target_id: str
    target_name: Optional[str] = None
    status: RequestStatus
    created_at: datetime
    resolved_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SupervisionRelationResponse(BaseModel):
    relation_id: str = Field(validation_alias="id")
    supervisor_id: str
    supervisor_name: Optional[str] = None
    target_id: str
    target_name: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class SupervisedDeviceResponse(BaseModel):
    relation_id: str
    status: DeviceStatusResponse

    model_config = {"from_attributes": True}


class SupervisorOverviewResponse(BaseModel):
    supervisor_id: str
    supervised: list[SupervisedDeviceResponse]
    pending_requests: list[SupervisionRequestResponse]

    model_config = {"from_attributes": True}
