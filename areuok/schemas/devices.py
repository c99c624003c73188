from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from areuok.models import NAME_KEY_LENGTH, DeviceMode
from areuok.services.identity import normalize_name


def _check_device_name(value: str) -> str:
    if not value.strip():
        raise ValueError("device_name must not be blank")
    # NFKC can expand a single character into many
    if len(normalize_name(value)) > NAME_KEY_LENGTH:
        raise ValueError("device_name is too long once normalized")
    return value


class DeviceRegisterRequest(BaseModel):
    device_name: str = Field(min_length=1, max_length=64)
    hardware_id: Optional[str] = Field(default=None, max_length=128)
    mode: DeviceMode = DeviceMode.signin

    @field_validator("device_name")
    @classmethod
    def valid_name(cls, value: str) -> str:
        return _check_device_name(value)

    @field_validator("hardware_id")
    @classmethod
    def blank_hardware_id_is_absent(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class DeviceNameUpdate(BaseModel):
    device_name: str = Field(min_length=1, max_length=64)

    @field_validator("device_name")
    @classmethod
    def valid_name(cls, value: str) -> str:
        return _check_device_name(value)


class DeviceModeUpdate(BaseModel):
    mode: DeviceMode


class DeviceResponse(BaseModel):
    device_id: str = Field(validation_alias="id")
    device_name: str
    hardware_id: Optional[str]
    mode: DeviceMode
    created_at: datetime
    last_seen_at: datetime
    last_name_updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class StreakResponse(BaseModel):
    device_id: str
    streak: int
    last_signin_date: Optional[date]

    model_config = {"from_attributes": True}


class SigninHistoryResponse(BaseModel):
    device_id: str
    dates: list[date]


class DeviceStatusResponse(BaseModel):
    device_id: str
    device_name: str
    mode: DeviceMode
    streak: int
    last_signin_date: Optional[date]
    signed_in_today: bool

    model_config = {"from_attributes": True}
