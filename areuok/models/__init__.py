from areuok.models.entities import (
    Base,
    NAME_KEY_LENGTH,
    Device,
    DeviceMode,
    RequestStatus,
    SigninRecord,
    SigninStreak,
    SupervisionRelation,
    SupervisionRequest,
    utcnow,
)

__all__ = [
    "Base",
    "NAME_KEY_LENGTH",
    "Device",
    "DeviceMode",
    "RequestStatus",
    "SigninRecord",
    "SigninStreak",
    "SupervisionRelation",
    "SupervisionRequest",
    "utcnow",
]
