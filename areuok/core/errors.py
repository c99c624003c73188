"""Failure kinds raised by the services.

Every error carries a machine ``code`` and optional structured fields; rendering
to a transport status and message is left to the boundary layer.
"""

from typing import Any


class DomainError(Exception):
    code = "domain_error"
    status_code = 400

    def __init__(self, **fields: Any) -> None:
        super().__init__(self.code)
        self.fields = fields

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, **self.fields}


class NotFound(DomainError):
    code = "not_found"
    status_code = 404


class DeviceNotFound(NotFound):
    code = "device_not_found"


class RequestNotFound(NotFound):
    code = "request_not_found"


class RelationNotFound(NotFound):
    code = "relation_not_found"


class Conflict(DomainError):
    code = "conflict"
    status_code = 409


class NameConflict(Conflict):
    code = "name_conflict"


class HardwareIdConflict(Conflict):
    code = "hardware_id_conflict"


class DuplicateRequest(Conflict):
    code = "duplicate_request"


class AlreadySupervising(Conflict):
    code = "already_supervising"


class PolicyViolation(DomainError):
    code = "policy_violation"
    status_code = 422


class CooldownActive(PolicyViolation):
    code = "cooldown_active"

    def __init__(self, days_left: int) -> None:
        super().__init__(days_left=days_left)
        self.days_left = days_left


class SelfSupervision(PolicyViolation):
    code = "self_supervision"


class RaceLost(DomainError):
    code = "race_lost"
    status_code = 409


class RequestAlreadyResolved(RaceLost):
    code = "request_already_resolved"


class Internal(DomainError):
    code = "internal_error"
    status_code = 500
