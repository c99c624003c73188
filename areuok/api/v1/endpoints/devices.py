from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from areuok.db.session import get_db
from areuok.models import Device
from areuok.schemas.devices import (
    DeviceModeUpdate,
    DeviceNameUpdate,
    DeviceRegisterRequest,
    DeviceResponse,
    DeviceStatusResponse,
    SigninHistoryResponse,
    StreakResponse,
)
from areuok.services import identity, status, streaks

router = APIRouter(prefix="/devices", tags=["devices"])


@router.post("/register", response_model=DeviceResponse)
def register_device(payload: DeviceRegisterRequest, db: Session = Depends(get_db)) -> Device:
    return identity.register_device(db, payload.device_name, payload.hardware_id, payload.mode)


@router.get("/{device_id}", response_model=DeviceResponse)
def get_device(device_id: str, db: Session = Depends(get_db)) -> Device:
    return identity.get_info(db, device_id)


@router.patch("/{device_id}/name", response_model=DeviceResponse)
def update_device_name(device_id: str, payload: DeviceNameUpdate, db: Session = Depends(get_db)) -> Device:
    return identity.update_name(db, device_id, payload.device_name)


@router.patch("/{device_id}/mode", response_model=DeviceResponse)
def update_device_mode(device_id: str, payload: DeviceModeUpdate, db: Session = Depends(get_db)) -> Device:
    return identity.update_mode(db, device_id, payload.mode)


@router.post("/{device_id}/signin", response_model=StreakResponse)
def sign_in(device_id: str, db: Session = Depends(get_db)) -> streaks.StreakState:
    return streaks.sign_in(db, device_id)


@router.get("/{device_id}/streak", response_model=StreakResponse)
def get_streak(device_id: str, db: Session = Depends(get_db)) -> streaks.StreakState:
    return streaks.get_streak(db, device_id)


@router.get("/{device_id}/signins", response_model=SigninHistoryResponse)
def list_signins(device_id: str, db: Session = Depends(get_db)) -> SigninHistoryResponse:
    return SigninHistoryResponse(device_id=device_id, dates=streaks.signin_history(db, device_id))


@router.get("/{device_id}/status", response_model=DeviceStatusResponse)
def get_status(device_id: str, db: Session = Depends(get_db)) -> status.DeviceStatus:
    return status.get_status(db, device_id)
