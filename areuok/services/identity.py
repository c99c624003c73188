"""Identity store: registration, recovery, renames and lookup of devices.

Name and hardware-id uniqueness are enforced by unique constraints on
``devices.name_key`` and ``devices.hardware_id``. The lookups done before each
write only exist to report a precise failure; a write that loses a race is
rolled back and re-diagnosed from the committed state.
"""

import logging
import unicodedata
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from areuok.core.config import get_settings
from areuok.core.errors import CooldownActive, DeviceNotFound, Internal, NameConflict
from areuok.models import Device, DeviceMode
from areuok.services import clock

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """Comparison key for device names: NFKC-normalized and casefolded."""
    return unicodedata.normalize("NFKC", name.strip()).casefold()


def get_device(db: Session, device_id: str) -> Device:
    device = db.get(Device, device_id)
    if not device:
        raise DeviceNotFound(device_id=device_id)
    return device


def _find_by_hardware_id(db: Session, hardware_id: str) -> Optional[Device]:
    return db.scalar(select(Device).where(Device.hardware_id == hardware_id))


def _name_holder(db: Session, name_key: str) -> Optional[str]:
    return db.scalar(select(Device.id).where(Device.name_key == name_key))


def register_device(db: Session, name: str, hardware_id: Optional[str], mode: DeviceMode) -> Device:
    now = clock.utcnow()
    hardware_id = hardware_id.strip() if hardware_id else None

    if hardware_id:
        existing = _find_by_hardware_id(db, hardware_id)
        if existing:
            existing.last_seen_at = now
            db.commit()
            logger.info("device %s recovered by hardware id", existing.id)
            return existing

    display_name = name.strip()
    name_key = normalize_name(display_name)
    if _name_holder(db, name_key):
        raise NameConflict(device_name=display_name)

    device = Device(
        device_name=display_name,
        name_key=name_key,
        hardware_id=hardware_id,
        mode=mode,
        created_at=now,
        last_seen_at=now,
        last_name_updated_at=None,
    )
    db.add(device)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        winner = _find_by_hardware_id(db, hardware_id) if hardware_id else None
        if winner:
            logger.warning("registration lost hardware id race for %s, recovering", hardware_id)
            winner.last_seen_at = now
            db.commit()
            return winner
        if _name_holder(db, name_key):
            logger.warning("registration lost name race for %r", display_name)
            raise NameConflict(device_name=display_name) from exc
        logger.exception("unexpected integrity error while registering %r", display_name)
        raise Internal() from exc

    db.refresh(device)
    logger.info("device %s registered as %r (%s)", device.id, device.device_name, device.mode.value)
    return device


def get_info(db: Session, device_id: str) -> Device:
    device = get_device(db, device_id)
    device.last_seen_at = clock.utcnow()
    db.commit()
    return device


def cooldown_days_left(last_updated_at: Optional[datetime], now: datetime) -> int:
    if last_updated_at is None:
        return 0
    elapsed = (clock.local_date(now) - clock.local_date(last_updated_at)).days
    return max(get_settings().name_cooldown_days - elapsed, 0)


def update_name(db: Session, device_id: str, new_name: str) -> Device:
    device = get_device(db, device_id)
    now = clock.utcnow()
    display_name = new_name.strip()

    if display_name == device.device_name:
        device.last_seen_at = now
        db.commit()
        return device

    name_key = normalize_name(display_name)
    holder = _name_holder(db, name_key)
    if holder and holder != device.id:
        raise NameConflict(device_name=display_name)

    days_left = cooldown_days_left(device.last_name_updated_at, now)
    if days_left > 0:
        raise CooldownActive(days_left=days_left)

    previous = device.device_name
    device.device_name = display_name
    device.name_key = name_key
    device.last_name_updated_at = now
    device.last_seen_at = now
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("rename of %s lost name race for %r", device_id, display_name)
        raise NameConflict(device_name=display_name) from exc

    logger.info("device %s renamed %r -> %r", device.id, previous, device.device_name)
    return device


def update_mode(db: Session, device_id: str, mode: DeviceMode) -> Device:
    device = get_device(db, device_id)
    device.mode = mode
    device.last_seen_at = clock.utcnow()
    db.commit()
    return device


def search_devices(db: Session, query: str, limit: Optional[int] = None) -> list[Device]:
    needle = normalize_name(query)
    if not needle:
        return []
    limit = limit or get_settings().search_limit
    return list(
        db.scalars(
            select(Device)
            .where(Device.name_key.contains(needle, autoescape=True))
            .order_by(Device.name_key)
            .limit(limit)
        ).all()
    )
