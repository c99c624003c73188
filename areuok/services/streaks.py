import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from areuok.core.config import get_settings
from areuok.core.errors import Internal
from areuok.models import SigninRecord, SigninStreak
from areuok.services import clock
from areuok.services.identity import get_device

logger = logging.getLogger(__name__)


@dataclass
class StreakState:
    device_id: str
    streak: int = 0
    last_signin_date: Optional[date] = None


def _state(device_id: str, row: Optional[SigninStreak]) -> StreakState:
    if row is None:
        return StreakState(device_id=device_id)
    return StreakState(device_id=device_id, streak=row.streak, last_signin_date=row.last_signin_date)


def next_streak(current: int, last_signin_date: Optional[date], today: date) -> int:
    """Streak after signing in on ``today``; compares calendar dates only."""
    if last_signin_date is None:
        return 1
    gap = (today - last_signin_date).days
    if gap <= 0:
        return current
    if gap == 1:
        return current + 1
    return 1


def sign_in(db: Session, device_id: str) -> StreakState:
    device = get_device(db, device_id)
    now = clock.utcnow()
    today = clock.local_date(now)
    device.last_seen_at = now

    row = db.get(SigninStreak, device_id)
    if row is not None and row.last_signin_date >= today:
        db.commit()
        return _state(device_id, row)

    if row is None:
        row = SigninStreak(device_id=device_id, last_signin_date=today, streak=1)
        db.add(row)
    else:
        row.streak = next_streak(row.streak, row.last_signin_date, today)
        row.last_signin_date = today
    db.add(SigninRecord(device_id=device_id, signin_date=today))

    try:
        db.commit()
    except IntegrityError as exc:
        # a concurrent sign-in for the same day already committed
        db.rollback()
        device.last_seen_at = now
        db.commit()
        row = db.get(SigninStreak, device_id)
        if row is None:
            logger.exception("sign-in for %s failed without a committed streak", device_id)
            raise Internal() from exc
        return _state(device_id, row)

    logger.info("device %s signed in on %s, streak %d", device_id, today.isoformat(), row.streak)
    return _state(device_id, row)


def get_streak(db: Session, device_id: str) -> StreakState:
    get_device(db, device_id)
    return _state(device_id, db.get(SigninStreak, device_id))


def signin_history(db: Session, device_id: str, limit: Optional[int] = None) -> list[date]:
    get_device(db, device_id)
    limit = limit or get_settings().signin_history_limit
    return list(
        db.scalars(
            select(SigninRecord.signin_date)
            .where(SigninRecord.device_id == device_id)
            .order_by(SigninRecord.signin_date.desc())
            .limit(limit)
        ).all()
    )
