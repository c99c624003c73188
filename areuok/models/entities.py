import enum
import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator


NAME_KEY_LENGTH = 256


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class UTCDateTime(TypeDecorator):
    """Timezone-aware timestamps stored in UTC; naive values read back are UTC."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class DeviceMode(str, enum.Enum):
    signin = "signin"
    supervisor = "supervisor"


class RequestStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    cancelled = "cancelled"


class Device(Base):
    __tablename__ = "devices"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    device_name: Mapped[str] = mapped_column(String(64))
    name_key: Mapped[str] = mapped_column(String(NAME_KEY_LENGTH), unique=True, index=True)
    hardware_id: Mapped[Optional[str]] = mapped_column(String(128), unique=True, nullable=True)
    mode: Mapped[DeviceMode] = mapped_column(Enum(DeviceMode), default=DeviceMode.signin)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    last_seen_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    last_name_updated_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    streak: Mapped[Optional["SigninStreak"]] = relationship(back_populates="device", uselist=False)


class SigninStreak(Base):
    __tablename__ = "signin_streaks"
    __table_args__ = (CheckConstraint("streak >= 0", name="ck_signin_streaks_streak_non_negative"),)

    device_id: Mapped[str] = mapped_column(ForeignKey("devices.id"), primary_key=True)
    last_signin_date: Mapped[date] = mapped_column(Date)
    streak: Mapped[int] = mapped_column(Integer, default=1)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, onupdate=utcnow)

    device: Mapped["Device"] = relationship(back_populates="streak")


class SigninRecord(Base):
    __tablename__ = "signin_records"
    __table_args__ = (UniqueConstraint("device_id", "signin_date", name="uq_signin_records_device_day"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    device_id: Mapped[str] = mapped_column(ForeignKey("devices.id"), index=True)
    signin_date: Mapped[date] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)


class SupervisionRequest(Base):
    __tablename__ = "supervision_requests"
    __table_args__ = (
        Index(
            "uq_supervision_requests_pending_pair",
            "supervisor_id",
            "target_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    supervisor_id: Mapped[str] = mapped_column(ForeignKey("devices.id"), index=True)
    target_id: Mapped[str] = mapped_column(ForeignKey("devices.id"), index=True)
    status: Mapped[RequestStatus] = mapped_column(
        Enum(RequestStatus, native_enum=False, length=16), default=RequestStatus.pending
    )
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    supervisor: Mapped["Device"] = relationship(foreign_keys=[supervisor_id], lazy="joined")
    target: Mapped["Device"] = relationship(foreign_keys=[target_id], lazy="joined")

    @property
    def supervisor_name(self) -> str:
        return self.supervisor.device_name

    @property
    def target_name(self) -> str:
        return self.target.device_name


class SupervisionRelation(Base):
    __tablename__ = "supervision_relations"
    __table_args__ = (UniqueConstraint("supervisor_id", "target_id", name="uq_supervision_relations_pair"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    supervisor_id: Mapped[str] = mapped_column(ForeignKey("devices.id"), index=True)
    target_id: Mapped[str] = mapped_column(ForeignKey("devices.id"), index=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    supervisor: Mapped["Device"] = relationship(foreign_keys=[supervisor_id], lazy="joined")
    target: Mapped["Device"] = relationship(foreign_keys=[target_id], lazy="joined")

    @property
    def supervisor_name(self) -> str:
        return self.supervisor.device_name

    @property
    def target_name(self) -> str:
        return self.target.device_name
