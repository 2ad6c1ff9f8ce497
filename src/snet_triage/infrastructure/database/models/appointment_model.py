"""
Appointment Request Database Model

Booking submissions with the pre-screening urgency.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, SmallInteger, String, Text, func
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from snet_triage.infrastructure.database.connection import Base


class AppointmentRequestModel(Base):
    """
    Table: appointment_requests
    """

    __tablename__ = "appointment_requests"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    student_id: Mapped[Optional[UUID]] = mapped_column(
        PGUUID(as_uuid=True),
        nullable=True,
        doc="Null for guest bookings"
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    class_name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    dorm_room: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    time_slot: Mapped[str] = mapped_column(String(255), nullable=False)
    time_slot_display: Mapped[str] = mapped_column(String(255), nullable=False)
    issues: Mapped[str] = mapped_column(Text, nullable=False)
    urgency_level: Mapped[int] = mapped_column(
        SmallInteger,
        default=0,
        nullable=False,
        index=True,
    )
    ai_analysis: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<AppointmentRequestModel(id={self.id}, urgency_level={self.urgency_level})>"
