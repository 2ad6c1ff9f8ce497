"""
Staff, Notification and Appointment Repositories
"""

from typing import Sequence
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from snet_triage.domain.interfaces import AppointmentStore, NotificationSink, StaffDirectory
from snet_triage.domain.models.appointment import Appointment, Notification, StaffMember
from snet_triage.infrastructure.database.connection import DatabaseManager
from snet_triage.infrastructure.database.models.appointment_model import AppointmentRequestModel
from snet_triage.infrastructure.database.models.notification_model import (
    NotificationModel,
    UserModel,
)
from snet_triage.infrastructure.database.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserModel]):

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(UserModel, session)

    async def get_active_by_roles(self, roles: Sequence[str]) -> Sequence[UserModel]:
        result = await self._session.execute(
            select(UserModel)
            .where(
                UserModel.role.in_(list(roles)),
                UserModel.is_active.is_(True),
            )
            .order_by(UserModel.id)
        )
        return result.scalars().all()


class SqlStaffDirectory(StaffDirectory):

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def list_users_by_role(self, roles: Sequence[str]) -> list[StaffMember]:
        async with self._db.session() as session:
            rows = await UserRepository(session).get_active_by_roles(roles)
            return [StaffMember(id=row.id, role=row.role, full_name=row.full_name) for row in rows]


class SqlNotificationSink(NotificationSink):
    """One transaction per recipient so a failed write affects only that recipient."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def notify(self, notification: Notification) -> None:
        async with self._db.session() as session:
            await BaseRepository(NotificationModel, session).create(
                NotificationModel(
                    user_id=notification.recipient_id,
                    type=notification.category,
                    title=notification.title,
                    message=notification.body,
                    link=notification.link,
                    data=dict(notification.payload) or None,
                )
            )


class SqlAppointmentStore(AppointmentStore):

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def create(self, appointment: Appointment) -> Appointment:
        async with self._db.session() as session:
            await BaseRepository(AppointmentRequestModel, session).create(
                AppointmentRequestModel(
                    id=appointment.id,
                    student_id=appointment.student_id,
                    full_name=appointment.full_name,
                    email=appointment.email,
                    class_name=appointment.class_name,
                    dorm_room=appointment.dorm_room,
                    time_slot=appointment.time_slot,
                    time_slot_display=appointment.time_slot_display,
                    issues=appointment.issues,
                    urgency_level=int(appointment.urgency_level),
                    ai_analysis=appointment.ai_analysis or None,
                    status=appointment.status.value,
                    created_at=appointment.created_at,
                )
            )
        return appointment
