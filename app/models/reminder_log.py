from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, UniqueConstraint, JSON
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func

from app.models.base import Base
from app.utils.time_utils import to_utc


class ReminderLog(Base):
    """
    Append-only audit row written for every successful reminder send.

    (appointment_id, window_label, scheduled_for) is the dispatch idempotency
    key: an appointment is due for a window only while no row exists for its
    current start time. Rescheduling makes it due again.
    """
    __tablename__ = "reminder_logs"
    __table_args__ = (
        UniqueConstraint(
            "appointment_id", "window_label", "scheduled_for",
            name="uq_reminder_logs_appointment_window_start",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    appointment_id = Column(
        Integer,
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    window_label = Column(String(50), nullable=False)  # 3_days, 1_day, ...
    scheduled_for = Column(DateTime(timezone=True), nullable=False)

    recipient_phone = Column(String(32), nullable=False)
    message_content = Column(Text, nullable=False)

    provider = Column(String(50), nullable=False)  # whatsapp_cloud, twilio
    provider_message_id = Column(String(255), nullable=True)
    provider_status = Column(String(50), nullable=True)
    provider_payload = Column(JSON, default=dict)

    sent_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    appointment = relationship("Appointment", back_populates="reminders")

    @validates("scheduled_for")
    def _store_utc(self, key, value):
        return to_utc(value)

    def __repr__(self):
        return f"<ReminderLog appointment={self.appointment_id} window={self.window_label}>"
