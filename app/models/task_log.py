from sqlalchemy import Column, String, DateTime, JSON, Text, Integer, Index
from sqlalchemy.sql import func

from app.models.base import Base


class TaskLog(Base):
    """One row per scheduled job run (calendar sync, reminder dispatch)"""
    __tablename__ = "task_logs"
    __table_args__ = (
        Index("idx_task_logs_name_started", "task_name", "started_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_name = Column(String(100), nullable=False)
    task_id = Column(String(200))  # Celery task ID
    payload = Column(JSON, default=dict)
    status = Column(String(20), nullable=False)  # running, success, failure, skipped
    result = Column(JSON, default=dict)
    error_message = Column(Text)
    execution_time_ms = Column(Integer)
    started_at = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
