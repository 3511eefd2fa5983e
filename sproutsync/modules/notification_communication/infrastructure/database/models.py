# 📄 File: sproutsync/modules/notification_communication/infrastructure/database/models.py
# 🧭 Purpose (Layman Explanation):
# Keeps a record of every push notification we sent, so the same reminder
# is not sent twice.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy ORM model for notification_logs storing the serialized payload per send.
#
# 🔗 Dependencies:
# - SQLAlchemy ORM
# - sproutsync.shared.infrastructure.database.connection (Base, UTCDateTime)
#
# 🔄 Connected Modules / Calls From:
# - notification_service (due task de-duplication), firebase_messaging (send log)

from uuid import uuid4

from sqlalchemy import Column, ForeignKey, String, Text

from sproutsync.shared.infrastructure.database.connection import Base, UTCDateTime, utc_now


def _uuid() -> str:
    return str(uuid4())


class NotificationLogModel(Base):
    """One delivered push notification."""
    __tablename__ = "notification_logs"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    payload_json = Column(Text, nullable=False, comment="JSON encoded notification payload")
    sent_at = Column(UTCDateTime, nullable=False, default=utc_now, index=True)
    channel = Column(String(20), nullable=False, default="WEB_PUSH")

    def __repr__(self) -> str:
        return f"<NotificationLogModel(user_id={self.user_id}, sent_at={self.sent_at})>"


__all__ = ["NotificationLogModel"]


def get_notification_models():
    """Get all notification models for migration and schema generation."""
    return [NotificationLogModel]
