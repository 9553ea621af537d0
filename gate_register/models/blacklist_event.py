# gate_register/models/blacklist_event.py
"""
Blacklist audit trail: who changed a profile's blacklist flag, when, and why.
Profile.is_blacklisted stays the source of truth; these rows only record history.
"""

from sqlalchemy import Column, DateTime, Integer, String, Text
from gate_register.database import Base


class BlacklistEvent(Base):
    __tablename__ = "blacklist_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(36), unique=True, nullable=False)
    profile_id = Column(String(36), nullable=False, index=True)
    action = Column(String(20), nullable=False)      # blacklisted | unblacklisted
    reason = Column(Text)
    actor = Column(String(100), nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)

    def __repr__(self):
        return f"<BlacklistEvent {self.event_id} profile={self.profile_id} action={self.action}>"
