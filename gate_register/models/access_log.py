# gate_register/models/access_log.py
"""
Access log table: one row per visit of a profile.
A row starts Inside at entry and is closed once, on exit, to Exited.
"""

from sqlalchemy import Column, DateTime, Integer, String, Text
from gate_register.database import Base


class AccessLog(Base):
    __tablename__ = "access_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)   # insertion order
    log_id = Column(String(36), unique=True, nullable=False, index=True)
    profile_id = Column(String(36), nullable=False, index=True)  # owner, deleted with it
    entry_time = Column(DateTime, nullable=False, index=True)
    exit_time = Column(DateTime)                                 # set on exit
    status = Column(String(10), nullable=False, index=True)      # Inside | Exited
    associated_profile_id = Column(String(36))                   # e.g. driver entering with a vehicle
    purpose = Column(Text)
    guard_notes = Column(Text)

    def __repr__(self):
        return f"<AccessLog {self.log_id} profile={self.profile_id} status={self.status}>"
