# gate_register/models/profile.py
"""
Registered profiles table: people (Individual) and vehicles (Vehicle).
identifier is the phone number or plate number; identifier_key is its
lower-cased form and carries the case-insensitive uniqueness constraint.
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from gate_register.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)   # insertion order
    profile_id = Column(String(36), unique=True, nullable=False, index=True)
    profile_type = Column(String(20), nullable=False)            # Individual | Vehicle
    name = Column(String(200), nullable=False)
    identifier = Column(String(50), nullable=False)
    identifier_key = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(200))              # Individual
    company = Column(String(200))            # Individual
    driver_name = Column(String(200))        # Vehicle
    driver_phone = Column(String(50))        # Vehicle
    photo_url = Column(String(500))
    notes = Column(Text)
    is_blacklisted = Column(Boolean, default=False, nullable=False)
    linked_profile_id = Column(String(36))   # weak ref to another profile, may dangle
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    def __repr__(self):
        return f"<Profile {self.profile_id} {self.profile_type} identifier={self.identifier}>"
