from sqlalchemy import Column, Float, String, Text
from sqlalchemy.orm import relationship

from app.core.db import Base


class User(Base):
    """A named profile; user_name is the human-chosen, case-sensitive key."""

    __tablename__ = "Users"

    user_name = Column(String(255), primary_key=True)
    created_at = Column(String(64))

    # Optional profile fields
    height_cm = Column(Float)
    target_weight = Column(Float)
    notes = Column(Text)

    entries = relationship("WeightEntry", back_populates="user", cascade="all, delete-orphan")
