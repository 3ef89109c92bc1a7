from sqlalchemy import Column, Date, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from app.core.db import Base


class WeightEntry(Base):
    __tablename__ = "Weight_Log"
    __table_args__ = (UniqueConstraint("user_name", "date", name="uq_weight_log_user_date"),)

    id = Column(Integer, primary_key=True, index=True)
    user_name = Column(String(255), ForeignKey("Users.user_name"), nullable=False, index=True)

    # Calendar day, one entry per user
    date = Column(Date, nullable=False)
    weight_kg = Column(Float, nullable=False)
    note = Column(Text)

    user = relationship("User", back_populates="entries")
