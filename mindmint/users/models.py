from sqlalchemy import Column, String, Integer, DateTime, JSON
from sqlalchemy.orm import relationship
from mindmint.core.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    wallet_address = Column(String(44), nullable=True, index=True)  # base58 Solana address

    total_clarity_points = Column(Integer, nullable=False, default=0)
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_entry_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
    preferences = Column(JSON, nullable=False, default=dict)

    entries = relationship("JournalEntry", back_populates="user", cascade="all, delete-orphan")
