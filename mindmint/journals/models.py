from sqlalchemy import Column, String, Boolean, Integer, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from mindmint.core.database import Base


class JournalEntry(Base):
    __tablename__ = "journal_entries"
    __table_args__ = (
        Index("idx_entries_user_date", "user_id", "created_at"),
    )

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    content = Column(Text, nullable=False)
    mood = Column(String(20), nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)

    clarity_points = Column(Integer, nullable=False, default=0)
    is_minted = Column(Boolean, nullable=False, default=False)
    nft_address = Column(String(44), nullable=True)
    transaction_signature = Column(String(88), nullable=True)
    metadata_uri = Column(Text, nullable=True)
    is_sync = Column(Boolean, nullable=False, default=False, index=True)  # False: local-only or edited since last mirror

    user = relationship("User", back_populates="entries")
