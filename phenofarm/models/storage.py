# phenofarm/models/storage.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, func
from phenofarm.database import Base

# Durable per-user key-value slot (cart, favorites, price alerts, view modes).
# Values are raw JSON text and may be malformed; readers handle that.
class StorageSlot(Base):
    __tablename__ = "storage_slots"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    key = Column(String(100), nullable=False)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("owner_id", "key", name="uq_storage_owner_key"),
    )
