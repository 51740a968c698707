# phenofarm/models/strain.py
from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from phenofarm.database import Base


# A named genetic variety, referenced by products and batches
class Strain(Base):
    __tablename__ = "strains"

    id = Column(Integer, primary_key=True, index=True)
    grower_id = Column(Integer, ForeignKey("growers.id"), index=True, nullable=False)
    name = Column(String, nullable=False)
    genetics = Column(String, nullable=True) # e.g. "Indica dominant hybrid"
    description = Column(String, nullable=True)

    batches = relationship("Batch", back_populates="strain")

    __table_args__ = (
        UniqueConstraint("grower_id", "name", name="uq_strain_grower_name"),
    )
