# phenofarm/models/batch.py
from sqlalchemy import Column, Integer, String, Float, Date, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from phenofarm.database import Base


# A harvest lot with its lab results. Products reference a batch, they never own it.
class Batch(Base):
    __tablename__ = "batches"

    id = Column(Integer, primary_key=True, index=True)
    grower_id = Column(Integer, ForeignKey("growers.id"), index=True, nullable=False)
    strain_id = Column(Integer, ForeignKey("strains.id"), index=True, nullable=False)
    batch_number = Column(String, nullable=False)
    lot_number = Column(String, nullable=True)
    harvest_date = Column(Date, nullable=False)

    # Lab results (percentages)
    thc = Column(Float, nullable=True)
    cbd = Column(Float, nullable=True)
    total_cannabinoids = Column(Float, nullable=True)
    terpenes = Column(JSON, nullable=True) # {"myrcene": 0.8, ...}
    test_results = Column(JSON, nullable=True)
    coa_document_url = Column(String, nullable=True)
    notes = Column(String, nullable=True)

    strain = relationship("Strain", back_populates="batches")
    products = relationship("Product", back_populates="batch")

    __table_args__ = (
        UniqueConstraint("grower_id", "batch_number", name="uq_batch_grower_number"),
    )
