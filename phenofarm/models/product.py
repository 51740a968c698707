# phenofarm/models/product.py
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey, JSON, CheckConstraint, func
from sqlalchemy.orm import relationship
from phenofarm.database import Base

# Model Product
# A single listing offered by a grower. Prices are stored in cents.
# Strain and potency come either from the linked strain/batch or from the
# legacy inline columns kept for listings created before batches existed.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    grower_id = Column(Integer, ForeignKey("growers.id"), index=True, nullable=False)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)

    product_type = Column(String, nullable=False, index=True) # Flower, Edibles, ...
    sub_type = Column(String, nullable=True)
    unit = Column(String, nullable=False, default="gram")

    price_cents = Column(Integer, CheckConstraint("price_cents >= 0"), nullable=False)
    inventory_qty = Column(Integer, CheckConstraint("inventory_qty >= 0"), nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)

    strain_id = Column(Integer, ForeignKey("strains.id"), nullable=True)
    batch_id = Column(Integer, ForeignKey("batches.id"), nullable=True)

    # Legacy inline fields, read only through services.lab_results
    strain_legacy = Column(String, nullable=True)
    thc_legacy = Column(Float, nullable=True)
    cbd_legacy = Column(Float, nullable=True)

    images = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    grower = relationship("Grower", back_populates="products")
    strain = relationship("Strain")
    batch = relationship("Batch", back_populates="products")
