# phenofarm/models/grower.py
from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import relationship
from phenofarm.database import Base


# Supplier-side business profile: lists products and fulfills orders
class Grower(Base):
    __tablename__ = "growers"

    id = Column(Integer, primary_key=True, index=True)
    business_name = Column(String, nullable=False, index=True)
    license_number = Column(String, nullable=True)
    contact_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    # Address
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True, default="VT")
    zip = Column(String, nullable=True)

    website = Column(String, nullable=True)
    description = Column(String, nullable=True)
    logo = Column(String, nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)

    # Payment connect account
    stripe_account_id = Column(String, nullable=True)
    stripe_account_status = Column(String, nullable=True)

    users = relationship("User", back_populates="grower")
    products = relationship("Product", back_populates="grower")
