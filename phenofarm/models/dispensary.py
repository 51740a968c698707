# phenofarm/models/dispensary.py
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from phenofarm.database import Base


# Buyer-side business profile: browses catalogs and places orders
class Dispensary(Base):
    __tablename__ = "dispensaries"

    id = Column(Integer, primary_key=True, index=True)
    business_name = Column(String, nullable=False, index=True)
    license_number = Column(String, nullable=True)
    contact_name = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True, default="VT")
    zip = Column(String, nullable=True)

    website = Column(String, nullable=True)
    description = Column(String, nullable=True)
    logo = Column(String, nullable=True)

    users = relationship("User", back_populates="dispensary")
    orders = relationship("Order", back_populates="dispensary")
