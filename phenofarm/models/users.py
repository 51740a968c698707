# phenofarm/models/users.py
import enum

from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from phenofarm.database import Base


class UserRole(str, enum.Enum):
    GROWER = "GROWER"
    DISPENSARY = "DISPENSARY"
    ADMIN = "ADMIN"


# Represents a user account with authentication details and marketplace role
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False)
    name = Column(String, nullable=True)

    # Exactly one of these is set, depending on role
    grower_id = Column(Integer, ForeignKey("growers.id"), nullable=True)
    dispensary_id = Column(Integer, ForeignKey("dispensaries.id"), nullable=True)

    grower = relationship("Grower", back_populates="users")
    dispensary = relationship("Dispensary", back_populates="users")
