# phenofarm/schemas/strain.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class StrainCreate(BaseModel):
    name: str = Field(min_length=1)
    genetics: Optional[str] = None
    description: Optional[str] = None


class StrainUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    genetics: Optional[str] = None
    description: Optional[str] = None


class StrainOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    genetics: Optional[str] = None
    description: Optional[str] = None
    strain_type: Optional[str] = None
