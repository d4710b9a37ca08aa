from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional


class LookupCreate(BaseModel):
    """New entry in a lookup table. sort_order is assigned by the server."""
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v


class LookupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    sort_order: Optional[int] = None
