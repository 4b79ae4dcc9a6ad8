from typing import Optional

from pydantic import BaseModel, ConfigDict


class Location(BaseModel):
    region: Optional[str] = None
    province: Optional[str] = None
    city: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
