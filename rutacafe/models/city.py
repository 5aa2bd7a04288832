# rutacafe/models/city.py
from pydantic import BaseModel, Field


class CityCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
