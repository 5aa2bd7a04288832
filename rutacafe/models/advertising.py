# rutacafe/models/advertising.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel

AdStatus = Literal["activo", "inactivo"]


class AdCreate(BaseModel):
    title: str
    description: str
    image_url: str
    enlace_url: Optional[str] = ""
    status: AdStatus = "activo"
    start_date: datetime
    end_date: datetime


class AdUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    enlace_url: Optional[str] = None
    status: Optional[AdStatus] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
