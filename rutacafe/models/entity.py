# rutacafe/models/entity.py
from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from rutacafe.models.common import EntityStatus

HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"


class StateEvent(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    from_status: Optional[EntityStatus] = None
    to_status: EntityStatus
    at: datetime
    by_user_id: Optional[Union[str, int]] = None
    comment: Optional[str] = None


class Schedule(BaseModel):
    day: str = Field(min_length=1)
    open_time: str = Field(pattern=HHMM)
    close_time: str = Field(pattern=HHMM)


class RouteCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    image_url: Optional[str] = ""
    city_id: Optional[str] = None


class RouteUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    image_url: Optional[str] = None
    city_id: Optional[str] = None


class PlaceCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    route_id: str
    website: Optional[str] = ""
    phone_number: Optional[str] = ""
    image_url: Optional[str] = ""
    schedules: List[Schedule] = Field(default_factory=list)


class PlaceUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    route_id: Optional[str] = None
    website: Optional[str] = None
    phone_number: Optional[str] = None
    image_url: Optional[str] = None
    schedules: Optional[List[Schedule]] = None


class TransitionPayload(BaseModel):
    status: str
    rejection_comment: Optional[str] = None  # requerido si status == "rechazada"
