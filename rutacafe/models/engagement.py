# rutacafe/models/engagement.py
from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    place_id: str
    comment: str = Field(max_length=1000)


class CommentUpdate(BaseModel):
    comment: str = Field(max_length=1000)


class FavoritePayload(BaseModel):
    place_id: str
