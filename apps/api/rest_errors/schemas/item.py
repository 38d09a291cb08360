"""Item API schemas for the reference application."""

from datetime import datetime

from pydantic import BaseModel, Field


class CreateItemRequest(BaseModel):
    name: str = Field(min_length=1)
    quantity: int = Field(default=0, ge=0)


class Item(BaseModel):
    id: str
    name: str
    quantity: int
    created_at: datetime


class ItemAttachment(BaseModel):
    item_id: str
    filename: str
    size: int
