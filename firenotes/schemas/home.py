"""
Firenotes — Home Screen Schemas
================================

What:  Request bodies for note/product intents and the Home state snapshot.
Why:   Every Home action answers with the refreshed state, so the UI renders
       the same shape whether it reloaded, added, edited or deleted.
"""

import math
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from firenotes.models.records import Note, Product
from firenotes.schemas.auth import NavigationState, UserResponse


class NoteRequest(BaseModel):
    title: str = Field(default="", description="Note title")
    content: str = Field(default="", description="Note body")


class ProductRequest(BaseModel):
    name: str = Field(default="", description="Product name")
    price: float = Field(default=0.0, description="Unit price")

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: float) -> float:
        """Infinite and NaN prices cannot be stored or sorted."""
        if math.isnan(v) or math.isinf(v):
            raise ValueError("price must be a finite number")
        return v


class HomeStateResponse(BaseModel):
    """
    Snapshot of the Home view state.

    notes_version / products_version are the tickets of the published
    lists; they only ever increase for a client.
    """

    user: Optional[UserResponse] = None
    notes: List[Note]
    products: List[Product]
    notes_version: int
    products_version: int
    notification: Optional[str] = None
    last_error: Optional[str] = None
    navigation: NavigationState
