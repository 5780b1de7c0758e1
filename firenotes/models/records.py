"""
Firenotes — Record Kinds
=========================

What:  The two user-managed record kinds, Note and Product.
Why:   Documents in the store are schemaless field/value maps. These models
       are the only place that decides what a missing or mistyped field
       reads as, so every read path applies the same defaults.
How:   `from_document()` substitutes the sentinel default for any missing
       field; `is_blank` marks records whose every field is a default
       (suppressed on read by the record gateway).

Defaults:
    Note.title      → "Untitled"
    Note.content    → "No content"
    Product.name    → "Unnamed"
    Product.price   → 0.0
"""

from typing import Any, Dict, Mapping

from pydantic import BaseModel, Field

NOTE_TITLE_DEFAULT = "Untitled"
NOTE_CONTENT_DEFAULT = "No content"
PRODUCT_NAME_DEFAULT = "Unnamed"
PRODUCT_PRICE_DEFAULT = 0.0


def _string_field(data: Mapping[str, Any], key: str, default: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else default


def _float_field(data: Mapping[str, Any], key: str, default: float) -> float:
    value = data.get(key)
    # bool is an int subclass; a stored True is not a price
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return float(value)


class Note(BaseModel):
    """
    A titled text note.

    The id is assigned by the store on creation and is never generated
    client-side.
    """

    id: str = Field(description="Store-assigned document id")
    title: str = Field(default=NOTE_TITLE_DEFAULT)
    content: str = Field(default=NOTE_CONTENT_DEFAULT)

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "Note":
        return cls(
            id=doc_id,
            title=_string_field(data, "title", NOTE_TITLE_DEFAULT),
            content=_string_field(data, "content", NOTE_CONTENT_DEFAULT),
        )

    @staticmethod
    def to_document(title: str, content: str) -> Dict[str, Any]:
        return {"title": title, "content": content}

    @property
    def is_blank(self) -> bool:
        return self.title == NOTE_TITLE_DEFAULT and self.content == NOTE_CONTENT_DEFAULT


class Product(BaseModel):
    """A named product with a price (IEEE-754 double, never rounded)."""

    id: str = Field(description="Store-assigned document id")
    name: str = Field(default=PRODUCT_NAME_DEFAULT)
    price: float = Field(default=PRODUCT_PRICE_DEFAULT)

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "Product":
        return cls(
            id=doc_id,
            name=_string_field(data, "name", PRODUCT_NAME_DEFAULT),
            price=_float_field(data, "price", PRODUCT_PRICE_DEFAULT),
        )

    @staticmethod
    def to_document(name: str, price: float) -> Dict[str, Any]:
        return {"name": name, "price": float(price)}

    @property
    def is_blank(self) -> bool:
        return self.name == PRODUCT_NAME_DEFAULT and self.price == PRODUCT_PRICE_DEFAULT
