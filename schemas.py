"""
Database Schemas

MongoDB collection schemas and request bodies as Pydantic models.
Model name lowercased is the collection name (User -> "user").
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Dict, List, Optional

# largest integer BSON can store
MAX_QUANTITY = 2**63 - 1


class User(BaseModel):
    # profile fields come from the identity provider; keep whatever it synced
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., alias="_id", description="Identity provider user id")
    name: str = Field("", description="Full name")
    email: Optional[str] = None
    imageUrl: Optional[str] = None
    cartItems: Dict[str, int] = Field(default_factory=dict, description="{product_id: quantity}")


class Product(BaseModel):
    userId: str = Field(..., description="Owning seller's user id")
    name: str
    description: str = ""
    category: str
    price: float = Field(..., ge=0)
    offerPrice: float = Field(..., ge=0)
    image: List[str] = Field(..., min_length=1, description="Image URLs in upload order")
    date: int = Field(..., description="Creation time, epoch milliseconds")


class CartUpdate(BaseModel):
    itemId: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0, le=MAX_QUANTITY, strict=True)

    @field_validator("itemId")
    @classmethod
    def usable_as_field_name(cls, value: str) -> str:
        # cartItems keys become MongoDB field paths
        if "." in value or value.startswith("$"):
            raise ValueError("must not contain '.' or start with '$'")
        return value
