from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional, Tuple
from datetime import datetime


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Product(CamelModel):
    """Normalized catalog record served to storefront clients"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    name: str
    url: str
    image_url: str
    description: str = ""
    suitable_for: Tuple[str, ...] = ()
    key_ingredients: Tuple[str, ...] = ()
    variant_id: Optional[str] = None
    price: str
    original_price: Optional[str] = None
    product_type: Optional[str] = None


class RegisterStoreRequest(CamelModel):
    # Both optional so that missing values surface as 400 rather than 422
    shop: Optional[str] = None
    access_token: Optional[str] = None


class StoreSummary(CamelModel):
    shop: str
    installed_at: datetime


class SaveStoreResponse(BaseModel):
    message: str = "Store saved successfully"
    store: StoreSummary


class ProductsResponse(BaseModel):
    shop: str
    products: List[Product] = []


class ErrorResponse(BaseModel):
    error: str
    message: str
    status_code: int
    timestamp: datetime = Field(default_factory=datetime.now)
