from pydantic import BaseModel, Field
from typing import Optional, List
from app.models.product import ProductRead


class ProductCreateRequest(BaseModel):
    name: str
    description: str
    price: float = Field(..., ge=0)
    category: str
    image: Optional[str] = Field(
        None, description="Image payload (data URI, base64 or remote URL) to upload"
    )


class ProductListResponse(BaseModel):
    products: List[ProductRead]


class MessageResponse(BaseModel):
    message: str
