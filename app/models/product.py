from sqlmodel import SQLModel, Field
from datetime import datetime, timezone
import uuid
from sqlalchemy import DateTime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductBase(SQLModel):
    name: str = Field(index=True)
    description: str
    price: float = Field(ge=0)
    image: str = Field(default="")
    category: str = Field(index=True)
    isFeatured: bool = Field(default=False, index=True)


class Product(ProductBase, table=True):
    __tablename__ = "products"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    createdAt: datetime = Field(default_factory=_utcnow, sa_type=DateTime(timezone=True))
    updatedAt: datetime = Field(default_factory=_utcnow, sa_type=DateTime(timezone=True))


class ProductRead(ProductBase):
    id: str
    createdAt: datetime
    updatedAt: datetime


class ProductRecommendation(SQLModel):
    """Public projection used by the recommendations carousel."""
    id: str
    name: str
    description: str
    image: str
    price: float
