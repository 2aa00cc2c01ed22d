from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class PriceRange(BaseModel):
    min: float = 0
    max: float = 0


class Category(BaseModel):
    category_id: str
    name: str
    description: str
    image_url: str
    price_range: PriceRange
    rating: float = 0.0
    subcategories: List[str] = []
    tags: List[str] = []
    vendor_count: Optional[int] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
