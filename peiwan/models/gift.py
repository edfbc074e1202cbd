from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlmodel import Field, SQLModel


class Gift(SQLModel, table=True):
    __tablename__ = "gifts"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, sa_column_kwargs={"unique": True})
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = None
    # Gift records keep referencing retired gifts, so catalog removal is a flag.
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
