from decimal import Decimal

from sqlmodel import SQLModel


class PublicConfigRead(SQLModel):
    site_name: str
    commission_rate: Decimal
