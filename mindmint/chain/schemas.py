from decimal import Decimal
from pydantic import BaseModel, Field


class WalletBalance(BaseModel):
    address: str
    balance: Decimal
    network: str


class AirdropRequest(BaseModel):
    amount: Decimal = Field(Decimal("1"), gt=0, le=2)


class AirdropResult(BaseModel):
    signature: str
    amount: Decimal
