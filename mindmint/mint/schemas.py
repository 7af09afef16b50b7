from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union
from pydantic import BaseModel


class MintState(str, Enum):
    UNMINTED = "unminted"
    MINTING = "minting"
    MINTED = "minted"
    MINT_FAILED = "mint_failed"


class NFTAttribute(BaseModel):
    trait_type: str
    value: Union[str, int]


class NFTCreator(BaseModel):
    address: str
    share: int


class NFTProperties(BaseModel):
    category: str = "Journal Entry"
    creators: List[NFTCreator]


class NFTMetadata(BaseModel):
    name: str
    description: str
    image: str
    attributes: List[NFTAttribute]
    properties: NFTProperties


class MintResult(BaseModel):
    entry_id: str
    nft_address: str
    transaction_signature: str
    metadata_uri: str
    points_awarded: int


class MintStateOut(BaseModel):
    entry_id: str
    state: MintState
    error: Optional[str] = None


class MintCostEstimate(BaseModel):
    has_enough_sol: bool
    estimated_cost: Decimal
    current_balance: Decimal
