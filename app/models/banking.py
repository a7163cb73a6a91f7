"""Mercury banking models."""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class MercuryAccount(BaseModel):
    """Bank account as returned by Mercury."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    type: str = ""
    available_balance: float = Field(default=0.0, alias="availableBalance")
    current_balance: float = Field(default=0.0, alias="currentBalance")
    currency: str = "USD"


class MercuryTransaction(BaseModel):
    """Single account transaction."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    amount: float
    description: str = ""
    counterparty_name: Optional[str] = Field(default=None, alias="counterpartyName")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    posted_at: Optional[str] = Field(default=None, alias="postedAt")
    status: str = "posted"
    kind: str = ""


class BurnRateMetrics(BaseModel):
    """Outgoing spend for one calendar month."""
    period: str
    total_burn: float
    vendor_breakdown: dict[str, float]
    category_breakdown: dict[str, float]
    transaction_count: int
    average_transaction_size: float


class BankBalance(BaseModel):
    """Current balance of one account."""
    source: Literal["mercury", "macquarie"]
    account_name: str
    balance: float
    currency: str
    last_updated: str
