"""Request and response contracts for the HTTP API.

Field names on the wire are camelCase for compatibility with existing
callers; Python attributes are snake_case.
"""

from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TransferRequest(BaseModel):
    """Body accepted by every transfer route. All fields are optional.

    Several aliases carry the same meaning; precedence is applied by the
    resolver, not here.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Amounts
    amount: Optional[Decimal] = Field(None, description="Native amount")
    amount_eth: Optional[Decimal] = Field(None, alias="amountETH", description="Native amount")
    amount_usd: Optional[Decimal] = Field(None, alias="amountUSD", description="Fiat amount")
    value: Optional[Decimal] = Field(None, description="Native amount")
    eth: Optional[Decimal] = Field(None, description="Native amount")
    percentage: Optional[Decimal] = Field(None, description="Percent of balance (0-100)")

    # Destinations
    to: Optional[str] = None
    to_address: Optional[str] = Field(None, alias="toAddress")
    treasury: Optional[str] = None
    recipient: Optional[str] = None
    coinbase_wallet: Optional[str] = Field(None, alias="coinbaseWallet")
    fee_recipient: Optional[str] = Field(None, alias="feeRecipient")

    @field_validator(
        "amount", "amount_eth", "amount_usd", "value", "eth", "percentage",
        "to", "to_address", "treasury", "recipient", "coinbase_wallet", "fee_recipient",
        mode="before",
    )
    @classmethod
    def blank_as_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class TransferResponse(BaseModel):
    """Confirmed transfer. The three hash fields carry the same value."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    tx_hash: str = Field(..., alias="txHash")
    hash: str
    transaction_hash: str = Field(..., alias="transactionHash")
    from_address: str = Field(..., alias="from")
    to: str
    amount: float
    amount_usd: float = Field(..., alias="amountUSD")
    block_number: int = Field(..., alias="blockNumber")
    gas_used: str = Field(..., alias="gasUsed")


class BalanceResponse(BaseModel):
    """Signer balance with fiat estimate."""

    model_config = ConfigDict(populate_by_name=True)

    wallet: str
    balance: str
    balance_usd: str = Field(..., alias="balanceUSD")
    treasury: str
    fee_recipient: str = Field(..., alias="feeRecipient")


class StatusResponse(BaseModel):
    """Service status."""

    status: str = "online"
    service: str
    wallet: Optional[str] = None
    rpc: Optional[str] = None
    balance: str
    treasury: str
    endpoints: list[str]


class ErrorResponse(BaseModel):
    """Error body returned for every pipeline failure."""

    error: str
    code: Optional[Union[int, str]] = None
    balance: Optional[str] = None
    hint: Optional[str] = None
