"""
Pydantic models for request validation.

Field names follow the frontend's camelCase; Python code uses snake_case.
"""
from pydantic import BaseModel, ConfigDict, Field


class ApiBase(BaseModel):
    """Shared base — allows construction by Python name or alias."""
    model_config = ConfigDict(populate_by_name=True)


class SendTransactionRequest(ApiBase):
    """Body of POST /send. Amount is in whole ALGO."""
    mnemonic: str = Field(..., min_length=1, description="25-word account mnemonic (never stored)")
    recipient_address: str = Field(..., alias="recipientAddress", min_length=1)
    amount: float = Field(..., allow_inf_nan=False, description="Amount in ALGO; must be > 0")
    note: str | None = Field(default=None, description="Optional note, at most 1000 bytes")

    def __repr__(self) -> str:
        # keep the mnemonic out of logs and tracebacks
        return f"SendTransactionRequest(recipient_address={self.recipient_address!r}, amount={self.amount!r})"

    __str__ = __repr__


class DeriveAddressRequest(ApiBase):
    """Body of POST /derive-address."""
    mnemonic: str = Field(..., min_length=1)

    def __repr__(self) -> str:
        return "DeriveAddressRequest(mnemonic=***)"

    __str__ = __repr__
