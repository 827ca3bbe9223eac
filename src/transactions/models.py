"""Expense and income data models."""

from typing import Optional, Union
from pydantic import BaseModel, Field


UNKNOWN = "Bilinmiyor"


class TransactionBase(BaseModel):
    """Fields shared by expenses and incomes."""

    id: str
    amount: Optional[float] = Field(None, description="Transfer amount, null when unreadable")
    currency: str = "TRY"

    recipient: Optional[str] = None
    recipient_bank: Optional[str] = None
    recipient_iban: Optional[str] = None

    sender: Optional[str] = None
    sender_bank: Optional[str] = None
    sender_iban: Optional[str] = None

    bank: str = UNKNOWN
    branch_code: Optional[str] = None
    branch_name: Optional[str] = None

    account_type: Optional[str] = None
    account_number: Optional[str] = None

    transaction_type: Optional[str] = None
    transaction_id: Optional[str] = None
    description: Optional[str] = None

    commission: Optional[float] = None
    tax: Optional[float] = None
    total_fee: Optional[float] = None

    date: str = Field(..., description="Transaction date (YYYY-MM-DD)")
    time: Optional[str] = None

    # Category is referenced by name, not by key
    category: str

    receipt_path: Optional[str] = None
    receipt_type: Optional[str] = None
    receipt_storage_id: Optional[str] = None

    ai_raw_response: Optional[str] = None
    is_manual: bool = False
    user_id: str
    created_at: str
    updated_at: str

    class Config:
        """Pydantic config."""
        from_attributes = True


class Expense(TransactionBase):
    """Money paid out; the recipient is the primary counterparty."""

    recipient: str = UNKNOWN


class Income(TransactionBase):
    """Money received; the sender is the primary counterparty."""

    sender: str = UNKNOWN


Transaction = Union[Expense, Income]
