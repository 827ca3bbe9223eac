"""Receipt extraction and normalization models."""

from typing import Any, Dict, Literal, Optional
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class ExtractedReceipt(BaseModel):
    """
    Best-effort receipt data as returned by the vision model.

    Nothing here is trusted: every field may be missing or of the wrong type.
    Keys are read in the camelCase form the prompt asks for.
    """

    transaction_direction: Any = None
    amount: Any = None
    currency: Any = None

    recipient: Any = None
    recipient_bank: Any = None
    recipient_iban: Any = None

    sender: Any = None
    sender_bank: Any = None
    sender_iban: Any = None

    bank: Any = None
    branch_code: Any = None
    branch_name: Any = None

    account_type: Any = None
    account_number: Any = None

    transaction_type: Any = None
    transaction_id: Any = None
    description: Any = None

    commission: Any = None
    tax: Any = None
    total_fee: Any = None

    date: Any = None
    time: Any = None

    suggested_category: Any = None

    raw_response: Dict[str, Any] = Field(default_factory=dict, exclude=True)

    class Config:
        """Pydantic config."""
        alias_generator = to_camel
        populate_by_name = True
        extra = 'ignore'

    @classmethod
    def from_model_output(cls, data: Dict[str, Any]) -> 'ExtractedReceipt':
        """Build from the decoded JSON object, keeping the original for auditing."""
        receipt = cls.model_validate(data)
        receipt.raw_response = dict(data)
        return receipt


class NormalizedTransaction(BaseModel):
    """Validated transaction fields ready for classification and persistence."""

    direction: Literal['income', 'expense'] = 'expense'

    amount: Optional[float] = None
    currency: str = 'TRY'

    recipient: Optional[str] = None
    recipient_bank: Optional[str] = None
    recipient_iban: Optional[str] = None

    sender: Optional[str] = None
    sender_bank: Optional[str] = None
    sender_iban: Optional[str] = None

    bank: Optional[str] = None
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

    date: Optional[str] = Field(None, description="Transaction date (YYYY-MM-DD)")
    time: Optional[str] = None

    category: str

    raw_response: Dict[str, Any] = Field(default_factory=dict)


class Classification(BaseModel):
    """Routing decision for a normalized transaction."""

    target: Literal['income', 'expense']
    record: NormalizedTransaction
