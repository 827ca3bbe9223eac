"""Receipt storage models."""

from pydantic import BaseModel, Field


class StoredReceipt(BaseModel):
    """Where a receipt file ended up."""

    path: str = Field(..., description="https URL for remote storage, filesystem path for local")
    storage_id: str = Field(..., description="S3 key or local path, used for deletion")
    is_remote: bool = True


def is_remote_path(receipt_path: str) -> bool:
    """Remote receipts are stored as URLs; legacy ones as local paths."""
    return receipt_path.startswith('http://') or receipt_path.startswith('https://')
