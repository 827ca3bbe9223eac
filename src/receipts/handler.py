"""Lambda handler for viewing stored receipts."""

import os
import logging
from typing import Dict, Any, Optional
import sys

# Add parent directory to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.config import Settings
from shared.response import (
    binary_response,
    error_response,
    not_found_response,
    redirect_response,
    unauthorized_response
)
from shared.exceptions import LedgerException, NotFoundError
from shared.validators import mime_type_for_receipt
from receipts.models import is_remote_path
from receipts.storage import S3ReceiptStore, build_receipt_store
from transactions.service import TransactionService

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO'))

_services: Optional[Dict[str, Any]] = None


def get_services() -> Dict[str, Any]:
    """Build the transaction service and receipt store once per container."""
    global _services
    if _services is None:
        settings = Settings.from_env()
        _services = {
            'transactions': TransactionService.from_settings(settings),
            'store': build_receipt_store(settings)
        }
    return _services


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for receipt retrieval.

    Handles:
    - GET /receipts/{kind}/{id} - Redirect to, or stream, the receipt of an
      expense or income

    Args:
        event: Lambda event
        context: Lambda context

    Returns:
        API Gateway response
    """
    try:
        logger.info(f"Request: {event.get('httpMethod')} {event.get('path')}")

        # Get user ID from Cognito authorizer
        user_id = get_user_id(event)
        if not user_id:
            return unauthorized_response()

        if event.get('httpMethod') != 'GET':
            return error_response("Route not found", status_code=404)

        return handle_get(event)

    except LedgerException as e:
        logger.error(f"Application error: {str(e)}")
        return error_response(e.message, status_code=e.status_code)
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        return error_response("Dekont yüklenirken hata oluştu", status_code=500)


def handle_get(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Resolve a transaction's receipt.

    Remote receipts are redirected to; legacy local files are returned
    inline with a MIME type derived from receipt_type.

    Args:
        event: Lambda event

    Returns:
        API Gateway response
    """
    path_params = event.get('pathParameters') or {}
    kind = path_params.get('kind')
    transaction_id = path_params.get('id')

    if not kind or not transaction_id:
        return not_found_response("Dekont bulunamadı")

    services = get_services()

    try:
        transaction = services['transactions'].get_transaction(kind, transaction_id)
    except NotFoundError:
        return not_found_response("Dekont bulunamadı")

    receipt_path = transaction.get('receipt_path')
    if not receipt_path:
        return not_found_response("Dekont bulunamadı")

    receipt_type = transaction.get('receipt_type') or receipt_path.rsplit('.', 1)[-1].lower()

    if is_remote_path(receipt_path):
        store = services['store']
        storage_id = transaction.get('receipt_storage_id')
        if storage_id and isinstance(store, S3ReceiptStore):
            return redirect_response(
                store.get_view_url(storage_id, content_type=mime_type_for_receipt(receipt_type))
            )
        return redirect_response(receipt_path)

    if not os.path.exists(receipt_path):
        return not_found_response("Dekont dosyası bulunamadı")

    with open(receipt_path, 'rb') as f:
        content = f.read()

    return binary_response(
        content,
        content_type=mime_type_for_receipt(receipt_type),
        headers={'Content-Disposition': f'inline; filename="dekont.{receipt_type}"'}
    )


def get_user_id(event: Dict[str, Any]) -> str:
    """
    Extract user ID from Cognito authorizer claims.

    Args:
        event: Lambda event

    Returns:
        User ID (sub claim)
    """
    request_context = event.get('requestContext', {})
    authorizer = request_context.get('authorizer', {})
    claims = authorizer.get('claims', {})
    return claims.get('sub')
