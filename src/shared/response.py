"""Response utilities for Lambda functions."""

import base64
import json
from typing import Any, Dict, Optional
from datetime import datetime, date
from decimal import Decimal


DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS"
}


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder for Decimal and datetime objects."""

    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        return super().default(obj)


def json_response(
    body: Any,
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """
    Create a Lambda proxy response with a raw JSON body.

    Used where the caller dictates the payload shape (the Telegram webhook
    expects ``{"ok": true}``).

    Args:
        body: JSON-serializable payload
        status_code: HTTP status code (default: 200)
        headers: Optional additional headers

    Returns:
        Lambda proxy response dictionary
    """
    merged_headers = dict(DEFAULT_HEADERS)
    if headers:
        merged_headers.update(headers)

    return {
        "statusCode": status_code,
        "headers": merged_headers,
        "body": json.dumps(body, cls=DecimalEncoder)
    }


def error_response(
    message: str,
    status_code: int = 500,
    error_code: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """
    Create a standardized error response.

    Args:
        message: Error message
        status_code: HTTP status code (default: 500)
        error_code: Optional error code
        headers: Optional additional headers

    Returns:
        Lambda proxy response dictionary
    """
    body = {
        "success": False,
        "error": {
            "message": message,
            "code": error_code or f"ERROR_{status_code}"
        }
    }
    return json_response(body, status_code=status_code, headers=headers)


def not_found_response(message: str = "Resource not found") -> Dict[str, Any]:
    """Create a not found error response."""
    return error_response(
        message=message,
        status_code=404,
        error_code="NOT_FOUND"
    )


def unauthorized_response(message: str = "Unauthorized") -> Dict[str, Any]:
    """Create an unauthorized error response."""
    return error_response(
        message=message,
        status_code=401,
        error_code="UNAUTHORIZED"
    )


def redirect_response(location: str) -> Dict[str, Any]:
    """Create a temporary redirect response."""
    return {
        "statusCode": 302,
        "headers": {
            "Location": location,
            "Access-Control-Allow-Origin": "*"
        },
        "body": ""
    }


def binary_response(
    content: bytes,
    content_type: str,
    headers: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """
    Create a base64-encoded binary response for API Gateway.

    Args:
        content: Raw file bytes
        content_type: MIME type of the content
        headers: Optional additional headers

    Returns:
        Lambda proxy response dictionary
    """
    merged_headers = {
        "Content-Type": content_type,
        "Access-Control-Allow-Origin": "*"
    }
    if headers:
        merged_headers.update(headers)

    return {
        "statusCode": 200,
        "headers": merged_headers,
        "body": base64.b64encode(content).decode('utf-8'),
        "isBase64Encoded": True
    }
