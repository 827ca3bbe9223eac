"""Lambda handler for the Telegram webhook."""

import base64
import json
import os
import logging
from datetime import datetime
from typing import Dict, Any, Optional
import sys

# Add parent directory to path for imports
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.config import Settings
from shared.response import json_response, error_response, unauthorized_response
from telegram_bot.orchestrator import IngestionOrchestrator, build_orchestrator

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO'))

SECRET_HEADER = 'x-telegram-bot-api-secret-token'

_orchestrator: Optional[IngestionOrchestrator] = None


def get_orchestrator() -> IngestionOrchestrator:
    """Build the orchestrator once per Lambda container."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator(Settings.from_env())
    return _orchestrator


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for the Telegram webhook.

    Handles:
    - GET /telegram - Liveness check
    - POST /telegram - Telegram update delivery

    Args:
        event: Lambda event
        context: Lambda context

    Returns:
        API Gateway response
    """
    http_method = get_http_method(event)
    logger.info(f"Request: {http_method} {event.get('path') or event.get('rawPath')}")

    if http_method == 'GET':
        return json_response({
            'status': 'ok',
            'message': 'Telegram webhook endpoint aktif',
            'timestamp': datetime.utcnow().isoformat()
        })

    if http_method != 'POST':
        return error_response("Method not allowed", status_code=405)

    try:
        orchestrator = get_orchestrator()

        expected_secret = orchestrator.settings.telegram_webhook_secret
        if expected_secret and get_header(event, SECRET_HEADER) != expected_secret:
            logger.warning("Invalid webhook secret token")
            return unauthorized_response()

        update = parse_body(event)
        orchestrator.handle_update(update)

        return json_response({'ok': True})

    except Exception as e:
        logger.error(f"Telegram webhook error: {str(e)}", exc_info=True)
        return json_response({'error': 'Webhook error'}, status_code=500)


def get_http_method(event: Dict[str, Any]) -> Optional[str]:
    """HTTP method for both REST (v1) and HTTP API (v2) payloads."""
    method = event.get('httpMethod')
    if not method:
        method = event.get('requestContext', {}).get('http', {}).get('method')
    return method.upper() if method else None


def get_header(event: Dict[str, Any], name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    headers = event.get('headers') or {}
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def parse_body(event: Dict[str, Any]) -> Dict[str, Any]:
    """Decode the JSON request body."""
    body = event.get('body') or '{}'
    if event.get('isBase64Encoded'):
        body = base64.b64decode(body).decode('utf-8')
    return json.loads(body)
