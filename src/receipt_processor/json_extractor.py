"""Locate and decode the JSON object inside free-form model output."""

import json
import logging
from typing import Any, Dict, Optional

from shared.exceptions import ExtractionFailedError

logger = logging.getLogger(__name__)


def find_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced ``{...}`` span in text.

    Braces inside JSON string literals are ignored, so a description such as
    ``"a {b"`` does not unbalance the scan.

    Args:
        text: Model response text

    Returns:
        The span including both braces, or None if no balanced span exists
    """
    start = text.find('{')

    while start != -1:
        depth = 0
        in_string = False
        escaped = False

        for index in range(start, len(text)):
            char = text[index]

            if in_string:
                if escaped:
                    escaped = False
                elif char == '\\':
                    escaped = True
                elif char == '"':
                    in_string = False
                continue

            if char == '"':
                in_string = True
            elif char == '{':
                depth += 1
            elif char == '}':
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]

        # Unbalanced from this brace; try the next opening brace
        start = text.find('{', start + 1)

    return None


def parse_model_json(text: str) -> Dict[str, Any]:
    """
    Decode the JSON object embedded in a model response.

    Args:
        text: Model response text

    Returns:
        Decoded JSON object

    Raises:
        ExtractionFailedError: If no object is found or it does not decode
    """
    if not text:
        raise ExtractionFailedError("Empty model response")

    span = find_json_object(text)
    if span is None:
        logger.error(f"No JSON object in model response: {text[:200]}")
        raise ExtractionFailedError("No JSON object in model response")

    try:
        data = json.loads(span)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to decode model JSON: {e}; span={span[:200]}")
        raise ExtractionFailedError(f"Invalid JSON in model response: {e}")

    if not isinstance(data, dict):
        raise ExtractionFailedError("Model JSON is not an object")

    return data
