"""Amazon Bedrock vision service for receipt extraction."""

from typing import Any, Dict, List, Optional
from botocore.exceptions import BotoCoreError, ClientError
import logging

from shared import aws
from shared.exceptions import ExtractionFailedError
from shared.validators import PDF_MIME_TYPE
from receipt_processor.json_extractor import parse_model_json
from receipt_processor.models import ExtractedReceipt
from receipt_processor.prompt import RECEIPT_PROMPT

logger = logging.getLogger(__name__)

# Image formats accepted by the Converse API
IMAGE_FORMATS = {
    'image/jpeg': 'jpeg',
    'image/jpg': 'jpeg',
    'image/png': 'png',
    'image/gif': 'gif',
    'image/webp': 'webp'
}


class VisionService:
    """Bedrock Runtime client wrapper for receipt extraction."""

    def __init__(
        self,
        model_id: str,
        region_name: Optional[str] = None,
        client: Any = None,
        max_tokens: int = 2048
    ):
        """
        Initialize the Bedrock Runtime client.

        Args:
            model_id: Bedrock model identifier (must accept images and documents)
            region_name: Optional AWS region
            client: Optional pre-built client
            max_tokens: Upper bound on the answer length
        """
        self.model_id = model_id

        self.client = client if client is not None else aws.client('bedrock-runtime', region_name)
        self.max_tokens = max_tokens

    def extract(self, file_bytes: bytes, mime_type: str) -> ExtractedReceipt:
        """
        Extract receipt fields from an image or PDF.

        One request per call; there is no retry here.

        Args:
            file_bytes: Raw file content
            mime_type: MIME type of the file

        Returns:
            Loosely-typed extraction result

        Raises:
            ExtractionFailedError: If the call fails or the answer is not decodable
        """
        content = [self._file_block(file_bytes, mime_type), {'text': RECEIPT_PROMPT}]

        try:
            logger.info(f"Sending {len(file_bytes)} bytes ({mime_type}) to {self.model_id}")

            response = self.client.converse(
                modelId=self.model_id,
                messages=[{'role': 'user', 'content': content}],
                inferenceConfig={'maxTokens': self.max_tokens, 'temperature': 0}
            )
        except ClientError as e:
            error_code = e.response['Error']['Code']
            logger.error(f"Bedrock converse failed: {error_code}")
            raise ExtractionFailedError(f"Vision model call failed: {str(e)}")
        except BotoCoreError as e:
            logger.error(f"Bedrock converse failed: {str(e)}")
            raise ExtractionFailedError(f"Vision model call failed: {str(e)}")

        text = self._response_text(response)
        data = parse_model_json(text)

        logger.info(f"Model returned fields: {sorted(data.keys())}")
        return ExtractedReceipt.from_model_output(data)

    @staticmethod
    def _file_block(file_bytes: bytes, mime_type: str) -> Dict[str, Any]:
        """Build the Converse content block carrying the file inline."""
        mime_type = (mime_type or '').lower()

        if mime_type == PDF_MIME_TYPE:
            return {
                'document': {
                    'format': 'pdf',
                    'name': 'receipt',
                    'source': {'bytes': file_bytes}
                }
            }

        image_format = IMAGE_FORMATS.get(mime_type)
        if not image_format:
            raise ExtractionFailedError(f"Image format not supported by the model: {mime_type}")

        return {
            'image': {
                'format': image_format,
                'source': {'bytes': file_bytes}
            }
        }

    @staticmethod
    def _response_text(response: Dict[str, Any]) -> str:
        """Join the text blocks of a Converse response."""
        blocks: List[Dict[str, Any]] = (
            response.get('output', {}).get('message', {}).get('content', [])
        )
        return '\n'.join(block['text'] for block in blocks if 'text' in block)
