"""Unit tests for the Bedrock vision service."""

import json
import pytest
from unittest.mock import Mock
from botocore.exceptions import ClientError, EndpointConnectionError
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from receipt_processor.prompt import RECEIPT_PROMPT
from receipt_processor.vision_service import VisionService
from shared.exceptions import ExtractionFailedError

MODEL_ID = 'anthropic.claude-3-5-sonnet-20240620-v1:0'


def converse_response(text):
    """Build a Converse API response carrying one text block."""
    return {
        'output': {'message': {'role': 'assistant', 'content': [{'text': text}]}},
        'stopReason': 'end_turn'
    }


class TestVisionService:
    """Test cases for VisionService."""

    @pytest.fixture
    def bedrock(self):
        """Mocked bedrock-runtime client."""
        client = Mock()
        client.converse.return_value = converse_response(json.dumps({
            'transactionDirection': 'expense',
            'amount': 1500,
            'recipient': 'Ali Usta',
            'suggestedCategory': 'İşçi'
        }))
        return client

    @pytest.fixture
    def service(self, bedrock):
        """VisionService with the mocked client."""
        return VisionService(MODEL_ID, client=bedrock)

    def test_extract_image(self, service, bedrock):
        """Test extraction from a JPEG photo."""
        extracted = service.extract(b'jpeg-bytes', 'image/jpeg')

        assert extracted.amount == 1500
        assert extracted.recipient == 'Ali Usta'
        assert extracted.transaction_direction == 'expense'
        assert extracted.suggested_category == 'İşçi'
        assert extracted.raw_response['amount'] == 1500

        kwargs = bedrock.converse.call_args.kwargs
        assert kwargs['modelId'] == MODEL_ID
        assert kwargs['inferenceConfig']['temperature'] == 0

        content = kwargs['messages'][0]['content']
        assert content[0] == {'image': {'format': 'jpeg', 'source': {'bytes': b'jpeg-bytes'}}}
        assert content[1] == {'text': RECEIPT_PROMPT}

    def test_extract_pdf(self, service, bedrock):
        """Test that PDFs are sent as a document block."""
        service.extract(b'%PDF-1.7', 'application/pdf')

        block = bedrock.converse.call_args.kwargs['messages'][0]['content'][0]
        assert block['document']['format'] == 'pdf'
        assert block['document']['source'] == {'bytes': b'%PDF-1.7'}

    def test_extract_png(self, service, bedrock):
        """Test that the image format follows the MIME type."""
        service.extract(b'png-bytes', 'image/png')

        block = bedrock.converse.call_args.kwargs['messages'][0]['content'][0]
        assert block['image']['format'] == 'png'

    def test_max_tokens_default(self, service, bedrock):
        """Test the default answer length limit."""
        service.extract(b'jpeg-bytes', 'image/jpeg')

        assert bedrock.converse.call_args.kwargs['inferenceConfig']['maxTokens'] == 2048

    def test_max_tokens_configured(self, bedrock):
        """Test that a configured limit reaches the request."""
        service = VisionService(MODEL_ID, client=bedrock, max_tokens=4096)

        service.extract(b'jpeg-bytes', 'image/jpeg')

        assert bedrock.converse.call_args.kwargs['inferenceConfig']['maxTokens'] == 4096

    def test_extract_unsupported_image_format(self, service, bedrock):
        """Test that image formats the model cannot read are rejected before the call."""
        with pytest.raises(ExtractionFailedError):
            service.extract(b'tiff-bytes', 'image/tiff')

        bedrock.converse.assert_not_called()

    def test_extract_client_error(self, service, bedrock):
        """Test that API errors become ExtractionFailedError."""
        bedrock.converse.side_effect = ClientError(
            {'Error': {'Code': 'ThrottlingException', 'Message': 'Too many requests'}},
            'Converse'
        )

        with pytest.raises(ExtractionFailedError):
            service.extract(b'jpeg-bytes', 'image/jpeg')

    def test_extract_connection_error(self, service, bedrock):
        """Test that transport errors become ExtractionFailedError."""
        bedrock.converse.side_effect = EndpointConnectionError(endpoint_url='https://bedrock-runtime')

        with pytest.raises(ExtractionFailedError):
            service.extract(b'jpeg-bytes', 'image/jpeg')

    def test_extract_json_in_prose(self, service, bedrock):
        """Test that JSON wrapped in prose is still decoded."""
        bedrock.converse.return_value = converse_response(
            'Dekont bilgileri:\n```json\n{"amount": 250.5, "sender": "Mehmet"}\n```'
        )

        extracted = service.extract(b'jpeg-bytes', 'image/jpeg')

        assert extracted.amount == 250.5
        assert extracted.sender == 'Mehmet'

    def test_extract_no_json(self, service, bedrock):
        """Test that a refusal without JSON raises ExtractionFailedError."""
        bedrock.converse.return_value = converse_response('Bu görselde dekont yok.')

        with pytest.raises(ExtractionFailedError):
            service.extract(b'jpeg-bytes', 'image/jpeg')

    def test_extract_ignores_unknown_keys(self, service, bedrock):
        """Test that keys outside the receipt shape are ignored."""
        bedrock.converse.return_value = converse_response('{"amount": 10, "confidence": 0.9}')

        extracted = service.extract(b'jpeg-bytes', 'image/jpeg')

        assert extracted.amount == 10
        assert not hasattr(extracted, 'confidence')
        assert extracted.raw_response == {'amount': 10, 'confidence': 0.9}
