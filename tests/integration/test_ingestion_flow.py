"""Integration tests for the Telegram receipt ingestion flow."""

import json
import pytest
from unittest.mock import Mock, patch
from moto import mock_aws
import boto3
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

BUCKET = 'test-receipts-bucket'
ALLOWED_ID = '555'

PNG_DATA = (
    b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00'
    b'\x01\x08\x02\x00\x00\x00\x90wS\xde\x00\x00\x00\x0cIDATx\x9cc'
    b'\x00\x01\x00\x00\x05\x00\x01\r\n-\xb4\x00\x00\x00\x00IEND\xaeB`\x82'
)


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mock AWS Credentials and ledger configuration."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')
    monkeypatch.setenv('USE_LOCALSTACK', 'false')
    monkeypatch.setenv('TELEGRAM_BOT_TOKEN', '123:abc')
    monkeypatch.setenv('TELEGRAM_ALLOWED_USERS', f'{ALLOWED_ID}, 556')
    monkeypatch.setenv('TELEGRAM_WEBHOOK_SECRET', 's3cret')
    monkeypatch.setenv('RECEIPTS_BUCKET', BUCKET)
    monkeypatch.setenv('EXPENSES_TABLE', 'test-expenses')
    monkeypatch.setenv('INCOMES_TABLE', 'test-incomes')
    monkeypatch.setenv('USERS_TABLE', 'test-users')


@pytest.fixture
def aws(aws_credentials):
    """Create mock S3 and DynamoDB resources."""
    with mock_aws():
        s3 = boto3.client('s3', region_name='us-east-1')
        s3.create_bucket(Bucket=BUCKET)

        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
        for name, key in (('test-expenses', 'id'), ('test-incomes', 'id'), ('test-users', 'user_id')):
            dynamodb.create_table(
                TableName=name,
                KeySchema=[{'AttributeName': key, 'KeyType': 'HASH'}],
                AttributeDefinitions=[{'AttributeName': key, 'AttributeType': 'S'}],
                BillingMode='PAY_PER_REQUEST'
            )

        dynamodb.Table('test-users').put_item(Item={
            'user_id': 'admin-1',
            'username': 'admin',
            'role': 'admin',
            'created_at': '2024-01-01T00:00:00'
        })

        yield {'s3': s3, 'dynamodb': dynamodb}


@pytest.fixture
def telegram_session():
    """requests.Session stand-in answering the Bot API."""
    session = Mock()

    def post(url, json=None, timeout=None):
        response = Mock(status_code=200)
        if url.endswith('/getFile'):
            response.json.return_value = {'ok': True, 'result': {'file_path': 'photos/file_1.png'}}
        else:
            response.json.return_value = {'ok': True, 'result': {'message_id': 1}}
        return response

    session.post.side_effect = post
    session.get.return_value = Mock(status_code=200, content=PNG_DATA)
    return session


@pytest.fixture
def bedrock():
    """bedrock-runtime client stand-in answering with a receipt."""
    client = Mock()
    client.converse.return_value = {
        'output': {'message': {'role': 'assistant', 'content': [{'text': json.dumps({
            'transactionDirection': 'expense',
            'amount': 1500,
            'currency': 'TRY',
            'recipient': 'Ali Usta',
            'recipientIban': 'TR12 0001 0000 0000 0000 0000 01',
            'bank': 'Ziraat Bankası',
            'transactionType': 'FAST',
            'commission': 5,
            'tax': 0.25,
            'date': '15.01.2024',
            'time': '14:30:00',
            'suggestedCategory': 'İşçi'
        })}]}}
    }
    return client


@pytest.fixture
def orchestrator(aws, telegram_session, bedrock):
    """Orchestrator against moto, with Telegram and Bedrock stubbed."""
    from receipt_processor.vision_service import VisionService
    from receipts.storage import build_receipt_store
    from shared.config import Settings
    from telegram_bot.client import TelegramClient
    from telegram_bot.orchestrator import IngestionOrchestrator
    from transactions.service import TransactionService

    settings = Settings.from_env()
    return IngestionOrchestrator(
        settings=settings,
        telegram=TelegramClient(settings.telegram_bot_token, session=telegram_session),
        vision=VisionService(settings.bedrock_model_id, client=bedrock),
        store=build_receipt_store(settings),
        transactions=TransactionService.from_settings(settings)
    )


def photo_event(sender_id=ALLOWED_ID):
    """Webhook event carrying a photo message."""
    update = {
        'update_id': 1,
        'message': {
            'message_id': 10,
            'chat': {'id': 777},
            'from': {'id': int(sender_id)},
            'photo': [{'file_id': 'small'}, {'file_id': 'large'}]
        }
    }
    return {
        'httpMethod': 'POST',
        'path': '/telegram',
        'headers': {'X-Telegram-Bot-Api-Secret-Token': 's3cret'},
        'body': json.dumps(update)
    }


def sent_texts(session):
    """Texts posted to sendMessage, in order."""
    return [
        call.kwargs['json']['text']
        for call in session.post.call_args_list
        if call.args[0].endswith('/sendMessage')
    ]


class TestIngestionFlow:
    """Integration tests for webhook to ledger row."""

    def test_photo_becomes_expense(self, aws, orchestrator, telegram_session, bedrock):
        """Test a photo receipt ends up in S3 and the expenses table."""
        from telegram_bot import handler

        with patch('telegram_bot.handler.get_orchestrator', return_value=orchestrator):
            response = handler.lambda_handler(photo_event(), None)

        assert response['statusCode'] == 200

        # File fetched via getFile and the file endpoint
        telegram_session.get.assert_called_once()
        assert telegram_session.get.call_args.args[0] == (
            'https://api.telegram.org/file/bot123:abc/photos/file_1.png'
        )

        # Receipt uploaded
        objects = aws['s3'].list_objects_v2(Bucket=BUCKET)
        assert objects['KeyCount'] == 1
        key = objects['Contents'][0]['Key']
        assert key.startswith('receipts/receipt_')
        assert key.endswith('.jpg')
        assert aws['s3'].get_object(Bucket=BUCKET, Key=key)['Body'].read() == PNG_DATA

        # One expense row, no income rows
        expenses = aws['dynamodb'].Table('test-expenses').scan()['Items']
        assert len(expenses) == 1
        assert aws['dynamodb'].Table('test-incomes').scan()['Count'] == 0

        expense = expenses[0]
        assert expense['recipient'] == 'Ali Usta'
        assert expense['category'] == 'İşçi'
        assert expense['bank'] == 'Ziraat Bankası'
        assert expense['date'] == '2024-01-15'
        assert float(expense['amount']) == 1500.0
        assert float(expense['total_fee']) == 5.25
        assert expense['recipient_iban'] == 'TR120001000000000000000001'
        assert expense['receipt_storage_id'] == key
        assert expense['receipt_path'] == f'https://{BUCKET}.s3.amazonaws.com/{key}'
        assert expense['receipt_type'] == 'jpg'
        assert expense['user_id'] == 'admin-1'
        assert expense['is_manual'] is False

        texts = sent_texts(telegram_session)
        assert texts[0] == "🔍 Dekont analiz ediliyor..."
        assert texts[-1].startswith("✅ Gider kaydedildi!")

    def test_unauthorized_sender_leaves_no_trace(self, aws, orchestrator, telegram_session, bedrock):
        """Test that a rejected sender causes no download, upload or row."""
        from telegram_bot import handler

        with patch('telegram_bot.handler.get_orchestrator', return_value=orchestrator):
            response = handler.lambda_handler(photo_event(sender_id='999'), None)

        assert response['statusCode'] == 200
        telegram_session.get.assert_not_called()
        bedrock.converse.assert_not_called()
        assert aws['s3'].list_objects_v2(Bucket=BUCKET)['KeyCount'] == 0
        assert aws['dynamodb'].Table('test-expenses').scan()['Count'] == 0
        assert sent_texts(telegram_session) == ["⛔ Bu botu kullanma yetkiniz yok."]

    def test_unreadable_receipt_leaves_no_trace(self, aws, orchestrator, telegram_session, bedrock):
        """Test that an unreadable receipt is neither uploaded nor saved."""
        from telegram_bot import handler

        bedrock.converse.return_value = {
            'output': {'message': {'content': [{'text': '{"amount": null, "recipient": null}'}]}}
        }

        with patch('telegram_bot.handler.get_orchestrator', return_value=orchestrator):
            handler.lambda_handler(photo_event(), None)

        assert aws['s3'].list_objects_v2(Bucket=BUCKET)['KeyCount'] == 0
        assert aws['dynamodb'].Table('test-expenses').scan()['Count'] == 0
        assert sent_texts(telegram_session)[-1].startswith("⚠️ Dekont okunamadı")

    def test_saved_receipt_can_be_viewed(self, aws, orchestrator):
        """Test that the receipt endpoint redirects to the uploaded file."""
        from receipts import handler as receipt_handler

        result = orchestrator.handle_update(json.loads(photo_event()['body']))
        services = {'transactions': orchestrator.transactions, 'store': orchestrator.store}

        event = {
            'httpMethod': 'GET',
            'path': f'/receipts/expense/{result.transaction.id}',
            'pathParameters': {'kind': 'expense', 'id': result.transaction.id},
            'requestContext': {'authorizer': {'claims': {'sub': 'admin-1'}}}
        }
        with patch('receipts.handler.get_services', return_value=services):
            response = receipt_handler.lambda_handler(event, None)

        assert response['statusCode'] == 302
        assert result.transaction.receipt_storage_id in response['headers']['Location']
