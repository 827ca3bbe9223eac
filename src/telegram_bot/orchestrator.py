"""Ingestion of receipts sent to the Telegram bot."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union
import logging

from pydantic import BaseModel

from shared.config import Settings
from shared.exceptions import (
    GENERIC_FAILURE_MESSAGE,
    AuthorizationDeniedError,
    ChatTransportError,
    DatabaseError,
    LedgerException,
    NoSystemUserError,
    UnreadableReceiptError,
    UnsupportedAttachmentError
)
from shared.validators import extension_for_mime_type, is_supported_mime_type
from receipt_processor.classifier import TransactionClassifier
from receipt_processor.parser import ReceiptParser
from receipt_processor.vision_service import VisionService
from receipts.storage import build_receipt_store, generate_receipt_name
from telegram_bot import messages
from telegram_bot.client import TelegramClient
from transactions.models import Expense, Income
from transactions.service import TransactionService

logger = logging.getLogger(__name__)

PHOTO_MIME_TYPE = 'image/jpeg'


class IngestionState(str, Enum):
    """Stages of one receipt ingestion."""

    RECEIVED = 'received'
    AUTHORIZING = 'authorizing'
    ACKNOWLEDGED = 'acknowledged'
    FETCHING = 'fetching'
    EXTRACTING = 'extracting'
    VALIDATING = 'validating'
    STORING = 'storing'
    PERSISTING = 'persisting'
    CONFIRMED = 'confirmed'
    FAILED = 'failed'


class IngestionResult(BaseModel):
    """Outcome of one ingestion session."""

    chat_id: Any = None
    state: IngestionState = IngestionState.RECEIVED
    failed_at: Optional[IngestionState] = None
    error: Optional[str] = None
    target: Optional[str] = None
    transaction: Optional[Union[Expense, Income]] = None


class IngestionOrchestrator:
    """
    Drives each inbound Telegram message through the receipt pipeline.

    Holds its collaborators by reference so tests can swap any of them.
    Messages are handled independently; nothing here is shared between
    sessions except the collaborators themselves.
    """

    def __init__(
        self,
        settings: Settings,
        telegram: TelegramClient,
        vision: VisionService,
        store: Any,
        transactions: TransactionService
    ):
        self.settings = settings
        self.telegram = telegram
        self.vision = vision
        self.store = store
        self.transactions = transactions

    def is_allowed(self, sender_id: Any) -> bool:
        """An empty allow-list means anyone may use the bot."""
        allowed = self.settings.telegram_allowed_users
        if not allowed:
            return True
        return sender_id is not None and str(sender_id) in allowed

    def handle_update(self, update: Dict[str, Any]) -> Optional[IngestionResult]:
        """
        Handle one Telegram update.

        Args:
            update: Decoded webhook payload

        Returns:
            IngestionResult for photo and document messages, None otherwise
        """
        message = update.get('message')
        if not message:
            logger.info(f"Ignoring update {update.get('update_id')} without a message")
            return None

        chat_id = message.get('chat', {}).get('id')
        sender_id = message.get('from', {}).get('id')

        if message.get('photo'):
            # Sizes are ordered smallest first
            photo = message['photo'][-1]
            return self.ingest(chat_id, sender_id, photo['file_id'], PHOTO_MIME_TYPE)

        if message.get('document'):
            document = message['document']
            return self.ingest(chat_id, sender_id, document['file_id'], document.get('mime_type') or '')

        if message.get('text') is not None:
            self.handle_text(chat_id, sender_id, message['text'])
            return None

        logger.info(f"Ignoring unsupported message type from chat {chat_id}")
        return None

    def ingest(self, chat_id: Any, sender_id: Any, file_id: str, mime_type: str) -> IngestionResult:
        """
        Run one receipt through the pipeline.

        Every failure ends the session with a reply to the sender; nothing
        is retried. An unreadable receipt is neither stored nor saved.
        """
        result = IngestionResult(chat_id=chat_id)
        stored = None

        try:
            self._advance(result, IngestionState.AUTHORIZING)
            if not self.is_allowed(sender_id):
                raise AuthorizationDeniedError(f"Telegram user {sender_id} is not allowed")

            self._advance(result, IngestionState.ACKNOWLEDGED)
            self.telegram.send_message(chat_id, messages.PROCESSING_MESSAGE)

            self._advance(result, IngestionState.FETCHING)
            if not is_supported_mime_type(mime_type):
                raise UnsupportedAttachmentError(f"Unsupported MIME type: {mime_type!r}")
            file_bytes = self.telegram.download_file(file_id)

            self._advance(result, IngestionState.EXTRACTING)
            extracted = self.vision.extract(file_bytes, mime_type)
            if not ReceiptParser.has_usable_content(extracted):
                raise UnreadableReceiptError()

            self._advance(result, IngestionState.VALIDATING)
            record = ReceiptParser.normalize(extracted)

            self._advance(result, IngestionState.STORING)
            receipt_type = extension_for_mime_type(mime_type)
            stored = self.store.store(file_bytes, generate_receipt_name(), mime_type, receipt_type)

            self._advance(result, IngestionState.PERSISTING)
            classification = TransactionClassifier.classify(record)
            result.target = classification.target
            result.transaction = self.transactions.save(
                classification,
                stored,
                receipt_type,
                str(sender_id) if sender_id is not None else None
            )

        except LedgerException as e:
            if isinstance(e, DatabaseError) and stored is not None:
                # The blob is intentionally kept; reconcile out of band
                logger.error(f"Receipt {stored.storage_id} stored but not saved to the database")
            return self._fail(result, e)
        except Exception as e:
            logger.error(f"Unexpected error during {result.state.value}: {str(e)}", exc_info=True)
            return self._fail(result, e)

        try:
            self.telegram.send_message(chat_id, messages.confirmation_message(result.transaction))
        except ChatTransportError as e:
            logger.error(f"Saved {result.target} {result.transaction.id} but confirmation failed: {e.message}")
            result.failed_at = IngestionState.CONFIRMED
            result.error = type(e).__name__
            result.state = IngestionState.FAILED
            return result

        self._advance(result, IngestionState.CONFIRMED)
        return result

    def handle_text(self, chat_id: Any, sender_id: Any, text: str) -> None:
        """Answer bot commands and plain text."""
        command = text.strip().split()[0].split('@')[0].lower() if text.strip() else ''

        if command == '/id':
            self.telegram.send_message(chat_id, messages.id_message(sender_id))
            return

        if command == '/help':
            self.telegram.send_message(chat_id, messages.HELP_MESSAGE)
            return

        if not self.is_allowed(sender_id):
            logger.warning(f"Rejected {command or 'text'} from unauthorized user {sender_id}")
            self.telegram.send_message(chat_id, AuthorizationDeniedError.user_message)
            return

        if command == '/start':
            self.telegram.send_message(chat_id, messages.START_MESSAGE)
        elif command == '/son':
            self._send_recent(chat_id)
        elif command == '/stats':
            self._send_stats(chat_id)
        else:
            self.telegram.send_message(chat_id, messages.SEND_RECEIPT_HINT)

    def _send_recent(self, chat_id: Any) -> None:
        try:
            text = messages.recent_message(self.transactions.list_recent(limit=5))
        except LedgerException as e:
            logger.error(f"Listing recent transactions failed: {e.message}")
            text = messages.RECENT_FAILED_MESSAGE
        self.telegram.send_message(chat_id, text)

    def _send_stats(self, chat_id: Any) -> None:
        now = datetime.utcnow()
        try:
            summary = self.transactions.monthly_summary(now.year, now.month)
            text = messages.stats_message(summary, now.month)
        except LedgerException as e:
            logger.error(f"Monthly summary failed: {e.message}")
            text = messages.STATS_FAILED_MESSAGE
        self.telegram.send_message(chat_id, text)

    @staticmethod
    def _advance(result: IngestionResult, state: IngestionState) -> None:
        logger.info(f"Chat {result.chat_id}: {result.state.value} -> {state.value}")
        result.state = state

    def _fail(self, result: IngestionResult, error: Exception) -> IngestionResult:
        if isinstance(error, NoSystemUserError):
            logger.critical(f"No system user configured, cannot save receipts: {error.message}")
        elif isinstance(error, LedgerException):
            logger.warning(f"Chat {result.chat_id}: failed at {result.state.value}: {error.message}")

        result.failed_at = result.state
        result.error = type(error).__name__
        result.state = IngestionState.FAILED

        reply = error.user_message if isinstance(error, LedgerException) else GENERIC_FAILURE_MESSAGE
        try:
            self.telegram.send_message(result.chat_id, reply)
        except ChatTransportError as e:
            logger.error(f"Could not tell chat {result.chat_id} about the failure: {e.message}")

        return result


def build_orchestrator(settings: Settings) -> IngestionOrchestrator:
    """Wire the orchestrator against real AWS and Telegram services."""
    return IngestionOrchestrator(
        settings=settings,
        telegram=TelegramClient(settings.telegram_bot_token, api_base=settings.telegram_api_base),
        vision=VisionService(
            settings.bedrock_model_id,
            region_name=settings.aws_region,
            max_tokens=settings.bedrock_max_tokens
        ),
        store=build_receipt_store(settings),
        transactions=TransactionService.from_settings(settings)
    )
