"""Telegram Bot API client."""

from typing import Any, Dict, Optional
import logging

import requests

from shared.exceptions import ChatTransportError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class TelegramClient:
    """Minimal Telegram Bot API wrapper over requests."""

    def __init__(
        self,
        token: str,
        api_base: str = 'https://api.telegram.org',
        session: Optional[requests.Session] = None,
        timeout: int = DEFAULT_TIMEOUT
    ):
        """
        Initialize the client.

        Args:
            token: Bot token
            api_base: Bot API base URL
            session: Optional shared HTTP session
            timeout: Request timeout in seconds
        """
        self.token = token
        self.api_base = api_base.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def send_message(self, chat_id: Any, text: str) -> Dict[str, Any]:
        """
        Send a text message.

        Raises:
            ChatTransportError: If the Bot API call fails
        """
        return self._call('sendMessage', {'chat_id': chat_id, 'text': text})

    def get_file_path(self, file_id: str) -> str:
        """
        Resolve a file_id to its download path.

        Raises:
            ChatTransportError: If the file cannot be resolved
        """
        result = self._call('getFile', {'file_id': file_id})
        file_path = result.get('file_path')
        if not file_path:
            raise ChatTransportError(f"No file_path returned for file {file_id}")
        return file_path

    def download_file(self, file_id: str) -> bytes:
        """
        Download the content of an uploaded file.

        Args:
            file_id: Telegram file_id

        Returns:
            File bytes

        Raises:
            ChatTransportError: If resolving or downloading fails
        """
        file_path = self.get_file_path(file_id)
        url = f"{self.api_base}/file/bot{self.token}/{file_path}"

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            # Never log the URL, it carries the bot token
            logger.error(f"Telegram file download failed for {file_path}: {type(e).__name__}")
            raise ChatTransportError(f"Failed to download file {file_path}")

        logger.info(f"Downloaded {len(response.content)} bytes from Telegram ({file_path})")
        return response.content

    def _call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.api_base}/bot{self.token}/{method}"

        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Telegram {method} request failed: {type(e).__name__}")
            raise ChatTransportError(f"Telegram {method} request failed")
        except ValueError:
            logger.error(f"Telegram {method} returned non-JSON (HTTP {response.status_code})")
            raise ChatTransportError(f"Telegram {method} returned an invalid response")

        if not data.get('ok'):
            description = data.get('description', 'unknown error')
            logger.error(f"Telegram {method} failed: {description}")
            raise ChatTransportError(f"Telegram {method} failed: {description}")

        return data.get('result') or {}
