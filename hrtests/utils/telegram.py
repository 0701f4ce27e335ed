from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from hrtests.exceptions import NotifyError

logger = logging.getLogger(__name__)

API_URL = "https://api.telegram.org/bot{token}/sendMessage"
MAX_MESSAGE_LENGTH = 4096


@dataclass
class NotifyResult:
    ok: bool
    error: Optional[NotifyError] = None


def truncate(text: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class TelegramNotifier:
    """
    Отправка сообщения в канал через Bot API.
    Ошибки не бросаются, а возвращаются в NotifyResult: уведомление не должно ронять запрос.
    """

    def __init__(
        self,
        bot_token: Optional[str],
        channel_id: Optional[str],
        timeout: float = 10.0,
        dry_run: bool = False,
    ):
        self.bot_token = bot_token
        self.channel_id = channel_id
        self.timeout = timeout
        self.dry_run = dry_run

    @property
    def configured(self) -> bool:
        return bool(self.bot_token and self.channel_id)

    def send(self, text: str) -> NotifyResult:
        message = truncate(text)

        if self.dry_run:
            logger.info(f"[DRY RUN] Сообщение для канала {self.channel_id}:\n{message}")
            return NotifyResult(ok=True)

        if not self.configured:
            return NotifyResult(ok=False, error=NotifyError("Telegram не настроен"))

        payload = {
            "chat_id": self.channel_id,
            "text": message,
            "parse_mode": "Markdown",
            "disable_web_page_preview": True,
        }
        try:
            response = requests.post(
                API_URL.format(token=self.bot_token), json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            # без URL: в нём токен бота
            return NotifyResult(ok=False, error=NotifyError(f"Telegram недоступен: {type(e).__name__}"))

        if response.status_code != 200:
            return NotifyResult(
                ok=False,
                error=NotifyError(f"Telegram API ответил {response.status_code}: {response.text[:200]}"),
            )

        logger.info(f"Сообщение отправлено в канал {self.channel_id}")
        return NotifyResult(ok=True)
