"""
Подменные объекты для тестов: часы с ручным ходом и каналы уведомлений без сети.
"""
from datetime import datetime, timedelta
from typing import List

from hrtests.exceptions import NotifyError
from hrtests.utils.telegram import NotifyResult


class TickingClock:
    """Каждый вызов возвращает время на step позже предыдущего."""

    def __init__(self, start: datetime = datetime(2024, 3, 1, 12, 0, 0), step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + self.step
        return now

    def advance(self, delta: timedelta) -> None:
        self.current = self.current + delta


class RecordingNotifier:
    """Сохраняет отправленные тексты вместо отправки."""

    def __init__(self):
        self.messages: List[str] = []

    def send(self, text: str) -> NotifyResult:
        self.messages.append(text)
        return NotifyResult(ok=True)


class FailingNotifier:
    def __init__(self, reason: str = "Telegram недоступен"):
        self.reason = reason
        self.calls = 0

    def send(self, text: str) -> NotifyResult:
        self.calls += 1
        return NotifyResult(ok=False, error=NotifyError(self.reason))
