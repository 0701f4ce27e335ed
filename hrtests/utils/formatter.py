from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from hrtests.schemas.classification import Classification, TestName
from hrtests.utils.scoring_config import ScoringConfig, TestMeta, get_scoring_config

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates" / "messages"

# Символы разметки в режиме parse_mode=Markdown
MARKDOWN_SPECIAL = re.compile(r"([_*`\[])")


@dataclass
class Candidate:
    name: str
    telegram: str
    role: str
    submitted_at: datetime


# --------------------- Фильтры шаблонов ---------------------

def telegram_handle(value: str) -> str:
    """Ник с ведущим @ (первый @ из ввода убирается, чтобы не было @@)."""
    return "@" + value.replace("@", "", 1)


def ru_datetime(value: datetime) -> str:
    return value.strftime("%d.%m.%Y, %H:%M:%S")


def markdown_escape(value: object) -> str:
    """Экранирует символы разметки во вводе кандидата (ники вида @ivan_petrov)."""
    return MARKDOWN_SPECIAL.sub(r"\\\1", str(value))


class MessageFormatter:
    """
    Собирает Markdown-сообщение для канала из результата расчёта.
    Тексты полос берутся из той же конфигурации, что и у расчёта.
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        hr_contact: Optional[str] = None,
        templates_dir: Path = TEMPLATES_DIR,
    ):
        self.config = config or get_scoring_config()
        self.hr_contact = hr_contact
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            autoescape=False,
            undefined=StrictUndefined,
        )
        self.env.filters["handle"] = telegram_handle
        self.env.filters["ru_datetime"] = ru_datetime
        self.env.filters["md"] = markdown_escape

    def next_steps(self, meta: TestMeta) -> str:
        if meta.contact_hr and self.hr_contact:
            return f"{meta.next_steps} {markdown_escape(self.hr_contact)}"
        return meta.next_steps

    def format(self, test_name: TestName, candidate: Candidate, classification: Classification) -> str:
        test_name = TestName(test_name)
        meta = self.config.for_test(test_name)
        template = self.env.get_template(f"{test_name.value.lower()}.md.j2")
        text = template.render(
            meta=meta,
            candidate=candidate,
            c=classification,
            next_steps=self.next_steps(meta),
            severity_markers=self.config.oca.severity.markers,
        )
        return text.rstrip("\n")
