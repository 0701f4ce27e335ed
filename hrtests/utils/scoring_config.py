from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hrtests.exceptions import ScoringConfigError
from hrtests.schemas.classification import BandText, TestName, Tier

# Файл порогов и текстов лежит в пакете
CONFIG_PATH = Path(__file__).resolve().parents[1] / "rules" / "scoring.yaml"

Number = Union[int, float]


# --------------------- Модели конфигурации ---------------------

class RoleRule(BaseModel):
    """Рекомендуемая должность и условие допуска к ней."""
    name: str
    range: Optional[Tuple[Number, Number]] = None
    open_ended: bool = False
    gates: Dict[str, Number] = Field(default_factory=dict)
    note: Optional[str] = None


class Verdict(BandText):
    tier: Tier
    passed: bool
    roles: List[RoleRule] = Field(default_factory=list)

    def text_only(self) -> BandText:
        return BandText(**self.model_dump(include=set(BandText.model_fields)))


class Band(Verdict):
    min: Optional[Number] = None


class LabelledVerdict(Verdict):
    labels: List[str] = Field(default_factory=list)


class ReportedMarkers(BaseModel):
    level: str = "📈"
    description: str = "💡"
    recommendation: str = "🔍"


class TestMeta(BaseModel):
    """Общие для всех тестов поля: тип, максимум и шапка сообщения."""
    # незнакомый ключ в разделе теста считается опечаткой
    model_config = ConfigDict(extra="forbid")

    test_type: str
    max_score: int
    header: str
    audience: str = ""
    results_title: str
    next_steps: str
    contact_hr: bool = False
    reported_markers: ReportedMarkers = Field(default_factory=ReportedMarkers)


class DiscRules(BaseModel):
    excellent_i_above: Number
    excellent_d_min: Number
    good_i_above: Number
    good_weak_d_below: Number
    moderate_d_above: Number


class DiscVerdict(BaseModel):
    suitability: str
    recommendation: str
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)


class DiscConfig(TestMeta):
    rules: DiscRules
    weak_dominance_concern: str
    verdicts: Dict[Tier, DiscVerdict]


class BandTestConfig(TestMeta):
    range_unit: str = ""
    range_suffix: str = ""
    sub_max_score: Optional[int] = None
    bands: List[Band]


class SeverityRules(BaseModel):
    red_below: Number
    yellow_below: Number
    markers: Dict[str, str]


class OcaConfig(TestMeta):
    characteristics: List[str]
    severity: SeverityRules
    verdicts: List[LabelledVerdict]


class KfuOutcome(BaseModel):
    marker: str
    status: str
    verdict_marker: str
    verdict: str


class KfuConfig(TestMeta):
    questions: List[str]
    outcomes: Dict[str, KfuOutcome]


class ScoringConfig(BaseModel):
    disc: DiscConfig = Field(alias="DISC")
    eq: BandTestConfig = Field(alias="EQ")
    spq: BandTestConfig = Field(alias="SPQ")
    hubbard: BandTestConfig = Field(alias="Hubbard")
    integrity: BandTestConfig = Field(alias="Integrity")
    oca: OcaConfig = Field(alias="OCA")
    aptitude: BandTestConfig = Field(alias="Aptitude")
    kfu: KfuConfig = Field(alias="KFU")

    def for_test(self, test_name: TestName) -> TestMeta:
        return getattr(self, TestName(test_name).name.lower())


# --------------------- Загрузка YAML ---------------------

def _load_yaml(path: Path) -> Dict[str, Any]:
    """Читает YAML и возвращает dict. Бросает ScoringConfigError при ошибке."""
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ScoringConfigError(f"Ошибка чтения YAML {path}: {e}") from e
    if not isinstance(data, dict):
        raise ScoringConfigError(f"Формат YAML должен быть объектом (mapping): {path}")
    return data


def _validate_bands(name: str, bands: List[Band], path: Path) -> None:
    """Полосы идут по убыванию порога, у последней порога нет."""
    if not bands:
        raise ScoringConfigError(f"{path}: {name}: не заданы полосы")
    if bands[-1].min is not None:
        raise ScoringConfigError(f"{path}: {name}: последняя полоса должна иметь min: null")
    thresholds = [b.min for b in bands[:-1]]
    if any(t is None for t in thresholds):
        raise ScoringConfigError(f"{path}: {name}: min: null допустим только у последней полосы")
    if thresholds != sorted(thresholds, reverse=True):
        raise ScoringConfigError(f"{path}: {name}: пороги полос должны убывать")


def parse_scoring_config(data: Dict[str, Any], path: Path = CONFIG_PATH) -> ScoringConfig:
    try:
        config = ScoringConfig.model_validate(data)
    except ValidationError as e:
        raise ScoringConfigError(f"{path}: неверная структура: {e}") from e

    for name in ("eq", "spq", "hubbard", "integrity", "aptitude"):
        _validate_bands(name, getattr(config, name).bands, path)

    missing = [t.value for t in Tier if t not in config.disc.verdicts]
    if missing:
        raise ScoringConfigError(f"{path}: DISC: нет вердиктов для {', '.join(missing)}")
    if not config.aptitude.sub_max_score:
        raise ScoringConfigError(f"{path}: Aptitude: не задан sub_max_score")
    if not config.oca.verdicts:
        raise ScoringConfigError(f"{path}: OCA: не заданы вердикты")
    if len(config.oca.characteristics) != 10:
        raise ScoringConfigError(f"{path}: OCA: ожидается 10 характеристик")
    if len(config.kfu.questions) != 8:
        raise ScoringConfigError(f"{path}: KFU: ожидается 8 вопросов")
    if set(config.kfu.outcomes) != {"passed", "failed"}:
        raise ScoringConfigError(f"{path}: KFU: нужны исходы passed и failed")
    return config


def load_scoring_config(path: Path | None = None) -> ScoringConfig:
    path = Path(path) if path else CONFIG_PATH
    return parse_scoring_config(_load_yaml(path), path)


@lru_cache()
def get_scoring_config() -> ScoringConfig:
    return load_scoring_config()
