from __future__ import annotations

from enum import Enum
from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


class TestName(str, Enum):
    DISC = "DISC"
    EQ = "EQ"
    SPQ = "SPQ"
    HUBBARD = "Hubbard"
    INTEGRITY = "Integrity"
    OCA = "OCA"
    APTITUDE = "Aptitude"
    KFU = "KFU"


class Tier(str, Enum):
    """Уровень подходимости, от худшего к лучшему."""
    NOT_SUITABLE = "NOT_SUITABLE"
    MODERATE = "MODERATE"
    GOOD = "GOOD"
    EXCELLENT = "EXCELLENT"


class Severity(str, Enum):
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


class RoleMatch(BaseModel):
    name: str
    qualifying_range: str


class BandText(BaseModel):
    """Заголовок и вердикт выбранной полосы (для сообщения)."""
    marker: str
    title: str
    text: str
    verdict_marker: str
    verdict: str
    verdict_text: str


class ReportedAnalysis(BaseModel):
    """Анализ, посчитанный на стороне клиента (уровень и тексты)."""
    level: str = ""
    description: str = ""
    recommendation: str = ""


class Classification(BaseModel):
    test: TestName
    tier: Optional[Tier] = None
    passed: bool
    suitability: str
    recommendation: str
    strengths: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    recommended_roles: List[RoleMatch] = Field(default_factory=list)
    score: Optional[int] = None
    max_score: Optional[int] = None


class DiscClassification(Classification):
    test: Literal[TestName.DISC] = TestName.DISC
    dominant_type: str
    scores: Dict[str, int]


class BandClassification(Classification):
    """EQ, SPQ, Hubbard, Integrity и Aptitude: полоса по одной метрике."""
    test: Literal[
        TestName.EQ, TestName.SPQ, TestName.HUBBARD, TestName.INTEGRITY, TestName.APTITUDE
    ]
    metric: float
    band: BandText
    reported: Optional[ReportedAnalysis] = None
    average_tone: Optional[float] = None
    sub_scores: Dict[str, int] = Field(default_factory=dict)
    sub_percentages: Dict[str, float] = Field(default_factory=dict)


class CharacteristicMark(BaseModel):
    name: str
    score: int
    severity: Severity


class OcaClassification(Classification):
    test: Literal[TestName.OCA] = TestName.OCA
    characteristics: List[CharacteristicMark]
    band: BandText
    overall_assessment: str = ""
    reported_recommendation: str = ""


class KfuAnswer(BaseModel):
    question: str
    answer: str


class KfuClassification(Classification):
    test: Literal[TestName.KFU] = TestName.KFU
    answers: List[KfuAnswer]
    marker: str
    verdict_marker: str


AnyClassification = Union[DiscClassification, BandClassification, OcaClassification, KfuClassification]
