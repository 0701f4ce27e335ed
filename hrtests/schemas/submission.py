from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional, Type

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)

from hrtests.schemas.classification import ReportedAnalysis, TestName

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

DEFAULT_ROLE = "broker"


class CandidateIn(BaseModel):
    """Данные кандидата, общие для всех тестов."""
    model_config = ConfigDict(populate_by_name=True)

    name: NonEmptyStr
    telegram: NonEmptyStr
    role: Optional[str] = None

    @property
    def role_or_default(self) -> str:
        role = (self.role or "").strip()
        return role or DEFAULT_ROLE

    def answers_payload(self) -> Dict[str, Any]:
        """Сырые ответы без полей кандидата: то, что сохраняется в answers."""
        return self.model_dump(mode="json", by_alias=True, exclude=set(CandidateIn.model_fields))


class DiscScores(BaseModel):
    D: int = Field(ge=0)
    I: int = Field(ge=0)
    S: int = Field(ge=0)
    C: int = Field(ge=0)


class DiscSubmission(CandidateIn):
    scores: DiscScores


class EqSubmission(CandidateIn):
    score: int = Field(ge=0, le=40)
    analysis: ReportedAnalysis


class SpqSubmission(CandidateIn):
    score: int = Field(ge=0, le=30)
    analysis: ReportedAnalysis


class HubbardSubmission(CandidateIn):
    score: int = Field(ge=0, le=40)
    average_tone: float = Field(alias="averageTone", ge=0)
    analysis: ReportedAnalysis


class IntegritySubmission(CandidateIn):
    score: int = Field(ge=0, le=30)
    analysis: ReportedAnalysis


class OcaAnalysis(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    overall_assessment: str = Field(default="", alias="overallAssessment")
    recommendation: str = ""
    # Общая оценка считается на клиенте, здесь только принимается
    suitability: NonEmptyStr


class OcaSubmission(CandidateIn):
    scores: Annotated[List[int], Field(min_length=10, max_length=10)]
    analysis: OcaAnalysis


class AptitudeScores(BaseModel):
    attention: int = Field(ge=0, le=20, validation_alias=AliasChoices("attention", "attentionScore"))
    understanding: int = Field(
        ge=0, le=20, validation_alias=AliasChoices("understanding", "understandingScore")
    )
    logic: int = Field(ge=0, le=20, validation_alias=AliasChoices("logic", "logicScore"))

    @property
    def total(self) -> int:
        return self.attention + self.understanding + self.logic


class AptitudeSubmission(CandidateIn):
    scores: AptitudeScores
    analysis: Optional[ReportedAnalysis] = None


class KfuAnswers(BaseModel):
    question1: str = ""
    question2: str = ""
    question3: str = ""
    question4: str = ""
    question5: str = ""
    question6: str = ""
    question7: str = ""
    question8: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _answer_as_text(cls, value: Any) -> Any:
        # форма может прислать число вместо строки
        if value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value

    def as_list(self) -> List[str]:
        return [getattr(self, f"question{i}") for i in range(1, 9)]


class KfuSubmission(CandidateIn):
    answers: KfuAnswers
    passed: bool
    score: Optional[int] = Field(default=None, ge=0, le=8)

    @model_validator(mode="before")
    @classmethod
    def _lift_candidate_data(cls, data: Any) -> Any:
        # Старая форма КФУ присылает кандидата во вложенном candidateData
        if isinstance(data, dict) and isinstance(data.get("candidateData"), dict):
            candidate = data["candidateData"]
            data = {k: v for k, v in data.items() if k != "candidateData"}
            lifted = {
                "name": candidate.get("fullName") or candidate.get("name"),
                "telegram": candidate.get("telegram"),
                "role": candidate.get("role"),
            }
            for key, value in lifted.items():
                if value is not None:
                    data.setdefault(key, value)
        return data


SUBMISSION_MODELS: Dict[TestName, Type[CandidateIn]] = {
    TestName.DISC: DiscSubmission,
    TestName.EQ: EqSubmission,
    TestName.SPQ: SpqSubmission,
    TestName.HUBBARD: HubbardSubmission,
    TestName.INTEGRITY: IntegritySubmission,
    TestName.OCA: OcaSubmission,
    TestName.APTITUDE: AptitudeSubmission,
    TestName.KFU: KfuSubmission,
}
