from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from hrtests.schemas.classification import (
    BandClassification,
    CharacteristicMark,
    Classification,
    DiscClassification,
    KfuAnswer,
    KfuClassification,
    OcaClassification,
    ReportedAnalysis,
    RoleMatch,
    Severity,
    TestName,
    Tier,
)
from hrtests.schemas.submission import AptitudeScores, DiscScores, KfuAnswers, OcaAnalysis
from hrtests.utils.scoring_config import (
    Band,
    BandTestConfig,
    LabelledVerdict,
    RoleRule,
    ScoringConfig,
    SeverityRules,
    get_scoring_config,
)

# Порядок черт DISC; при равенстве баллов доминирует более ранняя
DISC_ORDER = ("D", "I", "S", "C")
APTITUDE_SUBSCALES = ("attention", "understanding", "logic")


# --------------------- Вспомогательные функции ---------------------

def percentage(score: int, max_score: int) -> float:
    # сначала умножаем: для целых баллов процент на границах полос точный
    return score * 100 / max_score


def select_band(bands: Sequence[Band], value: float) -> Band:
    """Первая полоса сверху, чей порог не выше значения; последняя ловит всё остальное."""
    for band in bands:
        if band.min is None or value >= band.min:
            return band
    return bands[-1]


def _role_qualifies(rule: RoleRule, value: float, subs: Dict[str, float]) -> bool:
    for subscale, threshold in rule.gates.items():
        if subs.get(subscale, 0.0) < threshold:
            return False
    if rule.range is not None:
        low, high = rule.range
        if value < low:
            return False
        if not rule.open_ended and value > high:
            return False
    return True


def range_label(rule: RoleRule, cfg: BandTestConfig) -> str:
    if rule.note:
        return rule.note
    if rule.range is not None:
        low, high = rule.range
        return f"{low}-{high}{cfg.range_unit}{cfg.range_suffix}"
    return ""


def recommend_roles(
    band: Band,
    cfg: BandTestConfig,
    value: float,
    subs: Optional[Dict[str, float]] = None,
) -> List[RoleMatch]:
    subs = subs or {}
    return [
        RoleMatch(name=rule.name, qualifying_range=range_label(rule, cfg))
        for rule in band.roles
        if _role_qualifies(rule, value, subs)
    ]


def _classify_band(
    test: TestName,
    cfg: BandTestConfig,
    value: float,
    score: int,
    reported: Optional[ReportedAnalysis] = None,
    **extra,
) -> BandClassification:
    band = select_band(cfg.bands, value)
    return BandClassification(
        test=test,
        tier=band.tier,
        passed=band.passed,
        suitability=band.title.rstrip("!"),
        recommendation=f"{band.verdict} {band.verdict_text}",
        recommended_roles=recommend_roles(band, cfg, value, extra.get("sub_percentages")),
        score=score,
        max_score=cfg.max_score,
        metric=value,
        band=band.text_only(),
        reported=reported,
        **extra,
    )


# --------------------- Расчёт по тестам ---------------------

def classify_disc(scores: DiscScores, config: ScoringConfig | None = None) -> DiscClassification:
    """
    DISC для брокеров: доминирующая черта и подходимость к активным продажам.
    Правила проверяются по порядку, срабатывает первое.
    """
    cfg = (config or get_scoring_config()).disc
    rules = cfg.rules
    values = scores.model_dump()
    dominant = max(DISC_ORDER, key=lambda trait: values[trait])

    extra_concerns: List[str] = []
    if values["I"] > rules.excellent_i_above and values["D"] >= rules.excellent_d_min:
        tier = Tier.EXCELLENT
    elif values["I"] > rules.good_i_above:
        tier = Tier.GOOD
        if values["D"] < rules.good_weak_d_below:
            extra_concerns.append(cfg.weak_dominance_concern)
    elif values["D"] > rules.moderate_d_above:
        tier = Tier.MODERATE
    else:
        tier = Tier.NOT_SUITABLE

    verdict = cfg.verdicts[tier]
    return DiscClassification(
        tier=tier,
        passed=tier is not Tier.NOT_SUITABLE,
        suitability=verdict.suitability,
        recommendation=verdict.recommendation,
        strengths=list(verdict.strengths),
        concerns=list(verdict.concerns) + extra_concerns,
        score=values[dominant],
        max_score=cfg.max_score,
        dominant_type=dominant,
        scores=values,
    )


def classify_eq(
    score: int,
    reported: Optional[ReportedAnalysis] = None,
    config: ScoringConfig | None = None,
) -> BandClassification:
    cfg = (config or get_scoring_config()).eq
    return _classify_band(TestName.EQ, cfg, percentage(score, cfg.max_score), score, reported)


def classify_spq(
    score: int,
    reported: Optional[ReportedAnalysis] = None,
    config: ScoringConfig | None = None,
) -> BandClassification:
    cfg = (config or get_scoring_config()).spq
    return _classify_band(TestName.SPQ, cfg, percentage(score, cfg.max_score), score, reported)


def classify_hubbard(
    score: int,
    average_tone: float,
    reported: Optional[ReportedAnalysis] = None,
    config: ScoringConfig | None = None,
) -> BandClassification:
    """Полоса и должности определяются средним тоном, а не суммой баллов."""
    cfg = (config or get_scoring_config()).hubbard
    return _classify_band(
        TestName.HUBBARD, cfg, average_tone, score, reported, average_tone=average_tone
    )


def classify_integrity(
    score: int,
    reported: Optional[ReportedAnalysis] = None,
    config: ScoringConfig | None = None,
) -> BandClassification:
    cfg = (config or get_scoring_config()).integrity
    return _classify_band(TestName.INTEGRITY, cfg, score, score, reported)


def classify_aptitude(
    scores: AptitudeScores,
    reported: Optional[ReportedAnalysis] = None,
    config: ScoringConfig | None = None,
) -> BandClassification:
    """
    Полоса по общему баллу (из 60), должности по процентам подшкал;
    все пороги должности должны выполняться одновременно.
    """
    cfg = (config or get_scoring_config()).aptitude
    sub_scores = {name: getattr(scores, name) for name in APTITUDE_SUBSCALES}
    sub_percentages = {
        name: percentage(value, cfg.sub_max_score) for name, value in sub_scores.items()
    }
    total = scores.total
    return _classify_band(
        TestName.APTITUDE,
        cfg,
        total,
        total,
        reported,
        sub_scores=sub_scores,
        sub_percentages=sub_percentages,
    )


def severity_of(score: int, rules: SeverityRules) -> Severity:
    if score < rules.red_below:
        return Severity.RED
    if score < rules.yellow_below:
        return Severity.YELLOW
    return Severity.GREEN


def _oca_verdict(verdicts: Sequence[LabelledVerdict], label: str) -> LabelledVerdict:
    wanted = (label or "").strip().upper()
    for verdict in verdicts:
        if wanted in (lbl.upper() for lbl in verdict.labels):
            return verdict
    return verdicts[-1]


def classify_oca(
    scores: Sequence[int],
    analysis: OcaAnalysis,
    config: ScoringConfig | None = None,
) -> OcaClassification:
    """
    OCA: отметка по каждой из десяти характеристик.
    Общая оценка не выводится из баллов, она приходит готовой в analysis.suitability.
    """
    cfg = (config or get_scoring_config()).oca
    marks = [
        CharacteristicMark(name=name, score=value, severity=severity_of(value, cfg.severity))
        for name, value in zip(cfg.characteristics, scores)
    ]
    verdict = _oca_verdict(cfg.verdicts, analysis.suitability)
    return OcaClassification(
        tier=verdict.tier,
        passed=verdict.passed,
        suitability=verdict.title.rstrip("!"),
        recommendation=f"{verdict.verdict} {verdict.verdict_text}",
        strengths=[m.name for m in marks if m.severity is Severity.GREEN],
        concerns=[m.name for m in marks if m.severity is Severity.RED],
        score=sum(1 for m in marks if m.severity is Severity.GREEN),
        max_score=cfg.max_score,
        characteristics=marks,
        band=verdict.text_only(),
        overall_assessment=analysis.overall_assessment,
        reported_recommendation=analysis.recommendation,
    )


def classify_kfu(
    answers: KfuAnswers,
    passed: bool,
    score: Optional[int] = None,
    config: ScoringConfig | None = None,
) -> KfuClassification:
    """КФУ: без уровней, только пройдено / не пройдено и ответы как есть."""
    cfg = (config or get_scoring_config()).kfu
    outcome = cfg.outcomes["passed" if passed else "failed"]
    return KfuClassification(
        passed=passed,
        suitability=outcome.status,
        recommendation=outcome.verdict,
        score=score,
        max_score=cfg.max_score,
        answers=[
            KfuAnswer(question=question, answer=answer)
            for question, answer in zip(cfg.questions, answers.as_list())
        ],
        marker=outcome.marker,
        verdict_marker=outcome.verdict_marker,
    )


def classify(test_name: TestName, submission, config: ScoringConfig | None = None) -> Classification:
    """Запускает функцию расчёта, соответствующую тесту."""
    test_name = TestName(test_name)
    if test_name is TestName.DISC:
        return classify_disc(submission.scores, config)
    if test_name is TestName.EQ:
        return classify_eq(submission.score, submission.analysis, config)
    if test_name is TestName.SPQ:
        return classify_spq(submission.score, submission.analysis, config)
    if test_name is TestName.HUBBARD:
        return classify_hubbard(submission.score, submission.average_tone, submission.analysis, config)
    if test_name is TestName.INTEGRITY:
        return classify_integrity(submission.score, submission.analysis, config)
    if test_name is TestName.OCA:
        return classify_oca(submission.scores, submission.analysis, config)
    if test_name is TestName.APTITUDE:
        return classify_aptitude(submission.scores, submission.analysis, config)
    return classify_kfu(submission.answers, submission.passed, submission.score, config)
