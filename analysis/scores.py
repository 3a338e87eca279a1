"""
Satisfaction scores for one faculty member's analysis result.

Each response option carries a 3-point Likert code (1 = bad, 2 = neutral,
3 = good). Codes are mapped onto a 5-point weight and normalised per
question:

    weighted_sum   = Σ count × weight(value)      weight: 1→1, 2→3, 3→5
    max_possible   = Σ count × 5
    question_score = weighted_sum / max_possible × 100   (0 if max_possible is 0)

A section score is the plain mean of its question scores and the overall
score is the plain mean of the section scores. Neither mean is weighted by
response count, and rounding (half-up, to an integer) happens only on the
section and overall values, never per question. A value outside {1, 2, 3}
is used as its own weight.

Public API:
    question_score(options)        → float
    score_card(result)             → ScoreCard
    option_share(option, question) → float
    interpretation(value)          → "Good" | "Neutral" | "Bad"
    score_band(score)              → "success" | "warning" | "danger"
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from api.schemas import AnalysisResult, OptionCount, QuestionStats

VALUE_WEIGHTS = {1: 1, 2: 3, 3: 5}
MAX_WEIGHT    = 5


@dataclass
class SectionScore:
    name: str
    score: int
    question_count: int


@dataclass
class ScoreCard:
    overall: int = 0
    sections: dict[str, SectionScore] = field(default_factory=dict)


def round_half_up(x: float) -> int:
    """Round .5 upwards (towards +inf), unlike Python's round()."""
    return math.floor(x + 0.5)


def weight(value: float) -> float:
    return VALUE_WEIGHTS.get(value, value)


def question_score(options: Iterable[OptionCount]) -> float:
    weighted_sum = 0.0
    responses = 0
    for option in options:
        weighted_sum += option.count * weight(option.value)
        responses += option.count

    max_possible = responses * MAX_WEIGHT
    if max_possible <= 0:
        return 0
    return weighted_sum / max_possible * 100


def score_card(result: AnalysisResult) -> ScoreCard:
    card = ScoreCard()
    total = 0.0

    for key, section in result.analysis.items():
        scores = [question_score(q.options) for q in section.questions.values()]
        mean = sum(scores) / len(scores) if scores else 0
        card.sections[key] = SectionScore(
            name=section.section_name or key,
            score=round_half_up(mean),
            question_count=len(scores),
        )
        total += mean

    if card.sections:
        card.overall = round_half_up(total / len(card.sections))
    return card


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

def option_share(option: OptionCount, question: QuestionStats) -> float:
    """Percentage of the question's responses that picked this option."""
    if not question.total_responses:
        return 0
    return option.count / question.total_responses * 100


def interpretation(value: float) -> str:
    if value == 3:
        return "Good"
    if value == 2:
        return "Neutral"
    return "Bad"


def score_band(score: float) -> str:
    if score >= 75:
        return "success"
    if score >= 50:
        return "warning"
    return "danger"
