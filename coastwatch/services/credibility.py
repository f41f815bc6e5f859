"""
Оценка достоверности отчёта по метаданным отправки.

База 0.10, затем аддитивные надбавки; результат ограничен сверху 1.00.
Функция чистая: никаких обращений к БД, никаких исключений.
"""
from decimal import Decimal
from typing import Optional, Union

BASE_SCORE = Decimal("0.10")
IMAGE_BONUS = Decimal("0.30")
LOCATION_BONUS = Decimal("0.20")
DESCRIPTION_BONUS = Decimal("0.10")
NEARBY_BONUS = Decimal("0.30")
MAX_SCORE = Decimal("1.00")

# ~10 слов
DESCRIPTION_MIN_LENGTH = 50

HIGH_THRESHOLD = 0.70
MEDIUM_THRESHOLD = 0.40
DEFAULT_SCORE = Decimal("0.50")

BANDS = ("high", "medium", "low")


def calculate_credibility_score(
    has_image: bool,
    has_location: bool,
    description_length: int,
    nearby_reports_count: int = 0,
) -> Decimal:
    score = BASE_SCORE
    if has_image:
        score += IMAGE_BONUS
    if has_location:
        score += LOCATION_BONUS
    if description_length > DESCRIPTION_MIN_LENGTH:
        score += DESCRIPTION_BONUS
    if nearby_reports_count > 0:
        score += NEARBY_BONUS
    if score > MAX_SCORE:
        score = MAX_SCORE
    return score.quantize(Decimal("0.01"))


def credibility_band(score: Optional[Union[Decimal, float]]) -> str:
    """high >= 0.70, medium [0.40, 0.70), low < 0.40; пустой score считается 0.50."""
    value = float(DEFAULT_SCORE if score is None else score)
    if value >= HIGH_THRESHOLD:
        return "high"
    if value >= MEDIUM_THRESHOLD:
        return "medium"
    return "low"
