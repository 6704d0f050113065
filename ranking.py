# ranking.py
import math
from errors import InvalidInput

# Max RP a perfect score earns at each difficulty
MAX_RP_BY_DIFFICULTY = {
    "easy": 50,
    "medium": 100,
    "hard": 200,
}
DEFAULT_DIFFICULTY = "medium"

# Highest threshold first
TIER_THRESHOLDS = (
    (2000, "Diamond"),
    (1000, "Platinum"),
    (500, "Gold"),
)
BASE_TIER = "Silver"
TIERS = (BASE_TIER,) + tuple(name for _, name in reversed(TIER_THRESHOLDS))


def max_rp(difficulty: str) -> int:
    return MAX_RP_BY_DIFFICULTY.get(difficulty, MAX_RP_BY_DIFFICULTY[DEFAULT_DIFFICULTY])


def calculate_rp(score: int, total_questions: int, difficulty: str = DEFAULT_DIFFICULTY) -> int:
    """RP earned for one quiz: the score ratio scaled to the difficulty's max.

    Rounds half up so 12.5 becomes 13, the same as the browser's ``Math.round``.
    """
    if total_questions is None or total_questions <= 0:
        raise InvalidInput("totalQuestions must be greater than zero")
    if score is None or score < 0 or score > total_questions:
        raise InvalidInput("score must be between 0 and totalQuestions")
    return int(math.floor(score / total_questions * max_rp(difficulty) + 0.5))


def get_tier(rp: int) -> str:
    for threshold, name in TIER_THRESHOLDS:
        if rp >= threshold:
            return name
    return BASE_TIER


DEFAULT_TIER = get_tier(0)
