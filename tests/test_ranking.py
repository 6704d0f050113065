import pytest

from errors import InvalidInput
from ranking import DEFAULT_TIER, MAX_RP_BY_DIFFICULTY, TIERS, calculate_rp, get_tier


def test_hard_quiz_scenario():
    assert calculate_rp(8, 10, "hard") == 160
    assert get_tier(160) == "Silver"
    assert calculate_rp(10, 10, "hard") == 200
    assert get_tier(200) == "Silver"


def test_unknown_difficulty_uses_medium():
    assert calculate_rp(5, 10, "impossible") == 50
    assert calculate_rp(5, 10) == 50


def test_rounds_half_up():
    # 1/4 of 50 is 12.5
    assert calculate_rp(1, 4, "easy") == 13
    # 1/8 of 100 is 12.5
    assert calculate_rp(1, 8, "medium") == 13


@pytest.mark.parametrize("difficulty", ["easy", "medium", "hard"])
def test_rp_bounded_and_monotonic(difficulty):
    for total in (1, 3, 7, 10, 25):
        previous = -1
        for score in range(total + 1):
            rp = calculate_rp(score, total, difficulty)
            assert isinstance(rp, int)
            assert 0 <= rp <= MAX_RP_BY_DIFFICULTY[difficulty]
            assert rp >= previous
            previous = rp
        assert previous == MAX_RP_BY_DIFFICULTY[difficulty]


@pytest.mark.parametrize("score,total", [(0, 0), (1, 0), (3, -2), (-1, 5), (6, 5)])
def test_invalid_input_rejected(score, total):
    with pytest.raises(InvalidInput):
        calculate_rp(score, total, "easy")


@pytest.mark.parametrize("rp,tier", [
    (0, "Silver"),
    (499, "Silver"),
    (500, "Gold"),
    (999, "Gold"),
    (1000, "Platinum"),
    (1999, "Platinum"),
    (2000, "Diamond"),
    (10_000, "Diamond"),
])
def test_tier_boundaries(rp, tier):
    assert get_tier(rp) == tier


def test_tier_ladder_is_monotonic():
    ranks = [TIERS.index(get_tier(rp)) for rp in range(0, 2600, 7)]
    assert ranks == sorted(ranks)
    assert set(get_tier(rp) for rp in range(0, 2600, 7)) == set(TIERS)


def test_default_tier_is_reachable():
    assert DEFAULT_TIER == "Silver"
    assert DEFAULT_TIER in TIERS
