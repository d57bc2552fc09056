"""
Pytest configuration and shared fixtures for scorecast tests.
"""

import pytest


@pytest.fixture
def simple_odds():
    """Three-entry odds set: 2-1 is the clear favourite."""
    return [
        {"score": "2-1", "coefficient": 3.0, "probability": 30},
        {"score": "1-1", "coefficient": 4.0, "probability": 20},
        {"score": "0-0", "coefficient": 8.0, "probability": 10},
    ]


@pytest.fixture
def rich_odds():
    """25 entries, coefficients 1.2-20, probabilities summing to 98."""
    coefficients = [
        1.2, 2.0, 2.5, 3.0, 3.5, 4.0, 4.5, 5.0, 5.5, 6.0, 6.5, 7.0, 7.5,
        8.0, 9.0, 10.0, 11.0, 12.0, 13.0, 14.0, 15.0, 16.0, 17.0, 18.0, 20.0,
    ]
    probabilities = [
        12, 10, 8, 7, 6, 6, 5, 5, 4, 4, 4, 3, 3,
        3, 3, 2, 2, 2, 2, 2, 1, 1, 1, 1, 1,
    ]
    scores = [f"{home}-{away}" for home in range(5) for away in range(5)]
    return [
        {"score": score, "coefficient": coefficient, "probability": probability}
        for score, coefficient, probability in zip(scores, coefficients, probabilities)
    ]


@pytest.fixture
def pattern_odds():
    """12 entries with three safe bets and two borderline upsets."""
    return [
        {"score": "1-0", "coefficient": 2.5, "probability": 30},
        {"score": "0-0", "coefficient": 3.0, "probability": 25},
        {"score": "1-1", "coefficient": 3.5, "probability": 22},
        {"score": "2-1", "coefficient": 9.0, "probability": 10},
        {"score": "2-0", "coefficient": 8.0, "probability": 9},
        {"score": "0-1", "coefficient": 10.0, "probability": 5},
        {"score": "3-1", "coefficient": 15.0, "probability": 4},
        {"score": "1-2", "coefficient": 12.0, "probability": 4},
        {"score": "2-2", "coefficient": 20.0, "probability": 3},
        {"score": "3-0", "coefficient": 25.0, "probability": 2},
        {"score": "0-2", "coefficient": 18.0, "probability": 3},
        {"score": "3-2", "coefficient": 30.0, "probability": 2},
    ]


@pytest.fixture
def short_odds():
    """Very short prices, so the runners-up all clear the alternative threshold."""
    return [
        {"score": "1-0", "coefficient": 1.2, "probability": 80},
        {"score": "0-0", "coefficient": 1.3, "probability": 75},
        {"score": "1-1", "coefficient": 1.4, "probability": 70},
        {"score": "2-0", "coefficient": 1.5, "probability": 65},
        {"score": "0-1", "coefficient": 20.0, "probability": 1},
    ]
