"""
scorecast: Correct-Score Prediction from Bookmaker Odds

A deterministic scoring pipeline that ranks the candidate final scores of
a fixture from their correct-score quotations. This package covers:

- Odds loading, validation and normalisation
- Feature derivation and four factor analyzers
- Score ranking with bounded confidence and risk classification
- Independent plausibility validation of predictions
- Pattern detection and post-hoc accuracy tracking
"""

__version__ = "1.0.0"

from .data_loader import OddsDataLoader, OddsEntry, ScoreLine, normalize_odds
from .feature_engineering import DerivedEntry, FeatureEngineer
from .model_evaluation import ModelEvaluator, tag_result
from .patterns import InsufficientDataError, PatternDetector
from .predict import Prediction, RiskLevel, ScorePredictor
from .validation import PredictionValidator, ValidationResult

__all__ = [
    "OddsDataLoader",
    "OddsEntry",
    "ScoreLine",
    "normalize_odds",
    "DerivedEntry",
    "FeatureEngineer",
    "ModelEvaluator",
    "tag_result",
    "InsufficientDataError",
    "PatternDetector",
    "Prediction",
    "RiskLevel",
    "ScorePredictor",
    "PredictionValidator",
    "ValidationResult",
]
