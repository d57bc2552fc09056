"""
Data Loader Module

Handles loading, validation and normalisation of correct-score odds.
Every quotation passes through here exactly once; downstream modules only
ever see well-formed OddsEntry objects.

Expected CSV columns:
    - score: Final score label (e.g., "2-1")
    - coefficient: Decimal odds for that score (e.g., 6.5)
    - probability: Optional quoted probability in percent (e.g., 15.4)
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import pandas as pd

logger = logging.getLogger(__name__)

SCORE_PATTERN = re.compile(r"^\d+-\d+$", re.ASCII)


@dataclass(frozen=True)
class ScoreLine:
    """A final score as a (home goals, away goals) pair."""

    home_goals: int
    away_goals: int

    @classmethod
    def parse(cls, label: Any) -> ScoreLine:
        """
        Build a ScoreLine from a "H-A" label.

        Args:
            label: Score label, surrounding whitespace is ignored.

        Returns:
            Parsed ScoreLine.

        Raises:
            ValueError: If the label is not of the form "<digits>-<digits>".
        """
        if not isinstance(label, str):
            raise ValueError(f"Score label must be a string, got {type(label).__name__}")
        text = label.strip()
        if not SCORE_PATTERN.match(text):
            raise ValueError(f"Invalid score label: {label!r}")
        home, away = text.split("-")
        return cls(int(home), int(away))

    @property
    def label(self) -> str:
        return f"{self.home_goals}-{self.away_goals}"

    @property
    def total_goals(self) -> int:
        return self.home_goals + self.away_goals


@dataclass(frozen=True)
class OddsEntry:
    """A single validated correct-score quotation."""

    score: str
    coefficient: float
    probability: float
    quoted_probability: bool = True

    @property
    def score_line(self) -> ScoreLine:
        return ScoreLine.parse(self.score)


@dataclass
class LoadReport:
    """Result of odds validation."""

    is_valid: bool
    errors: list[str]
    warnings: list[str]
    n_valid: int = 0
    n_dropped: int = 0


def _to_float(value: Any) -> Optional[float]:
    """Parse a number, returning None for anything non-numeric or non-finite."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def normalize_entry(record: Any) -> Optional[OddsEntry]:
    """
    Turn one raw odds record into an OddsEntry.

    A record is valid when its score label matches "<digits>-<digits>"
    after trimming and its coefficient parses to a finite number > 0
    whose implied probability and value score are finite too. The
    trimmed label is kept as given ("02-1" stays "02-1").
    A missing, non-numeric or negative probability falls back to the
    probability implied by the coefficient.

    Args:
        record: Mapping or object with score/coefficient/probability fields.

    Returns:
        OddsEntry, or None if the record is invalid.
    """
    if isinstance(record, OddsEntry):
        record = {
            "score": record.score,
            "coefficient": record.coefficient,
            "probability": record.probability if record.quoted_probability else None,
        }

    label = _field(record, "score")
    try:
        ScoreLine.parse(label)
    except ValueError:
        return None

    coefficient = _to_float(_field(record, "coefficient"))
    if coefficient is None or coefficient <= 0:
        return None

    probability = _to_float(_field(record, "probability"))
    quoted = probability is not None and probability >= 0
    if not quoted:
        probability = 100 / coefficient

    # implied probability and value score overflow for tiny coefficients
    if not (math.isfinite(100 / coefficient) and math.isfinite(probability / coefficient)):
        return None

    return OddsEntry(
        score=label.strip(),
        coefficient=coefficient,
        probability=probability,
        quoted_probability=quoted,
    )


def normalize_odds(records: Optional[Iterable[Any]]) -> list[OddsEntry]:
    """
    Filter raw odds records down to well-formed OddsEntry objects.

    Invalid records are dropped silently, input order is preserved.

    Args:
        records: Iterable of raw records (None is treated as empty).

    Returns:
        List of valid entries.
    """
    if records is None:
        return []

    entries = []
    dropped = 0
    for record in records:
        entry = normalize_entry(record)
        if entry is None:
            dropped += 1
            continue
        entries.append(entry)

    if dropped:
        logger.debug("Dropped %d malformed odds entries (%d kept)", dropped, len(entries))

    return entries


class OddsDataLoader:
    """
    Load and validate correct-score odds from CSV files or raw records.

    This class provides methods to:
    - Load odds from CSV
    - Report on how many quotations survive validation
    - Normalise raw records into OddsEntry objects

    Example:
        >>> loader = OddsDataLoader()
        >>> df = loader.load("odds.csv")
        >>> report = loader.validate(df)
        >>> if report.is_valid:
        ...     entries = loader.prepare(df)
    """

    REQUIRED_COLUMNS = ["score", "coefficient"]
    MIN_RECOMMENDED_ENTRIES = 5

    def load(self, filepath: str | Path) -> pd.DataFrame:
        """
        Load odds from a CSV file.

        Args:
            filepath: Path to the CSV file.

        Returns:
            DataFrame with raw odds (score read as text).

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If required columns are missing.
        """
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"Odds file not found: {filepath}")

        df = pd.read_csv(filepath, dtype={"score": str})

        missing = set(self.REQUIRED_COLUMNS) - set(df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

        if "probability" not in df.columns:
            df["probability"] = None

        return df

    def validate(self, records: pd.DataFrame | Iterable[Any]) -> LoadReport:
        """
        Check how usable a set of odds is.

        Checks:
        - At least one well-formed entry
        - Malformed entries (reported as a warning, they are dropped)
        - Duplicate score labels
        - Small sets that will give low-confidence predictions

        Args:
            records: DataFrame or iterable of raw records.

        Returns:
            LoadReport with status and any errors/warnings.
        """
        raw = self._records(records)
        entries = normalize_odds(raw)

        errors = []
        warnings = []

        if not entries:
            errors.append("No valid odds entries")

        n_dropped = len(raw) - len(entries)
        if n_dropped:
            warnings.append(f"Dropped {n_dropped} malformed entries")

        labels = [entry.score for entry in entries]
        duplicates = sorted({label for label in labels if labels.count(label) > 1})
        if duplicates:
            warnings.append(f"Duplicate score labels: {duplicates}")

        if 0 < len(entries) < self.MIN_RECOMMENDED_ENTRIES:
            warnings.append(
                f"Only {len(entries)} valid entries - confidence will be limited"
            )

        return LoadReport(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
            n_valid=len(entries),
            n_dropped=n_dropped,
        )

    def prepare(self, records: pd.DataFrame | Iterable[Any]) -> list[OddsEntry]:
        """
        Normalise raw odds into OddsEntry objects.

        Args:
            records: DataFrame or iterable of raw records.

        Returns:
            Valid entries in input order.
        """
        return normalize_odds(self._records(records))

    def _records(self, records: pd.DataFrame | Iterable[Any]) -> list[Any]:
        if isinstance(records, pd.DataFrame):
            df = records.astype(object).where(pd.notna(records), None)
            return df.to_dict(orient="records")
        if records is None:
            return []
        return list(records)


# Utility function for quick loading
def load_odds(filepath: str | Path) -> list[OddsEntry]:
    """
    Convenience function to load and normalise odds in one step.

    Args:
        filepath: Path to CSV file.

    Returns:
        Valid odds entries.

    Raises:
        ValueError: If no entry in the file is usable.
    """
    loader = OddsDataLoader()
    df = loader.load(filepath)
    report = loader.validate(df)

    if not report.is_valid:
        raise ValueError(f"Odds validation failed: {report.errors}")

    for warning in report.warnings:
        logger.warning(warning)

    return loader.prepare(df)
