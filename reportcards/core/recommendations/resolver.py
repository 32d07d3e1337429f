"""
Recommendation Resolver

Maps a diagnosis label and a model confidence score to a classification
outcome and the prevention / treatment / specialist advice shown on a card.

The mapping is total: any diagnosis string (known or not) and any confidence
value (missing, malformed or numeric) yields a fully populated result.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Any, Optional, Union
from enum import Enum
from pathlib import Path
import json
import math

from reportcards.utils import get_logger, RecommendationTableError

logger = get_logger(__name__)

LOW_CONFIDENCE_THRESHOLD = 0.05
FALLBACK_TEXT = "N/A"
LOW_CONFIDENCE_DIAGNOSIS = "No significant abnormality detected"

DEFAULT_TABLE_PATH = Path(__file__).parent / "recommendations.json"

BUNDLE_FIELDS = ("prevention", "treatment", "specialist")


class ClassificationOutcome(str, Enum):
    """Confidence tier of a diagnosis."""
    LOW_CONFIDENCE = "low_confidence"
    NORMAL = "normal"

    @classmethod
    def from_confidence(
        cls, confidence: float, threshold: float = LOW_CONFIDENCE_THRESHOLD
    ) -> "ClassificationOutcome":
        """Threshold is inclusive: a score equal to it is low-confidence."""
        if confidence <= threshold:
            return cls.LOW_CONFIDENCE
        return cls.NORMAL

    @property
    def table_key(self) -> str:
        """Key of this tier inside a condition entry."""
        return "low" if self is ClassificationOutcome.LOW_CONFIDENCE else "normal"


@dataclass(frozen=True)
class RecommendationBundle:
    """Advisory text for one condition at one confidence tier."""
    prevention: str
    treatment: str
    specialist: str

    @classmethod
    def fallback(cls, text: str = FALLBACK_TEXT) -> "RecommendationBundle":
        return cls(prevention=text, treatment=text, specialist=text)

    def to_dict(self) -> Dict[str, str]:
        return {
            "prevention": self.prevention,
            "treatment": self.treatment,
            "specialist": self.specialist,
        }


@dataclass(frozen=True)
class Resolution:
    """Derived findings for one report record."""
    outcome: ClassificationOutcome
    diagnosis_text: str
    confidence: float
    recommendations: RecommendationBundle

    @property
    def confidence_text(self) -> str:
        """Confidence as displayed on the card, always two decimals."""
        return f"{self.confidence:.2f}"

    @property
    def is_low_confidence(self) -> bool:
        return self.outcome is ClassificationOutcome.LOW_CONFIDENCE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "diagnosis": self.diagnosis_text,
            "confidence": self.confidence_text,
            **self.recommendations.to_dict(),
        }


RecommendationTable = Dict[str, Dict[ClassificationOutcome, RecommendationBundle]]


def coerce_confidence(value: Any) -> float:
    """
    Convert a raw confidence value to a float.

    Missing, empty, unparsable and non-finite (NaN, infinite or out of
    float range) values all become 0.0.
    """
    if value is None:
        return 0.0
    try:
        number = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def parse_recommendation_table(raw: Any, source: str = "<memory>") -> RecommendationTable:
    """
    Validate a decoded condition table.

    Expected shape: ``{condition: {"normal": bundle, "low": bundle}}`` where
    each bundle has ``prevention``, ``treatment`` and ``specialist`` strings.
    Condition names are stored lower-cased.
    """
    if not isinstance(raw, dict):
        raise RecommendationTableError("Condition table must be a JSON object", source=source)

    table: RecommendationTable = {}
    for condition, tiers in raw.items():
        if not isinstance(tiers, dict):
            raise RecommendationTableError(
                f"Entry for '{condition}' must be an object",
                source=source,
                details={"condition": condition}
            )
        entry: Dict[ClassificationOutcome, RecommendationBundle] = {}
        for outcome in ClassificationOutcome:
            bundle = tiers.get(outcome.table_key)
            if not isinstance(bundle, dict):
                raise RecommendationTableError(
                    f"Entry for '{condition}' is missing the '{outcome.table_key}' bundle",
                    source=source,
                    details={"condition": condition, "tier": outcome.table_key}
                )
            # Missing fields are tolerated here; the resolver falls back per field
            entry[outcome] = RecommendationBundle(
                **{name: str(bundle.get(name) or "") for name in BUNDLE_FIELDS}
            )
        table[str(condition).lower()] = entry

    return table


def load_recommendation_table(path: Optional[Union[str, Path]] = None) -> RecommendationTable:
    """Load the condition table from JSON (bundled file when no path is given)."""
    table_path = Path(path) if path else DEFAULT_TABLE_PATH
    try:
        with open(table_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise RecommendationTableError(f"Condition table not found: {table_path}", source=str(table_path)) from e
    except json.JSONDecodeError as e:
        raise RecommendationTableError(
            f"Condition table is not valid JSON: {e}",
            source=str(table_path)
        ) from e

    table = parse_recommendation_table(raw, source=str(table_path))
    logger.info(f"Loaded {len(table)} conditions from {table_path}")
    return table


class RecommendationResolver:
    """
    Resolves display findings for a diagnosis at a given confidence.

    Holds only immutable configuration; ``resolve`` has no side effects.
    """

    def __init__(
        self,
        table: Optional[RecommendationTable] = None,
        threshold: float = LOW_CONFIDENCE_THRESHOLD,
        fallback_text: str = FALLBACK_TEXT,
        low_confidence_diagnosis: str = LOW_CONFIDENCE_DIAGNOSIS,
    ):
        self.table = table if table is not None else load_recommendation_table()
        self.threshold = threshold
        self.fallback_text = fallback_text
        self.low_confidence_diagnosis = low_confidence_diagnosis

    @classmethod
    def from_settings(cls, settings) -> "RecommendationResolver":
        return cls(
            table=load_recommendation_table(settings.recommendations_path),
            threshold=settings.low_confidence_threshold,
            fallback_text=settings.fallback_text,
            low_confidence_diagnosis=settings.low_confidence_diagnosis,
        )

    @property
    def conditions(self):
        return sorted(self.table)

    def classify(self, confidence: Any) -> ClassificationOutcome:
        return ClassificationOutcome.from_confidence(coerce_confidence(confidence), self.threshold)

    def lookup(self, diagnosis: Optional[str], outcome: ClassificationOutcome) -> RecommendationBundle:
        """Bundle for a diagnosis at a tier, with every empty field replaced by the fallback."""
        entry = self.table.get((diagnosis or "").lower())
        if entry is None:
            return RecommendationBundle.fallback(self.fallback_text)

        bundle = entry.get(outcome)
        if bundle is None:
            return RecommendationBundle.fallback(self.fallback_text)

        return RecommendationBundle(
            prevention=bundle.prevention or self.fallback_text,
            treatment=bundle.treatment or self.fallback_text,
            specialist=bundle.specialist or self.fallback_text,
        )

    def resolve(self, diagnosis: Optional[str], confidence: Any) -> Resolution:
        score = coerce_confidence(confidence)
        outcome = ClassificationOutcome.from_confidence(score, self.threshold)

        if outcome is ClassificationOutcome.LOW_CONFIDENCE:
            diagnosis_text = self.low_confidence_diagnosis
        else:
            diagnosis_text = diagnosis or ""

        return Resolution(
            outcome=outcome,
            diagnosis_text=diagnosis_text,
            confidence=score,
            recommendations=self.lookup(diagnosis, outcome),
        )
