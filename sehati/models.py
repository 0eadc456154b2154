"""Data models for encoded images and label analysis results."""

from __future__ import annotations

import base64
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

# Allergen value the model uses when a product has none
NO_ALLERGENS = "لا يوجد"


def as_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def as_text_list(value: object) -> list[str]:
    """Coerce *value* to a list of non-empty strings; a lone scalar is wrapped."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [as_text(v) for v in value if v is not None and as_text(v)]
    text = as_text(value)
    return [text] if text else []


class HealthGrade(str, Enum):
    """Ordinal nutrition rating, A best and E worst."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"

    @property
    def style(self) -> str:
        return _GRADE_STYLES[self]

    @property
    def label_ar(self) -> str:
        return _GRADE_LABELS_AR[self]

    @classmethod
    def parse(cls, value: object) -> HealthGrade | None:
        """Return the grade for *value*, or None if it is not A-E."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


_GRADE_STYLES: dict[HealthGrade, str] = {
    HealthGrade.A: "excellent",
    HealthGrade.B: "good",
    HealthGrade.C: "average",
    HealthGrade.D: "poor",
    HealthGrade.E: "unhealthy",
}

_GRADE_LABELS_AR: dict[HealthGrade, str] = {
    HealthGrade.A: "ممتاز",
    HealthGrade.B: "جيد",
    HealthGrade.C: "متوسط",
    HealthGrade.D: "ضعيف",
    HealthGrade.E: "غير صحي",
}


@dataclass(frozen=True)
class EncodedImage:
    """A still image held in memory, ready to embed in a request body."""

    data: bytes
    mime_type: str = "image/jpeg"

    def b64(self) -> str:
        return base64.standard_b64encode(self.data).decode()


@dataclass
class NutritionInfo:
    """Per-100g values. Each may be a number or the model's text."""

    calories: float | str = ""
    protein: float | str = ""
    carbohydrates: float | str = ""
    sugar: float | str = ""
    fat: float | str = ""


@dataclass
class AnalysisResult:
    product_name: str
    ingredients: list[str] = field(default_factory=list)
    nutrition: NutritionInfo = field(default_factory=NutritionInfo)
    allergens: list[str] = field(default_factory=list)
    health_grade: str = ""  # A-E; anything else renders with the fallback style
    health_summary: str = ""
    timestamp: str = ""  # ISO8601, stamped locally

    @property
    def grade(self) -> HealthGrade | None:
        return HealthGrade.parse(self.health_grade)

    @property
    def has_allergens(self) -> bool:
        return bool(self.allergens) and self.allergens[0] != NO_ALLERGENS

    def stamped(self, now: datetime | None = None) -> AnalysisResult:
        """Return a copy carrying a local receive time."""
        now = now or datetime.now(timezone.utc)
        return AnalysisResult(
            product_name=self.product_name,
            ingredients=list(self.ingredients),
            nutrition=NutritionInfo(**asdict(self.nutrition)),
            allergens=list(self.allergens),
            health_grade=self.health_grade,
            health_summary=self.health_summary,
            timestamp=now.isoformat(),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisResult:
        """Build a result from a stored snapshot entry.

        Snapshots written by the browser app store ``timestamp`` as epoch
        milliseconds; those are converted to ISO8601. An epoch outside the
        platform's range becomes an empty timestamp.
        """
        nutrition = data.get("nutrition")
        if not isinstance(nutrition, dict):
            nutrition = {}
        ts = data.get("timestamp", "")
        if isinstance(ts, (int, float)) and not isinstance(ts, bool):
            try:
                ts = datetime.fromtimestamp(ts / 1000, tz=timezone.utc).isoformat()
            except (OverflowError, OSError, ValueError):
                ts = ""
        return cls(
            product_name=as_text(data.get("product_name")),
            ingredients=as_text_list(data.get("ingredients")),
            nutrition=NutritionInfo(
                calories=nutrition.get("calories", ""),
                protein=nutrition.get("protein", ""),
                carbohydrates=nutrition.get("carbohydrates", ""),
                sugar=nutrition.get("sugar", ""),
                fat=nutrition.get("fat", ""),
            ),
            allergens=as_text_list(data.get("allergens")),
            health_grade=as_text(data.get("health_grade")),
            health_summary=as_text(data.get("health_summary")),
            timestamp=str(ts or ""),
        )
