"""Instruction text sent with every image, and parsing of the reply."""

from __future__ import annotations

import json
from datetime import datetime

from ..errors import AnalysisError
from ..models import AnalysisResult, HealthGrade, NutritionInfo, as_text, as_text_list

ANALYSIS_PROMPT = """\
You are a nutrition expert AI assistant.
Task:
- Analyze the food product image provided.
- Identify the product name in Arabic.
- Extract ingredients list in Arabic.
- Calculate nutrition per 100g (Calories, Protein, Carbs, Sugar, Fat).
- Identify allergens in Arabic.
- Provide a Health Grade (A: Excellent, B: Good, C: Average, D: Poor, E: Unhealthy) based on ingredients and nutrition.
- Provide a 1-sentence health summary in Arabic.
- Return ONLY valid JSON with this structure:
{
  "product_name": "اسم المنتج",
  "ingredients": ["مكون 1", "مكون 2"],
  "nutrition": {
    "calories": "number",
    "protein": "number",
    "carbohydrates": "number",
    "sugar": "number",
    "fat": "number"
  },
  "allergens": ["مسبب حساسية 1"],
  "health_grade": "A|B|C|D|E",
  "health_summary": "ملخص صحي قصير"
}"""

NUTRITION_FIELDS = ("calories", "protein", "carbohydrates", "sugar", "fat")


def parse_analysis(text: str | None, *, now: datetime | None = None) -> AnalysisResult:
    """Parse the model's JSON reply into a timestamped AnalysisResult.

    Only the JSON itself is required to be valid. Fields are coerced to
    their expected types and missing ones default to empty values.
    """
    cleaned = _strip_fences(text or "")
    if not cleaned:
        raise AnalysisError("empty response from the inference service")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise AnalysisError(f"response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise AnalysisError(
            f"expected a JSON object, got {type(data).__name__}"
        )

    nutrition = data.get("nutrition")
    if not isinstance(nutrition, dict):
        nutrition = {}

    # A timestamp supplied by the service is ignored.
    result = AnalysisResult(
        product_name=as_text(data.get("product_name")),
        ingredients=as_text_list(data.get("ingredients")),
        nutrition=NutritionInfo(
            **{name: _value(nutrition.get(name)) for name in NUTRITION_FIELDS}
        ),
        allergens=as_text_list(data.get("allergens")),
        health_grade=_grade(data.get("health_grade")),
        health_summary=as_text(data.get("health_summary")),
    )
    return result.stamped(now)


def _strip_fences(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")
        lines = [l for l in lines[1:] if not l.strip().startswith("```")]
        cleaned = "\n".join(lines).strip()
    return cleaned


def _value(value: object) -> float | str:
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float)):
        return value
    return as_text(value)


def _grade(value: object) -> str:
    grade = HealthGrade.parse(value)
    if grade is not None:
        return grade.value
    return as_text(value)
