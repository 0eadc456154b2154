"""Presentation helpers shared by the web app and the CLI."""

from __future__ import annotations

from datetime import datetime

from .models import AnalysisResult, HealthGrade

FALLBACK_STYLE = "unknown"

# style label → badge colour
GRADE_COLORS: dict[str, str] = {
    "excellent": "#22c55e",
    "good": "#84cc16",
    "average": "#eab308",
    "poor": "#f97316",
    "unhealthy": "#ef4444",
    FALLBACK_STYLE: "#6b7280",
}

SAFE_ALLERGENS_TEXT = "آمن من مسببات الحساسية المعروفة"

_NUTRITION_LABELS = [
    ("calories", "السعرات", "سعرة"),
    ("protein", "بروتين", "جم"),
    ("carbohydrates", "كربوهيدرات", "جم"),
    ("sugar", "سكر", "جم"),
    ("fat", "دهون", "جم"),
]


def grade_style(grade: str) -> str:
    parsed = HealthGrade.parse(grade)
    return parsed.style if parsed is not None else FALLBACK_STYLE


def grade_color(grade: str) -> str:
    return GRADE_COLORS[grade_style(grade)]


def nutrition_tiles(result: AnalysisResult) -> list[tuple[str, float | str, str]]:
    """Return (label, value, unit) for the five nutrition fields in display order."""
    return [
        (label, getattr(result.nutrition, name), unit)
        for name, label, unit in _NUTRITION_LABELS
    ]


def allergen_display(result: AnalysisResult) -> list[str]:
    """Allergens to show as chips; empty means the product is reported safe."""
    if not result.has_allergens:
        return []
    return list(result.allergens)


def format_timestamp(ts: str) -> str:
    if not ts:
        return ""
    try:
        dt = datetime.fromisoformat(ts)
    except ValueError:
        return ts
    return dt.astimezone().strftime("%Y-%m-%d %H:%M")


def format_result(result: AnalysisResult) -> str:
    """Render a result as plain text for the terminal."""
    grade = HealthGrade.parse(result.health_grade)
    grade_text = (
        f"{grade.value} ({grade.label_ar})" if grade else result.health_grade or "?"
    )

    lines = [
        f"🛒 {result.product_name}",
        f"   التقييم الصحي: {grade_text}",
    ]
    if result.health_summary:
        lines.append(f"   {result.health_summary}")

    lines.append("")
    lines.append("📊 القيم الغذائية (لكل 100 جم):")
    for label, value, unit in nutrition_tiles(result):
        lines.append(f"  {label:<12} {value} {unit}")

    lines.append("")
    lines.append("⚠ الحساسية:")
    allergens = allergen_display(result)
    if allergens:
        lines.append("  " + "، ".join(allergens))
    else:
        lines.append(f"  {SAFE_ALLERGENS_TEXT}")

    if result.ingredients:
        lines.append("")
        lines.append("🧾 قائمة المكونات:")
        for ing in result.ingredients:
            lines.append(f"  - {ing}")

    return "\n".join(lines)


def format_history(entries: list[AnalysisResult]) -> str:
    if not entries:
        return "لا توجد عمليات فحص سابقة."
    lines = []
    for i, entry in enumerate(entries):
        when = format_timestamp(entry.timestamp)
        lines.append(
            f"  [{i}] {entry.health_grade or '?'}  {entry.product_name}  {when}"
        )
    return "\n".join(lines)
