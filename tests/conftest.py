"""Shared fixtures."""

import pytest

from sehati.models import AnalysisResult, NutritionInfo
from sehati.vision import AnalyzerBackend


class MemoryStorage:
    """In-memory stand-in for LocalStorage that counts writes."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(initial or {})
        self.writes = 0

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value
        self.writes += 1


class FakeBackend(AnalyzerBackend):
    def __init__(self, result=None, error=None) -> None:
        self.result = result
        self.error = error
        self.calls = 0

    async def analyze(self, image):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def memory_storage():
    return MemoryStorage()


def make_result(name: str, grade: str = "B", timestamp: str = "") -> AnalysisResult:
    return AnalysisResult(
        product_name=name,
        ingredients=["ماء", "سكر"],
        nutrition=NutritionInfo(
            calories=120, protein=1, carbohydrates=30, sugar=25, fat=0
        ),
        allergens=["لا يوجد"],
        health_grade=grade,
        health_summary="ملخص",
        timestamp=timestamp or "2025-01-01T00:00:00+00:00",
    )
