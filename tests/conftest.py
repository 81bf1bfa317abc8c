"""Shared fixtures for scicalc tests."""

from __future__ import annotations

import pytest

from scicalc.controller import Calculator
from scicalc.evaluator import EvaluationError, SympyEvaluator
from scicalc.models import AngleUnit


class StubEvaluator:
    """Deterministic evaluator: answers from a lookup table, fails otherwise.

    Records every call so tests can check what the controller passed in.
    """

    def __init__(self, results=None):
        self.results = dict(results or {})
        self.calls: list[tuple[str, AngleUnit]] = []

    def evaluate(self, text, angle_unit):
        self.calls.append((text, angle_unit))
        if text not in self.results:
            raise EvaluationError(f"no stub result for {text!r}")
        return self.results[text]


@pytest.fixture
def stub():
    return StubEvaluator()


@pytest.fixture
def evaluator():
    return SympyEvaluator()


@pytest.fixture
def calc():
    """Calculator wired to the real SymPy evaluator."""
    return Calculator()
