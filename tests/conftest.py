from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from shell_core.descriptors import model_from_dict  # noqa: E402
from shell_core.registry import WidgetRegistry  # noqa: E402
from shell_fixtures import SAMPLE_MODEL, FakeWidget, SliderParams  # noqa: E402


@pytest.fixture()
def model():
    return model_from_dict(SAMPLE_MODEL)


@pytest.fixture()
def registry() -> WidgetRegistry:
    reg = WidgetRegistry()
    reg.register("button", lambda params: FakeWidget("button", params))
    reg.register("slider", lambda params: FakeWidget("slider", params), SliderParams)
    return reg
