from __future__ import annotations

import sys
from pathlib import Path

import pytest

_START = Path(__file__).resolve().parent
_pkg_root = _START
while _pkg_root != _pkg_root.parent and not (_pkg_root / "__init__.py").exists():
    _pkg_root = _pkg_root.parent

sys.path.insert(0, str(_pkg_root.parent))


IMPEDANCE_BLUEPRINT = """\
# Series RL impedance magnitude
title: Impedance
equation: Z * x / 10
steps: 100
params:
  R: { label: "Resistance", value: 10, min: 0, max: 50, step: 1 }
  X: { label: "Reactance", value: 15, min: 0, max: 50, step: 1 }
vars:
  Z: sqrt(R**2 + X**2)
  phase: Z / R
axis:
  x: { title: "Frequency", min: 0, max: 10 }
  y: { title: "|Z|", min: 0, max: 50 }
"""

CIRCLE_BLUEPRINT = """\
title: Circle
equation: x**2 + y**2 = r**2
color: rgb(0, 200, 255)
params:
  r: { label: "Radius", value: 1.5, min: 0.5, max: 2, step: 0.1 }
axis:
  x: { min: -2, max: 2 }
  y: { min: -2, max: 2 }
"""


@pytest.fixture
def impedance_text() -> str:
    return IMPEDANCE_BLUEPRINT


@pytest.fixture
def circle_text() -> str:
    return CIRCLE_BLUEPRINT
