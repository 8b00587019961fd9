"""Pytest configuration shared by the allocation test suite."""

from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture
def sample_returns() -> np.ndarray:
    return np.array([0.012, 0.015, 0.009, 0.02, 0.011])


@pytest.fixture
def sample_covariances() -> np.ndarray:
    return np.array(
        [
            [0.05, 0.01, 0.0, 0.02, 0.01],
            [0.01, 0.04, 0.01, 0.015, 0.0],
            [0.0, 0.01, 0.03, 0.01, 0.02],
            [0.02, 0.015, 0.01, 0.06, 0.02],
            [0.01, 0.0, 0.02, 0.02, 0.05],
        ]
    )
