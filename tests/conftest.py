"""Shared fixtures for tilecollapse tests."""

from __future__ import annotations

import numpy as np
import pytest
from helpers import WHITE, make_model, uniform_rules

from tilecollapse.source_patterns import AdjacencyModel


@pytest.fixture
def uniform_image() -> np.ndarray:
    """A 4x4 image of a single color."""
    return np.full((4, 4, 3), (10, 120, 200), dtype=np.uint8)


@pytest.fixture
def stripe_image() -> np.ndarray:
    """A 4x4 image of alternating black and white columns, black first."""
    image = np.zeros((4, 4, 3), dtype=np.uint8)
    image[:, 1::2] = WHITE
    return image


@pytest.fixture
def distinct_image() -> np.ndarray:
    """A 3x3 image where every pixel has a different color."""
    return np.arange(27, dtype=np.uint8).reshape(3, 3, 3)


@pytest.fixture
def blob_image() -> np.ndarray:
    """An 8x8 image with a few colored shapes, enough to give dozens of tiles."""
    image = np.zeros((8, 8, 3), dtype=np.uint8)
    image[1:4, 1:4] = (200, 30, 30)
    image[5:7, 2:7] = (30, 200, 30)
    image[2, 5:8] = (30, 30, 200)
    image[6, 0] = WHITE
    return image


@pytest.fixture
def self_only_model() -> AdjacencyModel:
    """Two tiles, each allowed only next to itself in every direction."""
    return make_model([uniform_rules([0]), uniform_rules([1])])
