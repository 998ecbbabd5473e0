"""Test helpers shared across the tilecollapse test suite."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

import numpy as np

from tilecollapse.source_patterns import AdjacencyModel, Direction, Tile

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


class ScriptedRandom:
    """Stands in for numpy.random.Generator, returning scripted draws.

    Each call to choice() pops the next scripted tile id, which must be one
    of the offered options. The probabilities passed in are recorded.
    """

    def __init__(self, draws: Iterable[int]) -> None:
        self.draws = list(draws)
        self.calls: list[tuple[list[int], np.ndarray | None]] = []

    def choice(self, a: Sequence[int], p: np.ndarray | None = None) -> int:
        self.calls.append((list(a), p))
        draw = self.draws.pop(0)
        assert draw in a, f"scripted draw {draw} not among options {list(a)}"
        return draw


def make_model(
    rules: Sequence[Mapping[Direction, Iterable[int]]],
    frequencies: Sequence[int] | None = None,
) -> AdjacencyModel:
    """Build a model from explicit rules, with one distinct 1x1 tile per rule."""
    tiles = []
    for index in range(len(rules)):
        frequency = frequencies[index] if frequencies is not None else 1
        pixels = np.array([[[index * 40 % 256, 0, 0]]], dtype=np.uint8)
        tiles.append(Tile.from_ndarray(index, pixels, frequency))
    return AdjacencyModel(tiles, rules)


def uniform_rules(allowed: Iterable[int]) -> dict[Direction, list[int]]:
    allowed = list(allowed)
    return {direction: allowed for direction in Direction}
