"""Overlapping-tile wave function collapse on a toroidal grid."""

from .bitvector import BitVector
from .source_patterns import AdjacencyModel, ConstructionError, Direction, Tile
from .wavefunction import (
    CellState,
    Contradiction,
    Grid,
    Resolved,
    StepResult,
    StepStatus,
    Undetermined,
)
from .wvfc import GenerationFailed, WavefunctionCollapse

__all__ = [
    "AdjacencyModel",
    "BitVector",
    "CellState",
    "ConstructionError",
    "Contradiction",
    "Direction",
    "GenerationFailed",
    "Grid",
    "Resolved",
    "StepResult",
    "StepStatus",
    "Tile",
    "Undetermined",
    "WavefunctionCollapse",
]
