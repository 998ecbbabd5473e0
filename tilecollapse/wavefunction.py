import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Iterator, List, Optional, Set, Tuple, Union

import networkx as nx
import numpy as np
from numpy.typing import NDArray

from .bitvector import BitVector
from .source_patterns import AdjacencyModel, Direction

log = logging.getLogger(__name__)


class Contradiction(Exception):
    """A cell ran out of possible tiles."""

    def __init__(self, index: int) -> None:
        super().__init__(f"cell {index} has no possible tiles left")
        self.index = index


@dataclass
class Cell:
    options: BitVector
    resolved: Optional[int] = None

    def entropy(self) -> int:
        return len(self.options)

    def is_resolved(self) -> bool:
        return self.resolved is not None


@dataclass(frozen=True)
class Resolved:
    tile_id: int


@dataclass(frozen=True)
class Undetermined:
    option_count: int


CellState = Union[Resolved, Undetermined]


class StepStatus(Enum):
    ADVANCED = "advanced"
    COMPLETE = "complete"
    CONTRADICTION = "contradiction"


@dataclass(frozen=True)
class StepResult:
    status: StepStatus
    # the cell resolved by an ADVANCED step, or the emptied cell of a CONTRADICTION
    index: Optional[int] = None

    @property
    def is_contradiction(self) -> bool:
        return self.status is StepStatus.CONTRADICTION


class Grid:
    """
    A toroidal width x height wave of cells over the tiles of an
    AdjacencyModel.

    1. every cell starts with every tile possible
    2. `step` observes the unresolved cell with the fewest options and
    collapses it to a single tile
    3. the choice is propagated to neighbors until nothing else narrows

    Cells live in a flat row-major list. Their neighborhood is a lattice
    graph with one edge per (cell, direction), keyed by the direction.
    """

    def __init__(self, model: AdjacencyModel, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"grid dimensions must be positive, got {width}x{height}")
        self.model = model
        self.width = width
        self.height = height
        self.cells: List[Cell] = [
            Cell(model.all_tiles()) for _ in range(width * height)
        ]
        self.unresolved: Set[int] = set(range(width * height))
        self.contradiction: Optional[int] = None
        self.lattice = nx.MultiDiGraph()
        self._make_lattice()

    def _make_lattice(self) -> None:
        self.lattice.add_nodes_from(range(len(self.cells)))
        for index in range(len(self.cells)):
            for direction in Direction:
                self.lattice.add_edge(
                    index, self.neighbor(index, direction), key=direction
                )

    def __len__(self) -> int:
        return len(self.cells)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.cells):
            raise IndexError(f"cell index {index} outside {self.width}x{self.height} grid")

    def index_of(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height} grid")
        return x + y * self.width

    def coordinates(self, index: int) -> Tuple[int, int]:
        self._check_index(index)
        return index % self.width, index // self.width

    def neighbor(self, index: int, direction: Direction) -> int:
        x, y = self.coordinates(index)
        x = (x + direction.dx) % self.width
        y = (y + direction.dy) % self.height
        return x + y * self.width

    def neighbors(self, index: int) -> Iterator[Tuple[Direction, int]]:
        for _, neighbor_index, direction in self.lattice.out_edges(index, keys=True):
            yield direction, neighbor_index

    def entropy(self, index: int) -> int:
        self._check_index(index)
        return self.cells[index].entropy()

    def options(self, index: int) -> BitVector:
        self._check_index(index)
        return self.cells[index].options.copy()

    def cell_state(self, index: int) -> CellState:
        self._check_index(index)
        cell = self.cells[index]
        if cell.resolved is not None:
            return Resolved(cell.resolved)
        return Undetermined(len(cell.options))

    def is_complete(self) -> bool:
        return not self.unresolved

    def progress(self) -> float:
        return 1.0 - len(self.unresolved) / len(self.cells)

    def get_minimum_entropy_unresolved_cell(self) -> int:
        # ties go to the lowest index so runs replay exactly
        return min(self.unresolved, key=lambda index: (self.cells[index].entropy(), index))

    def step(self, rng: np.random.Generator) -> StepResult:
        """Observe one cell and propagate. A grid that reported a
        contradiction keeps reporting it and is never touched again.
        """
        if self.contradiction is not None:
            return StepResult(StepStatus.CONTRADICTION, self.contradiction)
        if self.is_complete():
            return StepResult(StepStatus.COMPLETE)
        try:
            index = self.observe(rng)
            self.propagate(index)
        except Contradiction as contradiction:
            self.contradiction = contradiction.index
            log.warning("contradiction at cell %s", self.coordinates(contradiction.index))
            return StepResult(StepStatus.CONTRADICTION, contradiction.index)
        return StepResult(StepStatus.ADVANCED, index)

    def observe(self, rng: np.random.Generator) -> int:
        """
        Find the minimum entropy cell and collapse it to one of its tiles,
        chosen at random weighted by how often the tile occurs in the source.
        """
        index = self.get_minimum_entropy_unresolved_cell()
        cell = self.cells[index]
        if not cell.options:
            raise Contradiction(index)
        tile_ids = list(cell.options)
        weights = self.model.weights(tile_ids)
        choice = int(rng.choice(tile_ids, p=weights / weights.sum()))
        cell.options = BitVector([choice])
        cell.resolved = choice
        self.unresolved.discard(index)
        return index

    def propagate(self, origin: int) -> None:
        """
        Starting from `origin`, narrow each unresolved neighbor to the tiles
        allowed by some option of the cell next to it. Narrowed cells are
        pushed to the front of the worklist so constraints settle locally
        before spreading.
        """
        worklist: Deque[int] = deque([origin])
        queued = {origin}
        while worklist:
            propagater = worklist.popleft()
            queued.discard(propagater)
            propagater_options = self.cells[propagater].options
            for direction, neighbor_index in self.neighbors(propagater):
                neighbor_cell = self.cells[neighbor_index]
                if neighbor_cell.is_resolved():
                    continue
                allowed = self.model.allowed(propagater_options, direction)
                narrowed = neighbor_cell.options & allowed
                if not narrowed < neighbor_cell.options:
                    continue
                neighbor_cell.options = narrowed
                if not narrowed:
                    raise Contradiction(neighbor_index)
                if neighbor_index not in queued:
                    worklist.appendleft(neighbor_index)
                    queued.add(neighbor_index)
                if neighbor_index == propagater:
                    propagater_options = narrowed

    def produce_image(self) -> NDArray[np.uint8]:
        """
        One pixel per cell: the top-left pixel of a resolved tile, or the
        frequency weighted average over the tiles an undetermined cell still
        allows. Cells with no options left are black.
        """
        image = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        for index, cell in enumerate(self.cells):
            x, y = self.coordinates(index)
            state = self.cell_state(index)
            if isinstance(state, Resolved):
                image[y, x] = self.model.tiles[state.tile_id].top_left()
            elif state.option_count > 0:
                tile_ids = list(cell.options)
                weights = self.model.weights(tile_ids)
                colors = np.array(
                    [self.model.tiles[tile_id].top_left() for tile_id in tile_ids],
                    dtype=np.float64,
                )
                image[y, x] = np.average(colors, axis=0, weights=weights).astype(np.uint8)
        return image
