import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .bitvector import BitVector

log = logging.getLogger(__name__)


class ConstructionError(ValueError):
    """The source image or tile rules cannot produce a usable model."""


class Direction(Enum):
    # (dx, dy), y grows downwards
    NORTH = (0, -1)
    EAST = (1, 0)
    SOUTH = (0, 1)
    WEST = (-1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_OPPOSITES = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}


@dataclass(frozen=True)
class Tile:
    index: int
    pixels: bytes
    shape: Tuple[int, int, int]
    frequency: int = 1

    @classmethod
    def from_ndarray(cls, index: int, pixels: NDArray[np.uint8], frequency: int = 1):
        return cls(
            index,
            pixels.astype(np.uint8).tobytes(),
            (pixels.shape[0], pixels.shape[1], pixels.shape[2]),
            frequency,
        )

    @property
    def height(self) -> int:
        return self.shape[0]

    @property
    def width(self) -> int:
        return self.shape[1]

    def get_ndarray(self) -> NDArray[np.uint8]:
        return np.frombuffer(self.pixels, dtype=np.uint8).reshape(self.shape)

    def band(self, direction: Direction) -> bytes:
        """
        The pixels this tile shares with a neighbor placed one step away in
        `direction`. A neighbor B fits to the north of A when A's north band
        equals B's south band, and likewise for the other directions.
        """
        pixels = self.get_ndarray()
        if direction is Direction.NORTH:
            region = pixels[0: self.height - 1]
        elif direction is Direction.SOUTH:
            region = pixels[1: self.height]
        elif direction is Direction.EAST:
            region = pixels[:, 1: self.width]
        else:
            region = pixels[:, 0: self.width - 1]
        return np.ascontiguousarray(region).tobytes()

    def overlaps(self, other: "Tile", direction: Direction) -> bool:
        return self.band(direction) == other.band(direction.opposite)

    def top_left(self) -> NDArray[np.uint8]:
        return self.get_ndarray()[0, 0]


def as_rgb(image: NDArray) -> NDArray[np.uint8]:
    """Normalizes greyscale, grey+alpha and RGBA rasters to (height, width, 3) uint8."""
    image = np.asarray(image)
    if image.ndim == 3 and image.shape[2] == 2:
        image = image[:, :, 0]
    if image.ndim == 2:
        image = np.repeat(image[:, :, np.newaxis], 3, axis=2)
    if image.ndim != 3:
        raise ConstructionError(f"expected a 2D raster, got shape {image.shape}")
    if image.shape[2] == 4:
        image = image[:, :, :3]
    if image.shape[2] != 3:
        raise ConstructionError(f"unsupported channel count {image.shape[2]}")
    return image.astype(np.uint8, copy=False)


class AdjacencyModel:
    """
    An ordered tileset plus, for each tile and direction, the set of tile
    ids that may sit next to it in that direction. Immutable once built;
    any number of grids may share one model.
    """

    def __init__(
        self,
        tiles: Sequence[Tile],
        rules: Sequence[Mapping[Direction, Iterable[int]]],
    ) -> None:
        if len(tiles) == 0:
            raise ConstructionError("tileset is empty")
        if len(rules) != len(tiles):
            raise ConstructionError(
                f"{len(tiles)} tiles but adjacency rules for {len(rules)}"
            )
        self.tiles: Tuple[Tile, ...] = tuple(tiles)
        self._universe = BitVector.full(len(self.tiles))
        self.rules: List[Dict[Direction, BitVector]] = []
        for tile_id, tile_rules in enumerate(rules):
            missing = set(Direction) - set(tile_rules)
            if missing:
                names = sorted(direction.name for direction in missing)
                raise ConstructionError(f"tile {tile_id} has no rules for {names}")
            converted = {}
            for direction in Direction:
                allowed = BitVector(tile_rules[direction])
                if not allowed.issubset(self._universe):
                    raise ConstructionError(
                        f"tile {tile_id} {direction.name} rules reference unknown "
                        f"tiles {list(allowed)}"
                    )
                converted[direction] = allowed
            self.rules.append(converted)

    @classmethod
    def build(
        cls,
        image: NDArray,
        tile_width: int,
        tile_height: int,
        deduplicate: bool = True,
    ) -> "AdjacencyModel":
        """
        Slides a tile_width x tile_height window over every pixel of the
        image, wrapping around its edges, and derives adjacency rules from
        where the extracted patterns overlap.
        """
        image = as_rgb(image)
        height, width, _ = image.shape
        if tile_width <= 0 or tile_height <= 0:
            raise ConstructionError(
                f"tile size must be positive, got {tile_width}x{tile_height}"
            )
        if tile_width >= width or tile_height >= height:
            raise ConstructionError(
                f"{width}x{height} image is too small for "
                f"{tile_width}x{tile_height} tiles"
            )
        tiles = _collect_tiles(image, tile_width, tile_height, deduplicate)
        rules = _collect_adjacencies(tiles)
        model = cls(tiles, rules)
        log.info(
            "built adjacency model: %d tiles (%dx%d) from %dx%d image",
            model.tile_count,
            tile_width,
            tile_height,
            width,
            height,
        )
        return model

    @property
    def tile_count(self) -> int:
        return len(self.tiles)

    def __len__(self) -> int:
        return len(self.tiles)

    def all_tiles(self) -> BitVector:
        return self._universe.copy()

    def neighbors(self, tile_id: int, direction: Direction) -> BitVector:
        return self.rules[tile_id][direction]

    def allowed(self, options: BitVector, direction: Direction) -> BitVector:
        """Every tile that may sit in `direction` of at least one of `options`."""
        mask = 0
        for tile_id in options:
            mask |= self.rules[tile_id][direction].mask
        return BitVector.from_mask(mask)

    def weights(self, tile_ids: Iterable[int]) -> NDArray[np.float64]:
        return np.array(
            [self.tiles[tile_id].frequency for tile_id in tile_ids], dtype=np.float64
        )


def _collect_tiles(
    image: NDArray[np.uint8], tile_width: int, tile_height: int, deduplicate: bool
) -> List[Tile]:
    """Runs a tile-sized convolution across the whole image, wrapping at the
    edges. Identical windows are merged and counted when deduplicating.
    """
    height, width, _ = image.shape
    windows: List[NDArray[np.uint8]] = []
    frequencies: List[int] = []
    seen: Dict[bytes, int] = {}
    for y in range(height):
        for x in range(width):
            window = image.take(range(y, y + tile_height), mode="wrap", axis=0).take(
                range(x, x + tile_width), mode="wrap", axis=1
            )
            key = window.tobytes()
            if deduplicate and key in seen:
                frequencies[seen[key]] += 1
                continue
            seen[key] = len(windows)
            windows.append(window)
            frequencies.append(1)
    log.debug(
        "extracted %d patterns from %d offsets", len(windows), width * height
    )
    return [
        Tile.from_ndarray(index, window, frequency)
        for index, (window, frequency) in enumerate(zip(windows, frequencies))
    ]


def _collect_adjacencies(tiles: Sequence[Tile]) -> List[Dict[Direction, List[int]]]:
    """
    For each direction, groups tiles by the band they would present to a
    neighbor coming from the opposite side. A tile's legal neighbors are
    then the group whose band matches its own, which is the same relation
    as comparing every ordered pair of tiles.
    """
    rules: List[Dict[Direction, List[int]]] = [{} for _ in tiles]
    for direction in Direction:
        by_band: defaultdict[bytes, List[int]] = defaultdict(list)
        for tile in tiles:
            by_band[tile.band(direction.opposite)].append(tile.index)
        for tile in tiles:
            rules[tile.index][direction] = by_band.get(tile.band(direction), [])
    return rules
