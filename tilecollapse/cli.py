import logging
import pathlib
from typing import List, Optional

from tap import Tap

from . import png
from .logging_config import setup_logging
from .source_patterns import ConstructionError
from .wvfc import GenerationFailed, WavefunctionCollapse

log = logging.getLogger(__name__)


class WvfcParser(Tap):
    source_tiles: pathlib.Path  # sample image to extract tiles from
    output: pathlib.Path  # where to write the generated png
    height: int = 20  # grid height in cells
    width: int = 40  # grid width in cells
    tile_width: int = 3
    tile_height: int = 3
    seed: Optional[int] = None  # random seed, fresh entropy when omitted
    trials: int = 10  # fresh grids to try before giving up
    keep_duplicates: bool = False  # one tile per source pixel instead of merging repeats
    verbose: bool = False  # log progress after every step

    def process_args(self) -> None:
        for name in ("height", "width", "tile_width", "tile_height", "trials"):
            value = getattr(self, name)
            if value <= 0:
                raise ValueError(f"--{name} must be positive, got {value}")
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"--seed must be non-negative, got {self.seed}")


def main(argv: Optional[List[str]] = None) -> int:
    args = WvfcParser().parse_args(argv)
    setup_logging(args.verbose)
    log.info("Running with args %s", args.as_dict())

    try:
        source_texture = png.load_png(args.source_tiles)
        wvfc = WavefunctionCollapse(
            source_texture,
            tile_width=args.tile_width,
            tile_height=args.tile_height,
            deduplicate=not args.keep_duplicates,
        )
        generated_image = wvfc.run(
            (args.height, args.width), seed=args.seed, trials=args.trials
        )
    except (ConstructionError, GenerationFailed) as error:
        log.error("%s", error)
        return 1
    png.save_png(generated_image, args.output)
    log.info("wrote %s", args.output)
    return 0
