import logging
from typing import Callable, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from .source_patterns import AdjacencyModel
from .wavefunction import Grid, StepResult, StepStatus

log = logging.getLogger(__name__)

StepCallback = Callable[[Grid, StepResult], None]


class GenerationFailed(Exception):
    pass


class WavefunctionCollapse:
    """Runs wavefunction collapse. Returns an image. Does no I/O."""

    def __init__(
        self,
        source_texture: NDArray[np.uint8],
        tile_width: int = 3,
        tile_height: int = 3,
        deduplicate: bool = True,
    ) -> None:
        self.model = AdjacencyModel.build(
            source_texture, tile_width, tile_height, deduplicate=deduplicate
        )

    def run(
        self,
        requested_dimensions: Tuple[int, int],
        seed: Optional[int] = None,
        trials: int = 10,
        on_step: Optional[StepCallback] = None,
    ) -> NDArray[np.uint8]:
        """Generates a (height, width) image, starting over with a fresh
        grid whenever a trial hits a contradiction.
        """
        if trials < 1:
            raise ValueError(f"trials must be at least 1, got {trials}")
        height, width = requested_dimensions
        rng = np.random.default_rng(seed)
        for trial in range(1, trials + 1):
            wvf = Grid(self.model, width, height)
            result = self._collapse(wvf, rng, on_step)
            if result.status is StepStatus.COMPLETE:
                log.info("generated %dx%d grid on trial %d", width, height, trial)
                return wvf.produce_image()
            log.info(
                "trial %d/%d hit a contradiction at cell %s",
                trial,
                trials,
                result.index,
            )
        raise GenerationFailed(f"ran into {trials} contradictions")

    @staticmethod
    def _collapse(
        wvf: Grid, rng: np.random.Generator, on_step: Optional[StepCallback]
    ) -> StepResult:
        while True:
            result = wvf.step(rng)
            if on_step is not None:
                on_step(wvf, result)
            if result.status is not StepStatus.ADVANCED:
                return result
            log.debug("%.1f%% done", wvf.progress() * 100.0)
