# pyright: reportUnknownVariableType=false

import imageio.v3 as iio
from pathlib import Path
from numpy.typing import NDArray
import numpy as np

from .source_patterns import as_rgb


def load_png(file: Path) -> NDArray[np.uint8]:
    return as_rgb(iio.imread(file))


def save_png(image: NDArray[np.uint8], output_file: Path):
    iio.imwrite(output_file, image)
