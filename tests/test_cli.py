"""Tests for PNG I/O and the command line entry point."""

from __future__ import annotations

import logging

import imageio.v3 as iio
import numpy as np
import pytest

from tilecollapse import png
from tilecollapse.cli import WvfcParser, main
from tilecollapse.logging_config import LOGGER_NAME, setup_logging


@pytest.fixture
def source_png(tmp_path, stripe_image):
    path = tmp_path / "stripes.png"
    iio.imwrite(path, stripe_image)
    return path


@pytest.fixture(autouse=True)
def restore_package_logger():
    logger = logging.getLogger(LOGGER_NAME)
    yield
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


class TestPng:
    def test_round_trip(self, tmp_path, blob_image) -> None:
        path = tmp_path / "blob.png"
        png.save_png(blob_image, path)
        np.testing.assert_array_equal(png.load_png(path), blob_image)

    def test_grey_alpha_loads_as_rgb(self, tmp_path) -> None:
        grey_alpha = np.zeros((4, 4, 2), dtype=np.uint8)
        grey_alpha[:, :, 0] = 70
        grey_alpha[:, :, 1] = 255
        path = tmp_path / "la.png"
        iio.imwrite(path, grey_alpha)
        loaded = png.load_png(path)
        assert loaded.shape == (4, 4, 3)
        assert (loaded == 70).all()

    def test_alpha_is_dropped_on_load(self, tmp_path) -> None:
        path = tmp_path / "rgba.png"
        iio.imwrite(path, np.full((3, 3, 4), 200, dtype=np.uint8))
        assert png.load_png(path).shape == (3, 3, 3)


class TestParser:
    def test_defaults(self, source_png, tmp_path) -> None:
        args = WvfcParser().parse_args(
            ["--source_tiles", str(source_png), "--output", str(tmp_path / "o.png")]
        )
        assert (args.width, args.height) == (40, 20)
        assert (args.tile_width, args.tile_height) == (3, 3)
        assert args.seed is None
        assert args.trials == 10
        assert not args.keep_duplicates

    @pytest.mark.parametrize("flag", ["--width", "--height", "--tile_width", "--trials"])
    def test_non_positive_values_are_rejected(self, source_png, tmp_path, flag) -> None:
        argv = ["--source_tiles", str(source_png), "--output", str(tmp_path / "o.png")]
        with pytest.raises(ValueError, match=flag.lstrip("-")):
            WvfcParser().parse_args(argv + [flag, "0"])

    def test_negative_seed_is_rejected(self, source_png, tmp_path) -> None:
        argv = ["--source_tiles", str(source_png), "--output", str(tmp_path / "o.png")]
        with pytest.raises(ValueError, match="seed"):
            WvfcParser().parse_args(argv + ["--seed", "-1"])

    def test_zero_seed_is_accepted(self, source_png, tmp_path) -> None:
        argv = ["--source_tiles", str(source_png), "--output", str(tmp_path / "o.png")]
        assert WvfcParser().parse_args(argv + ["--seed", "0"]).seed == 0


class TestMain:
    def test_grey_alpha_source_generates(self, tmp_path) -> None:
        source = tmp_path / "la.png"
        grey_alpha = np.zeros((4, 4, 2), dtype=np.uint8)
        grey_alpha[:, 1::2, 0] = 255
        grey_alpha[:, :, 1] = 255
        iio.imwrite(source, grey_alpha)
        output = tmp_path / "out.png"
        status = main(
            [
                "--source_tiles", str(source),
                "--output", str(output),
                "--width", "4",
                "--height", "2",
                "--tile_width", "2",
                "--tile_height", "2",
                "--seed", "1",
            ]
        )
        assert status == 0
        assert iio.imread(output).shape == (2, 4, 3)

    def test_unusable_source_exits_non_zero(self, tmp_path) -> None:
        source = tmp_path / "tiny.png"
        iio.imwrite(source, np.zeros((2, 2, 2), dtype=np.uint8))
        status = main(
            ["--source_tiles", str(source), "--output", str(tmp_path / "o.png")]
        )
        assert status == 1

    def test_writes_generated_image(self, source_png, tmp_path) -> None:
        output = tmp_path / "out.png"
        status = main(
            [
                "--source_tiles", str(source_png),
                "--output", str(output),
                "--width", "6",
                "--height", "4",
                "--tile_width", "2",
                "--tile_height", "2",
                "--seed", "3",
            ]
        )
        assert status == 0
        generated = iio.imread(output)
        assert generated.shape == (4, 6, 3)

    def test_failed_generation_exits_non_zero(self, source_png, tmp_path) -> None:
        output = tmp_path / "out.png"
        status = main(
            [
                "--source_tiles", str(source_png),
                "--output", str(output),
                "--width", "3",
                "--height", "2",
                "--tile_width", "2",
                "--tile_height", "2",
                "--trials", "2",
            ]
        )
        assert status == 1
        assert not output.exists()

    def test_tiles_larger_than_source_exit_non_zero(self, source_png, tmp_path) -> None:
        status = main(
            ["--source_tiles", str(source_png), "--output", str(tmp_path / "o.png")]
            + ["--tile_width", "4"]
        )
        assert status == 1


class TestLoggingConfig:
    def test_setup_is_idempotent(self) -> None:
        setup_logging()
        logger = setup_logging(verbose=True)
        assert logger.name == LOGGER_NAME
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert not logger.propagate
