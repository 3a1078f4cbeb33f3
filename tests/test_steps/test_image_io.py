"""Tests for PNG writing, image normalization and the file texture decoder."""

from pathlib import Path

import cv2
import numpy as np
import pytest

from rigidexport.core.errors import OutputWriteFailure, TextureReadError
from rigidexport.core.pixels import PixelBuffer
from rigidexport.steps.s01_obj_export._normalizer import normalize_image, write_png
from rigidexport.steps.s01_obj_export._texture_decoder import FileTextureDecoder


def _sample_buffer() -> PixelBuffer:
    rng = np.random.default_rng(11)
    return PixelBuffer(rng.integers(0, 256, (5, 7, 4), dtype=np.uint8))


class TestWritePng:
    def test_round_trip_through_decoder(self, tmp_path: Path):
        buf = _sample_buffer()
        path = write_png(buf, tmp_path / "a.png")
        decoded = FileTextureDecoder().decode(str(path))
        np.testing.assert_array_equal(decoded.pixels, buf.pixels)

    def test_unwritable_path(self, tmp_path: Path):
        with pytest.raises(OutputWriteFailure):
            write_png(_sample_buffer(), tmp_path / "missing_dir" / "a.png")


class TestNormalizeImage:
    def test_rgb_becomes_rgba(self, tmp_path: Path):
        path = tmp_path / "rgb.png"
        bgr = np.full((4, 6, 3), (10, 20, 30), dtype=np.uint8)
        cv2.imwrite(str(path), bgr)

        outcome = normalize_image(path)
        assert outcome.ok
        img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        assert img.shape == (4, 6, 4)
        assert img.dtype == np.uint8
        assert img[0, 0].tolist() == [10, 20, 30, 255]

    def test_grey_and_16_bit(self, tmp_path: Path):
        path = tmp_path / "grey16.png"
        cv2.imwrite(str(path), np.full((3, 3), 65535, dtype=np.uint16))

        assert normalize_image(path).ok
        img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        assert img.shape == (3, 3, 4)
        assert img.dtype == np.uint8
        assert img[1, 1].tolist() == [255, 255, 255, 255]

    def test_identity_scale_preserves_pixels(self, tmp_path: Path):
        buf = _sample_buffer()
        path = write_png(buf, tmp_path / "rgba.png")
        assert normalize_image(path).ok
        np.testing.assert_array_equal(FileTextureDecoder().decode(str(path)).pixels, buf.pixels)

    def test_failure_is_reported_not_raised(self, tmp_path: Path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not a png")
        outcome = normalize_image(path)
        assert outcome.ok is False
        assert outcome.error
        assert path.read_bytes() == b"not a png"

    def test_missing_file(self, tmp_path: Path):
        assert normalize_image(tmp_path / "nope.png").ok is False


class TestFileTextureDecoder:
    def test_relative_refs_use_root(self, tmp_path: Path):
        write_png(_sample_buffer(), tmp_path / "tex.png")
        decoder = FileTextureDecoder(tmp_path)
        assert decoder.resolve("tex.png") == tmp_path / "tex.png"
        assert decoder.decode("tex.png").width == 7

    def test_missing_texture(self, tmp_path: Path):
        with pytest.raises(TextureReadError, match="not found"):
            FileTextureDecoder(tmp_path).decode("nope.png")

    def test_corrupt_texture(self, tmp_path: Path):
        (tmp_path / "bad.png").write_bytes(b"\x00\x01\x02")
        with pytest.raises(TextureReadError):
            FileTextureDecoder(tmp_path).decode("bad.png")

    def test_bgr_converted_to_rgba(self, tmp_path: Path):
        bgr = np.zeros((2, 2, 3), dtype=np.uint8)
        bgr[..., 0] = 200  # blue
        cv2.imwrite(str(tmp_path / "blue.png"), bgr)
        px = FileTextureDecoder(tmp_path).decode("blue.png").pixels
        assert px[0, 0].tolist() == [0, 0, 200, 255]

    def test_grey_converted_to_opaque_rgba(self, tmp_path: Path):
        cv2.imwrite(str(tmp_path / "grey.png"), np.full((3, 2), 90, dtype=np.uint8))
        buf = FileTextureDecoder(tmp_path).decode("grey.png")
        assert (buf.width, buf.height) == (2, 3)
        assert buf.pixels[2, 1].tolist() == [90, 90, 90, 255]
