# tests/conftest.py
from pathlib import Path

import numpy as np
import pytest

from envi_utils.decode.data_types import ENVI_DATA_TYPES
from envi_utils.decode.sources import BytesSource


def to_interleave(cube_bsq: np.ndarray, interleave: str) -> np.ndarray:
    """Rearrange a (bands, lines, samples) cube into the on-disk order of `interleave`."""
    if interleave == "bsq":
        return cube_bsq
    if interleave == "bil":
        return cube_bsq.transpose(1, 0, 2)  # (lines, bands, samples)
    if interleave == "bip":
        return cube_bsq.transpose(1, 2, 0)  # (lines, samples, bands)
    raise ValueError(f"Unsupported interleave in fixture: {interleave}")


def expected_output(cube_bsq: np.ndarray, channels) -> bytes:
    """Extracted buffer is (line, channel, sample) in C order."""
    return np.ascontiguousarray(cube_bsq[list(channels)].transpose(1, 0, 2)).tobytes()


class CountingSource(BytesSource):
    """BytesSource that records every range requested."""

    def __init__(self, data: bytes):
        super().__init__(data)
        self.reads = []

    def read_range(self, start: int, end: int) -> bytes:
        self.reads.append((start, end))
        return super().read_range(start, end)


@pytest.fixture
def make_cube():
    """
    Factory that builds a cube with BSQ shape (bands, lines, samples) where
    every value is distinct (for the small sizes used in tests).
    """

    def _make(bands, lines, samples, dtype_code: int = 3):
        dtype = ENVI_DATA_TYPES[dtype_code].numpy_type
        values = np.arange(bands * lines * samples) % 251 + 1
        return values.reshape(bands, lines, samples).astype(dtype)

    return _make


@pytest.fixture
def make_header():
    """Factory for a parsed-header dict as the decoder sees it."""

    def _make(*, samples=4, lines=3, bands=3, interleave="bil", dtype_code=3, **extra):
        hdr = {
            "samples": str(samples),
            "lines": str(lines),
            "bands": str(bands),
            "data_type": str(dtype_code),
            "interleave": interleave,
        }
        hdr.update(extra)
        return hdr

    return _make


@pytest.fixture
def counting_source():
    return CountingSource


@pytest.fixture
def interleaved():
    return to_interleave


@pytest.fixture
def expected_buffer():
    return expected_output


@pytest.fixture
def write_envi_header(tmp_path: Path):
    """
    Factory that writes a minimal ENVI header and returns its path.
    """

    def _write(
        fname: str,
        *,
        samples: int,
        lines: int,
        bands: int,
        dtype_code: int = 3,  # 3 = int32
        interleave: str = "bil",
        wavelengths=None,
        band_names=None,
        byte_order: int = 0,
    ) -> Path:
        txt = (
            "ENVI\n"
            "description = {unit test}\n"
            f"samples = {samples}\n"
            f"lines = {lines}\n"
            f"bands = {bands}\n"
            "header offset = 0\n"
            "file type = ENVI Standard\n"
            f"data type = {dtype_code}\n"
            f"interleave = {interleave}\n"
            "sensor type = Unknown\n"
            f"byte order = {byte_order}\n"
        )
        if wavelengths:
            txt += "wavelength = {" + ", ".join(str(float(v)) for v in wavelengths) + "}\n"
        if band_names:
            txt += "band names = {" + ", ".join(band_names) + "}\n"
        path = tmp_path / fname
        path.write_text(txt, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_data(tmp_path: Path):
    """
    Factory that writes a binary data file for the given array and returns its path.
    The array must already be in the desired interleave layout.
    """

    def _write(fname: str, arr: np.ndarray) -> Path:
        path = tmp_path / fname
        path.write_bytes(arr.tobytes(order="C"))
        return path

    return _write


@pytest.fixture
def envi_pair(make_cube, write_envi_header, write_data):
    """
    Factory that creates a paired (hdr, data) with controllable interleave & type.
    Returns (hdr_path, data_path, cube_bsq) where cube_bsq is the original BSQ cube.
    """

    def _create(
        *,
        samples: int = 4,
        lines: int = 3,
        bands: int = 3,
        interleave: str = "bil",
        dtype_code: int = 3,
        wavelengths=None,
        band_names=None,
        byte_order: int = 0,
        name: str = "img",
        data_ext: str = ".bil",
    ):
        cube_bsq = make_cube(bands, lines, samples, dtype_code)
        if byte_order == 1:
            cube_bsq = cube_bsq.astype(cube_bsq.dtype.newbyteorder(">"))

        data = write_data(name + data_ext, to_interleave(cube_bsq, interleave))
        hdr = write_envi_header(
            name + ".hdr",
            samples=samples,
            lines=lines,
            bands=bands,
            dtype_code=dtype_code,
            interleave=interleave,
            wavelengths=wavelengths,
            band_names=band_names,
            byte_order=byte_order,
        )
        return hdr, data, cube_bsq

    return _create
