from typing import Optional, Sequence

import numpy as np
import xarray as xr

from envi_utils.decode.data_types import BYTE_ORDER, EnviDataType
from envi_utils.decode.header import parse_int
from envi_utils.decode.image import EnviImage


def buffer_to_array(
    buffer: bytes,
    lines: int,
    samples: int,
    count: int,
    data_type: EnviDataType,
    byte_order: int = 0,
) -> np.ndarray:
    """
    View an extracted buffer as a (band, y, x) array.

    ``byte_order`` follows the ENVI header convention: 0 little-endian,
    1 big-endian.
    """
    endian = "<" if BYTE_ORDER.get(byte_order, "little") == "little" else ">"
    dt = np.dtype(data_type.numpy_type).newbyteorder(endian)
    # buffer is (line, channel, sample) in C order
    arr = np.frombuffer(buffer, dtype=dt).reshape((lines, count, samples))
    return arr.transpose(1, 0, 2)


def read_array(
    image: EnviImage, channels: Sequence[int], max_workers: Optional[int] = None
) -> np.ndarray:
    channels = list(channels)
    layout = image.layout(channels)
    buffer = image.get_data(channels, max_workers=max_workers)
    byte_order = parse_int(image.header.get("byte_order")) or 0
    return buffer_to_array(
        buffer, layout.lines, layout.samples, len(channels), layout.data_type, byte_order
    )


def _band_coordinate(values, channels):
    # header lists may be absent or empty
    if isinstance(values, list) and values:
        return [values[c] for c in channels]
    return None


def to_dataarray(
    image: EnviImage,
    channels: Optional[Sequence[int]] = None,
    max_workers: Optional[int] = None,
) -> xr.DataArray:
    """Read the given channels (default: all) into a (band, y, x) DataArray."""
    if channels is None:
        channels = range(image.shape[2])
    channels = list(channels)

    arr = read_array(image, channels, max_workers=max_workers)
    coords = {
        "band": np.asarray(channels, dtype=int),
        "y": np.arange(arr.shape[1]),
        "x": np.arange(arr.shape[2]),
    }

    wavelengths = _band_coordinate(image.header.get("wavelength"), channels)
    if wavelengths is not None:
        try:
            coords["wavelength"] = ("band", [float(v) for v in wavelengths])
        except ValueError:
            coords["wavelength"] = ("band", wavelengths)

    band_names = _band_coordinate(image.header.get("band_names"), channels)
    if band_names is not None:
        coords["band_name"] = ("band", band_names)

    return xr.DataArray(
        arr,
        dims=("band", "y", "x"),
        coords=coords,
        attrs=dict(image.header),
        name="data",
    )


def to_zarr(
    image: EnviImage,
    zarr_path: str,
    channels: Optional[Sequence[int]] = None,
    chunks=None,
    max_workers: Optional[int] = None,
    **kwargs,
) -> str:
    if chunks is None:
        chunks = {"band": 1, "y": 512, "x": 512}

    da = to_dataarray(image, channels, max_workers=max_workers)
    ds = da.to_dataset(name="data")

    # Disable all chunk-level compression
    encoding = {name: {"compressor": None} for name in list(ds.data_vars)}

    ds.chunk(chunks).to_zarr(
        zarr_path,
        mode="w",
        encoding=encoding,
        consolidated=True,
        zarr_format=2,
        **kwargs,
    )
    return zarr_path
