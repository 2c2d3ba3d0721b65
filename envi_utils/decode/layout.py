import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, Mapping, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from envi_utils.decode.data_types import EnviDataType, get_data_type
from envi_utils.decode.header import parse_int
from envi_utils.decode.sources import ByteRangeReader
from envi_utils.errors import (
    ChannelOutOfRangeError,
    MissingDimensionsError,
    SizeMismatchError,
    UnsupportedDataTypeError,
    UnsupportedInterleaveError,
)

INTERLEAVES = ("bil", "bip", "bsq")

Strides = Tuple[int, int, int]


class Layout(NamedTuple):
    lines: int
    samples: int
    bands: int
    interleave: str
    data_type: EnviDataType


class _Read(NamedTuple):
    start: int
    end: int
    # element positions in the output buffer
    dest: np.ndarray
    # element positions within the read chunk, None when taken in order
    src: Optional[np.ndarray]


def file_strides(interleave: str, lines: int, samples: int, bands: int) -> Strides:
    """Element strides of the (line, sample, band) axes in the data file."""
    # BIL = band interleaved by line
    # BIP = band interleaved by pixel
    # BSQ = band sequential
    if interleave == "bil":
        return samples * bands, 1, samples
    if interleave == "bip":
        return samples * bands, bands, 1
    if interleave == "bsq":
        return samples, 1, lines * samples
    raise UnsupportedInterleaveError(f"Unsupported interleave format: {interleave}")


def output_strides(samples: int, count: int) -> Strides:
    """Element strides of the (line, sample, channel) axes in the extracted buffer."""
    return samples * count, 1, samples


def get_dimensions(header: Mapping) -> Tuple[int, int, int]:
    lines = parse_int(header.get("lines"))
    samples = parse_int(header.get("samples"))
    bands = parse_int(header.get("bands"))
    if lines is None or samples is None or bands is None:
        raise MissingDimensionsError(
            "Header file is missing required dimension information (lines, samples, bands)."
        )
    if lines < 1 or samples < 1 or bands < 1:
        raise MissingDimensionsError(
            f"Header dimensions must be positive, got lines={lines}, samples={samples}, "
            f"bands={bands}."
        )
    return lines, samples, bands


def check_layout(header: Mapping, file_size: int, channels: Sequence[int]) -> Layout:
    """
    Validate a header against the data file size and a channel selection.

    Checks run in a fixed order: dimensions, channel range, interleave,
    data type, then file size.
    """
    lines, samples, bands = get_dimensions(header)

    for c in channels:
        if c < 0 or c >= bands:
            raise ChannelOutOfRangeError(
                f"Requested channel index {c} out of bounds for {bands} bands."
            )

    interleave = header.get("interleave")
    if interleave not in INTERLEAVES:
        raise UnsupportedInterleaveError(f"Unsupported interleave format: {interleave}")

    code = parse_int(header.get("data_type"))
    data_type = get_data_type(code)
    if data_type is None:
        raise UnsupportedDataTypeError(
            f"Unsupported data type code: {header.get('data_type')}"
        )

    if file_size % data_type.byte_size != 0:
        raise SizeMismatchError(
            f"Data file size {file_size} is not aligned with data type byte size "
            f"{data_type.byte_size}."
        )
    if file_size // data_type.byte_size != lines * samples * bands:
        raise SizeMismatchError(
            f"Data file size {file_size} does not match header specifications "
            f"(lines*samples*bands*byte size = "
            f"{lines * samples * bands * data_type.byte_size})."
        )

    return Layout(lines, samples, bands, interleave, data_type)


def _bil_reads(layout: Layout, channels: Sequence[int]) -> Iterator[_Read]:
    # one contiguous run of `samples` values per (line, channel)
    width = layout.data_type.byte_size
    fs = file_strides(layout.interleave, layout.lines, layout.samples, layout.bands)
    os_ = output_strides(layout.samples, len(channels))
    sample_idx = np.arange(layout.samples)

    for i in range(layout.lines):
        for c, channel in enumerate(channels):
            start = (i * fs[0] + channel * fs[2]) * width
            yield _Read(
                start=start,
                end=start + layout.samples * width,
                dest=i * os_[0] + sample_idx * os_[1] + c * os_[2],
                src=sample_idx * fs[1],
            )


def _bip_reads(layout: Layout, channels: Sequence[int]) -> Iterator[_Read]:
    # the wanted value is one of `bands` adjacent values, so read it alone
    width = layout.data_type.byte_size
    fs = file_strides(layout.interleave, layout.lines, layout.samples, layout.bands)
    os_ = output_strides(layout.samples, len(channels))

    for i in range(layout.lines):
        for c, channel in enumerate(channels):
            for j in range(layout.samples):
                start = (i * fs[0] + j * fs[1] + channel * fs[2]) * width
                yield _Read(
                    start=start,
                    end=start + width,
                    dest=np.array([i * os_[0] + j * os_[1] + c * os_[2]]),
                    src=None,
                )


def _bsq_reads(layout: Layout, channels: Sequence[int]) -> Iterator[_Read]:
    # one whole (lines x samples) plane per channel
    width = layout.data_type.byte_size
    fs = file_strides(layout.interleave, layout.lines, layout.samples, layout.bands)
    os_ = output_strides(layout.samples, len(channels))
    line_idx = np.arange(layout.lines)[:, None]
    sample_idx = np.arange(layout.samples)[None, :]
    src = (line_idx * fs[0] + sample_idx * fs[1]).ravel()

    for c, channel in enumerate(channels):
        start = channel * fs[2] * width
        yield _Read(
            start=start,
            end=start + layout.lines * layout.samples * width,
            dest=(line_idx * os_[0] + sample_idx * os_[1] + c * os_[2]).ravel(),
            src=src,
        )


_READ_PLANS = {
    "bil": _bil_reads,
    "bip": _bip_reads,
    "bsq": _bsq_reads,
}


def extract_channels(
    header: Mapping,
    file_size: int,
    channels: Sequence[int],
    source: ByteRangeReader,
    max_workers: Optional[int] = None,
) -> bytes:
    """
    Extract the requested channels from an ENVI data file.

    The result holds ``lines * samples * len(channels)`` values laid out with
    strides ``[samples * len(channels), 1, samples]`` for (line, sample,
    channel), in the channel order requested. Duplicated channels are
    repeated. Values keep the byte order of the source file.

    Reads are issued sequentially unless ``max_workers`` is given, in which
    case they run on a thread pool. Every read fills its own region of the
    output.
    """
    channels = list(channels)
    layout = check_layout(header, file_size, channels)
    width = layout.data_type.byte_size

    logging.debug(
        "Extracting channels %s from %s image (lines=%d, samples=%d, bands=%d, type=%s)",
        channels,
        layout.interleave,
        layout.lines,
        layout.samples,
        layout.bands,
        layout.data_type.name,
    )

    out = np.zeros((layout.lines * layout.samples * len(channels), width), dtype=np.uint8)
    reads = _READ_PLANS[layout.interleave](layout, channels)

    def fetch(read: _Read) -> Tuple[_Read, bytes]:
        return read, source.read_range(read.start, read.end)

    def place(read: _Read, data: bytes) -> None:
        chunk = np.frombuffer(data, dtype=np.uint8).reshape(-1, width)
        out[read.dest] = chunk if read.src is None else chunk[read.src]

    if max_workers is None:
        for read in reads:
            place(*fetch(read))
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            for read, data in executor.map(fetch, reads):
                place(read, data)

    return out.tobytes()
