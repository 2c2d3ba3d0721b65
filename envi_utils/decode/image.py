import logging
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence

from envi_utils.decode.header import parse_envi_header
from envi_utils.decode.layout import Layout, check_layout, extract_channels, get_dimensions
from envi_utils.decode.sources import ByteRangeReader, FileByteSource
from envi_utils.utils import check_file_names


def _file_text(path: str) -> Callable[[], str]:
    def read():
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    return read


class EnviImage:
    """
    An ENVI header/data file pair.

    Construction only checks the file names. ``load()`` must be called (once
    is enough) before the header or any data can be accessed; ``open()``
    does both.
    """

    def __init__(
        self,
        header_name: str,
        data_name: str,
        header_text: Callable[[], str],
        data_source: ByteRangeReader,
    ):
        check_file_names(header_name, data_name)

        self.header_name = header_name
        self.data_name = data_name
        self._header_text = header_text
        self.data_source = data_source
        self._header: Optional[dict] = None

    @classmethod
    def open(cls, hdr_path: str, data_path: str) -> "EnviImage":
        image = cls(hdr_path, data_path, _file_text(hdr_path), FileByteSource(data_path))
        image.load()
        return image

    @property
    def loaded(self) -> bool:
        return self._header is not None

    def load(self) -> Mapping:
        """Read and parse the header. Later calls return the same mapping."""
        if self._header is None:
            self._header = parse_envi_header(self._header_text())
            logging.info(
                "Loaded ENVI header %s (%d fields)", self.header_name, len(self._header)
            )
        return self.header

    @property
    def header(self) -> Mapping:
        if self._header is None:
            raise RuntimeError(f"Header of {self.header_name} not loaded; call load() first")
        return MappingProxyType(self._header)

    @property
    def shape(self):
        """(lines, samples, bands) as given by the header."""
        return get_dimensions(self.header)

    def layout(self, channels: Sequence[int] = ()) -> Layout:
        return check_layout(self.header, self.data_source.size(), list(channels))

    def get_data(self, channels: Sequence[int], max_workers: Optional[int] = None) -> bytes:
        """
        Extract ``channels`` (in the given order, duplicates kept) as raw bytes.

        The buffer is laid out line by line, and within each line channel by
        channel, with all samples of a channel adjacent.
        """
        return extract_channels(
            self.header,
            self.data_source.size(),
            channels,
            self.data_source,
            max_workers=max_workers,
        )

    def close(self):
        close = getattr(self.data_source, "close", None)
        if close is not None:
            close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def open_envi_image(hdr_path: str, data_path: str) -> EnviImage:
    return EnviImage.open(hdr_path, data_path)
