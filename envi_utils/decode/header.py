from typing import Dict, List, Optional, Union

from envi_utils.errors import HeaderConsistencyError, HeaderFormatError

HeaderValue = Union[str, List[str]]


def parse_int(value) -> Optional[int]:
    """Return ``value`` as an int, or None when it is missing or not an integer string."""
    if not isinstance(value, str):
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _normalise_key(key: str) -> str:
    # only the first space is replaced: "sensor type name" -> "sensor_type name"
    return key.strip().replace(" ", "_", 1).lower()


def _count_entries(value: HeaderValue) -> int:
    return len(value) if isinstance(value, list) else 1


def parse_envi_header(text: str) -> Dict[str, HeaderValue]:
    """
    Parse the text of an ENVI-style ASCII header (.hdr) into a dict.

    Keys are lower-cased with their first space replaced by an underscore
    ("band names" -> "band_names"). Values are kept as strings; values written
    in braces become lists of strings and may span several lines.
    """
    if not text:
        raise HeaderFormatError("Header file is empty.")

    lines = text.split("\n")
    if lines[0] != "ENVI":
        raise HeaderFormatError('Invalid header file format. Should start with "ENVI".')

    hdr: Dict[str, HeaderValue] = {}
    i = 1
    while i < len(lines):
        line = lines[i].strip()
        i += 1
        if "=" not in line:
            continue

        key, val = line.split("=", 1)
        key = _normalise_key(key)
        val = val.strip()

        if not val.startswith("{"):
            hdr[key] = val
            continue

        # list-valued, possibly continued on the following lines
        while not val.endswith("}"):
            if i >= len(lines):
                raise HeaderFormatError(f'Unterminated list for key "{key}" in header file.')
            val += lines[i].strip()
            i += 1

        hdr[key] = [v.strip() for v in val[1:-1].split(",")]

    bands = parse_int(hdr.get("bands"))
    if bands is not None:
        if "band_names" in hdr and _count_entries(hdr["band_names"]) != bands:
            raise HeaderConsistencyError(
                "Number of band names does not match the specified number of bands."
            )
        if "wavelength" in hdr and _count_entries(hdr["wavelength"]) != bands:
            raise HeaderConsistencyError(
                "Number of wavelengths does not match the specified number of bands."
            )

    return hdr


def read_envi_header(hdr_path: str) -> Dict[str, HeaderValue]:
    """Read an ENVI header file from disk and parse it."""
    with open(hdr_path, "r", encoding="utf-8") as f:
        return parse_envi_header(f.read())
