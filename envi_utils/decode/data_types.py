from typing import NamedTuple, Optional

import numpy as np


class EnviDataType(NamedTuple):
    code: int
    byte_size: int
    name: str
    numpy_type: type


# https://www.nv5geospatialsoftware.com/docs/ENVIHeaderFiles.html
ENVI_DATA_TYPES = {
    1: EnviDataType(1, 1, "Uint8", np.uint8),
    2: EnviDataType(2, 2, "Int16", np.int16),
    3: EnviDataType(3, 4, "Int32", np.int32),
    4: EnviDataType(4, 4, "Float", np.float32),
    5: EnviDataType(5, 8, "Double", np.float64),
    6: EnviDataType(6, 8, "ComplexFloat", np.complex64),
    9: EnviDataType(9, 16, "ComplexDouble", np.complex128),
    12: EnviDataType(12, 2, "Uint16", np.uint16),
    13: EnviDataType(13, 4, "Uint32", np.uint32),
    14: EnviDataType(14, 8, "Int64", np.int64),
    15: EnviDataType(15, 8, "Uint64", np.uint64),
}

BYTE_ORDER = {
    0: "little",
    1: "big",
}


def get_data_type(code: int) -> Optional[EnviDataType]:
    """Return the table entry for an ENVI data type code, or None."""
    return ENVI_DATA_TYPES.get(code)
