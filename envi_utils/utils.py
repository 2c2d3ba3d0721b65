import logging
import os

from envi_utils.errors import NamingMismatchError

SUPPORTED_IMAGE_EXTENSIONS = [".bil", ".biq", ".bsq"]
SUPPORTED_HEADER_EXTENSIONS = [".hdr"]


def check_file_names(header_name: str, data_name: str) -> None:
    """
    Check that a header and data file belong together.

    The header must end in .hdr and the data file in one of the supported
    image extensions (case-insensitive), and both must share the same name
    apart from the last 4 characters.
    """
    header_name = os.path.basename(header_name)
    data_name = os.path.basename(data_name)

    if not any(header_name.lower().endswith(ext) for ext in SUPPORTED_HEADER_EXTENSIONS):
        raise NamingMismatchError(
            f"Header file must have a {'/'.join(SUPPORTED_HEADER_EXTENSIONS)} extension."
        )
    if not any(data_name.lower().endswith(ext) for ext in SUPPORTED_IMAGE_EXTENSIONS):
        raise NamingMismatchError(
            f"Data file must have a {'/'.join(SUPPORTED_IMAGE_EXTENSIONS)} extension."
        )
    if header_name[:-4] != data_name[:-4]:
        raise NamingMismatchError(
            f"Header file and data file names do not match: {header_name}, {data_name}"
        )


def _find_data_file(header_path: str):
    folder, name = os.path.split(header_path)
    for file in sorted(os.listdir(folder or ".")):
        if file[:-4] == name[:-4] and file[-4:].lower() in SUPPORTED_IMAGE_EXTENSIONS:
            return os.path.join(folder, file)
    return None


def find_envi_pairs(inputs: list):
    """Return (header, data) path pairs found in the given files and folders."""
    pairs = []

    error_message = "%s not recognised. Ensure that path is valid"
    missing_message = "No data file found for %s"

    def process_input(i):
        if os.path.isdir(i):
            for file in sorted(os.listdir(i)):
                process_input(os.path.join(i, file))
        elif os.path.isfile(i):
            if not i.lower().endswith(".hdr"):
                return
            data_path = _find_data_file(i)
            if data_path is None:
                logging.warning(missing_message, i)
            else:
                pairs.append((i, data_path))
        else:
            logging.error(error_message, i)

    for i in inputs:
        process_input(i)

    return pairs
