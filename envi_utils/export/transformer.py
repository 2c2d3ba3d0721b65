import argparse
import logging

from envi_utils.decode.image import open_envi_image
from envi_utils.export.arrays import to_zarr


def transform(
    hdr,
    data,
    bands=None,
    raw=None,
    zarr=None,
    max_workers=None,
):
    """Extract ENVI channels to a raw band-interleaved file and/or a Zarr store."""
    # parse band list
    band_list = [int(b) for b in bands.split(",")] if bands else None

    with open_envi_image(hdr, data) as image:
        if band_list is None:
            band_list = list(range(image.shape[2]))

        # 1) raw buffer
        if raw:
            buffer = image.get_data(band_list, max_workers=max_workers)
            with open(raw, "wb") as f:
                f.write(buffer)
            logging.info("Saved %d bytes of channels %s to %s", len(buffer), band_list, raw)

        # 2) Zarr
        if zarr:
            to_zarr(image, zarr, band_list, max_workers=max_workers)
            logging.info("Saved Zarr to %s", zarr)

    return band_list


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="ENVI channel extraction")
    parser.add_argument("hdr", help="ENVI header file (.hdr)")
    parser.add_argument("data", help="ENVI data file (.bil/.biq/.bsq)")
    parser.add_argument("--bands", help="comma separated channel indices", default=None)
    parser.add_argument("--raw", help="output file for the extracted bytes", default=None)
    parser.add_argument("--zarr", help="output Zarr store", default=None)
    parser.add_argument("--max_workers", help="parallel reads", type=int, default=None)
    args, unknown = parser.parse_known_args()

    transform(
        hdr=args.hdr,
        data=args.data,
        bands=args.bands,
        raw=args.raw,
        zarr=args.zarr,
        max_workers=args.max_workers,
    )
