import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from tqdm import tqdm

from .core import AssetSelection
from .exceptions import AssetLoadError
from .reporting import asset_to_dict, render_asset_info, status_text, write_csv_report

def setup_logging(verbose: bool, log_file: Optional[Path] = None):
    """Sets up logging to the console and, optionally, a file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
    )

    # Silence chatty libraries
    logging.getLogger("exifread").setLevel(logging.ERROR)
    logging.getLogger("PIL").setLevel(logging.WARNING)

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Asset Inspector: show file, image and EXIF metadata")

    p.add_argument("paths", nargs="+", help="Files (paths or file:// URIs) to inspect")

    p.add_argument("--json", action="store_true", help="Print JSON instead of the info panel")
    p.add_argument("--csv", type=Path, default=None, help="Also write a summary CSV to this path")
    p.add_argument("--log-file", type=Path, default=None, help="Write the log to this file as well")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return p.parse_args(argv)

def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    selection = AssetSelection()
    loaded = []
    failures = 0

    paths = args.paths if len(args.paths) == 1 else tqdm(args.paths, desc="Inspecting", file=sys.stderr)
    for locator in paths:
        try:
            asset = selection.select(locator)
        except AssetLoadError:
            failures += 1
            print(status_text(selection))
            continue

        loaded.append(asset)
        if args.json:
            print(json.dumps(asset_to_dict(asset), indent=2, ensure_ascii=False))
        else:
            print(render_asset_info(asset))

    if args.csv:
        write_csv_report(loaded, args.csv)

    if failures:
        logging.warning(f"{failures} of {len(args.paths)} files could not be loaded.")
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
