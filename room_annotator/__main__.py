"""
Command line entry point: ``python -m room_annotator IMAGE [--seeds FILE]``.

Opens the editor on an image, optionally pre-populated with detector seeds,
and prints the finalized annotations as JSON when the window is closed.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

import matplotlib.pyplot as plt

from .business import AnnotationSession, load_seed_file
from .config import EDITOR_PRESETS, VISUALIZATION_PRESETS
from .logging_config import init_logging
from .ui import AnnotationEditorView, load_image
from .utils.error_handling import SeedFormatError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="room_annotator",
        description="Draw, move, resize and label bounding boxes on an image.",
    )
    parser.add_argument("image", help="Image file to annotate")
    parser.add_argument("--seeds", help="JSON seed list, detector output or plan metadata")
    parser.add_argument("--config", default="default", choices=sorted(EDITOR_PRESETS),
                        help="Editor configuration preset")
    parser.add_argument("--theme", default="default", choices=sorted(VISUALIZATION_PRESETS),
                        help="Visualization preset")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-dir", help="Directory for timestamped log files")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    init_logging(log_dir=args.log_dir, level=args.log_level, console_level=args.log_level)

    try:
        image = load_image(args.image)
    except OSError as e:
        logger.error(f"Cannot open image {args.image}: {e}")
        return 1

    seeds = None
    if args.seeds:
        height, width = image.shape[:2]
        try:
            seeds = load_seed_file(args.seeds, natural_size=(width, height))
        except (OSError, SeedFormatError) as e:
            logger.error(f"Cannot load seeds from {args.seeds}: {e}")
            return 1

    session = AnnotationSession(seeds=seeds, preset=args.config)
    AnnotationEditorView(session, image, preset=args.theme)
    plt.show()

    finalized = session.finalize()
    json.dump([record.to_dict() for record in finalized], sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
