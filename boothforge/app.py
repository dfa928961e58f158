# flake8: noqa: E402
import argparse
import gettext
import json
import logging
import sys
from pathlib import Path

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# --------------------------------------------------------
# Gettext MUST be initialized before importing app modules
# --------------------------------------------------------
locale_dir = Path(__file__).parent / 'locale'
gettext.install("boothforge", locale_dir)

from boothforge.config import initialize_config
from boothforge.core.element import MalformedDocument
from boothforge.core.layout import Layout
from boothforge.render.renderer import ExportError, LayoutRenderer


logger = logging.getLogger(__name__)


def render_command(args) -> int:
    config = initialize_config()
    try:
        with open(args.layout, 'r') as f:
            data = json.load(f)
        layout = Layout.from_dict(data)
    except (OSError, ValueError, MalformedDocument) as e:
        logger.error(f"Cannot load layout {args.layout}: {e}")
        return 1

    renderer = LayoutRenderer(fallback_font=config.fallback_font)
    scale = config.export_scale if args.scale is None else args.scale
    try:
        renderer.export(
            layout,
            args.output,
            scale=scale,
            include_background=(
                config.include_background and not args.no_background
            ),
            include_sample_photos=(
                config.include_sample_photos and not args.no_samples
            ),
        )
    except ExportError:
        logger.error(f"Export to {args.output} failed", exc_info=True)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="boothforge",
        description=_("Render photo-booth layouts to images."),
    )
    parser.add_argument(
        '--loglevel',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help=_('Set the logging level (default: INFO)')
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    render = subparsers.add_parser(
        "render", help=_("Render a layout document to a PNG file.")
    )
    render.add_argument("layout", help=_("Path to the layout JSON file."))
    render.add_argument("output", help=_("Path of the PNG file to write."))
    render.add_argument(
        "--scale",
        type=float,
        default=None,
        help=_("Resolution multiplier (default: from config)"),
    )
    render.add_argument(
        "--no-background",
        action="store_true",
        help=_("Leave the background transparent."),
    )
    render.add_argument(
        "--no-samples",
        action="store_true",
        help=_("Draw camera slots as placeholders instead of sample photos."),
    )
    render.set_defaults(func=render_command)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Set logging level based on the command-line argument
    log_level = getattr(logging, args.loglevel.upper(), logging.INFO)
    logging.getLogger().setLevel(log_level)
    logger.info(f"boothforge starting with log level {args.loglevel.upper()}")

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
