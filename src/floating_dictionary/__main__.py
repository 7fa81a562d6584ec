"""Main entry point for Floating Dictionary.

This module is executed when running:
- python -m floating_dictionary
- floating-dictionary (via pyproject.toml entry point)
"""

import argparse
import sys

from . import __version__, log
from .config import Config
from .languages import OCR_LANG_CHOICES, Language, resolve_ocr_languages
from .tessdata import setup_tessdata


def _parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="floating-dictionary",
        description="Select a screen region and translate the text in it",
    )
    parser.add_argument(
        "--ocr-lang",
        type=str,
        choices=list(OCR_LANG_CHOICES),
        default=None,
        help="OCR language model, or auto to try every model except the target's (default: auto)",
    )
    parser.add_argument(
        "--target", "-t",
        type=str,
        default=None,
        help="Translation target language code (default: th)",
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to config file (default: config.yml)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = _parse_arguments(argv)

    log.configure(debug=args.debug)
    logger = log.get_logger()

    # Load configuration
    config = Config.load(args.config)

    # Override with CLI arguments
    if args.ocr_lang:
        config.ocr_lang = args.ocr_lang
    if args.target:
        config.target_lang = args.target

    try:
        ocr_languages = resolve_ocr_languages(config.ocr_lang, config.target_lang)
    except ValueError as e:
        logger.error("invalid configuration", err=str(e))
        return 2

    setup_tessdata(config.tessdata_dir, config.tessdata_bundle)
    target = Language.from_code(config.target_lang)
    logger.info(
        "languages",
        ocr="+".join(ocr_languages),
        target=target.display_name if target else config.target_lang,
    )

    from .gui import run

    return run(config, ocr_languages)


if __name__ == "__main__":
    sys.exit(main())
