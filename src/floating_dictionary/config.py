"""Configuration management for Floating Dictionary."""

import os
from pathlib import Path

import yaml

from . import log

logger = log.get_logger()

CONFIG_DIR = Path.home() / ".floating-dictionary"
CONFIG_FILE = "config.yml"

DEFAULT_CONFIG = """# Translation target language (Google Translate code, e.g. th, en, ja, zh-CN)
target_lang: th

# OCR language model: auto, eng, rus, kor, jpn, chi_sim or thai
# "auto" runs every bundled model except the target language's
ocr_lang: auto

# Directory holding *.traineddata files (empty = Tesseract's default)
tessdata_dir:

# Directory with bundled *.traineddata copied into the user data dir on first run
tessdata_bundle:

# Translation service
translate_url: "https://translate.googleapis.com/translate_a/single"
translate_timeout: 10.0
# Seconds before the single retry after a network failure
retry_backoff: 0.5

# Dictionary lookup (single English word -> Thai only)
dictionary_url: "https://dict.longdo.com/mobile.php"
dictionary_timeout: 10.0
# Seconds to wait for a slow dictionary lookup once the translation is ready
dictionary_join_timeout: 3.0

# Result window
display_timeout_seconds: 60
error_display_seconds: 2.5
keep_screenshots: false
font_size: 16
font_color: "#F0F0F0"
background_color: "#1C1C20"
min_width: 400
min_height: 150
max_width: 800
max_height: 600
"""


class Config:
    """Application configuration."""

    def __init__(
        self,
        target_lang: str = "th",
        ocr_lang: str = "auto",
        tessdata_dir: str | None = None,
        tessdata_bundle: str | None = None,
        translate_url: str = "https://translate.googleapis.com/translate_a/single",
        translate_timeout: float = 10.0,
        retry_backoff: float = 0.5,
        dictionary_url: str = "https://dict.longdo.com/mobile.php",
        dictionary_timeout: float = 10.0,
        dictionary_join_timeout: float = 3.0,
        display_timeout_seconds: float = 60.0,
        error_display_seconds: float = 2.5,
        keep_screenshots: bool = False,
        font_size: int = 16,
        font_color: str = "#F0F0F0",
        background_color: str = "#1C1C20",
        min_width: int = 400,
        min_height: int = 150,
        max_width: int = 800,
        max_height: int = 600,
    ):
        self.target_lang = target_lang
        self.ocr_lang = ocr_lang
        self.tessdata_dir = tessdata_dir
        self.tessdata_bundle = tessdata_bundle
        self.translate_url = translate_url
        self.translate_timeout = translate_timeout
        self.retry_backoff = retry_backoff
        self.dictionary_url = dictionary_url
        self.dictionary_timeout = dictionary_timeout
        self.dictionary_join_timeout = dictionary_join_timeout
        self.display_timeout_seconds = display_timeout_seconds
        self.error_display_seconds = error_display_seconds
        self.keep_screenshots = keep_screenshots
        self.font_size = font_size
        self.font_color = font_color
        self.background_color = background_color
        self.min_width = min_width
        self.min_height = min_height
        self.max_width = max_width
        self.max_height = max_height

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Build a config from parsed YAML, falling back to defaults per key."""
        defaults = cls()
        return cls(
            target_lang=str(data.get("target_lang") or defaults.target_lang),
            ocr_lang=str(data.get("ocr_lang") or defaults.ocr_lang),
            tessdata_dir=data.get("tessdata_dir") or None,
            tessdata_bundle=data.get("tessdata_bundle") or None,
            translate_url=data.get("translate_url", defaults.translate_url),
            translate_timeout=float(data.get("translate_timeout", defaults.translate_timeout)),
            retry_backoff=float(data.get("retry_backoff", defaults.retry_backoff)),
            dictionary_url=data.get("dictionary_url", defaults.dictionary_url),
            dictionary_timeout=float(data.get("dictionary_timeout", defaults.dictionary_timeout)),
            dictionary_join_timeout=float(
                data.get("dictionary_join_timeout", defaults.dictionary_join_timeout)
            ),
            display_timeout_seconds=float(
                data.get("display_timeout_seconds", defaults.display_timeout_seconds)
            ),
            error_display_seconds=float(data.get("error_display_seconds", defaults.error_display_seconds)),
            keep_screenshots=bool(data.get("keep_screenshots", defaults.keep_screenshots)),
            font_size=int(data.get("font_size", defaults.font_size)),
            font_color=data.get("font_color", defaults.font_color),
            background_color=data.get("background_color", defaults.background_color),
            min_width=int(data.get("min_width", defaults.min_width)),
            min_height=int(data.get("min_height", defaults.min_height)),
            max_width=int(data.get("max_width", defaults.max_width)),
            max_height=int(data.get("max_height", defaults.max_height)),
        )

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load configuration from YAML file.

        Args:
            config_path: Path to config file. If None, looks for config.yml
                        in common locations.

        Returns:
            Config instance with loaded values.
        """
        if config_path is None:
            search_paths = [
                Path(CONFIG_FILE),
                CONFIG_DIR / CONFIG_FILE,
            ]
            for path in search_paths:
                if path.exists():
                    config_path = str(path)
                    break

        if config_path and os.path.exists(config_path):
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            logger.debug("config loaded", path=config_path)
            return cls.from_dict(data)

        # No config file found - create default in home directory
        config = cls()
        config._create_default_config()
        return config

    def _create_default_config(self) -> None:
        """Create a default config file in the user's home directory."""
        config_path = CONFIG_DIR / CONFIG_FILE

        if config_path.exists():
            return

        try:
            CONFIG_DIR.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(DEFAULT_CONFIG)
        except OSError as e:
            logger.warning("could not write default config", path=str(config_path), err=str(e))
            return

        logger.info("created default config", path=str(config_path))

    @property
    def min_size(self) -> tuple[int, int]:
        return (self.min_width, self.min_height)

    @property
    def max_size(self) -> tuple[int, int]:
        return (self.max_width, self.max_height)
