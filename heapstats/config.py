# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   to all other modules.
#
# CLASSES:
# --------
# - AggregationConfig (dataclass)
#     sample_cap: int            (default 3)
#     max_string_length: int     (default 1048576 characters)
#     max_string_buckets: int    (default 0 = unlimited)
#     max_type_buckets: int      (default 0 = unlimited)
#
# - RankingConfig (dataclass)
#     top_strings: int           (default 10)
#     top_types: int             (default 5)
#
# - ReportConfig (dataclass)
#     output_dir: str            (default ".")
#     preview_chars: int         (default 500)
#     report_name: str           (default "report.txt")
#
# - AppConfig (dataclass)
#     aggregation: AggregationConfig
#     ranking: RankingConfig
#     report: ReportConfig
#     log_level: str             (default "INFO")
#
# FUNCTION:
# ---------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
#
# USAGE:
# ------
#   from heapstats.config import get_config
#   config = get_config()
#   print(config.ranking.top_strings)
#   print(config.report.output_dir)
#
# ==============================================

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from heapstats.errors import ConfigurationError


@dataclass
class AggregationConfig:
    """Bounds applied while folding objects into buckets."""
    sample_cap: int = 3
    max_string_length: int = 1_048_576
    max_string_buckets: int = 0
    max_type_buckets: int = 0


@dataclass
class RankingConfig:
    """How many buckets each ranking keeps."""
    top_strings: int = 10
    top_types: int = 5


@dataclass
class ReportConfig:
    """Where and how the report is written."""
    output_dir: str = "."
    preview_chars: int = 500
    report_name: str = "report.txt"


@dataclass
class AppConfig:
    """Main application configuration."""
    aggregation: AggregationConfig = field(default_factory=AggregationConfig)
    ranking: RankingConfig = field(default_factory=RankingConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    log_level: str = "INFO"

    def validate(self) -> "AppConfig":
        """
        Reject values the pipeline cannot honour.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError: If any bound is negative or a name is empty
        """
        non_negative = {
            "sample_cap": self.aggregation.sample_cap,
            "max_string_length": self.aggregation.max_string_length,
            "max_string_buckets": self.aggregation.max_string_buckets,
            "max_type_buckets": self.aggregation.max_type_buckets,
            "top_strings": self.ranking.top_strings,
            "top_types": self.ranking.top_types,
            "preview_chars": self.report.preview_chars,
        }
        for name, value in non_negative.items():
            if value < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {value}")

        if not self.report.report_name:
            raise ConfigurationError("report_name must not be empty")

        return self


# Singleton instance
_config_instance: Optional[AppConfig] = None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Load .env file from project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    aggregation_config = AggregationConfig(
        sample_cap=_env_int("HEAPSTATS_SAMPLE_CAP", 3),
        max_string_length=_env_int("HEAPSTATS_MAX_STRING_LENGTH", 1_048_576),
        max_string_buckets=_env_int("HEAPSTATS_MAX_STRING_BUCKETS", 0),
        max_type_buckets=_env_int("HEAPSTATS_MAX_TYPE_BUCKETS", 0),
    )

    ranking_config = RankingConfig(
        top_strings=_env_int("HEAPSTATS_TOP_STRINGS", 10),
        top_types=_env_int("HEAPSTATS_TOP_TYPES", 5),
    )

    report_config = ReportConfig(
        output_dir=os.getenv("HEAPSTATS_OUTPUT_DIR", "."),
        preview_chars=_env_int("HEAPSTATS_PREVIEW_CHARS", 500),
        report_name=os.getenv("HEAPSTATS_REPORT_NAME", "report.txt"),
    )

    _config_instance = AppConfig(
        aggregation=aggregation_config,
        ranking=ranking_config,
        report=report_config,
        log_level=os.getenv("HEAPSTATS_LOG_LEVEL", "INFO").upper(),
    ).validate()

    return _config_instance
