"""
Settings for the migration command.

Settings are read from an optional JSON file (``config/migration_config.json``
by default) and completed with defaults, some of which can be overridden
through environment variables::

    {
      "store": {"database": "data/migration.duckdb", "table_prefix": "wp_"},
      "reports": {"directory": "reports/migration"},
      "migration": {"pause_seconds": 1.0, "reset_every": 50}
    }

The migration parameters themselves (post types, term, paging, dry run)
always come from the command line.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

from .utils.errors import DEFAULT_REPORT_DIR, ConfigurationError

CONFIG_FILE = os.path.join("config", "migration_config.json")
DEFAULT_DATABASE = os.path.join("data", "migration.duckdb")


def load_settings(config_file: Optional[str] = CONFIG_FILE) -> Dict[str, Any]:
    """Load settings from ``config_file`` and fill in defaults.

    A missing file is not an error; a file that is not valid JSON, or
    whose top level is not an object, raises :class:`ConfigurationError`.
    """
    config: Dict[str, Any] = {}
    if config_file and os.path.exists(config_file):
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid config in {config_file}: {e}") from e
        if not isinstance(config, dict):
            raise ConfigurationError(f"Invalid config in {config_file}: expected a JSON object")

    config.setdefault("store", {})
    config["store"].setdefault("database", os.getenv("POST_TYPE_MIGRATOR_DATABASE", DEFAULT_DATABASE))
    config["store"].setdefault("table_prefix", "wp_")
    config["store"].setdefault("taxonomies", None)

    config.setdefault("reports", {})
    config["reports"].setdefault("directory", os.getenv("POST_TYPE_MIGRATOR_REPORT_DIR", DEFAULT_REPORT_DIR))

    config.setdefault("migration", {})
    config["migration"].setdefault("pause_seconds", 1.0)
    config["migration"].setdefault("reset_every", 50)

    try:
        config["migration"]["pause_seconds"] = float(config["migration"]["pause_seconds"])
        config["migration"]["reset_every"] = int(config["migration"]["reset_every"])
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid migration settings: {e}") from e
    return config
