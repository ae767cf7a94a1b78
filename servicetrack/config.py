"""Runtime settings read from the environment, and logging setup."""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from .cycle import DEFAULT_CYCLES, CycleTable
from .debounce import DEFAULT_DELAY
from .loader import load_cycle_table

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings:
    """
    Application settings.

    Environment variables:
        SERVICE_TRACK_DATA: records YAML file (default: records.yaml)
        SERVICE_TRACK_CYCLES: optional cycle table YAML file
        SERVICE_TRACK_SEARCH_DELAY: search debounce in seconds (default: 0.3)
        LOG_LEVEL: logging level name (default: WARNING)
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        env = os.environ if environ is None else environ
        self.data_file = Path(env.get("SERVICE_TRACK_DATA", "records.yaml"))
        cycles = env.get("SERVICE_TRACK_CYCLES")
        self.cycles_file = Path(cycles) if cycles else None
        self.search_delay = float(env.get("SERVICE_TRACK_SEARCH_DELAY", DEFAULT_DELAY))
        self.log_level = env.get("LOG_LEVEL", "WARNING").upper()

    def cycle_table(self) -> CycleTable:
        """Cycle table from SERVICE_TRACK_CYCLES, or the built-in defaults."""
        if self.cycles_file is None:
            return DEFAULT_CYCLES
        return load_cycle_table(self.cycles_file)


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
