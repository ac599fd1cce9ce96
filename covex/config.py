"""
Global configuration for covex.

Centralizes default data paths and tunable report parameters. Every value
can be overridden through an environment variable.
"""
from __future__ import annotations

import os
from pathlib import Path

# Data
DATA_DIR = Path(os.getenv("COVEX_DATA_DIR", "data"))
DEATHS_PATH = Path(os.getenv("COVEX_DEATHS_PATH", DATA_DIR / "CovidDeaths.csv"))
VACCINATIONS_PATH = Path(os.getenv("COVEX_VACCINATIONS_PATH", DATA_DIR / "CovidVaccinations.csv"))

# Report parameters
TOP_N = int(os.getenv("COVEX_TOP_N", "10"))
INFECTION_THRESHOLD = float(os.getenv("COVEX_INFECTION_THRESHOLD", "25"))

# Locations compared side by side in the country infection-rate report
DEFAULT_LOCATIONS = ("United States", "Australia", "Brazil")
