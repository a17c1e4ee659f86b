"""
Engine configuration.

GameConfig collects every tunable the composition root needs. Values
come from keyword arguments, or from EONTAMERS_* environment variables
through GameConfig.from_env().
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from eonengine.core.rng import DEFAULT_SEED


class GameConfig:
    """Configuration for the game core."""

    def __init__(
        self,
        data_dir: Path | str | None = None,
        extra_data_dirs: list[Path | str] | None = None,
        save_dir: Path | str | None = None,
        rng_seed: int | None = DEFAULT_SEED,
        autosave_interval: float = 300.0,
        max_slots: int = 3,
        log_level: str = "INFO",
    ):
        # None lets the game pick its bundled data
        self.data_dir = Path(data_dir) if data_dir is not None else None
        self.extra_data_dirs = [Path(d) for d in (extra_data_dirs or [])]
        # None keeps saves in memory only
        self.save_dir = Path(save_dir) if save_dir is not None else None
        self.rng_seed = rng_seed
        self.autosave_interval = autosave_interval
        self.max_slots = max_slots
        self.log_level = log_level

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> GameConfig:
        """
        Build a config from environment variables.

        EONTAMERS_DATA_DIR, EONTAMERS_EXTRA_DATA_DIRS (os.pathsep separated),
        EONTAMERS_SAVE_DIR, EONTAMERS_SEED, EONTAMERS_AUTOSAVE_INTERVAL,
        EONTAMERS_MAX_SLOTS, EONTAMERS_LOG_LEVEL
        """
        env = os.environ if environ is None else environ
        kwargs: dict = {}

        if "EONTAMERS_DATA_DIR" in env:
            kwargs["data_dir"] = env["EONTAMERS_DATA_DIR"]
        if env.get("EONTAMERS_EXTRA_DATA_DIRS"):
            kwargs["extra_data_dirs"] = env["EONTAMERS_EXTRA_DATA_DIRS"].split(os.pathsep)
        if "EONTAMERS_SAVE_DIR" in env:
            kwargs["save_dir"] = env["EONTAMERS_SAVE_DIR"]
        if "EONTAMERS_SEED" in env:
            kwargs["rng_seed"] = int(env["EONTAMERS_SEED"])
        if "EONTAMERS_AUTOSAVE_INTERVAL" in env:
            kwargs["autosave_interval"] = float(env["EONTAMERS_AUTOSAVE_INTERVAL"])
        if "EONTAMERS_MAX_SLOTS" in env:
            kwargs["max_slots"] = int(env["EONTAMERS_MAX_SLOTS"])
        if "EONTAMERS_LOG_LEVEL" in env:
            kwargs["log_level"] = env["EONTAMERS_LOG_LEVEL"]

        return cls(**kwargs)

    def configure_logging(self) -> None:
        """Install a root handler at the configured level."""
        logging.basicConfig(
            level=getattr(logging, self.log_level.upper(), logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
