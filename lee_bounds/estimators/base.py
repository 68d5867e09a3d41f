from __future__ import annotations

from dataclasses import dataclass

from ..helpers.config import BoundsConfig


@dataclass
class BaseEstimator:
    """
    Very small common base class for the pipeline stages in this package.

    It only stores the :class:`BoundsConfig` object and exposes tiny
    helpers for tagged progress messages, which are silenced when
    ``config.verbose`` is False.
    """

    config: BoundsConfig

    def _log(self, message: str) -> None:
        if getattr(self.config, "verbose", True):
            print(f"[ESTIMATOR] {message}")

    def _log_formula(self, formula: str, extra: str = "") -> None:
        msg = f"Formula: {formula}"
        if extra:
            msg += f" ({extra})"
        self._log(msg)
