"""Randomized pacing of requests to the remote completion endpoint."""

from __future__ import annotations

import random
import warnings
from dataclasses import replace
from typing import TYPE_CHECKING, Final

from core.trans.interface import PolicyCorrectionWarning
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from models.config_models import DelayWindow

__all__: list[str] = ["MAXIMUM_DELAY_FLOOR", "MINIMUM_DELAY_FLOOR", "DelayScheduler"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

MINIMUM_DELAY_FLOOR: Final[float] = 1.0
MAXIMUM_DELAY_FLOOR: Final[float] = 3.0


class DelayScheduler:
    """Draws pause durations from a DelayWindow.

    Args:
        rng (random.Random | None): Source of randomness. Pass a seeded instance for reproducible delays.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng: random.Random = rng if rng is not None else random.Random()

    def apply_policy_floor(self, window: DelayWindow) -> DelayWindow:
        """Raise the bounds of ``window`` to their floors.

        Each correction emits a PolicyCorrectionWarning; the operation itself never fails.

        Returns:
            DelayWindow: The corrected window, or ``window`` itself when no correction was needed.
        """
        corrected: DelayWindow = window
        if window.minimum < MINIMUM_DELAY_FLOOR:
            warnings.warn(
                f"Cannot set MinDelaySeconds below {MINIMUM_DELAY_FLOOR} second(s). "
                f"Setting MinDelaySeconds={MINIMUM_DELAY_FLOOR}",
                PolicyCorrectionWarning,
                stacklevel=2,
            )
            corrected = replace(corrected, minimum=MINIMUM_DELAY_FLOOR)

        if window.maximum < MAXIMUM_DELAY_FLOOR:
            warnings.warn(
                f"Cannot set MaxDelaySeconds below {MAXIMUM_DELAY_FLOOR} second(s). "
                f"Setting MaxDelaySeconds={MAXIMUM_DELAY_FLOOR}",
                PolicyCorrectionWarning,
                stacklevel=2,
            )
            corrected = replace(corrected, maximum=MAXIMUM_DELAY_FLOOR)

        return corrected

    def sample(self, window: DelayWindow) -> float:
        """Return a uniformly distributed delay between the window bounds.

        Bounds given in reverse order are accepted; the result still lies between them.
        """
        delay: float = self._rng.uniform(window.minimum, window.maximum)
        logger.debug("Sampled delay %.3f sec from [%.3f, %.3f]", delay, window.minimum, window.maximum)
        return delay
