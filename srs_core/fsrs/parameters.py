"""
FSRS Parameters

Immutable configuration of the forgetting-curve model. A different profile
is a new Parameters value; nothing here is mutated after construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Sequence

from srs_core.errors import ConfigurationError


@dataclass(frozen=True)
class Weights:
    """
    The 13 coefficients of the scheduling formulas.

    Field order matches the classic weight vector w[0]..w[12], so
    ``Weights.from_sequence(w)`` and ``weights.as_tuple()`` round-trip with
    vectors stored by older card histories.
    """
    # initStability(r) = w0 + w1 * r
    init_stability_base: float = 1.0                  # w[0]
    init_stability_grade_gain: float = 1.0            # w[1]

    # initDifficulty(r) = w2 + w3 * (r - 2)
    init_difficulty: float = 5.0                      # w[2]
    init_difficulty_grade_step: float = -0.5          # w[3]

    # nextDifficulty(d, r) = meanReversion(w2, d + w4 * (r - 2))
    difficulty_grade_step: float = -0.5               # w[4]
    mean_reversion_rate: float = 0.2                  # w[5]

    # nextRecallStability(d, s, r)
    recall_stability_exponent: float = 1.4            # w[6]
    recall_stability_power: float = -0.12             # w[7]
    recall_retrievability_factor: float = 0.8         # w[8]

    # nextForgetStability(d, s, r)
    forget_stability_scale: float = 2.0               # w[9]
    forget_difficulty_power: float = -0.2             # w[10]
    forget_stability_power: float = 0.2               # w[11]
    forget_retrievability_factor: float = 1.0         # w[12]

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "Weights":
        """
        Build weights from a positional vector.

        Raises:
            ConfigurationError: if the vector does not hold exactly 13 numbers
        """
        expected = len(fields(cls))
        if len(values) != expected:
            raise ConfigurationError(
                f"Expected {expected} weights, got {len(values)}"
            )
        try:
            return cls(*(float(v) for v in values))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Weights must be numbers: {exc}") from exc

    def as_tuple(self) -> tuple[float, ...]:
        """Return the weights as the positional vector w[0]..w[12]."""
        return tuple(getattr(self, f.name) for f in fields(self))


@dataclass(frozen=True)
class Parameters:
    """
    Scheduler configuration.

    Attributes:
        request_retention: Target recall probability (0-1, exclusive)
        maximum_interval: Interval ceiling in days
        easy_bonus: Multiplier applied to the Easy stability
        hard_factor: Multiplier applied to the last stability for Hard reviews
        weights: Formula coefficients
        enable_fuzz: Spread long intervals to avoid review clumping
    """
    request_retention: float = 0.9
    maximum_interval: int = 36500
    easy_bonus: float = 1.3
    hard_factor: float = 1.2
    weights: Weights = field(default_factory=Weights)
    enable_fuzz: bool = False

    def __post_init__(self):
        if not 0.0 < self.request_retention < 1.0:
            raise ConfigurationError(
                f"request_retention must be between 0 and 1, got {self.request_retention}"
            )
        # Room for hard < good < easy below the ceiling
        if self.maximum_interval < 3:
            raise ConfigurationError(
                f"maximum_interval must be at least 3 days, got {self.maximum_interval}"
            )
        if self.easy_bonus <= 0 or self.hard_factor <= 0:
            raise ConfigurationError("easy_bonus and hard_factor must be positive")


DEFAULT_PARAMETERS = Parameters()
