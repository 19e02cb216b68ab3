"""
Practice variations attached to training session items.

A variation is a small twist on how to run a technique ("in slow motion",
"10 times"). One draw in three gives no variation at all.
"""
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class VariationType(str, Enum):
    stance = "stance"
    speed = "speed"
    focus = "focus"
    repetition = "repetition"


VARIATION_POOL: dict[VariationType, tuple[str, ...]] = {
    VariationType.stance: (
        "in left stance",
        "in right stance",
        "on the left side",
        "on the right side",
    ),
    VariationType.speed: (
        "in slow motion",
        "at double speed",
        "with deliberate pauses",
        "at a comfortable pace",
    ),
    VariationType.focus: (
        "Focus on power",
        "Focus on precise hand positioning",
        "Focus on footwork",
        "Focus on breathing",
    ),
    VariationType.repetition: (
        "10 times",
        "5 times on each side",
        "3 times, slowly",
        "Until muscle memory kicks in",
    ),
}

_TYPES = tuple(VariationType)


@dataclass(frozen=True, slots=True)
class Variation:
    type: Optional[VariationType]
    text: Optional[str]

    @property
    def is_none(self) -> bool:
        return self.type is None


NO_VARIATION = Variation(type=None, text=None)


def generate_variation(rng: Optional[random.Random] = None) -> Variation:
    """Return NO_VARIATION with probability 1/3, else a uniform (type, text) pick."""
    rng = rng or random
    if rng.randrange(3) == 0:
        return NO_VARIATION
    vtype = rng.choice(_TYPES)
    return Variation(type=vtype, text=rng.choice(VARIATION_POOL[vtype]))
