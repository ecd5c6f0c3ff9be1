import random
from typing import Optional

from saunaflow.core.status import StageType


def _keys(prefix: str, stage_type: StageType, count: int) -> tuple:
    return tuple(f"{prefix}_{stage_type.value.lower()}_{n}" for n in range(1, count + 1))


STAGE_CONTENT = {
    stage_type: {
        "microcopy": _keys("microcopy", stage_type, 5),
        "tips": _keys("tip", stage_type, 3),
    }
    for stage_type in StageType
}


class StageContentPicker:
    """Picks the encouragement line and the tip shown for a stage."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def pick(self, stage_type: StageType) -> dict:
        content = STAGE_CONTENT[stage_type]
        return {
            "microcopy": self.rng.choice(content["microcopy"]),
            "tip": self.rng.choice(content["tips"]),
        }
