"""
Rescales sauna and cold stage durations for the temperatures the user actually has.

Hotter sauna or colder water means shorter stages. The modifier is clamped to
[0.5, 1.5] so any temperature is accepted, and rounding is half-up to whole
seconds with a floor of one second.
"""
from saunaflow.core.protocol import Protocol, Stage
from saunaflow.core.status import StageType
from saunaflow.utils.time_conversions import round_half_up

BASE_SAUNA_TEMP = 85
BASE_COLD_TEMP = 10

MIN_MODIFIER = 0.5
MAX_MODIFIER = 1.5

# Slider ranges offered on the settings step. adjust_protocol accepts anything.
SAUNA_TEMP_RANGE = (60, 110)
COLD_TEMP_RANGE = (1, 20)


def _clamp(value: float, lo: float = MIN_MODIFIER, hi: float = MAX_MODIFIER) -> float:
    return max(lo, min(hi, value))


def sauna_modifier(sauna_temp: int) -> float:
    """12% shorter per 5°C above baseline, 6% longer per 5°C below."""
    delta = sauna_temp - BASE_SAUNA_TEMP
    if delta > 0:
        modifier = 1 - (delta / 5) * 0.12
    else:
        modifier = 1 - (delta / 5) * 0.06
    return _clamp(modifier)


def cold_modifier(cold_temp: int) -> float:
    """20% shorter per 2°C below baseline, 10% longer per 2°C above."""
    delta = cold_temp - BASE_COLD_TEMP
    if delta < 0:
        modifier = 1 - (abs(delta) / 2) * 0.20
    else:
        modifier = 1 + (delta / 2) * 0.10
    return _clamp(modifier)


def _scale(stage: Stage, modifier: float) -> Stage:
    return stage.with_duration(max(1, round_half_up(stage.duration * modifier)))


def adjust_protocol(protocol: Protocol, sauna_temp: int, cold_temp: int) -> Protocol:
    """Return a copy of `protocol` with sauna/cold stages rescaled; rest stages pass through."""
    heat = sauna_modifier(sauna_temp)
    cold = cold_modifier(cold_temp)

    stages = []
    for stage in protocol.stages:
        if stage.type is StageType.SAUNA:
            stages.append(_scale(stage, heat))
        elif stage.type is StageType.COLD:
            stages.append(_scale(stage, cold))
        else:
            stages.append(stage)
    return protocol.with_stages(stages)


def has_changes(original: Protocol, adjusted: Protocol) -> bool:
    return tuple(original.stages) != tuple(adjusted.stages)
