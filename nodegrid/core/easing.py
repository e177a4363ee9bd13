from __future__ import annotations

import math

ELASTIC_PERIOD = 0.3


def ease_in_quad(t: float) -> float:
    return t * t


def ease_out_cubic(t: float) -> float:
    return 1.0 - (1.0 - t) ** 3


def elastic_out(t: float, period: float = ELASTIC_PERIOD) -> float:
    # f(0) == 0, f(1) ~= 1, overshoots in between
    return 2.0 ** (-10.0 * t) * math.sin((t - period / 4.0) * (2.0 * math.pi) / period) + 1.0
