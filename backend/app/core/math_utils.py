import math


def round_half_up(x: float) -> int:
    """Round to the nearest integer; halves go up.

    Example: 2.5 -> 3, 12.5 -> 13 (builtin round() gives 2 and 12)
    """
    return int(math.floor(x + 0.5))
