import time


def clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def max_position(width: float, height: float, size: float) -> tuple[float, float]:
    '''Largest valid top-left corner for a bubble of `size` on the surface.'''
    return max(0, width - size), max(0, height - size)


def now_ms() -> int:
    return int(time.time() * 1000)
