"""Short-term trend classification over a minute kline window.

The test is all-or-nothing: a single reversal or flat step anywhere in the
window rules out UP and DOWN. It is not a majority vote.
"""

from alpha_monitor.models import MinuteKline, TrendDirection


def classify_trend(klines: list[MinuteKline]) -> TrendDirection:
    """Classify the trend from consecutive kline averages.

    Args:
        klines: Klines ordered ascending by minute.

    Returns:
        INSUFFICIENT with fewer than 2 klines, UP if every step of ``avg`` is
        strictly increasing, DOWN if every step is strictly decreasing,
        SIDEWAYS otherwise. Equal steps count toward neither direction.
    """
    if len(klines) < 2:
        return TrendDirection.INSUFFICIENT

    up_steps = 0
    down_steps = 0
    for prev, curr in zip(klines, klines[1:]):
        if curr.avg > prev.avg:
            up_steps += 1
        elif curr.avg < prev.avg:
            down_steps += 1

    steps = len(klines) - 1
    if up_steps == steps:
        return TrendDirection.UP
    if down_steps == steps:
        return TrendDirection.DOWN
    return TrendDirection.SIDEWAYS
