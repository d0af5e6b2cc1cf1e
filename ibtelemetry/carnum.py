"""Encoding of car numbers that carry leading zeros."""

from __future__ import annotations


def pad_car_num(num: int, zero: int) -> int:
    """Encode car number ``num`` with ``zero`` leading zeros.

    Car #001 is encoded as ``pad_car_num(1, 2)``.  Without leading zeros the
    number is returned unchanged; otherwise the total digit count is stored
    in the thousands.
    """
    if num > 99:
        num_place = 3
    elif num > 9:
        num_place = 2
    else:
        num_place = 1

    if not zero:
        return num
    return num + 1000 * (num_place + zero)