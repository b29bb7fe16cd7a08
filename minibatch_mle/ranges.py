"""
Segment bookkeeping on the time axis.

Ranges are 0-based Python ``range`` objects. Consecutive segments share
their boundary index, so that the continuity penalty has a common anchor:

>>> get_ranges(5, 20)
[range(0, 5), range(4, 9), range(8, 13), range(12, 17), range(16, 20)]
"""
from typing import List, Sequence


def group_ranges(datasize: int, group_size: int) -> List[range]:
    """Overlapping ranges of length *group_size* covering ``0..datasize-1``.

    Each range starts at the last index of the previous one; the trailing
    range may be shorter.
    """
    return [
        range(start, min(datasize, start + group_size))
        for start in range(0, datasize - 1, group_size - 1)
    ]


def get_ranges(group_size: int, datasize: int) -> List[range]:
    """Segment ranges for a series of *datasize* points.

    A single range over the whole series is returned when the group size
    is too large for minibatching (``group_size - 1 >= datasize``).
    """
    if datasize < 1:
        raise ValueError(f"datasize must be positive, got {datasize}.")
    if group_size < 2:
        raise ValueError(
            f"group_size must be at least 2 for segments to overlap, got {group_size}."
        )
    if group_size - 1 < datasize:
        return group_ranges(datasize, group_size)
    return [range(0, datasize)]


def shift_ranges(ranges: Sequence[range], shift: int) -> List[range]:
    return [range(r.start + shift, r.stop + shift) for r in ranges]
