"""Convert packet arrival times into per-bin throughput counts."""

from typing import List, Sequence

from .errors import EmptyInputError


def _zero_bins(count: int) -> List[int]:
    try:
        return [0] * count
    except MemoryError as e:
        raise MemoryError(f"can't allocate {count} throughput bins") from e


def aggregate(events: Sequence[int], bin_duration: int) -> List[int]:
    """Bin a sequence of arrival times into buckets, each bin_duration wide.

    The number of bins is taken from the last event, so ``events`` must be
    in non-decreasing order for the bins to cover the whole trace. Sortedness
    is not checked.

    Args:
        events: Arrival times in milliseconds
        bin_duration: Width of each bin in milliseconds

    Returns:
        Packet counts, where index i covers [i * bin_duration, (i + 1) * bin_duration)
    """
    if not events:
        raise EmptyInputError("can't bin empty list of events")

    counts = _zero_bins(events[-1] // bin_duration + 1)

    for event_time in events:
        index = event_time // bin_duration
        if index >= len(counts):
            raise IndexError(f"event at {event_time} ms falls after the last event ({events[-1]} ms)")
        counts[index] += 1

    return counts
