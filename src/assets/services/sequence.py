"""Gap-filling sequence allocation over existing asset codes.

Allocation is a pure function of a snapshot of codes. Callers must read
that snapshot and persist the newly coded rows inside one
``transaction.atomic()`` block; the unique constraint on
``Asset.code`` is the last line of defence against a race.
"""

from collections.abc import Iterable

CODE_SEPARATOR = "."
CODE_SEGMENTS = 5


def parse_sequence(code: str | None) -> int | None:
    """Return the trailing sequence of a 5-segment code, or None.

    Malformed codes (wrong segment count, non-numeric sequence) yield
    None rather than raising.
    """
    if not code:
        return None
    parts = code.strip().split(CODE_SEPARATOR)
    if len(parts) != CODE_SEGMENTS:
        return None
    segment = parts[-1]
    if not (segment.isascii() and segment.isdigit()):
        return None
    return int(segment)


def occupied_sequences(codes: Iterable[str]) -> set[int]:
    """Set of sequence numbers already used by ``codes``."""
    occupied = set()
    for code in codes:
        sequence = parse_sequence(code)
        if sequence is not None:
            occupied.add(sequence)
    return occupied


def next_sequence_range(codes: Iterable[str], count: int) -> int:
    """First sequence ``s`` such that ``s .. s+count-1`` are all free.

    Sequences freed by deleted assets are reused before the counter
    moves past the historical maximum.
    """
    if count < 1:
        raise ValueError("Sequence range size must be at least 1.")

    occupied = occupied_sequences(codes)
    start = 1
    while True:
        blocked = [s for s in range(start, start + count) if s in occupied]
        if not blocked:
            return start
        # No window containing the highest blocker can be free
        start = max(blocked) + 1


def next_sequence(codes: Iterable[str]) -> int:
    """First free sequence number, starting at 1."""
    return next_sequence_range(codes, 1)
