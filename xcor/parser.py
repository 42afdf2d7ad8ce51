"""Parser for mahimahi packet arrival traces."""

import re
from typing import Iterable, List, Optional, TextIO

from .errors import FileOpenError, InvalidIntegerError

# Canonical unsigned decimal: no sign, no leading zeros, no whitespace
CANONICAL_INT_PATTERN = re.compile(r'(?:0|[1-9][0-9]*)')

# Largest value a trace timestamp or bin duration may take (signed 32-bit)
MAX_INT_VALUE = 2**31 - 1


def careful_atoi(text: str) -> int:
    """Parse a string as an unsigned integer and verify that it round-trips.

    Only the exact form ``str(value)`` is accepted, so ``"007"``, ``"+7"``,
    ``" 7"`` and ``"7 "`` are all rejected.
    """
    if not CANONICAL_INT_PATTERN.fullmatch(text):
        raise InvalidIntegerError(f"invalid int: {text}")

    value = int(text)
    if value > MAX_INT_VALUE:
        raise InvalidIntegerError(f"invalid int: {text}")

    return value


def parse_bin_duration(text: str) -> int:
    """Parse the bin duration argument (milliseconds, must be positive)."""
    bin_duration = careful_atoi(text)
    if bin_duration == 0:
        raise InvalidIntegerError(f"bin duration must be positive: {text}")
    return bin_duration


def read_integer_sequence(lines: Iterable[str]) -> List[int]:
    """Read one integer per line until the first empty line or end of input."""
    values = []
    for line in lines:
        if line.endswith('\n'):
            line = line[:-1]
        if not line:
            break
        values.append(careful_atoi(line))
    return values


class TraceParser:
    """Parser for a single packet arrival trace file."""

    def __init__(self, file_path: str):
        """Initialize the parser.

        Args:
            file_path: Path to the trace, one arrival time in milliseconds per line
        """
        self.file_path = file_path
        self.events: Optional[List[int]] = None
        self._file: Optional[TextIO] = None

    def open(self) -> TextIO:
        """Open the trace file for reading without parsing it yet.

        The returned file is a context manager; parse() reads from it and
        closes it.
        """
        try:
            self._file = open(self.file_path, 'r', encoding='ascii', newline='\n')
        except OSError as e:
            raise FileOpenError(f"can't open {self.file_path}") from e
        return self._file

    def parse(self) -> List[int]:
        """Read the trace file and return its arrival times."""
        if self._file is None or self._file.closed:
            self.open()

        with self._file as f:
            try:
                self.events = read_integer_sequence(f)
            except UnicodeDecodeError as e:
                raise InvalidIntegerError(f"invalid int in {self.file_path}: non-ASCII data") from e

        return self.events

    @property
    def packet_count(self) -> int:
        """Number of arrivals read by the last call to parse()."""
        return len(self.events) if self.events is not None else 0
