"""Recorded sample logs in CSV format.

Format, one sample per line after an optional ``#`` comment block:

    timestamp_us,gx,gy,gz,ax,ay,az,mx,my,mz,compass_valid

Gyro in rad/s, accel in g, compass in any consistent unit,
``compass_valid`` as 0 or 1.
"""

import logging
from pathlib import Path
from typing import Iterator, Optional, TextIO, Union

from ..core.errors import SampleLogError
from ..core.types import ImuSample

logger = logging.getLogger(__name__)

LOG_COLUMNS = (
    "timestamp_us",
    "gx", "gy", "gz",
    "ax", "ay", "az",
    "mx", "my", "mz",
    "compass_valid",
)
LOG_HEADER = ",".join(LOG_COLUMNS)


def parse_sample_line(line: str, line_number: int = 0) -> ImuSample:
    """Parse one CSV data line.

    Raises:
        SampleLogError: If the line has the wrong field count or bad values.
    """
    parts = line.strip().split(",")
    if len(parts) != len(LOG_COLUMNS):
        raise SampleLogError(
            f"expected {len(LOG_COLUMNS)} fields, got {len(parts)}", line_number
        )

    try:
        timestamp = int(parts[0])
        values = [float(p) for p in parts[1:10]]
        compass_valid = int(parts[10]) != 0
    except ValueError as exc:
        raise SampleLogError(str(exc), line_number) from exc

    return ImuSample.create(
        timestamp=timestamp,
        gyro=values[0:3],
        accel=values[3:6],
        compass=values[6:9],
        compass_valid=compass_valid,
    )


def read_sample_log(path: Union[str, Path]) -> Iterator[ImuSample]:
    """Iterate samples from a recorded CSV log.

    Args:
        path: Log file path.

    Yields:
        One ImuSample per data line.

    Raises:
        FileNotFoundError: If the log doesn't exist.
        SampleLogError: On the first malformed line.
    """
    path = Path(path)
    count = 0
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or stripped == LOG_HEADER:
                continue
            yield parse_sample_line(stripped, line_number)
            count += 1

    logger.debug("Read %d samples from %s", count, path)


class SampleLogWriter:
    """Writes samples in the format read by ``read_sample_log``.

    Usage:
        with SampleLogWriter("run.csv", comment="bench test") as writer:
            writer.write(sample)
    """

    def __init__(self, path: Union[str, Path], comment: Optional[str] = None):
        self._path = Path(path)
        self._comment = comment
        self._file: Optional[TextIO] = None
        self.sample_count = 0

    def open(self) -> None:
        """Create the file and write the header."""
        self._file = open(self._path, "w", encoding="utf-8")
        self._file.write("# quatfusion sample log\n")
        if self._comment:
            self._file.write(f"# {self._comment}\n")
        self._file.write(LOG_HEADER + "\n")

    def write(self, sample: ImuSample) -> None:
        """Append one sample."""
        if self._file is None:
            raise SampleLogError(f"Log {self._path} is not open")

        g, a, m = sample.gyro, sample.accel, sample.compass
        self._file.write(
            f"{sample.timestamp},"
            f"{g[0]:.9g},{g[1]:.9g},{g[2]:.9g},"
            f"{a[0]:.9g},{a[1]:.9g},{a[2]:.9g},"
            f"{m[0]:.9g},{m[1]:.9g},{m[2]:.9g},"
            f"{int(bool(sample.compass_valid))}\n"
        )
        self.sample_count += 1

    def close(self) -> None:
        """Close the file."""
        if self._file is not None:
            self._file.close()
            self._file = None
            logger.debug("Wrote %d samples to %s", self.sample_count, self._path)

    def __enter__(self) -> "SampleLogWriter":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
