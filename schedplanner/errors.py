"""
Exceptions raised across the package.

Row-level problems are NOT exceptions: the normalizer turns them into skipped
rows. Only problems that abort a whole operation are raised.
"""

from __future__ import annotations


class ScheduleFileError(ValueError):
    """The uploaded file cannot be processed at all (zero events)."""


class InvalidEventError(ValueError):
    """An event was rejected because its end is not after its start."""


class PdfExtractionError(ValueError):
    """The PDF extraction endpoint answered with an unusable payload."""
