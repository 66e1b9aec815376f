"""
Custom exceptions for the strata.io module.

Purpose
- Provide IO-layer specific error types that map cleanly to responsibilities in strata.io.
- Keep strata.core as the source of truth for parse/decode/validation errors
  (see strata.core.errors).

Source of truth and boundaries
- strata.core.errors.DecodeError and ValidationError are raised by core models and decoders.
- strata.io raises Io* errors for reader/writer/store concerns:
  - ReadError: a record could not be read (I/O, encoding, malformed row).
  - WriteError: a row could not be encoded or written.
  - NotFound: a content key is absent from the store.
  - Undetermined: no inference or row-stream path is registered for a format.

Notes
- End of a row stream is ordinary iterator exhaustion (StopIteration), never an IoError.
- These exceptions do not perform any IO and are stdlib-only.
"""

from __future__ import annotations

from typing import Any


class IoError(Exception):
    """
    Base class for IO-related errors in strata.io.

    Notes:
        Use this as a catch-all for IO-layer failures, distinct from strata.core errors.
    """


class ReadError(IoError):
    """
    Raised when a record cannot be read from a source.

    Attributes:
        row_number (int | None): 1-based number of the offending data row (a header
            record is not counted); None when the header itself failed.
        fields (list | None): For schema inference, the fields computed from the
            records scanned before the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        row_number: int | None = None,
        fields: list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.row_number = row_number
        self.fields = fields


class WriteError(IoError):
    """
    Raised when a row cannot be encoded or written to a sink.

    Notes:
        Width mismatches against the schema raise strata.core.errors.ValidationError
        before any bytes are produced.
    """


class NotFound(IoError, LookupError):
    """
    Raised when a content key is absent from a store.

    Attributes:
        key (str): The missing key.
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"content key not found: {key}")
        self.key = key


class Undetermined(IoError):
    """
    Raised when no inference or row-stream path is registered for a format.

    Examples:
        - Field detection over JSON or XML data
        - Opening a row reader for an xls Structure
    """
