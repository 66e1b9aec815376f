"""
Strata core defaults.

Defines the sampling, encoding, and naming defaults consumed by inference, row
streams, and the data model. This module is zero-IO and uses only the Python
standard library.

Notes:
    - strata.io.config.IoSettings sources its defaults from here.
    - POSITIONAL_PREFIX names fields of header-less data (field_1, field_2, ...).
    - ABSTRACT_PREFIX names fields of an abstract Structure (col_0, col_1, ...).
"""

from __future__ import annotations

__all__ = [
    "SAMPLE_CAP",
    "DEFAULT_ENCODING",
    "POSITIONAL_PREFIX",
    "ABSTRACT_PREFIX",
    "STORE_ROOT",
]

# Data records inspected by schema inference after the header candidate.
SAMPLE_CAP: int = 2000

# Character encoding assumed when a Structure does not name one.
DEFAULT_ENCODING: str = "utf-8"

# Synthetic field names for data without a header row (1-based).
POSITIONAL_PREFIX: str = "field_"

# Field names in the abstract projection of a Structure (0-based).
ABSTRACT_PREFIX: str = "col_"

# Default root directory for the file-backed content store.
STORE_ROOT: str = ".strata"
