"""
strata — format-independent dataset descriptions with content-addressed persistence.

Subpackages
- strata.core — data model, formats, datatypes, canonical hashing (zero-IO).
- strata.io — schema inference, row streams, frames, content stores, persistence.
"""
