"""
Core package aggregator for strata contracts (formats, format configs, datatypes,
data model, canonical hashing/serde, naming, errors).

## Contracts (single source of truth)
- Formats — DataFormat/Compression enums and their string conversions.
- Format configs — per-format option variants, built through a registry.
- Datatypes — the field type domain and the cell classification cascade.
- Structure — frozen Field/Schema/Structure/Dataset models with canonical rendering.
- Hashing/Serde — canonical JSON, SHA-256 content hashes, decoders.

## Notes
- Zero-IO policy: stdlib + pydantic only; no file/network IO. Logging helpers live
  in logging_config and are used by strata.io.
- Canonical encoding: key-sorted compact UTF-8 JSON, empty values omitted, format
  configs flattened to option maps. Equal values always hash equally.

## Downstream usage
- strata.io.detect — infers Schema fields from raw bytes and returns new Structures.
- strata.io.rows — reads/writes rows positionally aligned to Structure.schema_.
- strata.io.dsfs — stores Structure and Dataset canonical bytes in a content store.

## Examples
```python
from strata.core.formats import DataFormat
from strata.core.format_config import CsvConfig
from strata.core.structure import Field, Schema, Structure

a = Structure(
    format=DataFormat.CSV,
    format_config=CsvConfig(header_row=True),
    schema_=Schema(fields=(Field(name="name", type="string", title="Name"),)),
)
b = a.replace(schema_=Schema(fields=(Field(name="label", type="string"),)))
a.hash() == b.hash()  # False
a.abstract().hash() == b.abstract().hash()  # True
```
"""
