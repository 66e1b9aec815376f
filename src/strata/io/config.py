"""
Configuration for the strata.io module.

Defines IoSettings, a frozen dataclass carrying runtime configuration for inference,
row streams, and the file-backed content store. Defaults are sourced from
strata.core.constants (the single source of truth).

Source of truth
- strata.core.constants.SAMPLE_CAP, DEFAULT_ENCODING, STORE_ROOT

Import DAG discipline
- Depends only on stdlib and strata.core.constants.

Notes
- Precedence when loading: environment > TOML > defaults.
- Invalid values in a mapping are ignored and the previous value is kept.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from strata.core.constants import DEFAULT_ENCODING as CORE_ENCODING
from strata.core.constants import SAMPLE_CAP as CORE_SAMPLE_CAP
from strata.core.constants import STORE_ROOT as CORE_STORE_ROOT


@dataclass(frozen=True)
class IoSettings:
    """
    Runtime settings for the strata.io layer.

    Attributes:
        sample_cap (int): Data records schema inference inspects after the header
            candidate (>= 1).
        encoding (str): Text encoding used when a Structure leaves it empty.
        store_root (str): Root directory of FileStore.
        fsync (bool): fsync blobs before their atomic rename in FileStore.

    Examples:
        >>> from strata.io import IoSettings
        >>> IoSettings(sample_cap=500).sample_cap
        500
    """

    sample_cap: int = CORE_SAMPLE_CAP
    encoding: str = CORE_ENCODING
    store_root: str = CORE_STORE_ROOT
    fsync: bool = True

    # Configuration loaders (env/TOML) with precedence: env > TOML > defaults.

    @classmethod
    def _apply_mapping(cls, base: IoSettings, cfg: dict[str, Any] | None) -> IoSettings:
        """Apply a loose config mapping onto IoSettings, returning a new instance."""
        if not isinstance(cfg, dict):
            return base

        s = base

        def _bool(v: Any) -> bool:
            if isinstance(v, bool):
                return v
            if isinstance(v, (int, float)):
                return bool(v)
            if isinstance(v, str):
                return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}
            return False

        # sample_cap (>= 1)
        if "sample_cap" in cfg:
            try:
                cap = int(cfg["sample_cap"])
            except (TypeError, ValueError):
                cap = 0
            if cap >= 1:
                s = replace(s, sample_cap=cap)

        # encoding (must be known to the codecs registry)
        if "encoding" in cfg and isinstance(cfg["encoding"], str):
            enc = cfg["encoding"].strip()
            try:
                "".encode(enc)
            except LookupError:
                enc = ""
            if enc:
                s = replace(s, encoding=enc)

        # store_root
        if "store_root" in cfg and isinstance(cfg["store_root"], str) and cfg["store_root"]:
            s = replace(s, store_root=cfg["store_root"])

        # fsync
        if "fsync" in cfg:
            s = replace(s, fsync=_bool(cfg["fsync"]))

        return s

    @classmethod
    def from_env(cls, base: IoSettings | None = None, prefix: str = "STRATA_") -> IoSettings:
        """
        Build IoSettings from environment variables. Precedence is env > base (if provided) > defaults.

        Recognized variables:
            - STRATA_SAMPLE_CAP
            - STRATA_ENCODING
            - STRATA_STORE_ROOT
            - STRATA_FSYNC (1/0/true/false/yes/no/on/off)
        """
        s = base or cls()

        mapping: dict[str, Any] = {}
        for key in ("sample_cap", "encoding", "store_root", "fsync"):
            v = os.getenv(prefix + key.upper())
            if v:
                mapping[key] = v

        return cls._apply_mapping(s, mapping)

    @classmethod
    def from_toml(cls, path: str | os.PathLike[str] | None = None) -> IoSettings:
        """
        Build IoSettings from a TOML file.

        Search order when `path` is None:
            1) ./strata.toml (with either top-level [io] or direct keys)
            2) ./pyproject.toml under [tool.strata.io]

        Returns defaults if no file is present or none of them parse.
        """
        s = cls()

        def _load_toml(p: Path) -> dict[str, Any] | None:
            try:
                with p.open("rb") as fh:
                    return tomllib.load(fh)
            except (OSError, tomllib.TOMLDecodeError):
                return None

        cfg: dict[str, Any] | None = None

        cand: list[Path] = []
        if path is not None:
            cand.append(Path(path))
        else:
            cand.append(Path.cwd() / "strata.toml")
            cand.append(Path.cwd() / "pyproject.toml")

        for p in cand:
            if not p.exists():
                continue
            data = _load_toml(p)
            if not isinstance(data, dict):
                continue
            if p.name == "pyproject.toml":
                # Expect [tool.strata.io]
                tool = data.get("tool", {})
                cfg = tool.get("strata", {}).get("io", {}) if isinstance(tool, dict) else None
            else:
                # strata.toml - accept either [io] table or top-level keys
                if "io" in data and isinstance(data["io"], dict):
                    cfg = data["io"]
                else:
                    cfg = data
            if cfg:
                break

        return cls._apply_mapping(s, cfg)

    @classmethod
    def load(cls, path: str | os.PathLike[str] | None = None) -> IoSettings:
        """
        Load IoSettings applying precedence: environment > TOML > defaults.

        Args:
            path: Optional explicit TOML path. If None, search defaults (strata.toml, pyproject.toml).

        Returns:
            IoSettings
        """
        s = cls.from_toml(path)
        s = cls.from_env(base=s)
        return s
