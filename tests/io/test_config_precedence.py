from __future__ import annotations

from pathlib import Path

from strata.io.config import IoSettings

_ENV_KEYS = [
    "STRATA_SAMPLE_CAP",
    "STRATA_ENCODING",
    "STRATA_STORE_ROOT",
    "STRATA_FSYNC",
]


def _write_strata_toml(tmp: Path, content: str) -> Path:
    p = tmp / "strata.toml"
    p.write_text(content)
    return p


def test_io_settings_precedence_env_over_toml(tmp_path: Path, monkeypatch) -> None:
    # Arrange TOML
    _write_strata_toml(
        tmp_path,
        """
        [io]
        store_root = "blobs_toml"
        sample_cap = 256
        encoding = "latin-1"
        """.strip(),
    )
    # Ensure cwd for IoSettings.from_toml() search
    monkeypatch.chdir(tmp_path)
    # Arrange ENV that should override TOML
    monkeypatch.setenv("STRATA_STORE_ROOT", "blobs_env")
    monkeypatch.setenv("STRATA_SAMPLE_CAP", "512")
    monkeypatch.setenv("STRATA_ENCODING", "utf-16")

    # Act
    s = IoSettings.load()

    # Assert precedence: env > TOML
    assert s.store_root == "blobs_env"
    assert s.sample_cap == 512  # env override
    assert s.encoding == "utf-16"  # env override


def test_io_settings_from_toml_when_no_env(tmp_path: Path, monkeypatch) -> None:
    # Arrange TOML only
    _write_strata_toml(
        tmp_path,
        """
        [io]
        store_root = "blobs_toml"
        sample_cap = 128
        encoding = "latin-1"
        fsync = false
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)

    # Act
    s = IoSettings.load()

    # Assert TOML applied
    assert s.store_root == "blobs_toml"
    assert s.sample_cap == 128
    assert s.encoding == "latin-1"
    assert s.fsync is False


def test_io_settings_from_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
        [tool.strata.io]
        sample_cap = 64
        """.strip()
    )
    monkeypatch.chdir(tmp_path)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)

    assert IoSettings.load().sample_cap == 64


def test_io_settings_ignores_invalid_values(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("STRATA_SAMPLE_CAP", "zero")
    monkeypatch.setenv("STRATA_ENCODING", "no-such-codec")
    monkeypatch.setenv("STRATA_FSYNC", "off")

    s = IoSettings.load()

    assert s.sample_cap == 2000
    assert s.encoding == "utf-8"
    assert s.fsync is False


def test_io_settings_defaults_when_no_config(tmp_path: Path, monkeypatch) -> None:
    # No TOML, no env
    monkeypatch.chdir(tmp_path)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)

    s = IoSettings.load()

    # Defaults from IoSettings / strata.core.constants
    assert s.sample_cap == 2000
    assert s.encoding == "utf-8"
    assert s.store_root == ".strata"
    assert s.fsync is True
