"""Test atomic filesystem operations.

Tests for wirefit.utils.fs:
    - Atomic writes leave no tmp file behind
    - YAML roundtrip preserves structure and key order
    - torch state dicts roundtrip through atomic_torch_save / load_torch
    - Unwritable destinations raise RuntimeError
    - ensure_dir creates parents

Run:
    pytest tests/test_fs.py -v
"""

import pytest
import torch

from wirefit.utils import fs


def test_atomic_write_bytes(tmp_path):
    path = tmp_path / "sub" / "data.bin"
    fs.atomic_write_bytes(path, b"\x00\x01wire")

    assert path.read_bytes() == b"\x00\x01wire"
    assert not (tmp_path / "sub" / "data.bin.tmp").exists()


def test_atomic_write_replaces_existing(tmp_path):
    path = tmp_path / "note.txt"
    fs.atomic_write_text(path, "first")
    fs.atomic_write_text(path, "second")
    assert path.read_text() == "second"


def test_yaml_roundtrip_preserves_order(tmp_path):
    obj = {"schema": "agent.v1", "agent": {"number_of_wires": 4, "epsilon": 0.01}, "list": [1, 2.5]}
    path = tmp_path / "x.yaml"
    fs.atomic_yaml_dump(obj, path)

    assert fs.load_yaml(path) == obj
    assert path.read_text().splitlines()[0] == "schema: agent.v1"


def test_load_yaml_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        fs.load_yaml(tmp_path / "missing.yaml")


def test_torch_roundtrip(tmp_path):
    state = {"weight": torch.arange(6, dtype=torch.float32).reshape(2, 3), "steps": 3}
    path = tmp_path / "state.pt"
    fs.atomic_torch_save(state, path)

    loaded = fs.load_torch(path)
    assert torch.equal(loaded["weight"], state["weight"])
    assert loaded["steps"] == 3


def test_load_torch_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        fs.load_torch(tmp_path / "missing.pt")


def test_unwritable_destination_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not dir")

    with pytest.raises(RuntimeError, match="atomically"):
        fs.atomic_write_bytes(blocker / "inner.bin", b"x")


def test_ensure_dir(tmp_path):
    p = fs.ensure_dir(tmp_path / "a" / "b" / "c")
    assert p.is_dir()
    assert fs.ensure_dir(p) == p
