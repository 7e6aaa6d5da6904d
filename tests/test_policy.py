import os
from pathlib import Path

import pytest

from lightning_core.errors import InvalidPathError
from lightning_core.pathutil import canonicalize
from lightning_core.policy import BoundaryPolicy


def test_roots_are_canonicalized_eagerly(tmp_path: Path) -> None:
    policy = BoundaryPolicy([str(tmp_path / "a" / "."), tmp_path / "b" / "x" / ".."])

    assert policy.roots == (canonicalize(tmp_path / "a"), canonicalize(tmp_path / "b"))


def test_is_allowed_under_any_root(tmp_path: Path) -> None:
    policy = BoundaryPolicy([tmp_path / "a", tmp_path / "b"])

    assert policy.is_allowed(tmp_path / "a")
    assert policy.is_allowed(tmp_path / "b" / "deep" / "file.txt")
    assert not policy.is_allowed(tmp_path / "c")
    assert not policy.is_allowed(tmp_path)


def test_sibling_with_shared_prefix_rejected(tmp_path: Path) -> None:
    policy = BoundaryPolicy([tmp_path / "b"])

    assert not policy.is_allowed(tmp_path / "bc")
    assert not policy.is_allowed(str(tmp_path / "b") + "c" + os.sep + "x")


def test_dot_dot_escape_rejected(tmp_path: Path) -> None:
    policy = BoundaryPolicy([tmp_path / "a"])

    assert not policy.is_allowed(os.path.join(str(tmp_path / "a"), "..", "b"))


def test_duplicate_and_nested_roots_permitted(tmp_path: Path) -> None:
    policy = BoundaryPolicy([tmp_path, tmp_path, tmp_path / "nested"])

    assert len(policy.roots) == 3
    assert policy.is_allowed(tmp_path / "nested" / "x")


def test_single_string_root(tmp_path: Path) -> None:
    policy = BoundaryPolicy(str(tmp_path))

    assert policy.roots == (canonicalize(tmp_path),)


def test_invalid_root_raises() -> None:
    with pytest.raises(InvalidPathError):
        BoundaryPolicy(["   "])


def test_invalid_query_raises(tmp_path: Path) -> None:
    policy = BoundaryPolicy([tmp_path])

    with pytest.raises(InvalidPathError):
        policy.is_allowed("")


def test_empty_policy_allows_nothing(tmp_path: Path) -> None:
    assert not BoundaryPolicy([]).is_allowed(tmp_path)


def test_none_roots_rejected() -> None:
    with pytest.raises(TypeError):
        BoundaryPolicy(None)  # type: ignore[arg-type]
