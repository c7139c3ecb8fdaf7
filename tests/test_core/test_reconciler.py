from __future__ import annotations

from pathlib import Path
from typing import List
from unittest.mock import patch

import pytest

from rubigo.core.reconciler import LockReconciler, stale_packages
from rubigo.exceptions import FileOperationError
from rubigo.models.lock import GitEntry, LockSnapshot


def _snapshot(git: List[str] = (), local: List[str] = ()) -> LockSnapshot:
    return LockSnapshot(git=[GitEntry(path) for path in git], local=list(local))


def _make_package(vendor: Path, identifier: str) -> Path:
    package_dir = vendor.joinpath(*identifier.split("/"))
    package_dir.mkdir(parents=True)
    (package_dir / "main.go").write_text("package main\n")
    return package_dir


@pytest.mark.unit
class TestStalePackages:
    """Tests for stale_packages()."""

    def test_partitions_diffed_independently(self) -> None:
        """Test only B is stale when A and X are kept and Y is new."""
        old = _snapshot(["github.com/a/A", "github.com/a/B"], ["local/X"])
        new = _snapshot(["github.com/a/A"], ["local/X", "local/Y"])

        assert stale_packages(old, new) == ["github.com/a/B"]

    def test_absent_old_snapshot(self) -> None:
        """Test a first run has nothing to remove."""
        assert stale_packages(None, _snapshot(["github.com/a/A"])) == []

    def test_identical_snapshots(self) -> None:
        snapshot = _snapshot(["github.com/a/A"], ["local/X"])

        assert stale_packages(snapshot, snapshot) == []

    def test_local_removed(self) -> None:
        """Test local paths are compared by path."""
        old = _snapshot([], ["local/X", "local/Y"])
        new = _snapshot([], ["local/Y"])

        assert stale_packages(old, new) == ["local/X"]

    def test_result_is_sorted(self) -> None:
        old = _snapshot(["github.com/z/z", "github.com/a/a", "github.com/m/m"])

        assert stale_packages(old, _snapshot()) == [
            "github.com/a/a",
            "github.com/m/m",
            "github.com/z/z",
        ]


@pytest.mark.unit
class TestLockReconciler:
    """Tests for LockReconciler."""

    def test_removes_only_stale_package(self, tmp_path: Path) -> None:
        """Test kept and newly added packages are untouched."""
        vendor = tmp_path / "vendor"
        for identifier in ("github.com/a/A", "github.com/a/B", "local/X", "local/Y"):
            _make_package(vendor, identifier)

        old = _snapshot(["github.com/a/A", "github.com/a/B"], ["local/X"])
        new = _snapshot(["github.com/a/A"], ["local/X", "local/Y"])

        result = LockReconciler(vendor).reconcile(old, new)

        assert result.removed == ["github.com/a/B"]
        assert result.failed == {}
        assert not (vendor / "github.com" / "a" / "B").exists()
        assert (vendor / "github.com" / "a" / "A").is_dir()
        assert (vendor / "local" / "X").is_dir()
        assert (vendor / "local" / "Y").is_dir()

    def test_first_run_removes_nothing(self, tmp_path: Path) -> None:
        """Test an absent previous snapshot causes zero removals."""
        vendor = tmp_path / "vendor"
        _make_package(vendor, "github.com/a/A")

        result = LockReconciler(vendor).reconcile(None, _snapshot())

        assert result.removed == []
        assert (vendor / "github.com" / "a" / "A").is_dir()

    def test_prunes_empty_parents_only(self, tmp_path: Path) -> None:
        """Test removing a/b/c keeps a because a/d is still there."""
        vendor = tmp_path / "vendor"
        _make_package(vendor, "a/b/c")
        _make_package(vendor, "a/d")

        result = LockReconciler(vendor).reconcile(_snapshot(["a/b/c", "a/d"]), _snapshot(["a/d"]))

        assert result.removed == ["a/b/c"]
        assert not (vendor / "a" / "b").exists()
        assert (vendor / "a").is_dir()
        assert (vendor / "a" / "d").is_dir()

    def test_never_removes_vendor_root(self, tmp_path: Path) -> None:
        """Test pruning stops at the vendor root even when it becomes empty."""
        vendor = tmp_path / "vendor"
        _make_package(vendor, "github.com/a/A")

        LockReconciler(vendor).reconcile(_snapshot(["github.com/a/A"]), _snapshot())

        assert vendor.is_dir()
        assert list(vendor.iterdir()) == []

    def test_missing_directory_is_reported(self, tmp_path: Path) -> None:
        """Test a deletion failure is recorded and the others still run."""
        vendor = tmp_path / "vendor"
        vendor.mkdir()
        _make_package(vendor, "github.com/a/B")

        old = _snapshot(["github.com/a/A", "github.com/a/B"])
        result = LockReconciler(vendor).reconcile(old, _snapshot())

        assert result.removed == ["github.com/a/B"]
        assert "github.com/a/A" in result.failed
        assert "unable to delete `github.com/a/A` directory" in result.failed["github.com/a/A"]

    def test_failure_is_logged_not_raised(self, tmp_path: Path) -> None:
        """Test remove_tree errors are converted into a result entry."""
        vendor = tmp_path / "vendor"
        _make_package(vendor, "github.com/a/A")
        error = FileOperationError("Unable to delete directory: Permission denied")

        with patch("rubigo.core.reconciler.remove_tree", side_effect=error):
            result = LockReconciler(vendor).reconcile(_snapshot(["github.com/a/A"]), _snapshot())

        assert result.removed == []
        assert "Permission denied" in result.failed["github.com/a/A"]

    def test_keeps_directory_owning_locked_package(self, tmp_path: Path) -> None:
        """Test a stale parent holding a still-locked package is not deleted."""
        vendor = tmp_path / "vendor"
        _make_package(vendor, "example.com/lib")
        _make_package(vendor, "example.com/lib/sub")

        old = _snapshot(["example.com/lib", "example.com/lib/sub"])
        new = _snapshot(["example.com/lib/sub"])

        result = LockReconciler(vendor).reconcile(old, new)

        assert result.kept == ["example.com/lib"]
        assert result.removed == []
        assert (vendor / "example.com" / "lib" / "sub").is_dir()

    def test_descendant_of_removed_parent(self, tmp_path: Path) -> None:
        """Test a nested stale package is counted as removed with its parent."""
        vendor = tmp_path / "vendor"
        _make_package(vendor, "example.com/lib")
        _make_package(vendor, "example.com/lib/sub")

        old = _snapshot(["example.com/lib", "example.com/lib/sub"])
        result = LockReconciler(vendor).reconcile(old, _snapshot())

        assert result.removed == ["example.com/lib", "example.com/lib/sub"]
        assert result.failed == {}
        assert not (vendor / "example.com").exists()

    def test_invalid_identifier_is_reported(self, tmp_path: Path) -> None:
        """Test an identifier that maps outside the vendor tree is refused."""
        vendor = tmp_path / "vendor"
        vendor.mkdir()

        result = LockReconciler(vendor).reconcile(_snapshot(["../escape"]), _snapshot())

        assert "../escape" in result.failed
        assert tmp_path.is_dir()
