"""Tests for dudu package exports and metadata."""

import pytest

import dudu


class TestPackageMetadata:
    """Package-level exports and metadata."""

    def test_version_string(self) -> None:
        assert isinstance(dudu.__version__, str)
        assert "0.1.0" in dudu.__version__

    def test_all_exports_resolvable(self) -> None:
        for name in dudu.__all__:
            getattr(dudu, name)

    def test_invalid_attribute_raises(self) -> None:
        with pytest.raises(AttributeError, match="no attribute"):
            dudu.nonexistent_thing  # type: ignore[attr-defined]  # noqa: B018
