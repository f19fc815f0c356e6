"""Tests for package discovery settings."""

from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent


class TestPackageDiscovery:
    """profitcalc has no top-level __init__.py, so discovery must include namespace packages."""

    @pytest.fixture
    def find_options(self) -> dict:
        tomllib = pytest.importorskip("tomllib")
        with open(ROOT / "pyproject.toml", "rb") as f:
            return tomllib.load(f)["tool"]["setuptools"]["packages"]["find"]

    def test_namespaces_enabled(self, find_options: dict) -> None:
        assert find_options["namespaces"] is True
        assert not (ROOT / "profitcalc" / "__init__.py").exists()

    def test_finds_all_packages(self, find_options: dict) -> None:
        setuptools = pytest.importorskip("setuptools")
        packages = setuptools.find_namespace_packages(where=str(ROOT), include=find_options["include"])
        assert "profitcalc" in packages
        assert "profitcalc.core" in packages
        assert not any(p.startswith("tests") for p in packages)
