"""Tests for pyproject.toml and package installation."""
from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

PYPROJECT = Path(__file__).parent.parent / "pyproject.toml"


class TestPackageInstallation:
    """Test that the package is properly installed."""

    def test_version_defined(self):
        """Package has a non-empty __version__."""
        import tts_web
        assert isinstance(tts_web.__version__, str)
        assert len(tts_web.__version__) > 0

    def test_core_modules_importable(self):
        """Core modules can be imported."""
        from tts_web.api import routes, schemas
        from tts_web.core import config, logging, metrics
        from tts_web.services import synthesizer
        from tts_web.speech import client, suffix

        for module in (routes, schemas, config, logging, metrics, synthesizer, client, suffix):
            assert module is not None

    def test_templates_shipped(self):
        """HTML templates live inside the package."""
        from tts_web.api.routes import TEMPLATES_DIR
        assert (TEMPLATES_DIR / "index.html").exists()
        assert (TEMPLATES_DIR / "result.html").exists()


class TestCLIEntryPoint:
    """Test the CLI entry point."""

    def test_cli_help_exits_zero(self):
        """python -m tts_web.cli --help exits with code 0."""
        result = subprocess.run(
            [sys.executable, "-m", "tts_web.cli", "--help"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert "tts-web CLI" in result.stdout


class TestPyprojectToml:
    """Test pyproject.toml configuration."""

    def test_pyproject_exists(self):
        """pyproject.toml file exists."""
        assert PYPROJECT.exists()

    def test_pyproject_metadata(self):
        """Name, dependencies and console script are declared."""
        tomllib = pytest.importorskip("tomllib")  # Python 3.11+
        data = tomllib.loads(PYPROJECT.read_text(encoding="utf-8"))

        assert data["project"]["name"] == "tts-web"
        deps = data["project"]["dependencies"]
        dep_names = [d.split(">=")[0].split("[")[0] for d in deps]
        for name in ("fastapi", "uvicorn", "pydantic", "pyyaml", "jinja2",
                     "python-multipart", "openai", "prometheus_client"):
            assert name in dep_names
        assert data["project"]["scripts"]["tts-web"] == "tts_web.cli:main"
