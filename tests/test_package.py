"""
Packaging and public surface checks for posture_alert
"""
from pathlib import Path

import pytest

import posture_alert
from posture_alert import cli, utils
from posture_alert.utils import constants

ROOT = Path(__file__).resolve().parent.parent


class TestPublicSurface:
    """Tests for exported names"""

    @pytest.mark.parametrize("module", [posture_alert, utils])
    def test_all_names_resolve(self, module):
        for name in module.__all__:
            assert hasattr(module, name), name

    def test_no_unused_camera_config(self):
        assert not hasattr(constants, "DEFAULT_CAMERA_CONFIG")
        assert "DEFAULT_CAMERA_CONFIG" not in utils.__all__

    def test_cli_importable_without_camera_stack(self):
        assert callable(cli.main)
        assert callable(cli.configure_logging)


class TestPyproject:
    """Tests for packaging metadata"""

    @pytest.fixture
    def pyproject(self):
        tomllib = pytest.importorskip("tomllib")
        with open(ROOT / "pyproject.toml", "rb") as f:
            return tomllib.load(f)

    def test_console_script_targets_package(self, pyproject):
        target = pyproject["project"]["scripts"]["posture-alert"]
        assert target == "posture_alert.cli:main"

    def test_no_top_level_modules_installed(self, pyproject):
        setuptools_cfg = pyproject.get("tool", {}).get("setuptools", {})
        assert "py-modules" not in setuptools_cfg

    def test_readme_is_project_readme(self, pyproject):
        readme = pyproject["project"]["readme"]
        assert readme == "README.md"
        assert (ROOT / readme).is_file()
