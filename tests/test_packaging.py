from __future__ import annotations

from pathlib import Path
import re


_ROOT = Path(__file__).resolve().parents[1]
_PYPROJECT = (_ROOT / "pyproject.toml").read_text(encoding="utf-8")


def test_readme_key_points_at_shipped_readme() -> None:
    readmes = re.findall(r'^readme\s*=\s*"([^"]+)"', _PYPROJECT, flags=re.MULTILINE)

    for readme in readmes:
        assert readme.lower().startswith("readme")
        assert (_ROOT / readme).is_file()


def test_console_scripts_point_at_existing_cli_modules() -> None:
    targets = re.findall(r'^lovcite-[\w-]+\s*=\s*"([\w.]+):main"', _PYPROJECT, flags=re.MULTILINE)

    assert len(targets) == 5
    for target in targets:
        module_path = _ROOT / "src" / Path(*target.split(".")).with_suffix(".py")
        assert module_path.is_file(), target
