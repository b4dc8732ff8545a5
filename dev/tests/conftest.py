from __future__ import annotations

import sys
import zipfile
from pathlib import Path
from typing import Dict, Optional

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def pytest_configure() -> None:
    """Ensure pytest base temp directory exists for CI runs."""

    base_temp = ROOT / "temp" / "pytest"
    base_temp.mkdir(parents=True, exist_ok=True)


def descriptor_xml(name: str, minimum_version: Optional[str] = None, players=("Germans", "Russians")) -> str:
    triplea = f'  <triplea minimumVersion="{minimum_version}"/>\n' if minimum_version else ""
    player_rows = "".join(f'    <player name="{p}" optional="false"/>\n' for p in players)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        "<game>\n"
        f'  <info name="{name}" version="1.0"/>\n'
        f"{triplea}"
        "  <playerList>\n"
        f"{player_rows}"
        "  </playerList>\n"
        "</game>\n"
    )


def write_map_zip(path: Path, members: Dict[str, str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return path


def write_map_dir(path: Path, members: Dict[str, str]) -> Path:
    for name, content in members.items():
        target = path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return path


def corrupt_member(archive: Path, member: str) -> None:
    """Break the local header of `member`; the central directory stays readable."""
    with zipfile.ZipFile(archive) as zf:
        offset = zf.getinfo(member).header_offset
    with open(archive, "r+b") as handle:
        handle.seek(offset)
        handle.write(b"XXXX")


@pytest.fixture
def map_roots(tmp_path: Path):
    user_root = tmp_path / "downloadedMaps"
    default_root = tmp_path / "maps"
    user_root.mkdir()
    default_root.mkdir()
    return user_root, default_root
