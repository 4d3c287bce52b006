"""
File discovery, work-unit grouping and backup/write helpers.
"""
from typing import Dict, Iterable, List, Sequence, Union
from pathlib import Path, PurePosixPath
import re
import shutil

from .config import SUBTITLE_EXTENSIONS, WORK_UNIT_PATTERN


def discover_files(root: Union[str, Path], extensions: Sequence[str] = SUBTITLE_EXTENSIONS) -> List[str]:
    """Find subtitle files under root

    Args:
        root: Folder to search recursively
        extensions: File extensions to include (case-insensitive)

    Returns:
        Sorted POSIX-style paths relative to root
    """
    root = Path(root)
    if not root.is_dir():
        return []
    wanted = {ext.lower() for ext in extensions}
    return sorted(
        path.relative_to(root).as_posix()
        for path in root.rglob("*")
        if path.is_file() and path.suffix.lower() in wanted
    )


def work_unit_key(rel_path: str, pattern: str = WORK_UNIT_PATTERN) -> str:
    """Project code found in the path, or the file's parent folder"""
    match = re.search(pattern, rel_path)
    if match:
        return match.group(0)
    return str(PurePosixPath(rel_path).parent)


def group_files(paths: Iterable[str], pattern: str = WORK_UNIT_PATTERN) -> Dict[str, List[str]]:
    """Group relative paths by work unit, keeping discovery order"""
    groups: Dict[str, List[str]] = {}
    for path in paths:
        groups.setdefault(work_unit_key(path, pattern), []).append(path)
    return groups


def subtitle_format(rel_path: str) -> str:
    return PurePosixPath(rel_path).suffix.lower().lstrip(".")


def read_subtitle(input_root: Union[str, Path], rel_path: str) -> str:
    with open(Path(input_root) / rel_path, "r", encoding="utf-8") as f:
        return f.read()


def backup_and_write(
    rel_path: str,
    content: str,
    input_root: Union[str, Path],
    backup_root: Union[str, Path],
    output_root: Union[str, Path],
) -> Path:
    """Copy the original into the backup tree, then write the new content

    Args:
        rel_path: File path relative to input_root
        content: Translated file contents
        input_root: Folder the original lives in
        backup_root: Folder receiving an untouched copy of the original
        output_root: Folder receiving the translated file

    Returns:
        Path of the written output file
    """
    source = Path(input_root) / rel_path

    backup = Path(backup_root) / rel_path
    backup.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, backup)

    output = Path(output_root) / rel_path
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        f.write(content)
    return output
