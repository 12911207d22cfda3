"""Asset handling — mirror build assets and the public directory.

Copies every non-HTML file of the built app into the output tree at the
same relative path (HTML comes from the renderer instead), then copies the
public directory into ``output_dir/assets`` without overwriting anything
already there.
"""

from __future__ import annotations

import shutil
from pathlib import Path

# Pages are produced by the renderer, never copied
_PAGE_SUFFIX = ".html"

# Public assets land here inside the output tree
PUBLIC_ASSETS_DIR = "assets"


def clean_output(output_dir: Path) -> None:
    """Remove *output_dir* recursively.  A missing directory is a no-op."""
    shutil.rmtree(output_dir, ignore_errors=True)


def copy_assets(input_dir: Path, output_dir: Path) -> tuple[Path, ...]:
    """Mirror every non-HTML file of *input_dir* into *output_dir*.

    Files already inside *output_dir* (when it is nested in *input_dir*)
    are skipped.

    Returns:
        Destination paths of the copied files.

    """
    if not input_dir.is_dir():
        return ()

    output_root = output_dir.resolve()
    copied: list[Path] = []

    for src_file in sorted(input_dir.rglob("*")):
        if not src_file.is_file() or src_file.suffix.lower() == _PAGE_SUFFIX:
            continue
        if src_file.resolve().is_relative_to(output_root):
            continue

        dest_file = output_dir / src_file.relative_to(input_dir)
        dest_file.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src_file, dest_file)
        copied.append(dest_file)

    return tuple(copied)


def copy_public_dir(public_dir: Path | None, output_dir: Path) -> tuple[Path, ...]:
    """Copy *public_dir* into ``output_dir/assets`` without overwriting.

    A missing (or unset) public directory copies nothing.

    Returns:
        Destination paths of the copied files.

    """
    if public_dir is None or not public_dir.is_dir():
        return ()

    dest_root = output_dir / PUBLIC_ASSETS_DIR
    copied: list[Path] = []

    for src_file in sorted(public_dir.rglob("*")):
        if not src_file.is_file():
            continue

        dest_file = dest_root / src_file.relative_to(public_dir)
        if dest_file.exists():
            continue
        dest_file.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src_file, dest_file)
        copied.append(dest_file)

    return tuple(copied)
