"""
Build-time helpers for shipping locale data inside a self-contained build.

The extractor is driven by ``mathmaps/manifest.json``, which lists every
locale file carried by the build. This Typer app writes that manifest from
the mathmaps directory and checks that every listed file exists.
"""

import json
from pathlib import Path
from typing import List, Optional

import typer

from .assets import MANIFEST_NAME, PACKAGE_MATHMAPS_DIR

app = typer.Typer(
    name="latex2sre-bundle",
    help="Prepare locale data for embedding in a self-contained build",
    add_completion=False
)


def discover_locale_files(mathmaps_dir: Path) -> List[str]:
    """
    List locale JSON files in a mathmaps directory.

    Args:
        mathmaps_dir: Directory holding the locale files

    Returns:
        Sorted file names, the manifest itself excluded

    Raises:
        FileNotFoundError: If the directory does not exist
    """
    mathmaps_dir = Path(mathmaps_dir)
    if not mathmaps_dir.is_dir():
        raise FileNotFoundError(f"mathmaps directory not found: {mathmaps_dir}")
    return sorted(
        path.name
        for path in mathmaps_dir.glob("*.json")
        if path.name != MANIFEST_NAME
    )


def write_manifest(mathmaps_dir: Path, manifest_path: Optional[Path] = None) -> Path:
    """
    Write the manifest listing every locale file of a mathmaps directory.

    Returns:
        Path to the written manifest
    """
    mathmaps_dir = Path(mathmaps_dir)
    files = discover_locale_files(mathmaps_dir)
    manifest_path = Path(manifest_path) if manifest_path else mathmaps_dir / MANIFEST_NAME
    with open(manifest_path, 'w', encoding='utf-8') as f:
        json.dump({"files": files}, f, indent=2)
        f.write("\n")
    return manifest_path


def missing_manifest_entries(mathmaps_dir: Path) -> List[str]:
    """
    Return manifest entries that have no matching file.

    Raises:
        FileNotFoundError: If the manifest does not exist
        ValueError: If the manifest is malformed
    """
    mathmaps_dir = Path(mathmaps_dir)
    manifest_path = mathmaps_dir / MANIFEST_NAME
    with open(manifest_path, 'r', encoding='utf-8') as f:
        manifest = json.load(f)

    files = manifest.get("files") if isinstance(manifest, dict) else None
    if not isinstance(files, list):
        raise ValueError(f"Manifest has no 'files' list: {manifest_path}")
    return [name for name in files if not (mathmaps_dir / name).is_file()]


@app.command()
def manifest(
    mathmaps_dir: Path = typer.Argument(
        PACKAGE_MATHMAPS_DIR,
        help="Directory containing locale JSON files"
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Where to write the manifest (default: <mathmaps_dir>/manifest.json)"
    )
):
    """Write the manifest of locale files to embed."""
    try:
        manifest_path = write_manifest(mathmaps_dir, output)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    files = discover_locale_files(mathmaps_dir)
    typer.echo(f"Added {len(files)} mathmaps assets to {manifest_path}")


@app.command()
def check(
    mathmaps_dir: Path = typer.Argument(
        PACKAGE_MATHMAPS_DIR,
        help="Directory containing locale JSON files and manifest.json"
    )
):
    """Check that every file listed in the manifest exists."""
    try:
        missing = missing_manifest_entries(mathmaps_dir)
    except (OSError, ValueError) as e:
        typer.echo(f"Error reading manifest: {e}", err=True)
        raise typer.Exit(1)

    if missing:
        typer.echo("Missing mathmaps assets:", err=True)
        for name in missing:
            typer.echo(f"  - {name}", err=True)
        raise typer.Exit(1)

    typer.echo("Manifest OK")


def main():
    app()


if __name__ == "__main__":
    main()
