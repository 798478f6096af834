"""
Scoped scratch files for backends that need file-based invocation.

A LaTeX compiler writes several auxiliary files next to its input. scoped_file()
writes the input under a unique name, hands the path to the caller, and removes
the input plus every known auxiliary sibling when the block exits, whether the
caller's work succeeded, failed, or raised.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, List

from loguru import logger

from tailor.utils.timestamp import unique_stamp

# Files LaTeX toolchains leave next to the source
LATEX_AUX_EXTENSIONS = [".aux", ".log", ".fls", ".fdb_latexmk", ".synctex.gz"]


def sibling_paths(primary: Path, extensions: Iterable[str]) -> List[Path]:
    """All paths sharing primary's basename with the given extensions (primary first)."""
    # with_suffix() would mangle double extensions like .synctex.gz
    base = primary.parent / primary.name[: -len(primary.suffix)] if primary.suffix else primary
    paths = [primary]
    for ext in extensions:
        candidate = Path(f"{base}{ext}")
        if candidate not in paths:
            paths.append(candidate)
    return paths


def remove_quietly(paths: Iterable[Path]) -> None:
    """Delete each path if present; log failures instead of raising."""
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not remove scratch file {path}: {e}")


@contextmanager
def scoped_file(
    base_dir: Path,
    name_prefix: str,
    content: str,
    extension: str = ".tex",
    extra_extensions: Iterable[str] = (),
) -> Iterator[Path]:
    """
    Write content to a uniquely named file and guarantee cleanup on exit.

    Args:
        base_dir: Scratch directory (created if absent)
        name_prefix: Prefix for the file name (e.g., "resume_")
        content: Text written to the file (UTF-8)
        extension: Primary extension (default: ".tex")
        extra_extensions: Additional sibling extensions to remove (e.g., [".pdf"])

    Yields:
        Path to the written file

    Example:
        with scoped_file(Path("outs/scratch"), "resume_", tex) as tex_path:
            subprocess.run(["pdflatex", tex_path.name], cwd=tex_path.parent)
        # tex_path, .aux, .log, ... are gone here
    """
    base_dir = Path(base_dir)
    base_dir.mkdir(parents=True, exist_ok=True)

    path = base_dir / f"{name_prefix}{unique_stamp()}{extension}"
    cleanup = sibling_paths(path, [*LATEX_AUX_EXTENSIONS, *extra_extensions])

    try:
        path.write_text(content, encoding="utf-8")
        logger.debug(f"Scratch file created: {path}")
        yield path
    finally:
        remove_quietly(cleanup)
        logger.debug(f"Scratch files cleaned up: {path.name} (+{len(cleanup) - 1} siblings)")
