import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

from pathspec import PathSpec

from scopelint.config import IGNORE_DIRS, IGNORE_FILES, IGNORE_SUFFIXES, SOURCE_EXTENSIONS, LintConfig
from scopelint.models import LintResponse
from scopelint.services.linter import Linter, to_lint_message

logger = logging.getLogger(__name__)


def find_repo_root(start_path: Path) -> Path:
    current = start_path.resolve()
    for parent in [current, *current.parents]:
        if (parent / ".git").exists():
            return parent
    return current


def _translate_gitignore_pattern(raw_line: str, base_rel: str) -> Optional[str]:
    """
    Rewrite one line of a .gitignore found in `base_rel` (relative to the
    repo root) as a root-relative gitwildmatch pattern.

    Negation (`!`) and anchoring (`/`) are kept; a pattern without a slash
    matches anywhere below its own directory.
    """
    line = raw_line.rstrip("\n")
    if not line.strip() or line.lstrip().startswith("#"):
        return None

    negated = line.startswith("!")
    body = line[1:] if negated else line
    anchored = body.startswith("/")
    if anchored:
        body = body[1:]

    if anchored or "/" in body.rstrip("/"):
        pattern = f"{base_rel}/{body}" if base_rel else body
    elif base_rel:
        pattern = f"{base_rel}/**/{body}"
    else:
        pattern = f"**/{body}"

    return f"!{pattern}" if negated else pattern


def load_gitignore_spec(root_path: Path) -> Tuple[Path, Optional[PathSpec]]:
    """
    Collect every .gitignore under the repository that contains `root_path`.

    Patterns are resolved against the repository root, so linting a
    subdirectory still honors ignore files higher up.
    """
    repo_root = find_repo_root(root_path)
    patterns: List[str] = []

    for dirpath, dirnames, filenames in os.walk(repo_root):
        if ".git" in dirnames:
            dirnames.remove(".git")
        if ".gitignore" not in filenames:
            continue

        current = Path(dirpath)
        base_rel = "" if current == repo_root else current.relative_to(repo_root).as_posix()
        with open(current / ".gitignore", "r", encoding="utf-8") as f:
            for raw in f:
                translated = _translate_gitignore_pattern(raw, base_rel)
                if translated is not None:
                    patterns.append(translated)

    if not patterns:
        return repo_root, None
    return repo_root, PathSpec.from_lines("gitwildmatch", patterns)


def is_gitignored(path: Path, ignore_root: Path, spec: Optional[PathSpec]) -> bool:
    if spec is None:
        return False
    try:
        rel = path.relative_to(ignore_root)
    except ValueError:
        rel = path
    rel_str = rel.as_posix()
    if path.is_dir():
        # Directory patterns such as `build/` only match with the trailing slash.
        return spec.match_file(rel_str) or spec.match_file(rel_str + "/")
    return spec.match_file(rel_str)


def is_source_file(name: str) -> bool:
    if name in IGNORE_FILES or name.endswith(IGNORE_SUFFIXES):
        return False
    return Path(name).suffix in SOURCE_EXTENSIONS


def collect_source_files(root_path: Path) -> List[Path]:
    """Return the lintable files under `root_path` in a stable, sorted order."""
    root_path = root_path.resolve()
    if root_path.is_file():
        return [root_path]

    ignore_root, spec = load_gitignore_spec(root_path)
    found: List[Path] = []

    for root_dir, dirs, files in os.walk(root_path):
        root_dir_path = Path(root_dir)
        # Prune in place so os.walk never descends into ignored directories
        dirs[:] = sorted(
            d for d in dirs
            if d not in IGNORE_DIRS and not is_gitignored(root_dir_path / d, ignore_root, spec)
        )
        for name in sorted(files):
            if not is_source_file(name):
                continue
            file_path = root_dir_path / name
            if is_gitignored(file_path, ignore_root, spec):
                continue
            found.append(file_path)

    return found


def lint_file(linter: Linter, file_path: Path) -> LintResponse:
    """
    Lint one file; a file that cannot be read or decoded becomes an error entry.

    Configuration and traversal errors are not caught.
    """
    try:
        source = file_path.read_bytes()
        source.decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Skipping {file_path}: {e}")
        return LintResponse(filename=str(file_path), error=str(e))

    diagnostics = linter.lint_source(source, str(file_path))
    logger.info(f"{file_path}: {len(diagnostics)} problem(s)")
    return LintResponse(
        filename=str(file_path),
        messages=[to_lint_message(d) for d in diagnostics],
    )


def lint_path(root_path: Path, config: Optional[LintConfig] = None) -> List[LintResponse]:
    # Building the linter first surfaces configuration errors before any file is read.
    linter = Linter(config)
    files = collect_source_files(root_path)
    logger.info(f"Linting {len(files)} file(s) under {root_path}")

    results = [lint_file(linter, f) for f in files]

    total = sum(len(r.messages) for r in results)
    failed = sum(1 for r in results if r.error is not None)
    logger.info(f"Finished {root_path}: {total} problem(s), {failed} unreadable file(s)")
    return results
