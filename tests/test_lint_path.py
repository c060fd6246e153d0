from pathlib import Path

import pytest

from scopelint.config import LintConfig
from scopelint.services import analysis
from scopelint.services.errors import ConfigurationError


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _names(root: Path, files):
    return [f.relative_to(root.resolve()).as_posix() for f in files]


def test_collect_source_files_filters_by_extension_and_ignore_lists(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    _write(root / "src" / "index.js", "")
    _write(root / "src" / "view.tsx", "")
    _write(root / "src" / "vendor.min.js", "")
    _write(root / "node_modules" / "lib" / "index.js", "")
    _write(root / "README.md", "")
    _write(root / "package-lock.json", "{}")

    files = analysis.collect_source_files(root)

    assert _names(root, files) == ["src/index.js", "src/view.tsx"]


def test_collect_source_files_honors_nested_gitignore(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    (root / ".git").mkdir(parents=True)
    _write(root / ".gitignore", "generated/\n*.gen.js\n")
    _write(root / "pkg" / ".gitignore", "/local.js\n")
    _write(root / "main.js", "")
    _write(root / "types.gen.js", "")
    _write(root / "generated" / "out.js", "")
    _write(root / "pkg" / "local.js", "")
    _write(root / "pkg" / "keep.js", "")
    _write(root / "pkg" / "sub" / "local.js", "")

    files = analysis.collect_source_files(root)

    assert _names(root, files) == ["main.js", "pkg/keep.js", "pkg/sub/local.js"]


def test_gitignore_negation(tmp_path: Path) -> None:
    root = tmp_path / "repo"
    (root / ".git").mkdir(parents=True)
    _write(root / ".gitignore", "*.js\n!keep.js\n")
    _write(root / "drop.js", "")
    _write(root / "keep.js", "")

    assert _names(root, analysis.collect_source_files(root)) == ["keep.js"]


def test_single_file_path(tmp_path: Path) -> None:
    src = _write(tmp_path / "one.js", "")

    assert analysis.collect_source_files(src) == [src.resolve()]


def test_lint_path_records_undecodable_files(tmp_path: Path) -> None:
    _write(tmp_path / "good.js", "var a = 1;\n")
    (tmp_path / "bad.js").write_bytes(b"\xff\xfe\x00var")

    results = {Path(r.filename).name: r for r in analysis.lint_path(tmp_path)}

    assert results["good.js"].error is None
    assert results["good.js"].messages == []
    assert results["bad.js"].error is not None
    assert results["bad.js"].messages == []


def test_lint_path_config_errors_propagate(tmp_path: Path) -> None:
    _write(tmp_path / "a.js", "")

    with pytest.raises(ConfigurationError):
        analysis.lint_path(tmp_path, LintConfig(rules={"unknown": []}))


def test_lint_path_uses_config(tmp_path: Path) -> None:
    _write(tmp_path / "a.js", "leaked;\nasync function f() { return 1; }\n")

    results = analysis.lint_path(tmp_path, LintConfig(rules={"require-await": []}))

    assert [m.ruleId for m in results[0].messages] == ["require-await"]
