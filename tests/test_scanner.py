"""Tests for scanner module."""

import os
import tempfile
from pathlib import Path

import pathspec
import pytest

from scanner.discovery import iter_files, file_extension
from scanner.ignore import IgnoreMatcher, DEFAULT_EXCLUDE_DIRS
from scanner.parser import (
    ECMASCRIPT,
    PYTHON,
    STYLESHEET,
    extract_imports,
    language_for,
)
from scanner.resolver import (
    candidate_paths,
    is_relative_import,
    resolve_import,
)


def write(root: Path, relative: str, content: str = "") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class TestImportExtraction:
    """Tests for per-language import extraction."""

    def test_language_for(self):
        """Test extension to language class mapping."""
        assert language_for(".ts") == ECMASCRIPT
        assert language_for(".TSX") == ECMASCRIPT
        assert language_for(".jsx") == ECMASCRIPT
        assert language_for(".scss") == STYLESHEET
        assert language_for(".py") == PYTHON
        assert language_for(".go") is None
        assert language_for(".md") is None

    def test_ecmascript_forms(self):
        """Test import-from, require and dynamic import, in source order."""
        content = (
            "import React from 'react';\n"
            "import { helper } from \"./utils/helper\";\n"
            "const config = require('../config');\n"
            "const Page = lazy(() => import('./pages/Home'));\n"
        )

        imports = extract_imports(content, ECMASCRIPT)

        assert imports == ["react", "./utils/helper", "../config", "./pages/Home"]

    def test_duplicates_preserved(self):
        """Test that repeated imports are all reported."""
        content = "import a from './a';\nimport b from './a';\n"

        assert extract_imports(content, ECMASCRIPT) == ["./a", "./a"]

    def test_empty_capture_skipped(self):
        """Test that an empty import string produces no entry."""
        content = "const x = require('');\nimport y from './y';\n"

        assert extract_imports(content, ECMASCRIPT) == ["./y"]

    def test_commented_import_is_matched(self):
        """Test the known approximation: look-alikes in comments match too."""
        content = "// import ghost from './ghost';\n"

        assert extract_imports(content, ECMASCRIPT) == ["./ghost"]

    def test_stylesheet_forms(self):
        """Test @import and url() references."""
        content = (
            "@import './base.css';\n"
            "@import \"theme\";\n"
            "body { background: url('./img/bg.png'); }\n"
            "h1 { background: url(./unquoted.png); }\n"
        )

        imports = extract_imports(content, STYLESHEET)

        assert imports == ["./base.css", "theme", "./img/bg.png"]

    def test_python_forms(self):
        """Test import X and from X import ... forms."""
        content = (
            "import os\n"
            "import pkg.sub\n"
            "from pkg.sub import y\n"
            "from .sibling import z\n"
            "from . import w\n"
            "try:\n"
            "    import json\n"
            "except ImportError:\n"
            "    pass\n"
        )

        imports = extract_imports(content, PYTHON)

        assert imports == ["os", "pkg", "pkg.sub", ".sibling", ".", "json"]

    def test_python_import_mid_line_ignored(self):
        """Test that 'import' inside an expression is not an import statement."""
        content = "x = 'import nothing'\n"

        assert extract_imports(content, PYTHON) == []

    def test_no_rules_for_other_languages(self):
        """Test that languages without rules produce no imports."""
        assert extract_imports('import "fmt"', language_for(".go")) == []
        assert extract_imports("#include <stdio.h>", language_for(".c")) == []
        assert extract_imports("anything", None) == []


class TestPathResolution:
    """Tests for relative import resolution."""

    def test_is_relative_import(self):
        """Test the relative-reference check."""
        assert is_relative_import("./a")
        assert is_relative_import("../a")
        assert not is_relative_import("react")
        assert not is_relative_import("@scope/pkg")

    def test_candidate_order(self):
        """Test the exact path comes first, then the fallbacks in order."""
        candidates = candidate_paths("./sub", "src/a.ts")

        assert candidates == [
            "src/sub",
            "src/sub.ts", "src/sub.tsx", "src/sub.js", "src/sub.jsx",
            "src/sub.css", "src/sub.scss",
            "src/sub/index.ts", "src/sub/index.js",
        ]

    def test_exact_match(self):
        """Test an import naming an existing file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, "a.ts")
            write(root, "b.ts")

            assert resolve_import("./b.ts", "a.ts", ECMASCRIPT, root) == "b.ts"

    def test_extension_probe(self):
        """Test extension fallbacks, earliest candidate wins."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, "a.ts")
            write(root, "b.js")
            write(root, "b.ts")

            assert resolve_import("./b", "a.ts", ECMASCRIPT, root) == "b.ts"

    def test_index_fallback(self):
        """Test that a directory import resolves to its index file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, "a.ts")
            write(root, "sub/index.ts")

            assert resolve_import("./sub", "a.ts", ECMASCRIPT, root) == "sub/index.ts"

    def test_parent_directory(self):
        """Test resolving '..' against the importing file's directory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, "src/app/main.ts")
            write(root, "src/lib/util.js")

            resolved = resolve_import("../lib/util", "src/app/main.ts", ECMASCRIPT, root)

            assert resolved == "src/lib/util.js"

    def test_stylesheet_relative(self):
        """Test that stylesheet imports use the same probing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, "styles/site.scss")
            write(root, "styles/base.scss")

            assert resolve_import("./base", "styles/site.scss", STYLESHEET, root) == "styles/base.scss"

    def test_bare_import_not_probed(self):
        """Test that bare imports are external even if a same-named file exists."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, "a.ts")
            write(root, "react.ts")

            assert resolve_import("react", "a.ts", ECMASCRIPT, root) is None
            assert resolve_import("theme", "a.css", STYLESHEET, root) is None

    def test_missing_relative(self):
        """Test that a relative import with no candidate is unresolved."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            write(root, "a.ts")

            assert resolve_import("./missing", "a.ts", ECMASCRIPT, root) is None

    def test_escape_root(self, tmp_path):
        """Test that a target outside the root is unresolved."""
        root = tmp_path / "project"
        write(root, "a.ts")
        write(tmp_path, "secret.ts")

        assert resolve_import("../secret", "a.ts", ECMASCRIPT, root) is None

    def test_python_dotted(self, tmp_path):
        """Test dotted module names map to .py files at the root."""
        write(tmp_path, "main.py")
        write(tmp_path, "pkg/sub.py")

        assert resolve_import("pkg.sub", "main.py", PYTHON, tmp_path) == "pkg/sub.py"
        assert resolve_import("pkg.other", "main.py", PYTHON, tmp_path) is None
        assert resolve_import("os", "main.py", PYTHON, tmp_path) is None

    def test_python_package_dir_not_resolved(self, tmp_path):
        """Test a package directory alone does not satisfy a module import."""
        write(tmp_path, "main.py")
        write(tmp_path, "pkg/__init__.py")

        assert resolve_import("pkg", "main.py", PYTHON, tmp_path) is None

    def test_python_bare_lookup_is_root_based(self, tmp_path):
        """Test bare Python imports are looked up at the root only."""
        write(tmp_path, "pkg/sub.py")
        write(tmp_path, "pkg/helpers.py")

        assert resolve_import("helpers", "pkg/sub.py", PYTHON, tmp_path) is None

    def test_python_relative(self, tmp_path):
        """Test leading dots resolve against the importing package."""
        write(tmp_path, "pkg/sub.py")
        write(tmp_path, "pkg/helpers.py")
        write(tmp_path, "pkg/inner/mod.py")
        write(tmp_path, "pkg/util.py")

        assert resolve_import(".helpers", "pkg/sub.py", PYTHON, tmp_path) == "pkg/helpers.py"
        assert resolve_import("..util", "pkg/inner/mod.py", PYTHON, tmp_path) == "pkg/util.py"
        assert resolve_import(".", "pkg/sub.py", PYTHON, tmp_path) is None
        assert resolve_import("..util", "main.py", PYTHON, tmp_path) is None


class TestIgnoreMatcher:
    """Tests for ignore rules."""

    def test_gitignore_semantics(self):
        """Test directory-only, glob, negation and anchored patterns."""
        matcher = IgnoreMatcher(["build-output/", "*.log", "!keep.log", "/anchored.ts"])

        assert matcher.ignores("build-output", is_dir=True)
        assert matcher.ignores("src/build-output", is_dir=True)
        assert matcher.ignores("build-output/app.ts")
        assert not matcher.ignores("build-output", is_dir=False)
        assert matcher.ignores("debug.log")
        assert not matcher.ignores("keep.log")
        assert matcher.ignores("anchored.ts")
        assert not matcher.ignores("src/anchored.ts")

    def test_no_patterns(self):
        """Test that an empty matcher ignores nothing."""
        matcher = IgnoreMatcher()

        assert matcher.pattern_count == 0
        assert not matcher.ignores("anything.ts")

    def test_hidden_entries(self):
        """Test the dotfile rule and its .gitignore exception."""
        matcher = IgnoreMatcher()

        assert matcher.is_hidden(".env")
        assert matcher.is_hidden(".git", is_dir=True)
        assert not matcher.is_hidden(".gitignore")
        assert matcher.is_hidden(".gitignore", is_dir=True)
        assert not matcher.is_hidden("src", is_dir=True)

    def test_denylist_not_overridable(self):
        """Test that negated patterns cannot re-include denylisted dirs."""
        matcher = IgnoreMatcher(["!node_modules/", "!vendor"])

        for name in DEFAULT_EXCLUDE_DIRS:
            assert matcher.should_skip(name, f"src/{name}", is_dir=True)

    def test_denylist_applies_to_directories_only(self):
        """Test that a file named like a denylisted dir is kept."""
        matcher = IgnoreMatcher()

        assert not matcher.should_skip("build", "build", is_dir=False)

    def test_extra_exclude_dirs(self):
        """Test configured directory names add to the denylist."""
        matcher = IgnoreMatcher(exclude_dirs={"fixtures"})

        assert matcher.is_denied_dir("fixtures")
        assert matcher.is_denied_dir("node_modules")

    def test_malformed_line_dropped(self, monkeypatch):
        """Test that a line pathspec rejects is dropped, not raised."""
        original = pathspec.GitIgnoreSpec.from_lines

        def from_lines(lines, *args, **kwargs):
            if "BROKEN" in list(lines):
                raise ValueError("Invalid git pattern")
            return original(lines, *args, **kwargs)

        monkeypatch.setattr(pathspec.GitIgnoreSpec, "from_lines", staticmethod(from_lines))

        matcher = IgnoreMatcher(["*.log", "BROKEN", "tmp/"])

        assert matcher.pattern_count == 2
        assert matcher.ignores("debug.log")
        assert matcher.ignores("tmp", is_dir=True)

    def test_odd_lines_do_not_raise(self):
        """Test that comments, blanks and odd lines are tolerated."""
        matcher = IgnoreMatcher(["# comment", "", "   ", "foo//bar", "[", "\\", "*.log"])

        assert matcher.ignores("x.log")

    def test_from_root(self, tmp_path):
        """Test loading patterns from the root .gitignore."""
        write(tmp_path, ".gitignore", "generated/\n*.tmp.ts\n")

        matcher = IgnoreMatcher.from_root(tmp_path)

        assert matcher.pattern_count == 2
        assert matcher.ignores("generated", is_dir=True)
        assert matcher.ignores("src/a.tmp.ts")

    def test_from_root_missing_file(self, tmp_path):
        """Test that a missing .gitignore is not an error."""
        matcher = IgnoreMatcher.from_root(tmp_path)

        assert matcher.pattern_count == 0

    def test_from_root_disabled(self, tmp_path):
        """Test respect_gitignore=False skips the file."""
        write(tmp_path, ".gitignore", "generated/\n")

        matcher = IgnoreMatcher.from_root(tmp_path, respect_gitignore=False)

        assert not matcher.ignores("generated", is_dir=True)


class TestDiscovery:
    """Tests for directory traversal."""

    def test_file_extension(self):
        """Test extension extraction."""
        assert file_extension("App.TSX") == ".tsx"
        assert file_extension("Makefile") == ""
        assert file_extension(".gitignore") == ""

    def test_accepted_files(self, tmp_path):
        """Test extension filter, hidden entries and denylisted dirs."""
        write(tmp_path, "src/main.ts")
        write(tmp_path, "src/readme.md")
        write(tmp_path, "src/logo.png")
        write(tmp_path, ".hidden/secret.ts")
        write(tmp_path, ".eslintrc.js")
        write(tmp_path, "node_modules/lib/index.js")
        write(tmp_path, "packages/app/node_modules/dep.js")
        write(tmp_path, "dist/bundle.js")

        ids = {f.relative_id for f in iter_files(tmp_path)}

        assert ids == {"src/main.ts", "src/readme.md"}

    def test_absolute_paths(self, tmp_path):
        """Test that yielded paths are absolute and match their ids."""
        write(tmp_path, "src/main.ts")

        files = list(iter_files(tmp_path))

        assert len(files) == 1
        assert files[0].path.is_absolute()
        assert files[0].path == (tmp_path / "src" / "main.ts").resolve()

    def test_include_ext(self, tmp_path):
        """Test a custom extension allow-list."""
        write(tmp_path, "a.ts")
        write(tmp_path, "b.py")

        ids = {f.relative_id for f in iter_files(tmp_path, include_ext={".py"})}

        assert ids == {"b.py"}

    def test_max_depth(self, tmp_path):
        """Test depth limiting (root contents are depth 0)."""
        write(tmp_path, "top.ts")
        write(tmp_path, "one/mid.ts")
        write(tmp_path, "one/two/deep.ts")

        ids = {f.relative_id for f in iter_files(tmp_path, max_depth=1)}

        assert ids == {"top.ts", "one/mid.ts"}

    def test_gitignore_applied(self, tmp_path):
        """Test that matcher rules prune files and directories."""
        write(tmp_path, "src/main.ts")
        write(tmp_path, "generated/api.ts")
        write(tmp_path, "src/main.test.ts")

        matcher = IgnoreMatcher(["generated/", "*.test.ts"])
        ids = {f.relative_id for f in iter_files(tmp_path, matcher=matcher)}

        assert ids == {"src/main.ts"}

    def test_symlinks_not_followed(self, tmp_path):
        """Test that symlinked directories are skipped."""
        write(tmp_path, "real/a.ts")
        try:
            os.symlink(tmp_path / "real", tmp_path / "link", target_is_directory=True)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        ids = {f.relative_id for f in iter_files(tmp_path)}

        assert ids == {"real/a.ts"}

    def test_unreadable_directory_skipped(self, tmp_path, monkeypatch):
        """Test that a directory listing error skips only that directory."""
        write(tmp_path, "ok/a.ts")
        write(tmp_path, "locked/b.ts")

        real_scandir = os.scandir

        def scandir(path):
            if Path(path).name == "locked":
                raise PermissionError(13, "Permission denied")
            return real_scandir(path)

        monkeypatch.setattr("scanner.discovery.os.scandir", scandir)

        ids = {f.relative_id for f in iter_files(tmp_path)}

        assert ids == {"ok/a.ts"}
