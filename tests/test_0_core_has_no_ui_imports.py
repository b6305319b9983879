"""Guard: nothing under src/tf_prism/core imports the UI stack.

The parser, decoder and diff engine are plain data transforms. A stray
`import rich` or `from tf_prism.tui import ...` in core would drag the
terminal layer into code that tests and the CLI use without it.

This file is named with `test_0_` so it runs first.
"""

import ast
import os


_CORE_ROOT = os.path.join(os.path.dirname(__file__), "..", "src", "tf_prism", "core")

_FORBIDDEN = ("textual", "rich", "tf_prism.tui", "tf_prism.io")


def _imported_names(tree):
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield node.lineno, alias.name
        elif isinstance(node, ast.ImportFrom) and node.module:
            yield node.lineno, node.module


def _find_ui_imports_in_core():
    violations = []
    for dirpath, _dirs, files in os.walk(_CORE_ROOT):
        for fname in files:
            if not fname.endswith(".py"):
                continue
            path = os.path.join(dirpath, fname)
            with open(path) as f:
                tree = ast.parse(f.read(), filename=path)

            rel = os.path.relpath(path, _CORE_ROOT)
            for lineno, name in _imported_names(tree):
                if any(name == root or name.startswith(root + ".") for root in _FORBIDDEN):
                    violations.append(f"{rel}:{lineno} imports {name}")
    return violations


def test_core_has_no_ui_imports():
    violations = _find_ui_imports_in_core()
    assert violations == [], (
        "core modules must stay free of the UI stack:\n"
        + "\n".join(f"  {v}" for v in violations)
    )
