from __future__ import annotations

import ast
import logging
from contextlib import contextmanager
from pathlib import Path

import pytest

import iracebind
from iracebind.foundation.logging import configure_iracebind_logging

FORBIDDEN_CALLS = {
    "print": "print()",
    "pprint": "pprint()",
    "pprint.pprint": "pprint()",
    "logging.basicConfig": "logging.basicConfig",
    "basicConfig": "logging.basicConfig",
}


def _src_root() -> Path:
    return Path(__file__).resolve().parents[1] / "src" / "iracebind"


def _call_name(node: ast.Call) -> str | None:
    func = node.func
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute) and isinstance(func.value, ast.Name):
        return f"{func.value.id}.{func.attr}"
    return None


def _library_files() -> list[Path]:
    return sorted(_src_root().rglob("*.py"))


def test_library_has_modules_to_check() -> None:
    assert _library_files()


def test_no_prints_or_basic_config_in_library() -> None:
    root = _src_root().parents[1]
    violations: list[str] = []
    for path in _library_files():
        rel_path = path.relative_to(root).as_posix()
        tree = ast.parse(path.read_text(encoding="utf-8-sig"))
        for node in ast.walk(tree):
            if not isinstance(node, ast.Call):
                continue
            name = _call_name(node)
            if name in FORBIDDEN_CALLS:
                violations.append(f"{rel_path}:{node.lineno}: {FORBIDDEN_CALLS[name]}")

    if violations:
        msg = ["Library modules must log through logging.getLogger(__name__):"]
        msg.extend(f"- {item}" for item in violations)
        raise AssertionError("\n".join(msg))


def test_importing_the_package_attaches_no_handlers() -> None:
    assert iracebind.__version__
    assert logging.getLogger("iracebind").handlers == []


@pytest.fixture
def clean_package_logger(monkeypatch):
    package_logger = logging.getLogger("iracebind")
    monkeypatch.setattr(package_logger, "handlers", [])
    monkeypatch.setattr(package_logger, "propagate", True)
    monkeypatch.setattr(package_logger, "level", logging.NOTSET)
    return package_logger


@contextmanager
def root_handlers(*handlers: logging.Handler):
    # pytest attaches its capture handler to the root logger around each test call.
    root = logging.getLogger()
    saved = root.handlers
    root.handlers = list(handlers)
    try:
        yield root
    finally:
        root.handlers = saved


def test_configure_logging_is_opt_in(clean_package_logger) -> None:
    with root_handlers():
        configure_iracebind_logging(level=logging.DEBUG)
    assert len(clean_package_logger.handlers) == 1
    assert clean_package_logger.level == logging.DEBUG
    assert clean_package_logger.propagate is False

    # A second call keeps the existing handler.
    with root_handlers():
        configure_iracebind_logging()
    assert len(clean_package_logger.handlers) == 1


def test_configure_logging_respects_user_setup(clean_package_logger) -> None:
    with root_handlers(logging.NullHandler()):
        configure_iracebind_logging()
    assert clean_package_logger.handlers == []


def test_no_bare_or_silent_except_in_library() -> None:
    root = _src_root().parents[1]
    violations: list[str] = []
    for path in _library_files():
        rel_path = path.relative_to(root).as_posix()
        for node in ast.walk(ast.parse(path.read_text(encoding="utf-8-sig"))):
            if not isinstance(node, ast.ExceptHandler):
                continue
            if node.type is None:
                violations.append(f"{rel_path}:{node.lineno}: bare except:")
            elif len(node.body) == 1 and isinstance(node.body[0], ast.Pass):
                violations.append(f"{rel_path}:{node.lineno}: except ...: pass")

    assert not violations, "\n".join(violations)
