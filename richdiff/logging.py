# richdiff/richdiff/logging.py
from __future__ import annotations
import logging as _logging
import os
import sys

_RESET = "\x1b[0m"
_COLORS = {
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "red": "\x1b[31m",
    "cyan": "\x1b[36m",
    "gray": "\x1b[90m",
}

# message kind -> (level, leading mark, mark color)
_MARKS = {
    "ok": (_logging.INFO, "✓", "green"),
    "step": (_logging.INFO, "→", "cyan"),
    "warn": (_logging.WARNING, "⚠", "yellow"),
    "err": (_logging.ERROR, "✖", "red"),
}

_LOGGER = _logging.getLogger("richdiff")
_color = False


def _tty(stream) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty()) and os.environ.get("TERM", "dumb") != "dumb"


def level_for(verbosity: int) -> int:
    """-v count to level: none shows warnings and errors, -v adds progress, -vv debug."""
    if verbosity <= 0:
        return _logging.WARNING
    return _logging.INFO if verbosity == 1 else _logging.DEBUG


def c(text: str, color: str) -> str:
    if not _color or color not in _COLORS:
        return text
    return f"{_COLORS[color]}{text}{_RESET}"


def setup_logging(verbosity: int = 0, log_file: str | None = None) -> None:
    """
    Send plain messages to stderr, and optionally to `log_file` too.
    Calling it again replaces the previous handlers.
    """
    global _color
    _color = _tty(sys.stderr)
    level = level_for(verbosity)

    targets = [_logging.StreamHandler(stream=sys.stderr)]
    if log_file:
        targets.append(_logging.FileHandler(log_file, encoding="utf-8"))

    for old in list(_LOGGER.handlers):
        _LOGGER.removeHandler(old)
        old.close()
    for handler in targets:
        handler.setLevel(level)
        handler.setFormatter(_logging.Formatter("%(message)s"))
        _LOGGER.addHandler(handler)
    _LOGGER.setLevel(level)
    _LOGGER.propagate = False


def _emit(kind: str, msg: str) -> None:
    level, mark, color = _MARKS[kind]
    _LOGGER.log(level, f"{c(mark, color)} {msg}")


def log_debug(msg: str) -> None:
    _LOGGER.debug(msg)


def log_info(msg: str) -> None:
    _LOGGER.info(msg)


def log_ok(msg: str) -> None:
    _emit("ok", msg)


def log_warn(msg: str) -> None:
    _emit("warn", msg)


def log_err(msg: str) -> None:
    _emit("err", msg)


def log_step(label: str, value: str = "") -> None:
    _emit("step", f"{label} {c(value, 'gray')}" if value else label)


def log_tally(label: str, count: int, note: str = "") -> None:
    """One indented `• label: count` line; zero is green, anything else yellow."""
    line = f"    • {label}: {c(str(count), 'green' if count == 0 else 'yellow')}"
    if note:
        line += " " + c(f"({note})", "gray")
    _LOGGER.info(line)
