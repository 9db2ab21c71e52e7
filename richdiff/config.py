# richdiff/richdiff/config.py
from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import yaml
from richdiff import logging as slog
from richdiff.problems import DEFAULT_MAX_PROBLEMS
from richdiff.sources import resolve_delimiter

_SUPPORTED_CONFIG_VERSIONS = {"1"}
_TOP_LEVEL_KEYS = {
    "config_version", "max_displayed_problems", "stop_at_max",
    "defaults", "expected", "actual", "report", "crash_log_dir",
}
_SOURCE_KEYS = {"delimiter", "encoding", "skip_blank_lines"}
_REPORT_KEYS = {"output", "title", "theme", "json_output"}

def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge dicts with 'explicit null clears default' semantics."""
    out = deepcopy(base) if base else {}
    for k, v in (override or {}).items():
        if v is None:
            out[k] = None
        elif isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


@dataclass
class SourceConfig:
    delimiter: str = ","
    encoding: str = "utf-8"
    skip_blank_lines: bool = True


@dataclass
class RichDiffConfig:
    expected: SourceConfig = field(default_factory=SourceConfig)
    actual: SourceConfig = field(default_factory=SourceConfig)
    max_displayed_problems: int = DEFAULT_MAX_PROBLEMS
    stop_at_max: bool = False
    report_output: Optional[str] = "out.html"
    report_title: Optional[str] = None
    theme: str = "light"
    json_output: Optional[str] = None
    crash_log_dir: Optional[str] = None


_SOURCE_DEFAULTS = {"delimiter": "comma", "encoding": "utf-8", "skip_blank_lines": True}
_REPORT_DEFAULTS = {"output": "out.html", "title": None, "theme": "light", "json_output": None}


class ConfigLoader:
    """
    Loads an optional YAML config:
      config_version: "1"
      max_displayed_problems: 50
      stop_at_max: false
      defaults: { delimiter, encoding, skip_blank_lines }
      expected: { ...same keys, override defaults... }
      actual:   { ...same keys, override defaults... }
      report:   { output, title, theme, json_output }
      crash_log_dir: path | null

    Notes:
      - Delimiters are names (comma/pipe/tab) or a single character.
      - `output: null` disables the HTML report.
      - With strict=False, unknown keys only warn; invalid values always raise.
    """

    def __init__(self, yaml_path: Optional[str] = None, *, strict: bool = True):
        self.yaml_path = yaml_path
        self.strict = strict

    def _warn_or_raise(self, msg: str, *, fatal: bool = False) -> None:
        if fatal or self.strict:
            slog.log_err(msg)
            raise ValueError(msg)
        slog.log_warn(msg)

    def _check_keys(self, block: Dict[str, Any], allowed: set, where: str) -> None:
        unknown = sorted(set(block) - allowed)
        if unknown:
            self._warn_or_raise(f"{where}: unknown key(s) {unknown}. Allowed: {sorted(allowed)}")

    def _as_mapping(self, value: Any, where: str) -> Dict[str, Any]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            self._warn_or_raise(f"{where} must be a mapping.", fatal=True)
        return value

    def _normalize_source(self, defaults: Dict[str, Any], side_raw: Any, side: str) -> SourceConfig:
        side_cfg = self._as_mapping(side_raw, side)
        self._check_keys(side_cfg, _SOURCE_KEYS, side)
        merged = _deep_merge(defaults, side_cfg)

        try:
            delimiter = resolve_delimiter(merged.get("delimiter") or "comma")
        except ValueError as e:
            self._warn_or_raise(f"{side}.delimiter: {e}", fatal=True)

        encoding = str(merged.get("encoding") or "utf-8").strip()
        skip_blank = merged.get("skip_blank_lines")
        if skip_blank is None:
            skip_blank = True
        if not isinstance(skip_blank, bool):
            self._warn_or_raise(f"{side}.skip_blank_lines must be true or false.", fatal=True)

        return SourceConfig(delimiter=delimiter, encoding=encoding, skip_blank_lines=skip_blank)

    def _normalize_max(self, value: Any) -> int:
        if value is None:
            return DEFAULT_MAX_PROBLEMS
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            self._warn_or_raise(
                f"max_displayed_problems must be a positive integer, got {value!r}.",
                fatal=True,
            )
        return value

    def _normalize_theme(self, theme_raw: Any) -> str:
        if theme_raw is None:
            return "light"
        t = str(theme_raw).strip().lower()
        if t not in {"light", "dark"}:
            self._warn_or_raise("report.theme must be 'light' or 'dark' if provided.", fatal=True)
        return t

    def from_mapping(self, raw: Dict[str, Any]) -> RichDiffConfig:
        raw = self._as_mapping(raw, "config")
        self._check_keys(raw, _TOP_LEVEL_KEYS, "config")

        version = raw.get("config_version")
        if version is not None and str(version).strip() not in _SUPPORTED_CONFIG_VERSIONS:
            self._warn_or_raise(
                f"Unsupported config_version '{version}'. Supported: {sorted(_SUPPORTED_CONFIG_VERSIONS)}",
                fatal=True,
            )

        defaults_raw = self._as_mapping(raw.get("defaults"), "defaults")
        self._check_keys(defaults_raw, _SOURCE_KEYS, "defaults")
        defaults = _deep_merge(_SOURCE_DEFAULTS, defaults_raw)

        report_raw = self._as_mapping(raw.get("report"), "report")
        self._check_keys(report_raw, _REPORT_KEYS, "report")
        report = _deep_merge(_REPORT_DEFAULTS, report_raw)

        stop_at_max = raw.get("stop_at_max", False)
        if not isinstance(stop_at_max, bool):
            self._warn_or_raise("stop_at_max must be true or false.", fatal=True)

        return RichDiffConfig(
            expected=self._normalize_source(defaults, raw.get("expected"), "expected"),
            actual=self._normalize_source(defaults, raw.get("actual"), "actual"),
            max_displayed_problems=self._normalize_max(raw.get("max_displayed_problems")),
            stop_at_max=stop_at_max,
            report_output=report.get("output"),
            report_title=report.get("title"),
            theme=self._normalize_theme(report.get("theme")),
            json_output=report.get("json_output"),
            crash_log_dir=raw.get("crash_log_dir"),
        )

    def load(self) -> RichDiffConfig:
        if not self.yaml_path:
            return self.from_mapping({})
        slog.log_step("Loading config:", self.yaml_path)
        with open(self.yaml_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        cfg = self.from_mapping(raw)
        slog.log_ok("Config loaded.")
        return cfg
