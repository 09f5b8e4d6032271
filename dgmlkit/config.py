"""Configuration loading from ``dgmlkit.toml``: title, analyses, strictness."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .analyses import ANALYSES, GraphAnalysis
from .errors import ConfigError

CONFIG_FILENAME = "dgmlkit.toml"


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


@dataclass(frozen=True)
class DgmlConfig:
    title: str | None = None
    analyses: tuple[str, ...] = ("hub",)
    strict: bool = False
    options: dict[str, dict[str, Any]] = field(default_factory=dict)  # analysis name -> kwargs

    def build_analyses(self, names: tuple[str, ...] | None = None) -> list[GraphAnalysis]:
        """Instantiate analyses by name, in order, with their configured options."""
        built: list[GraphAnalysis] = []
        for name in self.analyses if names is None else names:
            factory = ANALYSES.get(name)
            if factory is None:
                raise ConfigError(f"unknown analysis {name!r} (known: {', '.join(sorted(ANALYSES))})")
            try:
                built.append(factory(**self.options.get(name, {})))
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"invalid options for analysis {name!r}: {exc}") from exc
        return built


def parse_config(data: dict[str, Any]) -> DgmlConfig:
    """Validate a parsed TOML document.

    Tables named after an analysis hold keyword arguments for it.
    """
    title = data.get("title")
    if title is not None and not isinstance(title, str):
        raise ConfigError("title must be a string")

    raw_analyses = data.get("analyses", ["hub"])
    if not isinstance(raw_analyses, list) or not all(isinstance(a, str) for a in raw_analyses):
        raise ConfigError("analyses must be a list of names")
    analyses = tuple(a.strip() for a in raw_analyses if a.strip())
    for name in analyses:
        if name not in ANALYSES:
            raise ConfigError(f"unknown analysis {name!r} (known: {', '.join(sorted(ANALYSES))})")

    strict = data.get("strict", False)
    if not isinstance(strict, bool):
        raise ConfigError("strict must be true or false")

    options = {name: dict(_coerce_dict(data.get(name))) for name in ANALYSES if name in data}

    if title is not None:
        title = title.strip() or None

    return DgmlConfig(title=title, analyses=analyses, strict=strict, options=options)


def load_config(path: Path) -> DgmlConfig:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: {exc}") from exc
    return parse_config(data)


def find_config(start: Path) -> Path | None:
    """Find a dgmlkit.toml by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        candidate = p / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
