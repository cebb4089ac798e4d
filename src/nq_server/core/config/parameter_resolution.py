"""Record which source supplied each setting and report it at startup.

Settings are resolved in a fixed order: built-in defaults, the YAML file,
environment variables, then command line flags. Each applied value is
recorded with its source and origin (file path, variable name or flag), and
the final report lists every setting of the resolved `AppConfig`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ParameterSource(Enum):
    """Where a setting came from, in increasing order of precedence."""

    DEFAULT = "default"
    CONFIG_FILE = "config"
    ENVIRONMENT = "environment"
    CLI = "cli"

    @property
    def precedence(self) -> int:
        return list(ParameterSource).index(self)


@dataclass(frozen=True)
class ResolvedParameter:
    name: str
    value: Any
    source: ParameterSource
    origin: str | None = None

    @property
    def label(self) -> str:
        if self.origin:
            return f"{self.source.value} {self.origin}"
        return self.source.value


class ParameterResolution:
    """Winning source for each dotted setting name.

    A value recorded from a lower-precedence source never replaces one from a
    higher-precedence source, so recording order does not matter.
    """

    def __init__(self) -> None:
        self._winners: dict[str, ResolvedParameter] = {}

    def record(
        self,
        name: str,
        value: Any,
        source: ParameterSource,
        *,
        origin: str | None = None,
    ) -> None:
        current = self._winners.get(name)
        if current is not None and current.source.precedence > source.precedence:
            return
        self._winners[name] = ResolvedParameter(name, value, source, origin)

    def build_report(self, config: Any) -> list[ResolvedParameter]:
        """Pair every resolved value of ``config`` with its winning source."""
        report = []
        for name, value in sorted(flatten_config(config).items()):
            winner = self._winners.get(name)
            if winner is None:
                report.append(ResolvedParameter(name, value, ParameterSource.DEFAULT))
            else:
                report.append(ResolvedParameter(name, value, winner.source, winner.origin))
        return report

    def log(self, logger: logging.Logger, config: Any) -> None:
        for entry in self.build_report(config):
            logger.info(
                "Loaded parameter %s = %r (%s)", entry.name, entry.value, entry.label
            )


def flatten_config(config: Any) -> dict[str, Any]:
    """Flatten a pydantic model or nested mapping into dotted-path keys."""
    if hasattr(config, "model_dump"):
        data = config.model_dump(mode="json")
    elif isinstance(config, dict):
        data = config
    else:
        raise TypeError("Unsupported configuration object type")

    flattened: dict[str, Any] = {}
    pending: list[tuple[str, Any]] = [("", data)]
    while pending:
        prefix, value = pending.pop()
        if isinstance(value, dict):
            pending.extend(
                (f"{prefix}.{key}" if prefix else key, item)
                for key, item in value.items()
            )
        else:
            flattened[prefix] = value
    return flattened


__all__ = [
    "ParameterResolution",
    "ParameterSource",
    "ResolvedParameter",
    "flatten_config",
]
