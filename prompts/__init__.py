"""Prompt templates stored as editable markdown next to this module.

Any template can be replaced at deploy time through the environment:
``PARTY_PLANNER_PROMPT_<NAME>`` holds either a path to a file or the literal
prompt text.
"""
from __future__ import annotations

import os
import string
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, FrozenSet, Optional

__all__ = ["PromptTemplate", "load_prompt_template", "render_prompt"]

_PROMPT_ROOT = Path(__file__).resolve().parent
_ENV_PREFIX = "PARTY_PLANNER_PROMPT_"


def _override_for(name: str) -> Optional[str]:
    value = os.getenv(_ENV_PREFIX + name.upper())
    if not value:
        return None
    path = Path(value)
    if path.is_file():
        return path.read_text(encoding="utf-8")
    return value


@dataclass(frozen=True)
class PromptTemplate:
    """``str.format`` template that reports every missing placeholder at once."""

    name: str
    text: str

    @property
    def placeholders(self) -> FrozenSet[str]:
        return frozenset(
            field for _, field, _, _ in string.Formatter().parse(self.text) if field
        )

    def format(self, **kwargs: Any) -> str:
        missing = self.placeholders - kwargs.keys()
        if missing:
            raise KeyError(f"Prompt '{self.name}' is missing values for: {', '.join(sorted(missing))}")
        return self.text.format(**kwargs)


@lru_cache(maxsize=None)
def load_prompt_template(name: str, filename: Optional[str] = None) -> PromptTemplate:
    """Load ``<name>.md`` (or ``filename``) unless an environment override is set."""
    override = _override_for(name)
    if override is not None:
        return PromptTemplate(name, override)

    path = _PROMPT_ROOT / (filename or f"{name}.md")
    if not path.exists():
        raise FileNotFoundError(f"Prompt file not found: {path}")
    return PromptTemplate(name, path.read_text(encoding="utf-8"))


def render_prompt(name: str, **kwargs: Any) -> str:
    return load_prompt_template(name).format(**kwargs)
