"""Tool spec and registry primitives for chatline tools.

This layer separates tool metadata (name, description, parameters, tags)
from the concrete handler implementation (callable).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List


@dataclass(frozen=True)
class ToolSpec:
    """Specification describing a tool the agent can call.

    - `parameters` follows a JSONSchema-like shape used by the agent/LLM.
    - `tags` provide semantic hints (e.g., "search", "math").
    - `handler` is passed to the agent as-is, so its signature and docstring
      are what the model sees.
    """

    name: str
    description: str
    parameters: Dict[str, Any]
    handler: Callable[..., Any]
    tags: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not callable(self.handler):
            raise ValueError(f"ToolSpec '{self.name}' requires a callable handler")


class ToolRegistry:
    """In-memory registry of tool specifications."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolSpec] = {}

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def all(self) -> List[ToolSpec]:
        return list(self._tools.values())

    def handlers(self) -> List[Callable[..., Any]]:
        return [spec.handler for spec in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)
