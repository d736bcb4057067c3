"""Tool specifications for the built-in agent tools.

This file defines the metadata (name, description, parameters, tags)
for each tool, separate from the implementation handlers.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from chatline.core.errors import ToolError

from .base import ToolRegistry, ToolSpec
from .calculator import calculate
from .google_tools import google_search, require_api_key

LOGGER = logging.getLogger(__name__)


def create_search_tool(
    api_key: Optional[str] = None, model: Optional[str] = None
) -> ToolSpec:
    """Build the web search tool bound to a credential and model.

    Raises:
        ToolError: If no API key is available
    """
    try:
        resolved_api_key = require_api_key(api_key)
    except RuntimeError as e:
        raise ToolError(f"web_search: {e}") from e

    async def web_search(query: str) -> Dict[str, Any]:
        """Search the web for current information and return a summary with sources.

        Args:
            query: What to search for.
        """
        return await google_search(query, api_key=resolved_api_key, model=model)

    return ToolSpec(
        name="web_search",
        description="Search the web for current events and facts",
        parameters={
            "query": {"type": "string", "description": "Search query"},
        },
        handler=web_search,
        tags=["search", "network"],
    )


def create_calculator_tool() -> ToolSpec:
    """Build the calculator tool."""

    def calculator(expression: str) -> Dict[str, Any]:
        """Evaluate an arithmetic expression such as "2+2" or "sqrt(2) * pi".

        Args:
            expression: Math expression using + - * / // % **, parentheses,
                sqrt, log, ln, log10, sin, cos, tan, abs, round, pi and e.
        """
        return calculate(expression)

    return ToolSpec(
        name="calculator",
        description="Evaluate arithmetic expressions exactly",
        parameters={
            "expression": {"type": "string", "description": "Math expression"},
        },
        handler=calculator,
        tags=["math"],
    )


def build_default_tools(
    api_key: Optional[str] = None, model: Optional[str] = None
) -> ToolRegistry:
    """Create a fresh registry holding the web search and calculator tools.

    Raises:
        ToolError: If a tool cannot be constructed
    """
    registry = ToolRegistry()
    registry.register(create_search_tool(api_key=api_key, model=model))
    registry.register(create_calculator_tool())
    LOGGER.debug("Built tools: %s", ", ".join(spec.name for spec in registry.all()))
    return registry
