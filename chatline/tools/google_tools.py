"""Web search backed by the Gemini google_search grounding tool."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Set

from google import genai
from google.genai import types

from chatline.config.models import ModelRegistry
from chatline.config.settings import resolve_api_key

LOGGER = logging.getLogger(__name__)

# Default model used when callers do not provide one explicitly.
_DEFAULT_MODEL = ModelRegistry.DEFAULT.api_id


def require_api_key(explicit: Optional[str]) -> str:
    """Resolve the API key or fail, preferring an explicit override."""

    api_key = resolve_api_key(explicit)
    if not api_key:
        raise RuntimeError(
            "Google API key not configured. Set GOOGLE_API_KEY or GEMINI_API_KEY."
        )
    return api_key


def _extract_text_parts(response) -> str:
    """Extract concatenated text parts from a generate_content response."""

    texts: List[str] = []
    for candidate in getattr(response, "candidates", []) or []:
        content = getattr(candidate, "content", None)
        if not content:
            continue
        for part in getattr(content, "parts", []) or []:
            text = getattr(part, "text", None)
            if text:
                texts.append(text)
    return "\n".join(texts).strip()


def _extract_grounding_sources(response) -> List[str]:
    """Extract grounded source URLs from a generate_content response."""

    sources: List[str] = []
    seen: Set[str] = set()

    for candidate in getattr(response, "candidates", []) or []:
        grounding_metadata = getattr(candidate, "grounding_metadata", None)
        if not grounding_metadata:
            continue

        chunks = getattr(grounding_metadata, "grounding_chunks", None) or []
        for chunk in chunks:
            web_chunk = getattr(chunk, "web", None)
            if not web_chunk:
                continue

            uri = getattr(web_chunk, "uri", None)
            if uri and uri not in seen:
                seen.add(uri)
                sources.append(uri)

    return sources


async def google_search(
    query: Optional[str] = None,
    *,
    api_key: Optional[str] = None,
    model: Optional[str] = None,
    max_results: int = 6,
) -> Dict[str, Any]:
    """Run a live Google search via Gemini and return a structured summary."""

    if not query or not str(query).strip():
        return {
            "success": False,
            "query": query,
            "error": "Query parameter is required for web_search.",
        }

    query_text = str(query)
    resolved_api_key = require_api_key(api_key)
    model_id = model or _DEFAULT_MODEL

    gen_config = types.GenerateContentConfig(
        tools=[types.Tool(google_search=types.GoogleSearch())]
    )

    prompt = (
        "Use the google_search tool to look up the following query. "
        "Return the top results with concise markdown bullets including the page title, "
        "URL, and a one-sentence summary. Prioritize official and high-quality sources. "
        f"Limit the response to roughly {max_results} results.\n\n"
        f"Query: {query_text.strip()}"
    )

    def _call() -> Dict[str, Any]:
        client = genai.Client(api_key=resolved_api_key)

        response = client.models.generate_content(
            model=model_id,
            contents=[types.Content(role="user", parts=[types.Part(text=prompt)])],
            config=gen_config,
        )

        summary = _extract_text_parts(response)
        sources = _extract_grounding_sources(response)

        if not summary:
            return {
                "success": False,
                "query": query,
                "error": "No search results were returned.",
                "sources": sources,
            }

        return {
            "success": True,
            "query": query_text,
            "summary": summary,
            "sources": sources,
        }

    try:
        return await asyncio.to_thread(_call)
    except Exception as exc:  # noqa: BLE001
        # Failures go back to the agent as data.
        error_type = type(exc).__name__
        error_detail = str(exc)

        LOGGER.exception("web_search failed for query: %s", query)

        if "API key" in error_detail or "INVALID_ARGUMENT" in error_detail:
            error_msg = f"API key error: {error_detail}"
        else:
            error_msg = f"{error_type}: {error_detail}"

        return {
            "success": False,
            "query": query,
            "error": error_msg,
            "error_type": error_type,
        }


__all__ = [
    "google_search",
    "require_api_key",
]
