"""
Optional report polishing through an OpenAI-compatible chat-completions API.

The rendered markdown is sent as the user message; the first choice comes
back as the polished report. Nothing here runs unless explicitly requested.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from gitreport.errors import InvalidInput, OptimizerError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a technical writing assistant. Improve the following git activity "
    "report so it is clear, professional and easy to read. Keep the markdown "
    "structure and every fact intact; improve wording, grouping and formatting only."
)


def build_payload(content: str, settings: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "model": settings.get("model"),
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": content},
        ],
        "max_tokens": settings.get("max_tokens", 2000),
        "temperature": settings.get("temperature", 0.7),
    }


def extract_content(data: Any) -> str:
    """
    Pull the first choice's message text out of a chat-completions response.

    Raises:
        OptimizerError: response does not have the expected shape
    """
    try:
        choices = data["choices"]
        if not choices:
            raise OptimizerError("Invalid response format: no choices found")
        content = choices[0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        raise OptimizerError("Invalid response format: no message content found")

    if not isinstance(content, str):
        raise OptimizerError("Invalid response format: message content is not text")
    return content.strip()


async def optimize_report(
    content: str,
    config: Dict[str, Any],
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Polish a rendered report with the configured language model.

    Args:
        content: Markdown report text
        config: Full configuration dict (uses the 'optimizer' section)
        client: Optional shared httpx client (tests inject a mock transport)

    Returns:
        Polished markdown text

    Raises:
        InvalidInput: content is empty
        OptimizerError: missing configuration, HTTP failure or bad response
    """
    if not content or not content.strip():
        raise InvalidInput("Content is required", field="content")

    settings = config.get("optimizer") or {}
    api_url = settings.get("api_url")
    api_key = settings.get("api_key")
    if not api_url or not api_key:
        raise OptimizerError(
            "AI API configuration not found. Set AI_API_URL and AI_API_KEY environment variables"
        )

    headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
    payload = build_payload(content, settings)
    timeout = httpx.Timeout(settings.get("timeout_seconds", 60))

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=timeout)

    try:
        response = await client.post(api_url, json=payload, headers=headers)
    except httpx.TimeoutException:
        raise OptimizerError("Optimization request timed out")
    except httpx.HTTPError as e:
        logger.warning("Optimization request to %s failed: %s", api_url, e)
        raise OptimizerError(f"Failed to send optimization request: {e}")
    finally:
        if owns_client:
            await client.aclose()

    if response.status_code != 200:
        raise OptimizerError(
            f"API request failed with status {response.status_code}: {response.text[:500]}"
        )

    try:
        data = response.json()
    except ValueError:
        raise OptimizerError("Failed to parse optimization response")

    return extract_content(data)
