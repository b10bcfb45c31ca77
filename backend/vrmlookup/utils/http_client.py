"""
Thin wrapper around httpx that never raises for transport failures.

Every upstream call goes through call(), which returns an HttpResult with the
raw body text always populated and the parsed JSON body when there is one.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass
class HttpResult:
    ok: bool
    status: int
    json: Any = None
    text: str = ""
    url: str = ""
    error: str | None = None


def _parse_json(text: str) -> Any:
    if not text or not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


async def call(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    json_body: Any = None,
    data: dict[str, Any] | None = None,
    timeout: float = 10.0,
) -> HttpResult:
    """
    Issue one HTTP request with a hard timeout.

    Timeouts and network errors come back as ok=False, status=0 with the error
    message in both `text` and `error`. Non-JSON bodies keep json=None.
    """
    request_url = url
    try:
        request = client.build_request(
            method,
            url,
            params=params,
            headers=headers,
            json=json_body,
            data=data,
            timeout=timeout,
        )
        request_url = str(request.url)
        response = await client.send(request)
        text = response.text
    except httpx.TimeoutException as e:
        message = f"Timed out after {timeout}s ({type(e).__name__})"
        logger.warning(f"{method} {httpx.URL(request_url).host} timed out")
        return HttpResult(ok=False, status=0, text=message, url=request_url, error=message)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        message = f"{type(e).__name__}: {e}"
        logger.warning(f"{method} request failed: {type(e).__name__}")
        return HttpResult(ok=False, status=0, text=message, url=request_url, error=message)

    return HttpResult(
        ok=response.is_success,
        status=response.status_code,
        json=_parse_json(text),
        text=text,
        url=request_url,
    )
