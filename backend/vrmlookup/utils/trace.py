"""
Per-request record of every upstream call, returned to callers in debug mode.

Credentials never make it into an entry: query parameters named like a key or
token are replaced with ***, JSON members and form pairs named like a key, token
or secret are blanked in body samples, and every configured credential literal is scrubbed.
"""

import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from vrmlookup.schemas.vehicle import AttemptEntry
from vrmlookup.utils.http_client import HttpResult

MASK = "***"

_SENSITIVE_NAME = re.compile(r"key|token", re.IGNORECASE)

# "apiKey": "abc", "access_token": "xyz", "client_secret": "..."
_SENSITIVE_JSON_MEMBER = re.compile(
    r'("[^"]*(?:key|token|secret)[^"]*"\s*:\s*)"[^"]*"',
    re.IGNORECASE,
)

# access_token=xyz&token_type=Bearer (form-encoded bodies)
_SENSITIVE_FORM_PAIR = re.compile(
    r"(\b[\w.-]*(?:key|token|secret)[\w.-]*=)[^&\s\"]*",
    re.IGNORECASE,
)


def mask_url(url: str) -> str:
    """Redact query parameters whose name contains 'key' or 'token'."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    pairs = parse_qsl(parts.query, keep_blank_values=True)
    masked = [(name, MASK if _SENSITIVE_NAME.search(name) else value) for name, value in pairs]
    # Keep the mask readable rather than percent-encoded
    query = urlencode(masked, safe="*")
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def scrub(text: str, secrets: list[str]) -> str:
    """Blank sensitive JSON members, form pairs and any literal secret value."""
    text = _SENSITIVE_JSON_MEMBER.sub(rf'\1"{MASK}"', text)
    text = _SENSITIVE_FORM_PAIR.sub(rf"\1{MASK}", text)
    for secret in secrets:
        if secret:
            text = text.replace(secret, MASK)
    return text


class AttemptTrace:
    """Ordered, append-only list of upstream attempts for one request."""

    def __init__(self, secrets: list[str] | None = None, preview_chars: int = 900):
        self.secrets = [s for s in (secrets or []) if s]
        self.preview_chars = preview_chars
        self._entries: list[AttemptEntry] = []

    def record(self, provider: str, method: str, shape: str, result: HttpResult) -> AttemptEntry:
        url = scrub(mask_url(result.url), self.secrets)
        body = scrub(result.text or "", self.secrets)[: self.preview_chars]
        entry = AttemptEntry(
            provider=provider,
            method=method,
            shape=shape,
            url=url,
            status=result.status,
            body_sample=body,
            error=scrub(result.error, self.secrets) if result.error else None,
        )
        self._entries.append(entry)
        return entry

    def for_provider(self, provider: str) -> list[AttemptEntry]:
        return [e for e in self._entries if e.provider == provider]

    @property
    def entries(self) -> list[AttemptEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
