"""
Input validation for submitted URLs, job ids and prompt ids
"""

import re
import uuid
from urllib.parse import urlparse

from auditor.exceptions import ValidationError

ALLOWED_SCHEMES = ("http", "https")
# hostname as returned by urlparse: lowercased, brackets and port stripped
_HOST_RE = re.compile(r"^[\w.-]+$|^[0-9a-f:.]+$")


def validate_url(url: str | None) -> str:
    """Return the stripped URL or raise ValidationError"""
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("url", "URL is required")

    url = url.strip()
    if any(ch.isspace() for ch in url):
        raise ValidationError("url", "URL must not contain whitespace")

    parsed = urlparse(url)
    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise ValidationError("url", "Please provide a valid http(s) URL")

    if not parsed.netloc or not parsed.hostname:
        raise ValidationError("url", "URL must include a host")

    try:
        parsed.port
    except ValueError:
        raise ValidationError("url", "Invalid port") from None

    if not _HOST_RE.match(parsed.hostname) or parsed.hostname.startswith("."):
        raise ValidationError("url", f"Invalid host '{parsed.hostname}'")

    return url


def validate_job_id(job_id: str | None) -> str:
    """Job ids are canonical UUID strings"""
    if not isinstance(job_id, str):
        raise ValidationError("id", "Please provide a valid analysis ID")
    try:
        parsed = uuid.UUID(job_id)
    except ValueError:
        raise ValidationError("id", "Please provide a valid analysis ID") from None
    if str(parsed) != job_id.lower():
        raise ValidationError("id", "Please provide a valid analysis ID")
    return str(parsed)


def validate_prompt_ids(prompt_ids) -> list[str]:
    if prompt_ids is None:
        return []
    if isinstance(prompt_ids, str) or not isinstance(prompt_ids, (list, tuple)):
        raise ValidationError("prompts", "Prompts must be a list of prompt IDs")
    cleaned = []
    for prompt_id in prompt_ids:
        if not isinstance(prompt_id, str) or not prompt_id.strip():
            raise ValidationError("prompts", "Each prompt ID must be a non-empty string")
        cleaned.append(prompt_id.strip())
    return cleaned
