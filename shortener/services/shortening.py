import logging
import re
from datetime import datetime, timezone
from typing import Optional, Protocol
from urllib.parse import urlsplit

from ..exceptions import ValidationError, ConflictError
from ..models import ShortLink
from ..observability import SHORT_CODE_COLLISIONS, SHORT_LINKS_CREATED
from ..shortcode import Base62CodeGenerator

logger = logging.getLogger(__name__)

MAX_URL_LENGTH = 2048

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_HOST_SCHEMES = {"http", "https", "ftp", "ws", "wss"}
# RFC 3986 unreserved + reserved characters, plus percent escapes
_URI_CHARS_RE = re.compile(r"^[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]+$")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class ShortCodeGenerator(Protocol):
    def generate(self) -> str: ...


class LinkStore(Protocol):
    async def original_url_exists(self, original_url: str) -> bool: ...

    async def short_code_exists(self, short_code: str) -> bool: ...

    def add(self, link: ShortLink) -> None: ...

    async def commit(self) -> None: ...


def is_absolute_url(url: str) -> bool:
    if not url or len(url) > MAX_URL_LENGTH:
        return False
    if not _URI_CHARS_RE.match(url) or _BAD_ESCAPE_RE.search(url):
        return False

    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return False

    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        return False
    if parts.scheme.lower() in _HOST_SCHEMES:
        return bool(parts.hostname) and (port is None or port > 0)
    return bool(parts.netloc or parts.path)


async def create_short_link(
    repository: LinkStore,
    original_url: str,
    creator_id: int,
    generator: Optional[ShortCodeGenerator] = None,
    now: Optional[datetime] = None,
) -> ShortLink:
    """Allocate a free short code for ``original_url`` and persist the link.

    Raises ValidationError for a malformed URL and ConflictError when the URL
    is already shortened or the final insert hits a unique constraint.

    The generate-and-check loop has no attempt limit. With 62**11 possible
    codes it terminates with overwhelming probability; the existence check
    only saves wasted inserts, the database constraint decides.
    """
    if not is_absolute_url(original_url):
        raise ValidationError("Invalid URL format.")

    if await repository.original_url_exists(original_url):
        raise ConflictError("This URL already exists.")

    generator = generator or Base62CodeGenerator()
    attempts = 1
    short_code = generator.generate()
    while await repository.short_code_exists(short_code):
        SHORT_CODE_COLLISIONS.inc()
        logger.warning("Short code collision on attempt %d, regenerating", attempts)
        attempts += 1
        short_code = generator.generate()

    link = ShortLink(
        original_url=original_url,
        short_code=short_code,
        creator_id=creator_id,
        created_at=now or datetime.now(timezone.utc),
        visit_count=0,
    )
    repository.add(link)
    await repository.commit()

    SHORT_LINKS_CREATED.inc()
    logger.info("Created short link", extra={"short_code": short_code, "user_id": creator_id})
    return link
