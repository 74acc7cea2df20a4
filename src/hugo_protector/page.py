"""Unlocking protected regions of a rendered Hugo page.

Mirrors what the browser script does with the data attributes emitted by
the shortcode and the full-page partial:

    <div data-hugo-protector-mode="block"
         data-hugo-protector-payload="..."
         data-hugo-protector-format="markdown"></div>

    <div data-hugo-protector-mode="page"
         data-hugo-protector-payload="..."
         data-hugo-protector-target="main"></div>

Failures never reveal their cause: a wrong password, a tampered payload
and an unreadable payload all produce the same message.
"""

import logging
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from .crypto import ProtectorError
from .markdown import render_content
from .payload import decode

logger = logging.getLogger(__name__)

ATTR_PREFIX = "data-hugo-protector-"
ATTR_MODE = ATTR_PREFIX + "mode"
ATTR_PAYLOAD = ATTR_PREFIX + "payload"
ATTR_FORMAT = ATTR_PREFIX + "format"
ATTR_TARGET = ATTR_PREFIX + "target"

DEFAULT_TARGET = "main"
FAILURE_MESSAGE = "Unable to decrypt payload"
PASSWORD_REQUIRED_MESSAGE = "Password is required"


@dataclass
class ProtectedRegion:
    """A protected element found in a page."""

    element: Tag
    mode: str
    payload: str
    content_format: str = "html"
    target: str = DEFAULT_TARGET
    prompt: str | None = None
    hint: str | None = None
    button: str | None = None
    unlocked: bool = False


@dataclass
class UnlockResult:
    """Outcome of a single unlock attempt."""

    ok: bool
    html: str | None = None
    message: str | None = None
    region: ProtectedRegion | None = None


class MountRegistry:
    """Tracks which elements have been mounted, keyed by element identity.

    Registration is idempotent: registering the same element twice
    reports False the second time.
    """

    def __init__(self) -> None:
        # Keep the element alive so its id() cannot be recycled
        self._elements: dict[int, Tag] = {}

    def register(self, element: Tag) -> bool:
        key = id(element)
        if key in self._elements:
            return False
        self._elements[key] = element
        return True

    def __contains__(self, element: Tag) -> bool:
        return id(element) in self._elements

    def __len__(self) -> int:
        return len(self._elements)


def attempt_unlock(
    payload: str, password: str, content_format: str | None = "html"
) -> UnlockResult:
    """Decrypt one payload and render it by content format.

    Args:
        payload: Transport string.
        password: Password entered by the reader.
        content_format: "html" or "markdown".

    Returns:
        UnlockResult with the rendered HTML, or a generic failure message.
    """
    if not password:
        return UnlockResult(ok=False, message=PASSWORD_REQUIRED_MESSAGE)

    try:
        plaintext = decode(payload, password)
    except ProtectorError as e:
        logger.debug("Unlock attempt failed: %s", e)
        return UnlockResult(ok=False, message=FAILURE_MESSAGE)

    return UnlockResult(ok=True, html=render_content(plaintext, content_format))


def _region_from_element(element: Tag, mode: str) -> ProtectedRegion | None:
    payload = element.get(ATTR_PAYLOAD)
    if not payload:
        logger.warning("Skipping protected %s element without a payload", mode)
        return None

    return ProtectedRegion(
        element=element,
        mode=mode,
        payload=str(payload),
        content_format=str(element.get(ATTR_FORMAT) or "html").lower(),
        target=str(element.get(ATTR_TARGET) or DEFAULT_TARGET),
        prompt=element.get(ATTR_PREFIX + "prompt"),
        hint=element.get(ATTR_PREFIX + "hint"),
        button=element.get(ATTR_PREFIX + "button"),
    )


def _replace_children(element: Tag, html: str) -> None:
    element.clear()
    fragment = BeautifulSoup(html, "html.parser")
    # Use list() to avoid iterator invalidation when appending
    for child in list(fragment.children):
        element.append(child)


class ProtectedDocument:
    """A rendered HTML page holding protected regions."""

    def __init__(self, html: str) -> None:
        self.soup = BeautifulSoup(html, "html.parser")
        self.registry = MountRegistry()
        self.regions: list[ProtectedRegion] = []

    def mount(self) -> list[ProtectedRegion]:
        """Register protected elements not mounted yet.

        Safe to call repeatedly; already-mounted elements are skipped.
        Only the first full-page element is considered.

        Returns:
            Regions mounted by this call.
        """
        mounted = []
        candidates = [
            (element, "block")
            for element in self.soup.find_all(attrs={ATTR_MODE: "block"})
        ]
        page = self.soup.find(attrs={ATTR_MODE: "page"})
        if page is not None:
            candidates.append((page, "page"))

        for element, mode in candidates:
            if element in self.registry:
                continue
            region = _region_from_element(element, mode)
            if region is None:
                continue
            self.registry.register(element)
            mounted.append(region)

        self.regions.extend(mounted)
        return mounted

    @property
    def locked(self) -> list[ProtectedRegion]:
        return [r for r in self.regions if not r.unlocked and self._attached(r.element)]

    def _attached(self, element: Tag) -> bool:
        return any(parent is self.soup for parent in element.parents)

    def unlock(self, password: str) -> list[UnlockResult]:
        """Try password against every locked region.

        Regions that fail stay exactly as they were and may be retried.

        Returns:
            One result per attempted region, in document order.
        """
        results = []
        for region in self.locked:
            # Full-page content is inserted as-is, never converted
            content_format = region.content_format if region.mode == "block" else "html"
            result = attempt_unlock(region.payload, password, content_format)
            result.region = region

            if result.ok:
                self._inject(region, result.html or "")
                region.unlocked = True
                logger.info("Unlocked %s region", region.mode)
            else:
                logger.warning(
                    "Failed to unlock %s region: %s", region.mode, result.message
                )
            results.append(result)
        return results

    def _inject(self, region: ProtectedRegion, html: str) -> None:
        element = region.element
        if region.mode == "block":
            _replace_children(element, html)
            del element[ATTR_PAYLOAD]
            return

        target = self.soup.select_one(region.target)
        if target is not None:
            _replace_children(target, html)
            element.decompose()
        else:
            _replace_children(element, html)
            del element[ATTR_PAYLOAD]

    def __str__(self) -> str:
        return str(self.soup)


def unlock_html(html: str, password: str) -> tuple[str, list[UnlockResult]]:
    """Unlock every protected region of a page with one password.

    Returns:
        Tuple of (html, results). Regions that failed remain locked in html.
    """
    document = ProtectedDocument(html)
    document.mount()
    results = document.unlock(password)
    return str(document), results
