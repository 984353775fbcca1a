"""Internal/external link classification against the configured site domain"""

from typing import Optional
from urllib.parse import SplitResult, urlsplit

from mdforge.core.diagnostics import DiagnosticKind, Diagnostics
from mdforge.core.models import Document, LinkKind, Node, NodeType


STAGE = "links"
EXTERNAL_REL = "noopener noreferrer"


def _strip_www(host: str) -> str:
    host = host.lower().rstrip(".")
    return host[4:] if host.startswith("www.") else host


def _split(url: str) -> Optional[SplitResult]:
    """urlsplit that also validates host/port; None when the URL cannot be parsed."""
    try:
        parts = urlsplit(url.strip())
        parts.port      # raises ValueError for a non-numeric or out-of-range port
    except ValueError:
        return None
    return parts


def is_malformed(url: str) -> bool:
    return _split(url) is None


def _domain_host(domain: str) -> str:
    """Host part of the configured domain, which may carry a scheme, port or path."""
    domain = domain.strip()
    parts = _split(domain if "//" in domain else f"//{domain}")
    return (parts.hostname if parts is not None else None) or domain


def classify(url: str, domain: str) -> LinkKind:
    """Classify url relative to domain. Pure; malformed URLs count as external."""
    if url.startswith("#"):
        return LinkKind.internal
    parts = _split(url)
    if parts is None:
        return LinkKind.external
    if not parts.scheme and not url.strip().startswith("//"):
        return LinkKind.internal
    host = parts.hostname
    if host and _strip_www(host) == _strip_www(_domain_host(domain)):
        return LinkKind.internal
    return LinkKind.external


def _decorate(link: Node) -> None:
    link.attrs["target"] = "_blank"
    link.attrs["rel"] = EXTERNAL_REL
    link.children.append(Node(NodeType.external_marker))


def classify_links(document: Document, domain: str, diagnostics: Diagnostics) -> None:
    """Tag every link and image; external links get the decorative marker."""
    for node in list(document.walk()):
        if node.type not in (NodeType.link, NodeType.image):
            continue
        url = node.attrs.get("href" if node.type == NodeType.link else "src", "")
        if is_malformed(url):
            diagnostics.warn(DiagnosticKind.malformed_url, STAGE, f"Malformed URL {url!r} treated as external")
        kind = classify(url, domain)
        node.meta["link_kind"] = kind
        if kind == LinkKind.external and node.type == NodeType.link:
            _decorate(node)
