"""Expansion of iframe content documents into the raw DOM tree."""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Set, Tuple
from urllib.parse import urlparse

from llm_dom_serializer.core.config import IframeConfig
from llm_dom_serializer.core.exceptions import IframeProcessingError
from llm_dom_serializer.core.logging import log_iframe_issues
from llm_dom_serializer.dom.views import NodeType, RawNode

logger = logging.getLogger(__name__)

FetchSubtree = Callable[[RawNode], Awaitable[Optional[RawNode]]]

SAME_ORIGIN_SCHEMES = frozenset({"about", "data", "javascript"})
DEFAULT_PORTS = {"http": 80, "https": 443}


@dataclass
class IframeStats:
    """Counters for one iframe traversal."""
    total_iframes: int = 0
    processed_iframes: int = 0
    skipped_iframes: int = 0
    cross_origin_iframes: int = 0
    depth_violations: int = 0
    size_violations: int = 0


@dataclass
class IframeProcessingResult:
    root: RawNode
    issues: List[str] = field(default_factory=list)
    stats: IframeStats = field(default_factory=IframeStats)


@dataclass
class _Traversal:
    """State for a single ``process_iframes`` call."""
    fetch_subtree: FetchSubtree
    page_url: str
    issues: List[str] = field(default_factory=list)
    stats: IframeStats = field(default_factory=IframeStats)
    processed_targets: Set[str] = field(default_factory=set)
    next_synthetic_id: int = -1
    limit_reported: bool = False

    def allocate_id(self) -> int:
        node_id = self.next_synthetic_id
        self.next_synthetic_id -= 1
        return node_id


def extract_target_id(node: RawNode) -> str:
    """Identity used to avoid expanding the same iframe twice."""
    src = node.get_attribute("src")
    name = node.get_attribute("name")
    element_id = node.get_attribute("id")
    return f"iframe_{src}_{name}_{element_id}_{node.node_id}"


def _origin(url: str) -> Optional[Tuple[str, str, Optional[int]]]:
    parsed = urlparse(url)
    if not parsed.hostname:
        return None
    scheme = parsed.scheme.lower()
    try:
        port = parsed.port
    except ValueError:
        port = None
    return scheme, parsed.hostname.lower(), port or DEFAULT_PORTS.get(scheme)


def is_cross_origin(src: Optional[str], page_url: str) -> bool:
    """
    Compare an iframe's ``src`` with the page origin.

    Relative URLs, ``about:``, ``data:`` and ``javascript:`` sources and
    iframes without a ``src`` count as same-origin. Absolute URLs are
    cross-origin when the page URL is unknown.
    """
    if not src or not src.strip():
        return False

    src = src.strip()
    parsed = urlparse(src)
    if parsed.scheme.lower() in SAME_ORIGIN_SCHEMES:
        return False
    if not parsed.netloc:
        return False

    page_parsed = urlparse(page_url or "")
    if src.startswith("//"):
        # Protocol-relative: inherits the page scheme
        src = f"{page_parsed.scheme or 'https'}:{src}"

    frame_origin = _origin(src)
    page_origin = _origin(page_url or "")
    if frame_origin is None:
        return False
    if page_origin is None:
        return True
    return frame_origin != page_origin


class IframeProcessor:
    """
    Fetches and attaches the content documents of iframes.

    Traversal is sequential and depth-first: an iframe's document is fully
    attached before the iframes inside it are expanded. Each failure is
    recorded as an issue and never stops the traversal.
    """

    def __init__(self, config: Optional[IframeConfig] = None):
        self.config = config or IframeConfig()

    async def process_iframes(
        self,
        root: RawNode,
        fetch_subtree: FetchSubtree,
        page_url: str = "",
    ) -> IframeProcessingResult:
        """
        Expand iframes below ``root`` in place.

        Args:
            root: Root of the page's raw tree
            fetch_subtree: Coroutine returning the document of an iframe node, or None
            page_url: URL of the page, used for the same-origin check

        Returns:
            IframeProcessingResult with the root, the collected issues and counters
        """
        traversal = _Traversal(fetch_subtree=fetch_subtree, page_url=page_url)
        await self._walk(root, traversal)

        log_iframe_issues(traversal.issues)
        logger.debug(
            f"Iframes: {traversal.stats.processed_iframes} processed, "
            f"{traversal.stats.skipped_iframes} skipped of {traversal.stats.total_iframes}"
        )
        return IframeProcessingResult(root=root, issues=traversal.issues, stats=traversal.stats)

    async def _walk(self, root: RawNode, traversal: _Traversal) -> None:
        # Depth counts nested content documents, not element nesting
        stack: List[Tuple[RawNode, int]] = [(root, 0)]
        while stack:
            node, depth = stack.pop()
            if node.tag in ("iframe", "frame"):
                await self._process_iframe(node, depth, traversal)

            # Pushed first so the node's own subtree is walked before its document
            if node.content_document is not None:
                stack.append((node.content_document, depth + 1))
            for child in reversed(list(node.shadow_roots) + list(node.children)):
                stack.append((child, depth))

    async def _process_iframe(self, node: RawNode, depth: int, traversal: _Traversal) -> None:
        stats = traversal.stats
        stats.total_iframes += 1

        if node.content_document is not None:
            stats.skipped_iframes += 1
            return

        target_id = extract_target_id(node)
        try:
            if not self._is_eligible(node, depth, traversal):
                stats.skipped_iframes += 1
                return

            traversal.processed_targets.add(target_id)
            document = await traversal.fetch_subtree(node)
            if document is None:
                raise IframeProcessingError(target_id, "no content document returned")
        except Exception as e:
            stats.skipped_iframes += 1
            if isinstance(e, IframeProcessingError):
                traversal.issues.append(str(e))
            else:
                traversal.issues.append(str(IframeProcessingError(target_id, f"{type(e).__name__}: {e}")))
            return

        node.content_document = self._wrap_document(document, traversal)
        stats.processed_iframes += 1
        logger.debug(f"Attached content document for {target_id}")

    def _is_eligible(self, node: RawNode, depth: int, traversal: _Traversal) -> bool:
        """Depth, size, duplicate, origin and per-page limit checks, in that order."""
        if depth >= self.config.max_iframe_depth:
            traversal.stats.depth_violations += 1
            traversal.issues.append(
                f"Iframe depth limit exceeded ({depth + 1} > {self.config.max_iframe_depth}) "
                f"at node {node.node_id}"
            )
            return False

        if not self.should_process_iframe(node, traversal):
            return False

        if traversal.stats.processed_iframes >= self.config.max_iframes_per_page:
            if not traversal.limit_reported:
                traversal.limit_reported = True
                traversal.issues.append(
                    f"Iframe limit reached ({self.config.max_iframes_per_page}), remaining iframes skipped"
                )
            return False

        return True

    def should_process_iframe(self, node: RawNode, traversal: _Traversal) -> bool:
        """Check size, duplicate and origin constraints for one iframe."""
        if not self.meets_size_requirements(node):
            traversal.stats.size_violations += 1
            return False

        if extract_target_id(node) in traversal.processed_targets:
            return False

        if is_cross_origin(node.get_attribute("src"), traversal.page_url):
            traversal.stats.cross_origin_iframes += 1
            if not self.config.enable_cross_origin:
                return False

        return True

    def meets_size_requirements(self, node: RawNode) -> bool:
        bounds = node.bounds
        if bounds is None:
            return False
        minimum = self.config.min_iframe_size
        return bounds.width >= minimum and bounds.height >= minimum

    @staticmethod
    def _wrap_document(document: RawNode, traversal: _Traversal) -> RawNode:
        """Place fetched content under ``#document > html > body`` unless it is already a document."""
        if document.node_type == NodeType.DOCUMENT_NODE:
            return document

        def synthetic(node_type: NodeType, tag_name: str, children: List[RawNode]) -> RawNode:
            node_id = traversal.allocate_id()
            return RawNode(
                node_id=node_id,
                backend_node_id=node_id,
                node_type=node_type,
                tag_name=tag_name,
                children=children,
                frame_id=document.frame_id,
                session_id=document.session_id,
            )

        if document.tag == "html":
            html = document
        else:
            if document.tag == "body":
                body = document
            else:
                body = synthetic(NodeType.ELEMENT_NODE, "body", [document])
            html = synthetic(NodeType.ELEMENT_NODE, "html", [body])
        return synthetic(NodeType.DOCUMENT_NODE, "#document", [html])
