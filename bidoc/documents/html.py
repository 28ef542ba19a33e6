from html import escape as html_escape
from typing import Dict, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag
from loguru import logger

from bidoc.documents.base import DocumentAdapter, ParsedDocument, SourceIndex, TextNode
from bidoc.models import span_position

DEFAULT_SELECTORS: Tuple[str, ...] = (
    "p",
    "span",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "li",
)


class _SourceMap(SourceIndex):
    def offset_of(self, tag: Tag) -> Optional[int]:
        if tag.sourceline is None or tag.sourcepos is None:
            return None
        return self.line_starts[tag.sourceline - 1] + tag.sourcepos


class HtmlDocument(DocumentAdapter):
    """
    Text nodes of an HTML document: the direct text children of every tag
    matching ``selectors``. Rendered output is parsed back in as raw HTML.

    Definitions are only collected from ``selectors``; references are also
    resolved in ``ref_selectors`` (the same tags unless given).

    Positions come from the tag positions recorded by ``html.parser``; a text
    node whose raw source differs from its decoded value (entities) falls back
    to the position of its parent tag.
    """

    html = True

    def __init__(
        self,
        selectors: Optional[Sequence[str]] = None,
        ref_selectors: Optional[Sequence[str]] = None,
    ):
        self.selectors = tuple(selectors or DEFAULT_SELECTORS)
        self.ref_selectors = tuple(ref_selectors or self.selectors)

    def escape(self, text: str) -> str:
        return html_escape(text, quote=False)

    def parse(self, content: str) -> ParsedDocument:
        selectors = tuple(dict.fromkeys(self.selectors + self.ref_selectors))
        return self._parse(content, selectors)

    def definition_nodes(self, content: str) -> List[TextNode]:
        return self._parse(content, self.selectors).nodes

    def _parse(self, content: str, selectors: Sequence[str]) -> ParsedDocument:
        soup = BeautifulSoup(content, "html.parser")
        source = _SourceMap(content)
        # the same text node can be reached through several selectors
        seen: Dict[int, TextNode] = {}

        for selector in selectors:
            for tag in soup.select(selector):
                cursor = None
                for child in tag.children:
                    if type(child) is not NavigableString or id(child) in seen:
                        continue
                    start, cursor = self._locate(source, tag, child, cursor)
                    seen[id(child)] = TextNode(
                        text=str(child),
                        position=span_position(source.point(start), str(child)),
                        handle=child,
                    )

        nodes = sorted(
            seen.values(),
            key=lambda n: (n.position.start.offset, n.position.end.offset),
        )
        return ParsedDocument(nodes=nodes, tree=soup)

    def _locate(
        self,
        source: _SourceMap,
        tag: Tag,
        child: NavigableString,
        cursor: Optional[int],
    ) -> Tuple[int, int]:
        """Offset of ``child`` in the raw HTML, and the new search cursor."""
        raw = str(child)
        content = source.content
        tag_offset = source.offset_of(tag) or 0
        if cursor is None:
            cursor = content.find(">", tag_offset) + 1

        candidates = []
        if child.previous_sibling is None:
            candidates.append(cursor)
        nxt = child.next_sibling
        if isinstance(nxt, Tag) and source.offset_of(nxt) is not None:
            candidates.append(source.offset_of(nxt) - len(raw))
        found = content.find(raw, cursor)
        if found != -1:
            candidates.append(found)

        for start in candidates:
            if start >= cursor and content.startswith(raw, start):
                return start, start + len(raw)

        logger.warning(
            f"Could not locate text node {raw[:30]!r} in the HTML source; "
            f"using the position of its <{tag.name}> tag."
        )
        return tag_offset, cursor

    def serialize(self, document: ParsedDocument, outputs: Sequence[str]) -> str:
        for node, output in zip(document.nodes, outputs):
            if output == self.escape(node.text):
                continue
            node.handle.replace_with(BeautifulSoup(output, "html.parser"))
        return str(document.tree)
