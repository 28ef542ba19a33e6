from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger
from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.token import Token

from bidoc.documents.base import DocumentAdapter, ParsedDocument, SourceIndex, TextNode
from bidoc.models import span_position


@dataclass
class MarkdownTree:
    source: str
    tokens: List[Token]
    env: Dict[str, Any] = field(default_factory=dict)


class MarkdownDocument(DocumentAdapter):
    """
    Text nodes of a Markdown document, found with ``markdown-it``.

    Only plain text is searched: link text, link destinations, images, code
    spans, code blocks and raw HTML are left alone. Rendered output is spliced
    back into the source, so the rest of the document is kept byte for byte.
    With ``html_output`` the token stream is rendered to HTML instead.
    """

    def __init__(self, html_output: bool = False, md: Optional[MarkdownIt] = None):
        self.md = md or MarkdownIt("commonmark")
        self.html = html_output

    def output_adapter(self, html: bool) -> "MarkdownDocument":
        if html == self.html:
            return self
        return MarkdownDocument(html_output=html, md=self.md)

    def escape(self, text: str) -> str:
        return escapeHtml(text) if self.html else text

    def parse(self, content: str) -> ParsedDocument:
        env: Dict[str, Any] = {}
        tokens = self.md.parse(content, env)
        source = SourceIndex(content)
        nodes: List[TextNode] = []
        for token in tokens:
            if token.type == "inline" and token.children and token.map:
                nodes.extend(self._inline_nodes(source, token))
        return ParsedDocument(
            nodes=nodes, tree=MarkdownTree(source=content, tokens=tokens, env=env)
        )

    def _inline_nodes(self, source: SourceIndex, block: Token) -> List[TextNode]:
        """Text children of one inline block, located in the raw source."""
        content = source.content
        begin, end = block.map
        limit = source.line_offset(end)
        cursor = source.line_offset(begin)

        # skip block markers ("# ", "- ", "> ") before the first line of text
        first_line = block.content.split("\n")[0]
        line_end = content.find("\n", cursor, limit)
        line = content[cursor : line_end if line_end != -1 else limit]
        if first_line and line.rfind(first_line) != -1:
            cursor += line.rfind(first_line)

        def advance(text: Optional[str]) -> None:
            nonlocal cursor
            if text:
                found = content.find(text, cursor, limit)
                if found != -1:
                    cursor = found + len(text)

        nodes: List[TextNode] = []
        links: List[Optional[str]] = []  # destinations of the open links
        for child in block.children:
            if child.type == "link_open":
                links.append(child.attrGet("href"))
            elif child.type == "link_close":
                advance(links.pop() if links else None)
            elif child.type == "image":
                advance(child.attrGet("src"))
            elif child.type == "text" and not links and child.content:
                found = content.find(child.content, cursor, limit)
                if found == -1:
                    # entities and backslash escapes change the text
                    logger.warning(
                        f"Could not locate Markdown text {child.content[:30]!r} "
                        f"on line {begin + 1}; it is left as is."
                    )
                    continue
                nodes.append(
                    TextNode(
                        text=child.content,
                        position=span_position(source.point(found), child.content),
                        handle=child,
                    )
                )
                cursor = found + len(child.content)
            else:
                advance(child.content)
        return nodes

    def serialize(self, document: ParsedDocument, outputs: Sequence[str]) -> str:
        tree: MarkdownTree = document.tree
        changed = [
            (node, output)
            for node, output in zip(document.nodes, outputs)
            if output != self.escape(node.text)
        ]

        if self.html:
            for node, output in changed:
                node.handle.type = "html_inline"
                node.handle.content = output
            return self.md.renderer.render(tree.tokens, self.md.options, tree.env)

        pieces: List[str] = []
        done = 0
        for node, output in changed:
            start = node.position.start.offset
            pieces.append(tree.source[done:start])
            pieces.append(output)
            done = start + len(node.text)
        pieces.append(tree.source[done:])
        return "".join(pieces)

