from typing import Optional, Sequence

from bidoc.documents.base import DocumentAdapter, ParsedDocument, TextNode
from bidoc.models import Point
from bidoc.parser.fragments import text_position


class PlainTextDocument(DocumentAdapter):
    """The whole buffer is a single text node, searched verbatim."""

    def __init__(self, start: Optional[Point] = None):
        self.start = start

    def parse(self, content: str) -> ParsedDocument:
        node = TextNode(text=content, position=text_position(content, self.start))
        return ParsedDocument(nodes=[node])

    def serialize(self, document: ParsedDocument, outputs: Sequence[str]) -> str:
        return "".join(outputs)
