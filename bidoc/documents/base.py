from abc import ABC, abstractmethod
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Any, List, Sequence

from bidoc.models import Point, Position


@dataclass
class TextNode:
    """A run of raw text inside a document, with its source position."""
    text: str
    position: Position
    # whatever the adapter needs to write the node back (e.g. a soup element)
    handle: Any = field(default=None, repr=False)


@dataclass
class ParsedDocument:
    nodes: List[TextNode]
    tree: Any = field(default=None, repr=False)


class SourceIndex:
    """Converts 0-based character offsets of a raw source into points."""

    def __init__(self, content: str):
        self.content = content
        self.line_starts = [0]
        index = content.find("\n")
        while index != -1:
            self.line_starts.append(index + 1)
            index = content.find("\n", index + 1)

    def line_offset(self, line: int) -> int:
        """Offset of the first character of a 0-based line (or the end)."""
        if line >= len(self.line_starts):
            return len(self.content)
        return self.line_starts[line]

    def point(self, offset: int) -> Point:
        line = bisect_right(self.line_starts, offset)
        return Point(
            line=line, column=offset - self.line_starts[line - 1] + 1, offset=offset
        )


class DocumentAdapter(ABC):
    """
    Finds the text nodes of a document and writes rendered output back.

    Marker resolution only ever sees ``TextNode.text``; where those strings
    come from and how the rendered result lands in the document is up to the
    adapter.
    """

    # True when rendered output is HTML: links are always <a> and literal
    # text must be escaped.
    html = False

    def escape(self, text: str) -> str:
        return text

    def output_adapter(self, html: bool) -> "DocumentAdapter":
        """The adapter to render with when HTML output is requested or not."""
        return self

    @abstractmethod
    def parse(self, content: str) -> ParsedDocument:
        """Every text node that may hold definitions or references, in order."""

    @abstractmethod
    def serialize(self, document: ParsedDocument, outputs: Sequence[str]) -> str:
        """Replace each node by its output (same order as ``nodes``) and serialize."""

    def text_nodes(self, content: str) -> List[TextNode]:
        return self.parse(content).nodes

    def definition_nodes(self, content: str) -> List[TextNode]:
        """Text nodes searched by ``collect``. All of them unless narrowed."""
        return self.text_nodes(content)
