from bidoc.documents.base import DocumentAdapter, ParsedDocument, TextNode
from bidoc.documents.html import HtmlDocument
from bidoc.documents.markdown import MarkdownDocument
from bidoc.documents.text import PlainTextDocument

__all__ = [
    "DocumentAdapter",
    "HtmlDocument",
    "MarkdownDocument",
    "ParsedDocument",
    "PlainTextDocument",
    "TextNode",
]
