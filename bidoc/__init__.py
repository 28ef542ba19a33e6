from bidoc.bidoc import BiDoc, CollectedReferences
from bidoc.documents import (
    DocumentAdapter,
    HtmlDocument,
    MarkdownDocument,
    PlainTextDocument,
    TextNode,
)
from bidoc.errors import (
    BiDocError,
    DefinitionNotFoundError,
    DuplicateDefinitionError,
    DuplicateDefinitionIdError,
    DuplicateDefinitionNameError,
)
from bidoc.models import (
    Definition,
    EscapedReference,
    Fragment,
    Point,
    Position,
    Reference,
    ReferenceType,
    shift,
)
from bidoc.registry import DefinitionRegistry
from bidoc.render import RenderOptions
from bidoc.slug import default_ref_id, slugify

__all__ = [
    "BiDoc",
    "BiDocError",
    "CollectedReferences",
    "Definition",
    "DefinitionNotFoundError",
    "DefinitionRegistry",
    "DocumentAdapter",
    "DuplicateDefinitionError",
    "DuplicateDefinitionIdError",
    "DuplicateDefinitionNameError",
    "EscapedReference",
    "Fragment",
    "HtmlDocument",
    "MarkdownDocument",
    "PlainTextDocument",
    "Point",
    "Position",
    "Reference",
    "ReferenceType",
    "RenderOptions",
    "TextNode",
    "default_ref_id",
    "shift",
    "slugify",
]
