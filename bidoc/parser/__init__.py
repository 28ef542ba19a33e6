from bidoc.parser.definitions import DefinitionParseResult, parse_definitions
from bidoc.parser.fragments import init_fragments, process_fragments, text_position
from bidoc.parser.references import (
    ReferenceParseResult,
    parse_all_implicit_references,
    parse_all_references,
    parse_explicit_or_escaped_references,
    parse_implicit_references,
)

__all__ = [
    "DefinitionParseResult",
    "ReferenceParseResult",
    "init_fragments",
    "parse_all_implicit_references",
    "parse_all_references",
    "parse_definitions",
    "parse_explicit_or_escaped_references",
    "parse_implicit_references",
    "process_fragments",
    "text_position",
]
