"""
Reference passes.

These functions only *parse*: they return references without an index and
never touch ``Definition.refs``. Recording them is done by
``DefinitionRegistry.record``. Run them on fragments returned by
``parse_definitions`` so that no reference grammar ever sees the inside of a
definition marker.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

from loguru import logger

from bidoc.errors import DefinitionNotFoundError
from bidoc.models import (
    Definition,
    EscapedReference,
    Fragment,
    Reference,
    ReferenceType,
)
from bidoc.parser.fragments import process_fragments
from bidoc.parser.grammar import EXPLICIT_OR_ESCAPED_PATTERN, literal_pattern
from bidoc.registry import DefinitionRegistry


@dataclass
class ReferenceParseResult:
    fragments: List[Fragment]
    refs: List[Reference] = field(default_factory=list)
    escaped: List[EscapedReference] = field(default_factory=list)


def parse_explicit_or_escaped_references(
    fragments: Sequence[Fragment], path: str, registry: DefinitionRegistry
) -> ReferenceParseResult:
    """Resolve ``[[#id]]``/``[[@name]]`` markers and lock ``[[!...]]`` markers."""
    pending_refs = []  # (definition, literal name, fragment index)
    pending_escaped = []  # (payload, fragment index)

    def transform(m, position, index):
        if m.group("escaped") is not None:
            pending_escaped.append((m.group("escaped"), index))
            return m.group(0), True

        if m.group("id") is not None:
            definition = registry.id2def.get(m.group("id"))
            if definition is None:
                raise DefinitionNotFoundError("id", m.group("id"), path, position)
            # by id: show the canonical name
            pending_refs.append((definition, definition.name, index))
        else:
            definition = registry.name2def.get(m.group("name"))
            if definition is None:
                raise DefinitionNotFoundError("name", m.group("name"), path, position)
            # by name: keep whichever alias the author wrote
            pending_refs.append((definition, m.group("name"), index))
        return m.group(0), True

    result = process_fragments(fragments, EXPLICIT_OR_ESCAPED_PATTERN, transform)

    return ReferenceParseResult(
        fragments=result,
        refs=[
            Reference(
                path=path,
                fragment=result[index],
                type=ReferenceType.EXPLICIT,
                definition=definition,
                name=name,
            )
            for definition, name, index in pending_refs
        ],
        escaped=[
            EscapedReference(path=path, fragment=result[index], payload=payload)
            for payload, index in pending_escaped
        ],
    )


def parse_implicit_references(
    fragments: Sequence[Fragment], name: str, definition: Definition, path: str
) -> ReferenceParseResult:
    """One pass for one name or alias: every verbatim occurrence is a reference."""
    indexes: List[int] = []

    def transform(m, position, index):
        indexes.append(index)
        return m.group(0), True

    result = process_fragments(fragments, literal_pattern(name), transform)

    return ReferenceParseResult(
        fragments=result,
        refs=[
            Reference(
                path=path,
                fragment=result[i],
                type=ReferenceType.IMPLICIT,
                definition=definition,
                name=name,
            )
            for i in indexes
        ],
    )


def parse_all_implicit_references(
    fragments: Sequence[Fragment], path: str, registry: DefinitionRegistry
) -> ReferenceParseResult:
    """
    Run one implicit pass per registered name or alias, longest first.

    A pass locks what it matches, so ``LayoutGAN`` claims its text before
    ``GAN`` is searched for, whichever was declared first.
    """
    result = ReferenceParseResult(fragments=list(fragments))
    for name, definition in registry.implicit_schedule():
        res = parse_implicit_references(result.fragments, name, definition, path)
        result.fragments = res.fragments
        result.refs.extend(res.refs)
    return result


def parse_all_references(
    fragments: Sequence[Fragment], path: str, registry: DefinitionRegistry
) -> ReferenceParseResult:
    """Explicit and escaped markers first, then implicit occurrences."""
    result = parse_explicit_or_escaped_references(fragments, path, registry)
    res = parse_all_implicit_references(result.fragments, path, registry)
    result.fragments = res.fragments
    result.refs.extend(res.refs)

    if result.refs or result.escaped:
        logger.debug(
            f"Resolved {len(result.refs)} reference(s) and "
            f"{len(result.escaped)} escaped marker(s) in '{path}'."
        )
    return result
