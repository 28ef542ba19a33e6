from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from loguru import logger

from bidoc.documents import DocumentAdapter, PlainTextDocument
from bidoc.models import (
    DefIdGenerator,
    Definition,
    DefRenderer,
    EscapedReference,
    Position,
    RefIdGenerator,
    Reference,
    RefRenderer,
)
from bidoc.parser import (
    DefinitionParseResult,
    ReferenceParseResult,
    init_fragments,
    parse_all_references,
    parse_definitions,
)
from bidoc.registry import DefinitionRegistry
from bidoc.render import (
    RenderOptionsLike,
    coerce_options,
    definition_renderer,
    reference_renderer,
    render_fragments,
)
from bidoc.slug import slugify


@dataclass
class CollectedReferences:
    """References found by one call, already indexed and recorded."""
    refs: List[Reference] = field(default_factory=list)
    escaped: List[EscapedReference] = field(default_factory=list)


def _document_order(ref: Reference) -> Tuple[int, int]:
    start = ref.fragment.position.start
    return start.line, start.column


class BiDoc:
    """
    Bidirectional links between documents.

    Typical use is two phases over a corpus: ``collect`` every path so all
    definitions are known, then ``render`` (or ``collect_refs``) every path.
    References can point at definitions from any path.
    """

    def __init__(
        self,
        document: Optional[DocumentAdapter] = None,
        def_id_generator: Optional[DefIdGenerator] = None,
        ref_id_generator: Optional[RefIdGenerator] = None,
        registry: Optional[DefinitionRegistry] = None,
    ):
        """
        Args:
            document: Adapter that finds text nodes; the whole buffer is one
                text node by default.
            def_id_generator: Turns a definition name into its id when the
                marker has no explicit ``:id``.
            ref_id_generator: Turns a recorded reference into its element id.
            registry: Share an existing registry instead of starting empty.
        """
        self.document = document or PlainTextDocument()
        self.def_id_generator = def_id_generator or slugify
        self.registry = DefinitionRegistry() if registry is None else registry
        if ref_id_generator is not None:
            self.registry.ref_id_generator = ref_id_generator

    @property
    def name2def(self) -> Dict[str, Definition]:
        return self.registry.name2def

    @property
    def id2def(self) -> Dict[str, Definition]:
        return self.registry.id2def

    @property
    def ref_id_generator(self) -> RefIdGenerator:
        return self.registry.ref_id_generator

    def collect_text(
        self, path: str, text: str, position: Position
    ) -> List[Definition]:
        """Register the definitions of one text node."""
        parsed = parse_definitions(
            init_fragments(text, position), path, self.def_id_generator
        )
        return self.registry.register_all(parsed.defs)

    def collect(self, path: str, content: str) -> List[Definition]:
        """
        Register every definition of a document and return them.

        The first duplicate name/alias/id raises; definitions registered
        before it stay registered.
        """
        collected: List[Definition] = []
        for node in self.document.definition_nodes(content):
            collected.extend(self.collect_text(path, node.text, node.position))
        logger.info(f"Collected {len(collected)} definition(s) from '{path}'.")
        return collected

    def _parse_text(
        self, path: str, text: str, position: Position
    ) -> Tuple[DefinitionParseResult, ReferenceParseResult]:
        defs = parse_definitions(
            init_fragments(text, position), path, self.def_id_generator
        )
        refs = parse_all_references(defs.fragments, path, self.registry)
        refs.refs.sort(key=_document_order)
        return defs, refs

    def collect_refs(self, path: str, content: str) -> CollectedReferences:
        """
        Resolve and record every reference of a document without rendering.

        Nothing is recorded if any explicit reference is dangling.
        """
        parsed = [
            self._parse_text(path, node.text, node.position)[1]
            for node in self.document.text_nodes(content)
        ]
        result = CollectedReferences()
        for refs in parsed:
            result.refs.extend(self.registry.record(refs.refs))
            result.escaped.extend(refs.escaped)
        return result

    def render_text(
        self,
        path: str,
        text: str,
        position: Position,
        def_renderer: DefRenderer,
        ref_renderer: RefRenderer,
    ) -> str:
        """
        Resolve, record and render one text node with caller-supplied renderers.
        For callers that walk their own document trees.
        """
        defs, refs = self._parse_text(path, text, position)
        self.registry.record(refs.refs)
        return render_fragments(
            refs.fragments,
            defs.defs,
            refs.refs,
            refs.escaped,
            def_renderer,
            ref_renderer,
            escape=self.document.escape,
        )

    def render(
        self,
        path: str,
        content: str,
        options: RenderOptionsLike = None,
        def_renderer: Optional[DefRenderer] = None,
        ref_renderer: Optional[RefRenderer] = None,
    ) -> str:
        """
        Render a document based on the collected definitions.

        Every reference found is recorded (so rendering the same text twice
        yields new reference ids). A dangling explicit reference aborts the
        whole call before anything is recorded.
        """
        options = coerce_options(options)
        adapter = self.document.output_adapter(options.output.html)
        def_renderer = def_renderer or definition_renderer(options.definition)
        ref_renderer = ref_renderer or reference_renderer(
            options.reference,
            self.ref_id_generator,
            html=options.html_links or adapter.html,
        )

        document = adapter.parse(content)
        parsed = [
            self._parse_text(path, node.text, node.position) for node in document.nodes
        ]
        for _, refs in parsed:
            self.registry.record(refs.refs)

        outputs = [
            render_fragments(
                refs.fragments,
                defs.defs,
                refs.refs,
                refs.escaped,
                def_renderer,
                ref_renderer,
                escape=adapter.escape,
            )
            for defs, refs in parsed
        ]
        return adapter.serialize(document, outputs)

    def get_reverse_refs(
        self, *, id: Optional[str] = None, name: Optional[str] = None
    ) -> List[str]:
        """Link addresses (``path#ref-id``) of every reference to a definition."""
        return self.registry.get_reverse_refs(id=id, name=name)

    def purge(self, path: str) -> List[Definition]:
        """Drop a path's definitions and references, e.g. before re-collecting it."""
        return self.registry.purge(path)

    @classmethod
    def single_file(
        cls,
        content: str,
        path: str = "",
        options: RenderOptionsLike = None,
        document: Optional[DocumentAdapter] = None,
    ) -> str:
        """Collect definitions from one document, then render it."""
        bidoc = cls(document=document)
        bidoc.collect(path, content)
        return bidoc.render(path, content, options)
