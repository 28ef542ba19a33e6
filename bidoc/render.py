from typing import Callable, Dict, Iterable, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from bidoc.models import (
    Definition,
    DefRenderer,
    EscapedReference,
    Fragment,
    RefIdGenerator,
    RefRenderer,
    Reference,
)


class DefinitionRenderOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    # Show aliases as `name|alias`.
    show_alias: bool = Field(default=False, alias="showAlias")
    # Keep the `[[...]]` brackets around the name.
    show_brackets: bool = Field(default=False, alias="showBrackets")


class ReferenceRenderOptions(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    show_brackets: bool = Field(default=False, alias="showBrackets")
    # Render links as `<a href>` instead of markdown inline links.
    html: bool = False


class OutputRenderOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Markdown documents are rendered to HTML; elsewhere links become <a>.
    html: bool = False


class RenderOptions(BaseModel):
    """
    How definitions and references are turned into markup.

    Accepts the nested dict form as well, e.g.
    ``{"def": {"showAlias": True}, "ref": {"html": True}}``.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    definition: DefinitionRenderOptions = Field(
        default_factory=DefinitionRenderOptions, alias="def"
    )
    reference: ReferenceRenderOptions = Field(
        default_factory=ReferenceRenderOptions, alias="ref"
    )
    output: OutputRenderOptions = Field(default_factory=OutputRenderOptions)

    @property
    def html_links(self) -> bool:
        return self.reference.html or self.output.html


RenderOptionsLike = Union[RenderOptions, Dict, None]


def coerce_options(options: RenderOptionsLike) -> RenderOptions:
    if options is None:
        return RenderOptions()
    if isinstance(options, RenderOptions):
        return options
    return RenderOptions.model_validate(options)


def _bracketed(text: str, show: bool) -> str:
    return f"[[{text}]]" if show else text


def definition_renderer(options: DefinitionRenderOptions) -> DefRenderer:
    """``<span id="ID">NAME</span>``, optionally with aliases and brackets."""

    def render(definition: Definition) -> str:
        label = definition.name
        if options.show_alias and definition.alias:
            label += "|" + "|".join(definition.alias)
        label = _bracketed(label, options.show_brackets)
        return f'<span id="{definition.id}">{label}</span>'

    return render


def reference_renderer(
    options: ReferenceRenderOptions,
    ref_id_generator: RefIdGenerator,
    html: bool = False,
) -> RefRenderer:
    """
    An identifiable span showing the literal name the author wrote (which may
    be an alias), linked to the definition. ``html`` forces ``<a>`` links.
    """

    def render(ref: Reference) -> str:
        definition = ref.definition
        span = (
            f'<span id="{ref_id_generator(ref)}">'
            f"{_bracketed(ref.name, options.show_brackets)}</span>"
        )
        target = f"{definition.path}#{definition.id}"
        if options.html or html:
            return f'<a href="{target}">{span}</a>'
        return f"[{span}]({target})"

    return render


def render_fragments(
    fragments: Sequence[Fragment],
    defs: Iterable[Definition],
    refs: Iterable[Reference],
    escaped: Iterable[EscapedReference],
    def_renderer: DefRenderer,
    ref_renderer: RefRenderer,
    escape: Optional[Callable[[str], str]] = None,
) -> str:
    """
    Join fragments back into one string.

    Definition and reference fragments go through their renderer, escaped
    markers become their payload and everything else is kept verbatim.
    ``escape`` is applied to all literal text (plain fragments and payloads).
    """
    escape = escape or (lambda s: s)
    rendered: Dict[Fragment, str] = {}
    for definition in defs:
        rendered[definition.fragment] = def_renderer(definition)
    for ref in refs:
        rendered[ref.fragment] = ref_renderer(ref)
    for marker in escaped:
        rendered[marker.fragment] = escape(marker.payload)

    return "".join(
        rendered[f] if f in rendered else escape(f.content) for f in fragments
    )
