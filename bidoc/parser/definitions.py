from dataclasses import dataclass
from typing import List, Sequence

from loguru import logger

from bidoc.models import DefIdGenerator, Definition, Fragment
from bidoc.parser.fragments import process_fragments
from bidoc.parser.grammar import DEFINITION_PATTERN


@dataclass
class DefinitionParseResult:
    fragments: List[Fragment]
    defs: List[Definition]


def split_alias(raw: str, name: str) -> List[str]:
    """
    Turn the ``|a|b`` tail of a definition marker into an ordered alias set.
    Repeats and aliases equal to the name itself are dropped.
    """
    alias: List[str] = []
    for a in raw.split("|")[1:]:
        if a != name and a not in alias:
            alias.append(a)
    return alias


def parse_definitions(
    fragments: Sequence[Fragment], path: str, def_id_generator: DefIdGenerator
) -> DefinitionParseResult:
    """
    Find every definition marker and lock it.

    The returned definitions are not registered anywhere; registering them
    (and checking uniqueness) is the registry's job, so this can also be used
    for dry scans. Locked fragments keep the raw marker text as content.
    """
    pending = []  # (name, alias, id, index of the fragment)

    def transform(m, position, index):
        name = m.group("name")
        alias = split_alias(m.group("alias"), name)
        def_id = m.group("id") or def_id_generator(name)
        pending.append((name, alias, def_id, index))
        return m.group(0), True

    result = process_fragments(fragments, DEFINITION_PATTERN, transform)

    defs = [
        Definition(
            name=name, id=def_id, path=path, fragment=result[index], alias=alias
        )
        for name, alias, def_id, index in pending
    ]
    if defs:
        logger.debug(
            f"Parsed {len(defs)} definition marker(s) in '{path}': "
            + ", ".join(d.name for d in defs)
        )
    return DefinitionParseResult(fragments=result, defs=defs)
