from typing import Any, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from bidoc.errors import (
    DefinitionNotFoundError,
    DuplicateDefinitionIdError,
    DuplicateDefinitionNameError,
)
from bidoc.models import Definition, RefIdGenerator, Reference
from bidoc.slug import default_ref_id


class DefinitionRegistry:
    """
    The shared store of every known definition, indexed by name/alias and by id.

    Names, aliases and ids are unique across the whole registry, not per path.
    There is no locking: one writer processes one corpus, one path at a time.
    """

    def __init__(self, ref_id_generator: Optional[RefIdGenerator] = None):
        # name/alias => Definition
        self.name2def: Dict[str, Definition] = {}
        # id => Definition
        self.id2def: Dict[str, Definition] = {}
        self.ref_id_generator = ref_id_generator or default_ref_id

    def __len__(self) -> int:
        return len(self.id2def)

    def __iter__(self):
        return iter(self.id2def.values())

    @property
    def definitions(self) -> List[Definition]:
        return list(self.id2def.values())

    def _is_alias_key(self, key: str) -> bool:
        owner = self.name2def.get(key)
        return owner is not None and owner.name != key

    def register(self, definition: Definition) -> Definition:
        """
        Insert a definition under its name, aliases and id.

        Every key is validated before any is inserted, so a rejected
        definition leaves the registry as it was.
        """
        path = definition.path
        position = definition.fragment.position

        for key in definition.keys:
            owner = self.name2def.get(key)
            if owner is not None and owner is not definition:
                raise DuplicateDefinitionNameError(key, path, position)
        for alias in definition.alias:
            owner = self.id2def.get(alias)
            if owner is not None and owner is not definition:
                raise DuplicateDefinitionNameError(alias, path, position)

        owner = self.id2def.get(definition.id)
        if owner is not None and owner is not definition:
            raise DuplicateDefinitionIdError(definition.id, path, position)
        if self._is_alias_key(definition.id):
            raise DuplicateDefinitionIdError(definition.id, path, position)

        for key in definition.keys:
            self.name2def[key] = definition
        self.id2def[definition.id] = definition
        logger.debug(
            f"Registered definition '{definition.name}' (id={definition.id}, "
            f"alias={definition.alias}) from '{path}'."
        )
        return definition

    def register_all(self, definitions: Iterable[Definition]) -> List[Definition]:
        return [self.register(d) for d in definitions]

    def lookup_by_name(self, name: str) -> Definition:
        definition = self.name2def.get(name)
        if definition is None:
            raise DefinitionNotFoundError("name", name)
        return definition

    def lookup_by_id(self, id: str) -> Definition:
        definition = self.id2def.get(id)
        if definition is None:
            raise DefinitionNotFoundError("id", id)
        return definition

    def lookup(
        self, *, id: Optional[str] = None, name: Optional[str] = None
    ) -> Definition:
        """Look a definition up by exactly one of ``id`` or ``name``."""
        if (id is None) == (name is None):
            raise ValueError("Pass exactly one of 'id' or 'name'.")
        if id is not None:
            return self.lookup_by_id(id)
        return self.lookup_by_name(name)

    def implicit_schedule(self) -> List[Tuple[str, Definition]]:
        """
        The order implicit passes run in: longest key first, ties in
        registration order (``sorted`` is stable and dicts keep insertion order).
        """
        return sorted(self.name2def.items(), key=lambda item: -len(item[0]))

    def record(self, refs: Iterable[Reference]) -> List[Reference]:
        """
        Index references and append them to their definitions.

        Indexes continue from the definition's last recorded reference, so
        they keep increasing across calls and across paths.
        """
        recorded = []
        for ref in refs:
            definition = ref.definition
            ref.index = definition.refs[-1].index + 1 if definition.refs else 0
            definition.refs.append(ref)
            recorded.append(ref)
            logger.debug(
                f"Recorded {ref.type.value} reference '{ref.name}' -> "
                f"'{definition.id}' #{ref.index} in '{ref.path}'."
            )
        return recorded

    def get_reverse_refs(
        self, *, id: Optional[str] = None, name: Optional[str] = None
    ) -> List[str]:
        """``path#ref-id`` link addresses of every reference to a definition."""
        definition = self.lookup(id=id, name=name)
        return [self.ref_address(ref) for ref in definition.refs]

    def ref_address(self, ref: Reference) -> str:
        return f"{ref.path}#{self.ref_id_generator(ref)}"

    def purge(self, path: str) -> List[Definition]:
        """
        Forget everything a path contributed: its definitions (with every key)
        and the references found in it, wherever their definitions live.
        """
        removed = [d for d in self.id2def.values() if d.path == path]
        for definition in removed:
            for key in definition.keys:
                if self.name2def.get(key) is definition:
                    del self.name2def[key]
            del self.id2def[definition.id]

        dropped = 0
        for definition in self.id2def.values():
            kept = [ref for ref in definition.refs if ref.path != path]
            dropped += len(definition.refs) - len(kept)
            definition.refs = kept

        logger.info(
            f"Purged '{path}': removed {len(removed)} definition(s) and "
            f"{dropped} reference(s)."
        )
        return removed

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Snapshot of the registry keyed by definition id."""
        snapshot = {}
        for def_id, definition in self.id2def.items():
            data = definition.to_dict()
            data["reverse_refs"] = [self.ref_address(ref) for ref in definition.refs]
            snapshot[def_id] = data
        return snapshot
