from __future__ import annotations

from typing import Any, Optional

from bidoc.models import Position


class BiDocError(Exception):
    """Base class for every error raised while collecting or resolving markers."""

    code = "bidoc_error"

    def __init__(self, message: str, *, position: Optional[Position] = None):
        super().__init__(message)
        self.message = message
        self.position = position

    def _identity(self) -> dict[str, Any]:
        return {}

    def to_details_dict(self) -> dict[str, Any]:
        """Flatten the error for logs and per-path failure reports."""

        details: dict[str, Any] = {
            "reason": self.message,
            "reason_code": self.code,
            "exception_type": self.__class__.__name__,
        }
        details.update(
            {k: v for k, v in self._identity().items() if v is not None}
        )
        if self.position is not None:
            details["position"] = self.position.to_dict()
        return details


class DuplicateDefinitionError(BiDocError):
    """A definition key collides with a key already held by another definition."""

    def __init__(
        self, message: str, *, def_path: str, position: Optional[Position] = None
    ):
        super().__init__(message, position=position)
        self.def_path = def_path


class DuplicateDefinitionNameError(DuplicateDefinitionError):
    code = "dup_def_name"

    def __init__(self, name: str, path: str, position: Optional[Position] = None):
        super().__init__(
            f"Duplicate definition name: {name} in file {path}",
            def_path=path,
            position=position,
        )
        self.def_name = name

    def _identity(self) -> dict[str, Any]:
        return {"def_name": self.def_name, "def_path": self.def_path}


class DuplicateDefinitionIdError(DuplicateDefinitionError):
    code = "dup_def_id"

    def __init__(self, id: str, path: str, position: Optional[Position] = None):
        super().__init__(
            f"Duplicate definition id: {id} in file {path}",
            def_path=path,
            position=position,
        )
        self.def_id = id

    def _identity(self) -> dict[str, Any]:
        return {"def_id": self.def_id, "def_path": self.def_path}


class DefinitionNotFoundError(BiDocError):
    """
    No definition answers to the requested id or name.

    Raised while resolving ``[[#id]]``/``[[@name]]`` markers (``def_path`` and
    ``position`` describe the requesting marker) and by reverse-reference
    lookups (only the key is known).
    """

    code = "def_not_found"

    def __init__(
        self,
        lookup: str,
        key: str,
        path: Optional[str] = None,
        position: Optional[Position] = None,
    ):
        if lookup not in ("id", "name"):
            raise ValueError(f"Unknown lookup kind: {lookup!r}")
        message = f"Definition not found: {lookup}={key}"
        if path is not None:
            message += f" from {path}"
        super().__init__(message, position=position)
        self.lookup = lookup
        self.key = key
        self.def_path = path
        self.def_id = key if lookup == "id" else None
        self.def_name = key if lookup == "name" else None

    def _identity(self) -> dict[str, Any]:
        return {
            "lookup": self.lookup,
            "def_id": self.def_id,
            "def_name": self.def_name,
            "def_path": self.def_path,
        }
