import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple


class ReferenceType(Enum):
    """How a reference was written in the source text."""
    IMPLICIT = "implicit"  # bare occurrence of a name or alias
    EXPLICIT = "explicit"  # [[#id]] or [[@name]]
    ESCAPED = "escaped"  # [[!anything]], never linked


@dataclass(frozen=True)
class Point:
    """A caret position in the original source. Line and column start at 1."""
    line: int
    column: int
    offset: Optional[int] = None  # 0-based character offset, when known

    def to_dict(self) -> Dict[str, Optional[int]]:
        return {"line": self.line, "column": self.column, "offset": self.offset}


@dataclass(frozen=True)
class Position:
    """A span in the source. ``end`` points at the last character, not past it."""
    start: Point
    end: Point

    def to_dict(self) -> Dict[str, Dict[str, Optional[int]]]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}


def shift(point: Point, consumed: str) -> Point:
    """
    Shift ``point`` over ``consumed``.

    Without a newline the column moves by ``len(consumed)``. Otherwise the
    line moves by the number of newlines and the column is counted from the
    start of the new line: shifting 1:1 over ``"abc\\ndef"`` gives 2:3. Text
    ending on a newline still moves to the new line, with the column one past
    the second-to-last segment, so ``"\\n"`` gives 2:1 and ``"ab\\ncd\\n"``
    from 3:5 gives 5:3.
    """
    offset = point.offset + len(consumed) if point.offset is not None else None
    lines = consumed.split("\n")

    if len(lines) == 1:
        return Point(point.line, point.column + len(consumed), offset)

    line = point.line + len(lines) - 1
    if lines[-1] == "":
        return Point(line, len(lines[-2]) + 1, offset)
    return Point(line, len(lines[-1]), offset)


def _last_character(point: Point, consumed: str) -> Point:
    """
    Position of the last character of ``consumed`` when ``point`` is the
    character right before it.

    A newline is a character of the line it ends: from 1:1, ``"\\n"`` lands
    on 1:2 and ``"\\n\\n"`` on 2:1.
    """
    if not consumed.endswith("\n"):
        return shift(point, consumed)

    offset = point.offset + len(consumed) if point.offset is not None else None
    lines = consumed.split("\n")
    line = point.line + len(lines) - 2
    if len(lines) == 2:
        column = point.column + len(lines[-2]) + 1
    else:
        column = len(lines[-2]) + 1
    return Point(line, column, offset)


def seek(point: Point, text: str, to: int, frm: int = 0) -> Point:
    """
    Position of ``text[to]`` given that ``text[frm]`` sits at ``point``.

    Counting starts from the character at ``point``, which must not be a
    newline: newlines at the anchor are stepped over first.
    """
    while frm < to and text[frm] == "\n":
        offset = point.offset + 1 if point.offset is not None else None
        point = Point(point.line + 1, 1, offset)
        frm += 1
    if frm < to:
        point = _last_character(point, text[frm + 1 : to + 1])
    return point


def span_position(start: Point, text: str) -> Position:
    """Position of ``text`` when its first character sits at ``start``."""
    if not text:
        return Position(start=start, end=start)
    return Position(start=start, end=seek(start, text, len(text) - 1))


@dataclass(frozen=True, eq=False)
class Fragment:
    """
    One span of a text buffer while markers are being resolved.

    Fragments compare and hash by identity: the same span may appear in many
    lists across passes, and renderers look spans up by the object itself.
    """
    content: str
    # Already produced by a definition/reference/escape; later passes skip it.
    locked: bool
    position: Position


@dataclass(eq=False)
class Definition:
    """A named anchor declared once in the corpus with ``[[name|alias:id]]``."""
    name: str
    id: str
    path: str
    fragment: Fragment
    alias: List[str] = field(default_factory=list)
    refs: List["Reference"] = field(default_factory=list)

    @property
    def keys(self) -> List[str]:
        """Every name-like lookup key: the name followed by the aliases."""
        return [self.name, *self.alias]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "alias": list(self.alias),
            "id": self.id,
            "path": self.path,
            "position": self.fragment.position.to_dict(),
            "refs": [ref.to_dict() for ref in self.refs],
        }


@dataclass(eq=False)
class Reference:
    """An occurrence of a definition's name, alias or id elsewhere in the corpus."""
    path: str
    fragment: Fragment
    type: ReferenceType
    definition: "Definition" = field(repr=False)
    name: str  # literal name or alias written by the author
    index: Optional[int] = None  # assigned when the reference is recorded

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "type": self.type.value,
            "name": self.name,
            "index": self.index,
            "definition_id": self.definition.id,
            "position": self.fragment.position.to_dict(),
        }


@dataclass(eq=False)
class EscapedReference:
    """An ``[[!payload]]`` marker. It protects text from implicit matching only."""
    path: str
    fragment: Fragment
    payload: str
    type: ReferenceType = ReferenceType.ESCAPED


DefIdGenerator = Callable[[str], str]
RefIdGenerator = Callable[[Reference], str]
DefRenderer = Callable[[Definition], str]
RefRenderer = Callable[[Reference], str]
# (match, position of the match, index of the new fragment in the output list)
# -> (content, locked)
FragmentTransform = Callable[[re.Match, Position, int], Tuple[str, bool]]
