import re
from typing import List, Optional, Sequence

from loguru import logger

from bidoc.models import (
    Fragment,
    FragmentTransform,
    Point,
    Position,
    seek,
    span_position,
)


def init_fragments(text: str, position: Position) -> List[Fragment]:
    """Wrap a raw text node into the single unlocked fragment every pass starts from."""
    return [Fragment(content=text, locked=False, position=position)]


def text_position(text: str, start: Optional[Point] = None) -> Position:
    """Position of a whole buffer, starting at 1:1 (offset 0) unless told otherwise."""
    return span_position(start or Point(line=1, column=1, offset=0), text)


class _Cursor:
    """Walks a fragment's content left to right, keeping the point of one index."""

    def __init__(self, fragment: Fragment):
        self.content = fragment.content
        self.index = 0
        self.point = fragment.position.start

    def seek(self, index: int) -> Point:
        """Point of ``content[index]``. Only moves forward."""
        if index < self.index:
            raise ValueError(f"Cursor cannot move backwards ({index} < {self.index})")
        if index > self.index:
            self.point = seek(self.point, self.content, index, self.index)
            self.index = index
        return self.point


def process_fragments(
    fragments: Sequence[Fragment],
    pattern: re.Pattern,
    transform: FragmentTransform,
) -> List[Fragment]:
    """
    Split every unlocked fragment around the matches of ``pattern``.

    Unmatched text stays as unlocked fragments, each match becomes the
    fragment built from ``transform(match, position, output_index)`` which
    returns ``(content, locked)``. Locked fragments and fragments without a
    match are passed through as the same objects. The input is not mutated.
    """
    result: List[Fragment] = []

    for fragment in fragments:
        if fragment.locked:
            result.append(fragment)
            continue

        # empty matches would produce empty locked fragments
        matches = [
            m for m in pattern.finditer(fragment.content) if m.end() > m.start()
        ]
        if not matches:
            result.append(fragment)
            continue

        content = fragment.content
        cursor = _Cursor(fragment)
        done = 0  # end of the previous match

        for m in matches:
            start, end = m.span()
            if start > done:
                result.append(
                    Fragment(
                        content=content[done:start],
                        locked=False,
                        position=Position(
                            start=cursor.seek(done), end=cursor.seek(start - 1)
                        ),
                    )
                )

            position = Position(start=cursor.seek(start), end=cursor.seek(end - 1))
            new_content, locked = transform(m, position, len(result))
            result.append(
                Fragment(content=new_content, locked=locked, position=position)
            )
            done = end

        if done < len(content):
            result.append(
                Fragment(
                    content=content[done:],
                    locked=False,
                    position=Position(
                        start=cursor.seek(done), end=fragment.position.end
                    ),
                )
            )

    logger.debug(
        f"Pattern {pattern.pattern!r}: {len(fragments)} fragment(s) in, {len(result)} out."
    )
    return result
