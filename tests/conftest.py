import pytest

from bidoc import BiDoc, DefinitionRegistry, Point
from bidoc.parser import parse_definitions
from bidoc.parser.fragments import init_fragments, text_position
from bidoc.slug import slugify


@pytest.fixture
def origin():
    return Point(line=1, column=1, offset=0)


@pytest.fixture
def bidoc():
    return BiDoc()


@pytest.fixture
def make_registry():
    """Registry pre-filled from definition markers, one call per path."""

    def _make(*sources):
        registry = DefinitionRegistry()
        for path, text in sources:
            parsed = parse_definitions(
                init_fragments(text, text_position(text)), path, slugify
            )
            registry.register_all(parsed.defs)
        return registry

    return _make
