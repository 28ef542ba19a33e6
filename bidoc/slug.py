import re

from bidoc.models import Reference


def slugify(name: str) -> str:
    """
    Default definition id: lowercase, punctuation dropped, whitespace runs
    turned into dashes. Word characters are Unicode-aware, so ``中文`` stays
    ``中文``.
    """
    value = name.strip().lower()
    value = re.sub(r"[^\w\s-]", "", value)
    value = re.sub(r"\s+", "-", value)
    value = re.sub(r"-{2,}", "-", value)
    return value


def default_ref_id(ref: Reference) -> str:
    """``<definition id>-ref-<n>`` with ``n`` counted from 1."""
    return f"{ref.definition.id}-ref-{ref.index + 1}"
