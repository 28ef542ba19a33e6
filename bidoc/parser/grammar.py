import re

# Characters that may never appear inside a name, alias or id. Newlines are
# excluded so a marker cannot span lines; brackets so markers cannot nest.
_RESERVED = r"$&+,/:;=?!@\"'<>#%{}|\\^~\[\]`\n\r"

# Names and aliases may contain spaces, ids may not.
NAME_CHARS = rf"[^{_RESERVED}]+"
ID_CHARS = rf"[^{_RESERVED} ]+"

# [[name]], [[name|alias|...]], [[name:id]], [[name|alias|...:id]]
DEFINITION_PATTERN = re.compile(
    r"\[\["
    rf"(?P<name>{NAME_CHARS})"
    rf"(?P<alias>(?:\|{NAME_CHARS})*)"
    rf"(?::(?P<id>{ID_CHARS}))?"
    r"\]\]"
)

# [[#id]], [[@name]] or [[!anything on one line]]
EXPLICIT_OR_ESCAPED_PATTERN = re.compile(
    r"\[\["
    r"(?:"
    rf"#(?P<id>{ID_CHARS})"
    rf"|@(?P<name>{NAME_CHARS})"
    r"|!(?P<escaped>.*?)"
    r")"
    r"\]\]"
)


def literal_pattern(text: str) -> re.Pattern:
    """Exact-substring matcher for an implicit reference."""
    return re.compile(re.escape(text))
