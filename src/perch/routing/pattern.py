"""Route template compilation.

Turns a path template such as ``/books/:id/chapters/:num`` into a
compiled regular expression plus the ordered list of variable names
captured by it.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass

from perch.errors import InvalidPatternError

logger = logging.getLogger("perch.routing")

# ":" followed by one or more word characters
TOKEN = re.compile(r":(\w+)")

# Replacement for every token in the generated source
VARIABLE_GROUP = r"(\w+)"


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A compiled route template.

    ``variable_names`` lists one name per capturing group of ``regex``,
    in the order the tokens appear in ``template``.
    """

    template: str
    source: str
    regex: re.Pattern[str]
    variable_names: tuple[str, ...]

    def match(self, path: str) -> dict[str, str] | None:
        """Match *path* in full and return the captured variables.

        Returns ``None`` when the path does not match. A prefix match is
        not a match: ``/books/:id`` does not match ``/books/42/chapters``.
        """
        m = self.regex.fullmatch(path)
        if m is None:
            return None
        return dict(zip(self.variable_names, m.groups(), strict=True))


def escape_literal(text: str, *, strict: bool = True) -> str:
    """Escape literal template text for inclusion in a matcher source.

    The path separator is always escaped. With *strict*, every other
    regex metacharacter is escaped too; otherwise the text is copied
    as-is and may carry pattern syntax of its own.
    """
    if strict:
        text = re.escape(text)
    return text.replace("/", r"\/")


def compile_template(template: str, *, strict_literals: bool = True) -> CompiledPattern:
    """Compile a route template into a full-match pattern.

    Examples::

        "/books"          -> source r"\\/books",           variables ()
        "/books/:id"      -> source r"\\/books\\/(\\w+)",   variables ("id",)
        "/a/:x/b/:y"      -> source r"\\/a\\/(\\w+)\\/b\\/(\\w+)", variables ("x", "y")

    Duplicate variable names are accepted; a warning is logged and the
    last occurrence wins when the match is bound.

    Raises ``InvalidPatternError`` if the generated source is not a
    valid regular expression, or if literal text introduces capturing
    groups of its own (only possible with ``strict_literals=False``).
    """
    parts: list[str] = []
    names: list[str] = []
    position = 0

    for token in TOKEN.finditer(template):
        parts.append(escape_literal(template[position : token.start()], strict=strict_literals))
        parts.append(VARIABLE_GROUP)
        names.append(token.group(1))
        position = token.end()
    parts.append(escape_literal(template[position:], strict=strict_literals))

    source = "".join(parts)
    try:
        regex = re.compile(source)
    except re.error as exc:
        raise InvalidPatternError(template, source, str(exc)) from exc

    if regex.groups != len(names):
        raise InvalidPatternError(
            template,
            source,
            f"expected {len(names)} capturing group(s), found {regex.groups}",
        )

    duplicates = sorted(name for name, count in Counter(names).items() if count > 1)
    if duplicates:
        logger.warning(
            "Route template %r repeats variable(s) %s; the last occurrence wins",
            template,
            ", ".join(duplicates),
        )

    return CompiledPattern(
        template=template,
        source=source,
        regex=regex,
        variable_names=tuple(names),
    )
