"""Frontmatter codec — parse and splice the YAML block of a markdown file.

A frontmatter block is a leading ``---`` line, a YAML mapping, and a
closing ``---`` line. Parsing keeps everything needed to write the file
back without disturbing unrelated content:

- ``record``: the parsed mapping (a ruamel ``CommentedMap``, so key order,
  comments, and quote styles survive a round trip).
- ``body``: the trimmed text after the closing delimiter, or the whole
  input when there is no block.
- ``indentation``: the leading-space run of the first indented line inside
  the block, re-applied on render.

Rendering replaces only the original delimited region; the bytes after the
closing delimiter (body, line endings) are left exactly as they were.
"""

from __future__ import annotations

import re
from collections.abc import MutableMapping
from dataclasses import dataclass
from io import StringIO
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from privateplot.domain.errors import FrontmatterParseError

_DELIMITER = "---"

# Opening delimiter, lazily-matched block, closing delimiter on its own line.
_BLOCK_RE = re.compile(
    r"\A---[ \t]*\r?\n(?:(?P<block>.*?)\r?\n)?---[ \t]*(?=\r?\n|\Z)",
    re.DOTALL,
)
_INDENT_RE = re.compile(r"^( +)", re.MULTILINE)


def _new_yaml() -> YAML:
    """Create a fresh round-trip YAML instance.

    ruamel's YAML object keeps emitter state between calls, so a failed dump
    must not leak into the next file.
    """
    y = YAML()
    y.preserve_quotes = True
    y.default_flow_style = False
    y.width = 4096
    return y


@dataclass
class FrontmatterDocument:
    """A markdown file split into its frontmatter record and body.

    Attributes:
        record: Parsed frontmatter mapping; empty when the file had no block.
        body: Text after the closing delimiter (trimmed), or the full input.
        indentation: Indent style detected inside the original block.
        source: The original text, kept only when a block was present so the
            block can be spliced in place.
    """

    record: MutableMapping[str, Any]
    body: str
    indentation: str = ""
    source: str | None = None

    @property
    def has_block(self) -> bool:
        return self.source is not None


def parse_document(raw: str) -> FrontmatterDocument:
    """Split *raw* into a :class:`FrontmatterDocument`.

    Raises:
        FrontmatterParseError: If a block is delimited but is not a YAML
            mapping.
    """
    match = _BLOCK_RE.match(raw)
    if match is None:
        return FrontmatterDocument(record={}, body=raw)

    block = match.group("block") or ""
    try:
        loaded = _new_yaml().load(block)
    except YAMLError as exc:
        msg = f"Error parsing frontmatter: {exc}"
        raise FrontmatterParseError(msg) from exc

    if loaded is None:
        loaded = {}
    if not isinstance(loaded, MutableMapping):
        msg = f"Error parsing frontmatter: expected a mapping, got {type(loaded).__name__}"
        raise FrontmatterParseError(msg)

    # The first indented line sets the prefix for the whole rewritten block,
    # even when it belongs to a nested value rather than a top-level key.
    indent_match = _INDENT_RE.search(block)
    return FrontmatterDocument(
        record=loaded,
        body=raw[match.end() :].strip(),
        indentation=indent_match.group(1) if indent_match else "",
        source=raw,
    )


def parse_frontmatter(raw: str) -> tuple[MutableMapping[str, Any], str]:
    """Return ``(record, body)`` for *raw*; see :func:`parse_document`."""
    doc = parse_document(raw)
    return doc.record, doc.body


def dump_record(record: MutableMapping[str, Any], indentation: str = "") -> str:
    """Dump *record* as YAML text ending in a newline.

    When *indentation* is set it is prefixed to every non-empty line.
    An empty record dumps to an empty string (``---`` directly followed by
    ``---``), not ``{}``.
    """
    if not record:
        return ""
    buf = StringIO()
    _new_yaml().dump(record, buf)
    yaml_text = buf.getvalue()
    if not indentation:
        return yaml_text

    lines = yaml_text.split("\n")
    last = len(lines) - 1
    return "\n".join(
        indentation + line if line and index < last else line for index, line in enumerate(lines)
    )


def render_document(doc: FrontmatterDocument) -> str:
    """Reassemble a file from *doc*.

    Files without an original block get a new block followed by a blank
    line and the body; otherwise the new block replaces the original
    delimited region and the rest of the source is kept verbatim.
    """
    yaml_text = dump_record(doc.record, doc.indentation)
    new_block = f"{_DELIMITER}\n{yaml_text}{_DELIMITER}"

    if doc.source is None:
        return f"{new_block}\n\n{doc.body}"

    match = _BLOCK_RE.match(doc.source)
    if match is None:
        # Source was edited to drop its block; fall back to insertion.
        return f"{new_block}\n\n{doc.body}"
    return new_block + doc.source[match.end() :]
