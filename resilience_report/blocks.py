"""
blocks.py — Content Block Classifier.

Narrative fields use a deliberately small markup:

    **Objectives**                  -> Heading
    Overview                        -> BulletList (intro + items)
    - Item A
    - Item B
    1. Staffing: review rota        -> NumberedList (label: body)
       - nested detail              -> sub-item of the numbered entry
    Anything else                   -> Paragraph

Raw text is split on blank lines and each chunk is classified by the first
matching rule in _RULES. The order of that table is the precedence: a chunk
holding both '-' lines and 'N.' lines is a BulletList, because the bullet
rule is checked first.

Blocks are plain frozen dataclasses created per render call and never stored.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Union

logger = logging.getLogger(__name__)

_BOLD = "**"
_PARAGRAPH_SPLIT = re.compile(r"\n[ \t]*\n")
_HEADING = re.compile(r"^\*\*(.+)\*\*$", re.DOTALL)
_NUMBERED_LINE = re.compile(r"^(\d+)\.\s*(.*)$")
_NUMBERED_ANY = re.compile(r"^\d+\.\s*", re.MULTILINE)
_BULLET_LINE = re.compile(r"^-\s*")
_NESTED_BULLET = re.compile(r"^\s+-\s*")


# ---------------------------------------------------------------------------
# Block types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Heading:
    text: str


@dataclass(frozen=True)
class BulletList:
    items: tuple[str, ...]
    intro: str | None = None


@dataclass(frozen=True)
class NumberedItem:
    """One 'N.' entry; label is the emphasised text before the first colon."""
    body: str
    label: str | None = None
    number: int | None = None
    children: tuple[str, ...] = field(default=())


@dataclass(frozen=True)
class NumberedList:
    items: tuple[NumberedItem, ...]


@dataclass(frozen=True)
class Paragraph:
    text: str


ContentBlock = Union[Heading, BulletList, NumberedList, Paragraph]


def strip_bold(text: str) -> str:
    """Remove every bold marker from text."""
    return text.replace(_BOLD, "")


# ---------------------------------------------------------------------------
# Rules (predicate, builder) in precedence order
# ---------------------------------------------------------------------------

def _is_heading(chunk: str) -> bool:
    return _HEADING.match(chunk) is not None


def _build_heading(chunk: str) -> Heading:
    return Heading(strip_bold(chunk).strip())


def _is_bullet_list(chunk: str) -> bool:
    return any(line.startswith("-") for line in chunk.split("\n"))


def _build_bullet_list(chunk: str) -> BulletList:
    intro_lines: list[str] = []
    items: list[str] = []
    for line in chunk.split("\n"):
        if line.startswith("-"):
            items.append(strip_bold(_BULLET_LINE.sub("", line)).strip())
        elif not items:
            if line.strip():
                intro_lines.append(line.strip())
        elif line.strip():
            # Wrapped continuation of the previous bullet.
            items[-1] = f"{items[-1]} {strip_bold(line).strip()}"
    intro = strip_bold(" ".join(intro_lines)) if intro_lines else None
    return BulletList(items=tuple(items), intro=intro)


def _is_numbered_list(chunk: str) -> bool:
    return _NUMBERED_ANY.search(chunk) is not None


def _numbered_item(number: str, content: str) -> NumberedItem:
    clean = strip_bold(content).strip()
    if ":" in clean:
        label, body = clean.split(":", 1)
        return NumberedItem(body=body.strip(), label=label.strip(), number=int(number))
    return NumberedItem(body=clean, number=int(number))


def _build_numbered_list(chunk: str) -> NumberedList:
    items: list[NumberedItem] = []
    children: list[list[str]] = []
    for line in chunk.split("\n"):
        match = _NUMBERED_LINE.match(line)
        if match:
            items.append(_numbered_item(match.group(1), match.group(2)))
            children.append([])
        elif not line.strip():
            continue
        elif not items:
            logger.debug("Dropping text before first numbered item: %r", line)
        elif _NESTED_BULLET.match(line):
            children[-1].append(strip_bold(_NESTED_BULLET.sub("", line)).strip())
        else:
            prev = items[-1]
            items[-1] = NumberedItem(
                body=f"{prev.body} {strip_bold(line).strip()}".strip(),
                label=prev.label,
                number=prev.number,
            )
    return NumberedList(items=tuple(
        NumberedItem(body=item.body, label=item.label, number=item.number, children=tuple(kids))
        for item, kids in zip(items, children)
    ))


def _build_paragraph(chunk: str) -> Paragraph:
    return Paragraph(strip_bold(chunk).strip())


_RULES: tuple[tuple[Callable[[str], bool], Callable[[str], ContentBlock]], ...] = (
    (_is_heading, _build_heading),
    (_is_bullet_list, _build_bullet_list),
    (_is_numbered_list, _build_numbered_list),
    (lambda chunk: True, _build_paragraph),
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def classify_paragraph(chunk: str) -> ContentBlock | None:
    """Classify one blank-line-delimited chunk of text.

    Args:
        chunk: Text between blank lines.

    Returns:
        Exactly one ContentBlock, or None for an empty chunk.
    """
    chunk = chunk.strip()
    if not chunk.strip():
        return None
    for matches, build in _RULES:
        if matches(chunk):
            return build(chunk)
    return None  # unreachable: the last rule always matches


def parse_blocks(text: str | None) -> list[ContentBlock]:
    """Split raw narrative text on blank lines and classify each chunk.

    Args:
        text: Raw narrative text (may be None or empty).

    Returns:
        Ordered list of blocks; empty chunks are skipped.
    """
    if not text:
        return []
    blocks = []
    for chunk in _PARAGRAPH_SPLIT.split(text.replace("\r\n", "\n")):
        block = classify_paragraph(chunk)
        if block is not None:
            blocks.append(block)
    return blocks
