"""Bounded lexical scanner for Java source text.

This is not a Java parser. It recognizes a fixed set of declaration shapes:
a top-level type header, and the methods and fields declared directly in that
type's body. Comments and string literals are blanked out (offsets preserved)
before any matching, annotations are removed, and only brace depth 1 of the
primary type is examined.
"""
from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .models import JavaField, JavaMethod, JavaParameter

TYPE_MODIFIERS = (
    "public", "protected", "private", "abstract", "final", "static",
    "sealed", "non-sealed", "strictfp",
)
METHOD_MODIFIERS = frozenset((
    "public", "protected", "private", "static", "abstract", "final",
    "synchronized", "native", "default", "strictfp",
))
FIELD_MODIFIERS = frozenset((
    "public", "protected", "private", "static", "final", "volatile", "transient",
))

_TYPE_HEADER_PATTERN = re.compile(
    r"(?<![\w$.-])(?P<mods>(?:(?:%s)\s+)*)(?P<kind>class|interface|enum|record)\s+(?P<name>[A-Za-z_$][\w$]*)"
    % "|".join(re.escape(m) for m in TYPE_MODIFIERS)
)
_ANNOTATION_PATTERN = re.compile(r"@(?!interface\b)\s*[A-Za-z_$][\w$.]*")
_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_$][\w$]*$")
_TYPE_PATTERN = re.compile(r"^[A-Za-z_$][\w$.<>\[\]?,&\s]*(?:\.\.\.)?$")
_TRAILING_NAME_PATTERN = re.compile(r"([A-Za-z_$][\w$]*)((?:\s*\[\s*\])*)\s*$")
_PRE_PATTERN = re.compile(r"<pre>(.*?)</pre>", re.IGNORECASE | re.DOTALL)
_CODE_WRAPPER_PATTERN = re.compile(r"^\s*\{@code\s?(.*)\}\s*$", re.DOTALL)
_INLINE_TAG_PATTERN = re.compile(r"\{@(?:code|link|linkplain|literal|value)\s+([^}]*)\}")
_HTML_TAG_PATTERN = re.compile(r"</?(?:p|b|i|em|strong|br|ul|ol|li)\s*/?>", re.IGNORECASE)
_CLAUSE_PATTERN = re.compile(r"\b(extends|implements|permits)\b")

_OPENERS = {"(": ")", "<": ">", "[": "]", "{": "}"}


@dataclass
class Javadoc:
    """A cleaned javadoc block."""
    description: Optional[str] = None
    params: Dict[str, str] = field(default_factory=dict)
    examples: List[str] = field(default_factory=list)


@dataclass
class SourceScan:
    """What the scanner recovered from one compilation unit."""
    found: bool = False
    name: Optional[str] = None
    kind: Optional[str] = None
    modifiers: List[str] = field(default_factory=list)
    is_interface: bool = False
    is_abstract: bool = False
    super_class: Optional[str] = None
    interfaces: List[str] = field(default_factory=list)
    javadoc: Optional[str] = None
    methods: List[JavaMethod] = field(default_factory=list)
    fields: List[JavaField] = field(default_factory=list)


def scan_source(text: str, class_name: Optional[str] = None) -> SourceScan:
    """Scan Java source text for its primary type and that type's members.

    Args:
        text: Contents of a ``.java`` file.
        class_name: Simple name expected from the file name; a header with this
            name is preferred over any other.

    Returns:
        SourceScan; ``found`` is False when no type header was recognized.
    """
    masked, doc_blocks = mask_source(text)
    masked = _blank_annotations(masked)

    header = _select_header(masked, class_name)
    if header is None:
        return SourceScan()

    scan = SourceScan(found=True, name=header.group("name"), kind=header.group("kind"))
    scan.modifiers = header.group("mods").split()
    scan.is_interface = scan.kind == "interface"
    scan.is_abstract = "abstract" in scan.modifiers or scan.is_interface

    class_doc = _doc_before(masked, doc_blocks, header.start())
    if class_doc is not None:
        scan.javadoc = parse_javadoc(class_doc).description

    body_open = masked.find("{", header.end())
    if body_open < 0:
        return scan
    _apply_clauses(scan, masked[header.end():body_open])

    body_close = _matching(masked, body_open)
    body_start = body_open + 1
    if scan.kind == "enum":
        # Enum constants come first; members start after the first ';'.
        semicolon = _find_top_level(masked, body_start, body_close, ";")
        if semicolon < 0:
            return scan
        body_start = semicolon + 1

    for seg_start, seg_end, terminator in _member_segments(masked, body_start, body_close):
        declaration = " ".join(masked[seg_start:seg_end].split())
        if not declaration or _TYPE_HEADER_PATTERN.search(declaration):
            continue
        doc_text = _doc_within(doc_blocks, seg_start, seg_end)
        javadoc = parse_javadoc(doc_text) if doc_text is not None else None
        method = _parse_method(declaration, javadoc)
        if method is not None:
            scan.methods.append(method)
        elif terminator == ";" and "(" not in declaration.split("=", 1)[0]:
            scan.fields.extend(_parse_fields(declaration, javadoc))
    return scan


def mask_source(text: str) -> Tuple[str, List[Tuple[int, int, str]]]:
    """Blank comments and string/char literals, keeping every offset.

    Returns:
        The masked text and the javadoc blocks found as ``(start, end, raw)``.
    """
    out = list(text)
    docs: List[Tuple[int, int, str]] = []
    i, n = 0, len(text)

    def blank(start: int, end: int) -> None:
        for k in range(start, min(end, n)):
            if out[k] != "\n":
                out[k] = " "

    while i < n:
        ch = text[i]
        if text.startswith("//", i):
            end = text.find("\n", i)
            end = n if end < 0 else end
            blank(i, end)
            i = end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end < 0 else end + 2
            if text.startswith("/**", i) and not text.startswith("/**/", i):
                docs.append((i, end, text[i:end]))
            blank(i, end)
            i = end
        elif text.startswith('"""', i):
            end = text.find('"""', i + 3)
            end = n if end < 0 else end + 3
            blank(i + 1, end - 1)
            i = end
        elif ch in ('"', "'"):
            k = i + 1
            while k < n and text[k] != ch and text[k] != "\n":
                k += 2 if text[k] == "\\" else 1
            blank(i + 1, k)
            i = k + 1
        else:
            i += 1
    return "".join(out), docs


def parse_javadoc(raw: str) -> Javadoc:
    """Clean a ``/** ... */`` block into description, @param texts and examples."""
    body = raw.strip()
    if body.startswith("/**"):
        body = body[3:]
    if body.endswith("*/"):
        body = body[:-2]
    lines = []
    for line in body.splitlines():
        line = line.strip()
        if line.startswith("*"):
            line = line[1:]
            if line.startswith(" "):
                line = line[1:]
        lines.append(line.rstrip())
    cleaned = "\n".join(lines).strip()

    examples = []
    for match in _PRE_PATTERN.finditer(cleaned):
        snippet = match.group(1)
        wrapped = _CODE_WRAPPER_PATTERN.match(snippet)
        if wrapped:
            snippet = wrapped.group(1)
        snippet = textwrap.dedent(snippet).strip("\n").rstrip()
        if snippet.strip():
            examples.append(snippet)
    cleaned = _PRE_PATTERN.sub("", cleaned)

    description_lines: List[str] = []
    tags: List[List[str]] = []
    for line in cleaned.splitlines():
        if line.lstrip().startswith("@"):
            tags.append([line.strip()])
        elif tags:
            tags[-1].append(line.strip())
        else:
            description_lines.append(line)

    params = {}
    for tag in tags:
        words = " ".join(" ".join(tag).split()).split(" ", 2)
        if words[0] == "@param" and len(words) >= 2:
            params[words[1]] = _clean_inline(words[2]) if len(words) > 2 else ""

    description = _HTML_TAG_PATTERN.sub(" ", " ".join(description_lines))
    description = _clean_inline(" ".join(description.split()))
    return Javadoc(description=description or None, params=params, examples=examples)


def split_top_level(text: str, separator: str = ",") -> List[str]:
    """Split on ``separator`` outside of (), <>, [] and {}."""
    parts, depth, start = [], 0, 0
    for i, ch in enumerate(text):
        if ch in "(<[{":
            depth += 1
        elif ch in ")>]}":
            depth = max(depth - 1, 0)
        elif ch == separator and depth == 0:
            parts.append(text[start:i])
            start = i + 1
    parts.append(text[start:])
    return [p.strip() for p in parts if p.strip()]


def _clean_inline(text: str) -> str:
    return _INLINE_TAG_PATTERN.sub(lambda m: m.group(1).strip(), text).strip()


def _blank_annotations(masked: str) -> str:
    out = list(masked)
    for match in _ANNOTATION_PATTERN.finditer(masked):
        end = match.end()
        k = end
        while k < len(masked) and masked[k] in " \t\r\n":
            k += 1
        if k < len(masked) and masked[k] == "(":
            end = _matching(masked, k) + 1
        for i in range(match.start(), min(end, len(out))):
            if out[i] != "\n":
                out[i] = " "
    return "".join(out)


def _select_header(masked: str, class_name: Optional[str]):
    first = None
    for match in _TYPE_HEADER_PATTERN.finditer(masked):
        if class_name is None or match.group("name") == class_name:
            return match
        if first is None:
            first = match
    return first


def _matching(text: str, open_index: int) -> int:
    """Index of the bracket closing the one at ``open_index`` (or end of text)."""
    opener = text[open_index]
    closer = _OPENERS[opener]
    depth = 0
    for i in range(open_index, len(text)):
        if text[i] == opener:
            depth += 1
        elif text[i] == closer:
            depth -= 1
            if depth == 0:
                return i
    return len(text) - 1


def _find_top_level(text: str, start: int, end: int, char: str) -> int:
    depth = 0
    for i in range(start, end):
        ch = text[i]
        if ch in "({[":
            depth += 1
        elif ch in ")}]":
            depth -= 1
        elif ch == char and depth == 0:
            return i
    return -1


def _member_segments(masked: str, start: int, end: int):
    """Yield ``(start, end, terminator)`` for each declaration at depth 1."""
    seg_start = start
    i = start
    paren = 0
    while i < end:
        ch = masked[i]
        if ch == "(":
            paren += 1
        elif ch == ")":
            paren -= 1
        elif ch == ";" and paren == 0:
            yield seg_start, i, ";"
            seg_start = i + 1
        elif ch == "{" and paren == 0:
            close = _matching(masked, i)
            if "=" not in masked[seg_start:i]:
                # Method body, initializer block or nested type.
                yield seg_start, i, "{"
                seg_start = close + 1
            # Otherwise an initializer expression (array, anonymous class, lambda).
            i = close
        i += 1


def _doc_within(doc_blocks, start: int, end: int) -> Optional[str]:
    found = None
    for doc_start, doc_end, raw in doc_blocks:
        if doc_start >= start and doc_end <= end:
            found = raw
    return found


def _doc_before(masked: str, doc_blocks, position: int) -> Optional[str]:
    for doc_start, doc_end, raw in reversed(doc_blocks):
        if doc_end <= position:
            return raw if not masked[doc_end:position].strip() else None
    return None


def _apply_clauses(scan: SourceScan, clause: str) -> None:
    clause = clause.strip()
    if clause.startswith("<"):
        clause = clause[_matching(clause, 0) + 1:].strip()
    if clause.startswith("("):
        clause = clause[_matching(clause, 0) + 1:].strip()

    parts: Dict[str, str] = {}
    pieces = _CLAUSE_PATTERN.split(clause)
    for keyword, value in zip(pieces[1::2], pieces[2::2]):
        parts[keyword] = value

    extends = [_normalize_type(t) for t in split_top_level(parts.get("extends", ""))]
    implements = [_normalize_type(t) for t in split_top_level(parts.get("implements", ""))]
    if scan.is_interface:
        scan.interfaces = extends
    else:
        scan.super_class = extends[0] if extends else None
        scan.interfaces = implements


def _normalize_type(text: str) -> str:
    text = " ".join(text.split())
    text = re.sub(r"\s*([<>\[\],])\s*", r"\1", text)
    return text.replace(",", ", ")


def _take_modifiers(declaration: str, allowed) -> Tuple[List[str], str]:
    modifiers = []
    rest = declaration.strip()
    while True:
        word, _, remainder = rest.partition(" ")
        if word in allowed and remainder:
            modifiers.append(word)
            rest = remainder.strip()
        else:
            return modifiers, rest


def _parse_method(declaration: str, javadoc: Optional[Javadoc]) -> Optional[JavaMethod]:
    paren = declaration.find("(")
    if paren < 0:
        return None
    head = declaration[:paren]
    if "=" in head:
        return None
    close = _matching(declaration, paren)
    params_text = declaration[paren + 1:close]
    tail = declaration[close + 1:].strip()

    modifiers, rest = _take_modifiers(head, METHOD_MODIFIERS)
    if rest.startswith("<"):
        rest = rest[_matching(rest, 0) + 1:].strip()
    name_match = _TRAILING_NAME_PATTERN.search(rest)
    if name_match is None or name_match.group(2):
        return None
    name = name_match.group(1)
    return_type = rest[:name_match.start()].strip()
    if not return_type or not _TYPE_PATTERN.match(return_type):
        # Constructors and anything else without a return type.
        return None

    exceptions: List[str] = []
    tail = re.sub(r"^(?:\[\s*\]\s*)+", "", tail)
    if tail.startswith("throws "):
        throws_text = tail[len("throws "):]
        throws_text = throws_text.split(" default ", 1)[0]
        exceptions = [_normalize_type(t) for t in split_top_level(throws_text)]
    elif tail and not tail.startswith("default"):
        return None

    parameters = []
    for raw in split_top_level(params_text):
        tokens = [t for t in raw.split() if t != "final"]
        param_decl = " ".join(tokens)
        param_match = _TRAILING_NAME_PATTERN.search(param_decl)
        if param_match is None:
            return None
        param_type = param_decl[:param_match.start()].strip() + param_match.group(2).replace(" ", "")
        if not param_type:
            return None
        param_name = param_match.group(1)
        description = javadoc.params.get(param_name) if javadoc else None
        parameters.append(JavaParameter(name=param_name, type=_normalize_type(param_type), description=description))

    return JavaMethod(
        name=name,
        return_type=_normalize_type(return_type),
        parameters=parameters,
        modifiers=modifiers,
        exceptions=exceptions,
        javadoc=javadoc.description if javadoc else None,
        examples=list(javadoc.examples) if javadoc else [],
    )


def _parse_fields(declaration: str, javadoc: Optional[Javadoc]) -> List[JavaField]:
    declarators = split_top_level(declaration)
    if not declarators:
        return []
    first = declarators[0].split("=", 1)[0].strip()
    modifiers, rest = _take_modifiers(first, FIELD_MODIFIERS)
    name_match = _TRAILING_NAME_PATTERN.search(rest)
    if name_match is None:
        return []
    base_type = rest[:name_match.start()].strip()
    if not base_type or not _TYPE_PATTERN.match(base_type) or base_type in ("return", "throw"):
        return []
    base_type = _normalize_type(base_type)

    fields = []
    names = [(name_match.group(1), name_match.group(2))]
    for extra in declarators[1:]:
        extra_match = _TRAILING_NAME_PATTERN.search(extra.split("=", 1)[0])
        if extra_match is None or not _IDENTIFIER_PATTERN.match(extra_match.group(1)):
            continue
        names.append((extra_match.group(1), extra_match.group(2)))
    for name, dims in names:
        fields.append(JavaField(
            name=name,
            type=base_type + dims.replace(" ", ""),
            modifiers=list(modifiers),
            javadoc=javadoc.description if javadoc else None,
        ))
    return fields
