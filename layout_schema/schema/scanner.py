"""
Depth-aware scanning of builder-style schema source text.

Layout sources declare their schemas with fluent builder chains such as
``z.object({title: z.string().min(3)})``. Regular expressions cannot tell where
such a chain ends, so everything here walks the text one character at a time
with an explicit ScanState that tracks bracket depth and string literals.

Components:
    - ScanState / iter_code: the shared cursor state and character walker
    - code_offsets: positions that are code rather than comments or strings
    - extract_span: balanced span of a declaration, trailing modifiers included
    - find_balanced: matching closer for an opening bracket
    - split_top_level: field splitter (commas inside nested structures ignored)
    - strip_method_calls / strip_comments: text cleanup before compilation
    - parse_chain: split a chain into (name, args) calls

Example:
    ```python
    source = 'const CardSchema = z.object({title: z.string()}).optional();'
    span = extract_span(source, source.index("z."))
    # span == 'z.object({title: z.string()}).optional()'
    ```
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, Iterator, List, NamedTuple, Optional, Sequence, Tuple

QUOTES = ("'", '"', "`")
CLOSERS = {"(": ")", "{": "}", "[": "]"}

# Calls that still belong to a declaration after its constructor closes;
# every modifier the compiler reads has to be here
TRAILING_METHODS = (
    "default",
    "optional",
    "nullish",
    "min",
    "max",
    "length",
    "nonempty",
    "gte",
    "lte",
    "partial",
    "array",
    "describe",
)

_IDENT = re.compile(r"\s*([A-Za-z_$][\w$]*)")
_DOT_IDENT = re.compile(r"\s*\.\s*([A-Za-z_$][\w$]*)")
_CHAIN_CONTINUATION = re.compile(r"\s*\.")
_TRAILING_CALL = re.compile(
    r"\s*\.\s*(?:%s)\s*\(" % "|".join(re.escape(name) for name in TRAILING_METHODS)
)


@dataclass
class ScanState:
    """
    Cursor state for a single left-to-right scan.

    Attributes:
        paren: Current parenthesis depth
        brace: Current brace depth
        bracket: Current square bracket depth
        quote: Delimiter of the string being scanned (None outside strings).
            Only backtick strings continue past a newline.
        escaped: True when the previous character was an unconsumed backslash
    """

    paren: int = 0
    brace: int = 0
    bracket: int = 0
    quote: Optional[str] = None
    escaped: bool = False

    @property
    def in_string(self) -> bool:
        return self.quote is not None

    @property
    def at_top_level(self) -> bool:
        return (
            self.quote is None
            and self.paren == 0
            and self.brace == 0
            and self.bracket == 0
        )

    @property
    def unbalanced(self) -> bool:
        """True once a closer appeared without a matching opener."""
        return self.paren < 0 or self.brace < 0 or self.bracket < 0

    def advance(self, char: str) -> None:
        """Update the state with the next character of the text."""
        if self.quote is not None:
            if self.escaped:
                self.escaped = False
            elif char == "\\":
                self.escaped = True
            elif char == self.quote:
                self.quote = None
            elif char == "\n" and self.quote != "`":
                # Only template literals span lines
                self.quote = None
            return

        if char in QUOTES:
            self.quote = char
        elif char == "(":
            self.paren += 1
        elif char == ")":
            self.paren -= 1
        elif char == "{":
            self.brace += 1
        elif char == "}":
            self.brace -= 1
        elif char == "[":
            self.bracket += 1
        elif char == "]":
            self.bracket -= 1


def _skip_comment(text: str, index: int) -> int:
    """Return the index after a comment starting at index, or index itself."""
    if text.startswith("//", index):
        end = text.find("\n", index)
        # The newline is not part of the comment
        return len(text) if end == -1 else end
    if text.startswith("/*", index):
        end = text.find("*/", index + 2)
        return len(text) if end == -1 else end + 2
    return index


def iter_code(
    text: str,
    start: int = 0,
    state: Optional[ScanState] = None
) -> Iterator[Tuple[int, str, bool]]:
    """
    Walk text from start, skipping comments and updating state.

    Args:
        text: Source text
        start: Index to start from
        state: State to update in place (a fresh one if None)

    Yields:
        Tuple of (index, char, outside) where outside is True for characters
        that are code rather than part of a string literal. The state has
        already been advanced past the yielded character.
    """
    state = state if state is not None else ScanState()
    index = start
    length = len(text)

    while index < length:
        if state.quote is None:
            skipped = _skip_comment(text, index)
            if skipped != index:
                index = skipped
                continue

        char = text[index]
        outside = state.quote is None and char not in QUOTES
        state.advance(char)
        yield index, char, outside
        index += 1


def code_offsets(text: str) -> FrozenSet[int]:
    """Indexes of the characters of text that are code, not comments or string contents."""
    return frozenset(index for index, _, outside in iter_code(text) if outside)


def find_balanced(text: str, open_index: int) -> Optional[int]:
    """
    Find the end of the bracketed region opening at open_index.

    Args:
        text: Source text
        open_index: Index of an opening ``(``, ``{`` or ``[``

    Returns:
        Index just past the matching closer, or None if the region never closes
    """
    if open_index >= len(text) or text[open_index] not in CLOSERS:
        return None

    closer = CLOSERS[text[open_index]]
    state = ScanState()
    for index, char, outside in iter_code(text, open_index, state):
        if not outside:
            continue
        if state.unbalanced:
            return None
        if char == closer and state.at_top_level:
            return index + 1
    return None


def _continues_chain(text: str, index: int) -> bool:
    """True if the next non-blank character after index starts a method call."""
    match = _CHAIN_CONTINUATION.match(text, index + 1)
    return match is not None and not text.startswith("...", match.end() - 1)


def _consume_trailing_calls(text: str, index: int) -> int:
    """Extend a span over whitelisted trailing calls, returning the new end."""
    end = index
    while True:
        match = _TRAILING_CALL.match(text, end)
        if match is None:
            return end
        close = find_balanced(text, match.end() - 1)
        if close is None:
            return end
        end = close


def extract_span(text: str, start_index: int, namespace: str = "z") -> Optional[str]:
    """
    Extract the complete builder expression starting at start_index.

    The span ends at the first ``)`` that brings parenthesis and brace depth
    back to zero, then continues through trailing modifier calls such as
    ``.default(...)`` and ``.optional()``.

    Args:
        text: Source text
        start_index: Index where the builder chain begins (leading blanks allowed)
        namespace: Builder namespace the chain must start with

    Returns:
        str: The self-contained expression, or None if it is malformed
            (unterminated, or cut by a statement boundary)

    Example:
        ```python
        extract_span('x = z.string().min(3).default("a");', 4)
        # 'z.string().min(3).default("a")'
        ```
    """
    index = start_index
    while index < len(text) and text[index].isspace():
        index += 1

    prefix = re.compile(r"%s\s*\." % re.escape(namespace))
    if not prefix.match(text, index):
        return None

    state = ScanState()
    for position, char, outside in iter_code(text, index, state):
        if not outside:
            continue
        if state.unbalanced or char == ";":
            return None
        if char == "\n" and state.paren == 0 and state.brace == 0:
            if not _continues_chain(text, position):
                return None
        if char == ")" and state.paren == 0 and state.brace == 0:
            end = _consume_trailing_calls(text, position + 1)
            return text[index:end].strip()

    return None


def split_top_level(text: str, separator: str = ",") -> List[str]:
    """
    Split text on separators that are not nested or inside strings.

    Args:
        text: Text to split, e.g. the body of an object literal
        separator: Single separator character

    Returns:
        List of stripped, non-empty parts with comments removed

    Example:
        ```python
        split_top_level('a: z.enum(["x", "y"]), b: z.string()')
        # ['a: z.enum(["x", "y"])', 'b: z.string()']
        ```
    """
    parts = []
    state = ScanState()
    last = 0
    for index, char, outside in iter_code(text, 0, state):
        if outside and char == separator and state.at_top_level:
            parts.append(text[last:index])
            last = index + 1
    parts.append(text[last:])

    cleaned = [strip_comments(part).strip() for part in parts]
    return [part for part in cleaned if part]


def strip_comments(text: str) -> str:
    """Remove line and block comments that are outside string literals."""
    return "".join(char for _, char, _ in iter_code(text))


def _find_call(text: str, pattern: "re.Pattern[str]") -> Optional[Tuple[int, int]]:
    """Locate the first call matching pattern outside strings."""
    for index, char, outside in iter_code(text):
        if not (outside and char == "."):
            continue
        match = pattern.match(text, index)
        if match is None:
            continue
        close = find_balanced(text, match.end() - 1)
        if close is not None:
            return index, close
    return None


def strip_method_calls(text: str, names: Sequence[str]) -> str:
    """
    Remove every ``.name(...)`` call for the given method names.

    Calls are removed one at a time until none remain, so arguments that
    contain further calls (``.default(z.string().default("x"))``) are handled.

    Args:
        text: Expression text
        names: Method names to remove

    Returns:
        str: Text with the calls removed
    """
    pattern = re.compile(r"\.\s*(?:%s)\s*\(" % "|".join(re.escape(n) for n in names))
    while True:
        found = _find_call(text, pattern)
        if found is None:
            return text
        start, end = found
        text = text[:start] + text[end:]


class ChainCall(NamedTuple):
    """One segment of a fluent chain: ``name`` or ``name(args)``."""

    name: str
    args: Optional[str]


def parse_chain(text: str) -> Optional[List[ChainCall]]:
    """
    Split a fluent chain into its calls.

    Args:
        text: Chain text such as ``z.array(ItemSchema).min(1)``

    Returns:
        List of ChainCall, or None if text is not a clean chain

    Example:
        ```python
        parse_chain("z.string().max(40)")
        # [ChainCall('z', None), ChainCall('string', ''), ChainCall('max', '40')]
        ```
    """
    text = text.strip()
    calls: List[ChainCall] = []
    index = 0

    while index < len(text):
        pattern = _DOT_IDENT if calls else _IDENT
        match = pattern.match(text, index)
        if match is None:
            return None
        index = match.end()

        while index < len(text) and text[index].isspace():
            index += 1

        args = None
        if index < len(text) and text[index] == "(":
            close = find_balanced(text, index)
            if close is None:
                return None
            args = text[index + 1:close - 1]
            index = close

        calls.append(ChainCall(match.group(1), args))

        while index < len(text) and text[index].isspace():
            index += 1

    return calls or None
