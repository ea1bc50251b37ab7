"""
Declaration discovery for layout sources.

A layout source usually declares several schemas, with the entry point
referring to the others by name:

    ```tsx
    const ImageSchema = z.object({ __image_url__: z.string(), __image_prompt__: z.string() });
    const Schema = z.object({ title: z.string().min(3).max(60), image: ImageSchema });
    ```

build_table() collects every such declaration into a DeclarationTable, and
select_main() decides which one is the entry point.
"""

import logging
import re
from typing import Dict, Iterator, Mapping, NamedTuple, Optional

from layout_schema.config import CompilerConfig
from layout_schema.schema.diagnostics import DiagnosticKind, Diagnostics
from layout_schema.schema.scanner import code_offsets, extract_span, strip_comments

logger = logging.getLogger(__name__)


class DeclarationTable(Mapping[str, str]):
    """
    Immutable mapping of declaration name to expression text.

    Iteration follows the order in which declarations were first found.
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None):
        self._entries: Dict[str, str] = dict(entries or {})

    def __getitem__(self, name: str) -> str:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DeclarationTable({list(self._entries)})"


class MainDeclaration(NamedTuple):
    """The declaration chosen as entry point."""

    name: str
    text: str


def _declaration_pattern(config: CompilerConfig) -> "re.Pattern[str]":
    return re.compile(
        r"\bconst\s+([\w$]*%s)\s*=(?!=)\s*(?=%s\s*\.)"
        % (re.escape(config.name_suffix), re.escape(config.builder_namespace))
    )


def build_table(
    source_text: str,
    config: Optional[CompilerConfig] = None,
    diagnostics: Optional[Diagnostics] = None
) -> DeclarationTable:
    """
    Collect every schema declaration in a layout source.

    A declaration is ``const <name> = <namespace>.<call>...`` where name ends
    with the configured suffix. Declarations whose span cannot be extracted are
    skipped; a later declaration with the same name replaces an earlier one.
    Matches inside comments or string literals are not declarations.

    Args:
        source_text: Layout source code
        config: Compiler settings (defaults if None)
        diagnostics: Collector for skipped declarations

    Returns:
        DeclarationTable: Name to comment-free expression text

    Example:
        ```python
        table = build_table('const ItemSchema = z.object({label: z.string()})')
        table["ItemSchema"]  # 'z.object({label: z.string()})'
        ```
    """
    config = config or CompilerConfig()
    entries: Dict[str, str] = {}
    code = code_offsets(source_text)

    for match in _declaration_pattern(config).finditer(source_text):
        if match.start() not in code:
            continue
        name = match.group(1)
        span = extract_span(source_text, match.end(), config.builder_namespace)

        if span is None:
            line = source_text.count("\n", 0, match.start()) + 1
            logger.warning(f"Skipping malformed declaration {name} at line {line}")
            if diagnostics is not None:
                diagnostics.add(
                    DiagnosticKind.EXTRACTION_FAILURE,
                    f"Could not find the end of {name} (line {line})",
                    name=name
                )
            continue

        if name in entries:
            logger.debug(f"Declaration {name} redeclared, keeping the later one")
        entries[name] = strip_comments(span)

    logger.debug(f"Found {len(entries)} declaration(s): {', '.join(entries)}")
    return DeclarationTable(entries)


def select_main(
    source_text: str,
    table: Mapping[str, str],
    config: Optional[CompilerConfig] = None
) -> Optional[MainDeclaration]:
    """
    Choose the entry-point declaration.

    Priority:
        1. A table entry named after one of config.entry_names (in order)
        2. An entry-name declaration found directly in the source, which also
           covers ``export``/``let``/``var`` forms and type annotations
        3. The longest table entry whose name contains config.container_hint
        4. The last table entry

    Args:
        source_text: Layout source code
        table: Declarations from build_table()
        config: Compiler settings (defaults if None)

    Returns:
        MainDeclaration, or None if nothing can be selected
    """
    config = config or CompilerConfig()

    for name in config.entry_names:
        if name in table:
            return MainDeclaration(name, table[name])

    code = code_offsets(source_text)
    for name in config.entry_names:
        pattern = re.compile(
            r"(?:\bexport\s+)?\b(?:const|let|var)\s+%s\s*(?::[^=\n]+)?=(?!=)\s*(?=%s\s*\.)"
            % (re.escape(name), re.escape(config.builder_namespace))
        )
        match = next(
            (found for found in pattern.finditer(source_text) if found.start() in code),
            None
        )
        if match is None:
            continue
        span = extract_span(source_text, match.end(), config.builder_namespace)
        if span is not None:
            logger.debug(f"Entry point {name} found outside the declaration table")
            return MainDeclaration(name, strip_comments(span))

    if not table:
        return None

    hint = config.container_hint.lower()
    best: Optional[MainDeclaration] = None
    for name, text in table.items():
        if hint in name.lower() and (best is None or len(text) > len(best.text)):
            best = MainDeclaration(name, text)
    if best is not None:
        return best

    name = list(table)[-1]
    return MainDeclaration(name, table[name])
