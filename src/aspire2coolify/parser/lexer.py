#!/usr/bin/env python3
"""
ASPIRE2COOLIFY LEXER - Chain Tokenizer (Phase 1.1)
--------------------------------------------------
Normalizes raw Program.cs text and decomposes it into FluentChain records.
Every scan is string-literal aware: parentheses, commas and comment markers
that live inside quotes never break a chain.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

import re
import logging
from typing import List, Tuple, Dict, Optional

from aspire2coolify.core.models import FluentChain, MethodCall

logger = logging.getLogger("aspire2coolify.lexer")

QUOTES = ('"', "'")
OPENERS = "([{"
CLOSERS = ")]}"

# Optional `var x =`, then `<object>.Add<Name>`; generic annotation and '(' are checked by hand
ROOT_PATTERN = re.compile(r'(?:\b(?:var|const)\s+(\w+)\s*=\s*)?\b(\w+)\s*\.\s*(Add\w+)\b')
CALL_PATTERN = re.compile(r'\s*\.\s*(\w+)\s*')
STATEMENT_END = re.compile(r'\s*;')
STRING_LITERAL = re.compile(r'"((?:[^"\\]|\\.)*)"|\'((?:[^\'\\]|\\.)*)\'')
NAMED_ARG = re.compile(r'^(\w+)\s*:(?!:)\s*(.*)$', re.DOTALL)


def _split_literals(text: str) -> List[Tuple[bool, str]]:
    """
    Splits text into (is_literal, chunk) segments, dropping // and /* */
    comments that sit outside string literals.
    """
    segments: List[Tuple[bool, str]] = []
    buf: List[str] = []
    quote: Optional[str] = None
    i, n = 0, len(text)

    while i < n:
        ch = text[i]
        if quote:
            buf.append(ch)
            if ch == '\\' and i + 1 < n:
                buf.append(text[i + 1])
                i += 2
                continue
            if ch == quote:
                segments.append((True, ''.join(buf)))
                buf, quote = [], None
            i += 1
            continue

        if ch in QUOTES:
            if buf:
                segments.append((False, ''.join(buf)))
            buf, quote = [ch], ch
            i += 1
            continue

        if text.startswith('//', i):
            newline = text.find('\n', i)
            i = n if newline == -1 else newline
            continue

        if text.startswith('/*', i):
            end = text.find('*/', i + 2)
            i = n if end == -1 else end + 2
            buf.append(' ')
            continue

        buf.append(ch)
        i += 1

    if buf:
        # An unterminated quote at EOF is still treated as a literal
        segments.append((quote is not None, ''.join(buf)))
    return segments


def _normalize_code(chunk: str) -> str:
    chunk = re.sub(r'\s+', ' ', chunk)
    # '=>' first so the lambda arrow survives the '=' pass
    chunk = re.sub(r'\s*=>\s*', ' => ', chunk)
    return re.sub(r'\s*(?<![=!<>])=(?![=>])\s*', ' = ', chunk)


def normalize_source(source: str) -> str:
    """
    Removes comments, collapses whitespace and normalizes '=' / '=>' tokens.
    String literals are passed through byte-for-byte.
    """
    # Remove Byte Order Mark and standardize line endings
    source = source.lstrip('\ufeff').replace('\r\n', '\n')
    parts = [chunk if is_literal else _normalize_code(chunk)
             for is_literal, chunk in _split_literals(source)]
    return ''.join(parts).strip()


def mask_literals(text: str) -> str:
    """Blanks string literal contents (quotes kept) so regex scans cannot match inside them."""
    masked = []
    for is_literal, chunk in _split_literals(text):
        if is_literal and len(chunk) > 1:
            masked.append(chunk[0] + '_' * (len(chunk) - 2) + chunk[-1])
        else:
            masked.append(chunk)
    return ''.join(masked)


def find_closing_paren(text: str, open_index: int) -> int:
    """
    Returns the index of the ')' matching text[open_index], or -1 when the
    input is unbalanced. Brackets inside string literals are ignored.
    """
    depth = 0
    quote: Optional[str] = None
    i = open_index

    while i < len(text):
        ch = text[i]
        if quote:
            if ch == '\\':
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in QUOTES:
            quote = ch
        elif ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
            if depth == 0:
                return i if ch == ')' else -1
            if depth < 0:
                return -1
        i += 1
    return -1


def skip_generic(text: str, pos: int) -> int:
    """Skips a `<T>` annotation (nesting allowed) starting at pos; -1 if it never closes."""
    if pos >= len(text) or text[pos] != '<':
        return pos
    depth = 0
    for i in range(pos, len(text)):
        if text[i] == '<':
            depth += 1
        elif text[i] == '>':
            depth -= 1
            if depth == 0:
                j = i + 1
                while j < len(text) and text[j] == ' ':
                    j += 1
                return j
        elif text[i] in '();':
            return -1
    return -1


def parse_args(args_str: str) -> List[str]:
    """Splits an argument list on top-level commas only."""
    if not args_str.strip():
        return []

    args: List[str] = []
    current: List[str] = []
    depth = 0
    quote: Optional[str] = None
    escaped = False

    for ch in args_str:
        if quote:
            current.append(ch)
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == quote:
                quote = None
            continue

        if ch in QUOTES:
            quote = ch
        elif ch in OPENERS:
            depth += 1
        elif ch in CLOSERS:
            depth -= 1
        elif ch == ',' and depth == 0:
            args.append(''.join(current).strip())
            current = []
            continue
        current.append(ch)

    if ''.join(current).strip():
        args.append(''.join(current).strip())
    return args


def extract_first_string_arg(args_str: Optional[str]) -> Optional[str]:
    """Returns the content of the first quoted string in a raw argument blob."""
    if not args_str:
        return None
    match = STRING_LITERAL.search(args_str)
    if not match:
        return None
    return match.group(1) if match.group(1) is not None else match.group(2)


def extract_named_args(args: List[str]) -> Dict[str, str]:
    """
    Collects C# named arguments: ['env: "PORT"', '3000'] -> {'env': 'PORT'}.
    """
    result: Dict[str, str] = {}
    for arg in args:
        stripped = arg.strip()
        if not stripped or stripped[0] in QUOTES:
            continue
        match = NAMED_ARG.match(stripped)
        if match:
            result[match.group(1)] = match.group(2).strip().strip('"\'')
    return result


def read_method_calls(text: str, pos: int) -> Tuple[List[MethodCall], int, bool]:
    """
    Reads consecutive `.Method(args)` calls starting at pos.
    Returns (calls, end_position, balanced). Stops at the first token that
    is not a call; an unbalanced call stops the read with balanced=False.
    """
    calls: List[MethodCall] = []
    while True:
        match = CALL_PATTERN.match(text, pos)
        if not match:
            break
        open_idx = skip_generic(text, match.end())
        if open_idx == -1 or open_idx >= len(text) or text[open_idx] != '(':
            break
        close_idx = find_closing_paren(text, open_idx)
        if close_idx == -1:
            return calls, pos, False
        raw_args = text[open_idx + 1:close_idx]
        calls.append(MethodCall(method=match.group(1), args=parse_args(raw_args), raw_args=raw_args.strip()))
        pos = close_idx + 1
    return calls, pos, True


class ChainLexer:
    """
    Orchestrates the transition from raw text to FluentChain records.
    Keeps a record of the chains it had to skip so callers can report them.
    """

    def __init__(self):
        self.skipped: List[str] = []

    def extract_chains(self, source: str) -> List[FluentChain]:
        """
        Decomposes Program.cs text into a list of FluentChains.
        This is the primary interface for the ParsePipeline.
        """
        self.skipped = []
        normalized = normalize_source(source)
        masked = mask_literals(normalized)
        chains: List[FluentChain] = []

        pos = 0
        while True:
            match = ROOT_PATTERN.search(masked, pos)
            if not match:
                break

            chain, end = self._read_chain(normalized, match)
            if chain is None:
                # Unbalanced input: drop this chain, keep scanning after its root name
                self.skipped.append(normalized[match.start():match.start() + 100])
                logger.debug("Skipping unbalanced chain at offset %d", match.start())
                pos = match.end()
                continue

            chains.append(chain)
            pos = end

        return chains

    def _read_chain(self, text: str, match: re.Match) -> Tuple[Optional[FluentChain], int]:
        var_name, base_obj, root_method = match.groups()

        # 1. Root call (skipping an AddProject<T> style annotation)
        open_idx = match.end()
        while open_idx < len(text) and text[open_idx] == ' ':
            open_idx += 1
        open_idx = skip_generic(text, open_idx)
        if open_idx == -1 or open_idx >= len(text) or text[open_idx] != '(':
            return None, match.end()

        close_idx = find_closing_paren(text, open_idx)
        if close_idx == -1:
            return None, match.end()
        root_args_raw = text[open_idx + 1:close_idx]

        # 2. Chained calls up to the statement terminator
        calls, pos, balanced = read_method_calls(text, close_idx + 1)
        if not balanced:
            return None, match.end()

        terminator = STATEMENT_END.match(text, pos)
        end = terminator.end() if terminator else pos

        chain = FluentChain(
            root_method=root_method,
            name=extract_first_string_arg(root_args_raw) or "",
            variable_name=var_name or None,
            base_object=base_obj,
            root_args=parse_args(root_args_raw),
            chained_methods=calls,
            raw=text[match.start():end],
        )
        return chain, end


def extract_chains(source: str) -> List[FluentChain]:
    """Convenience wrapper around a throwaway ChainLexer."""
    return ChainLexer().extract_chains(source)
