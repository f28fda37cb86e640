#!/usr/bin/env python3
"""
ASPIRE2COOLIFY PARSE PIPELINE - The Chief Surgeon
-------------------------------------------------
Central coordinator for the parsing phase. Raw Program.cs text is processed
in a strict one-directional sequence: lexing, lambda scanning and extraction,
assembly, validation.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

import logging
from pathlib import Path
from typing import Union

from aspire2coolify.parser.lexer import ChainLexer
from aspire2coolify.parser.scanner import LambdaScanner
from aspire2coolify.parser.structurer import ModelAssembler
from aspire2coolify.parser.context import ParseResult, ParseError
from aspire2coolify.validator.validator import ModelValidator

logger = logging.getLogger("aspire2coolify.pipeline")


class ParsePipeline:
    """
    The Orchestrator: ensures tokenizing, extraction and assembly happen
    in a strictly defined order.
    """

    def __init__(self):
        self.lexer = ChainLexer()
        self.scanner = LambdaScanner()
        self.assembler = ModelAssembler(scanner=self.scanner, validator=ModelValidator())

    def run(self, source: str) -> ParseResult:
        # --- PHASE 1: TOKENIZING ---
        chains = self.lexer.extract_chains(source)
        logger.debug("Extracted %d chain(s), skipped %d", len(chains), len(self.lexer.skipped))

        # --- PHASE 2: EXTRACTION & ASSEMBLY ---
        result = self.assembler.assemble(chains)
        for snippet in self.lexer.skipped:
            result.errors.append(ParseError(message="Unbalanced chain skipped", context=snippet))

        logger.info(
            "Parsed %d database(s), %d storage, %d service(s), %d application(s)",
            len(result.app.databases), len(result.app.storage),
            len(result.app.services), len(result.app.applications),
        )
        return result


def parse_source(source: str) -> ParseResult:
    """Parse Program.cs source text into a ParseResult."""
    return ParsePipeline().run(source)


def parse_file(path: Union[str, Path]) -> ParseResult:
    """
    Parse a Program.cs file. An unreadable file is reported as a ParseError
    rather than raised.
    """
    try:
        # utf-8-sig drops a leading BOM
        source = Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Cannot read %s: %s", path, e)
        return ParseResult(errors=[ParseError(message=f"Cannot read {path}: {e}")])
    return parse_source(source)
