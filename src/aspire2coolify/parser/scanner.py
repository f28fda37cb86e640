#!/usr/bin/env python3
"""
ASPIRE2COOLIFY SCANNER - Lambda Archeologist (Phase 1.2)
--------------------------------------------------------
Mines the method calls buried inside configuration lambdas such as
`RunAsContainer(c => c.WithImage("postgres").WithDataVolume())`.
Acts as a second pass over argument text the Lexer left untouched.

Author: Aspire2Coolify Team
Date: 2026-10-19
"""

import re
import logging
from typing import List, Optional

from aspire2coolify.core.models import MethodCall
from aspire2coolify.parser.lexer import read_method_calls

logger = logging.getLogger("aspire2coolify.scanner")

# Recursion guard for lambdas nested inside lambdas
MAX_NESTING_DEPTH = 8


class LambdaScanner:
    """
    Recognizes `param => param.A(...).B(...)` bodies and returns their calls.
    Parenthesized parameter lists `(c) =>` and `(c, ct) =>` are accepted.
    """

    # Group 1: parenthesized first parameter, Group 2: bare parameter
    LAMBDA_HEAD = re.compile(r'^\s*(?:\(\s*(\w+)\s*(?:,\s*\w+\s*)*\)|(\w+))\s*=>\s*')

    def __init__(self, max_depth: int = MAX_NESTING_DEPTH):
        self.max_depth = max_depth

    def scan(self, raw_args: Optional[str], depth: int = 0) -> List[MethodCall]:
        """
        Returns the calls of the lambda body, or [] when raw_args is not a
        lambda on its own parameter. Malformed bodies yield the calls read so far.
        """
        if not raw_args or depth >= self.max_depth:
            if raw_args:
                logger.debug("Lambda nesting deeper than %d ignored", self.max_depth)
            return []

        head = self.LAMBDA_HEAD.match(raw_args)
        if not head:
            return []

        param = head.group(1) or head.group(2)
        receiver = re.compile(r'\s*' + re.escape(param) + r'\b').match(raw_args, head.end())
        if not receiver:
            # Block bodies and foreign receivers are out of reach
            return []

        calls, _, balanced = read_method_calls(raw_args, receiver.end())
        if not balanced:
            logger.debug("Unbalanced lambda body, kept %d call(s)", len(calls))
        return calls
