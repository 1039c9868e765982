"""Identifier assignment for customers, products, sales and payments.

Identifiers keep the ``<PREFIX>-<nnn>`` shape but the number comes from a
monotonic counter per prefix instead of the current collection length, so an
identifier is never handed out twice, even after deletions.
"""
from __future__ import annotations

import re

CUSTOMER_PREFIX = "CUST"
PRODUCT_PREFIX = "PROD"
SALE_PREFIX = "INV"
PAYMENT_PREFIX = "PAY"
PURCHASE_PREFIX = "PUR"
INVENTORY_PREFIX = "ITM"

_IDENTIFIER_RE = re.compile(r"^(?P<prefix>[A-Z]+)-(?P<number>\d+)$")


def format_identifier(prefix: str, number: int) -> str:
    return f"{prefix}-{number:03d}"


class IdentifierSequence:
    """Hands out ``<PREFIX>-<nnn>`` identifiers, one counter per prefix."""

    def __init__(self):
        self._counters: dict[str, int] = {}

    def next(self, prefix: str) -> str:
        number = self._counters.get(prefix, 0) + 1
        self._counters[prefix] = number
        return format_identifier(prefix, number)

    def observe(self, identifier: str) -> None:
        """Move the counter past an identifier assigned elsewhere.

        Used when seeding data with fixed identifiers so the next generated
        identifier cannot collide with it.
        """

        match = _IDENTIFIER_RE.match(identifier or "")
        if not match:
            return
        prefix = match.group("prefix")
        number = int(match.group("number"))
        if number > self._counters.get(prefix, 0):
            self._counters[prefix] = number

    def peek(self, prefix: str) -> str:
        return format_identifier(prefix, self._counters.get(prefix, 0) + 1)
