from __future__ import annotations

import logging
import re
from decimal import Decimal

from feedcatalog.core.errors import ParseError
from feedcatalog.models import Product

DELIMITER = ","
MIN_FIELDS = 5
INTEGER_RE = re.compile(r"[+-]?[0-9]+")
PRICE_RE = re.compile(r"[+-]?[0-9]+(?:\.[0-9]+)?")

logger = logging.getLogger(__name__)


def parse_products(raw_text: str) -> list[Product]:
    """Turn the raw CSV feed into products, preserving row order.

    The first non-empty line is the header and is skipped without inspection.
    Rows with fewer than five fields are dropped; a complete row with a bad
    id, price or quantity rejects the whole feed.
    """
    products: list[Product] = []
    header_seen = False
    for line_number, line in enumerate(raw_text.split("\n"), start=1):
        row = line.strip()
        if not row:
            continue
        if not header_seen:
            header_seen = True
            continue

        fields = [value.strip() for value in row.split(DELIMITER)]
        if len(fields) < MIN_FIELDS:
            logger.debug("Skipping short row at line %s (%s fields)", line_number, len(fields))
            continue

        products.append(
            Product(
                id=_parse_int(fields[0], "id", line_number),
                name=fields[1],
                sku=fields[2],
                price=_parse_price(fields[3], line_number),
                quantity=_parse_int(fields[4], "quantity", line_number),
            )
        )
    return products


# int() and Decimal() also take underscores, exponents and non-ASCII digits;
# the feed format allows plain ASCII digits only.
def _parse_int(value: str, column: str, line_number: int) -> int:
    if not INTEGER_RE.fullmatch(value):
        raise ParseError(line_number, f"invalid {column} {value!r}")
    return int(value)


def _parse_price(value: str, line_number: int) -> Decimal:
    if not PRICE_RE.fullmatch(value):
        raise ParseError(line_number, f"invalid price {value!r}")
    price = Decimal(value)
    if price < 0:
        raise ParseError(line_number, f"negative price {value!r}")
    return price
