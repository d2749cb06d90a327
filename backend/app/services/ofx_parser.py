"""
OFX/QFX parsing service.

Bank statements arrive in two flavours:

- OFX 1.x SGML, where closing tags are optional and many banks emit
  "tag soup" without </STMTTRN> or even field-level closing tags.
- OFX 2.x XML, which is well-formed and parsed as a DOM tree.

The SGML path is deliberately permissive: a strict block regex is tried
first, then a loose slice that ends each record at the next record or at
the end of the transaction list. Individual records that lack a usable
posted date or amount are dropped rather than failing the whole file.
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import date

from .values import parse_amount, parse_ofx_date, to_cents

log = logging.getLogger(__name__)

FORMAT_SGML = "sgml"
FORMAT_XML = "xml"

_STRICT_BLOCK = re.compile(r"<STMTTRN>.*?</STMTTRN>", re.IGNORECASE | re.DOTALL)
_LOOSE_BLOCK = re.compile(
    r"<STMTTRN>.*?(?=<STMTTRN>|</BANKTRANLIST>|</STMTRS>|</OFX>|\Z)",
    re.IGNORECASE | re.DOTALL,
)

_tag_patterns: dict[str, re.Pattern] = {}


@dataclass
class ParsedTransaction:
    """A single statement line extracted from an OFX file."""
    row_index: int
    posted_date: date
    amount_cents: int
    memo: str = ""
    fit_id: str | None = None  # None when the bank did not send one
    check_number: str | None = None

    # Original record for audit
    raw: dict = field(default_factory=dict)


@dataclass
class ParsedStatement:
    """Result of parsing an OFX file."""
    format: str
    transactions: list[ParsedTransaction]
    from_date: date | None = None
    to_date: date | None = None
    block_count: int = 0
    discarded_count: int = 0


def detect_format(text: str) -> str:
    """
    Decide between SGML and XML markup.

    SGML header markers win; XML needs a declaration or a matching
    <OFX>...</OFX> pair. Anything else is treated as SGML.
    """
    if "OFXHEADER:" in text or "DATA:OFXSGML" in text:
        return FORMAT_SGML
    if "<?xml" in text or ("<OFX>" in text and "</OFX>" in text):
        return FORMAT_XML
    return FORMAT_SGML


def parse_ofx(text: str) -> ParsedStatement:
    """Parse decoded OFX text into transactions plus the statement range."""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")

    if detect_format(normalized) == FORMAT_XML:
        try:
            return _parse_xml(normalized)
        except ET.ParseError as e:
            log.warning("OFX: XML markup is not well-formed (%s), retrying as SGML", e)
    return _parse_sgml(normalized)


def _tag_value(tag: str, text: str) -> str | None:
    """Value of the first <TAG> up to the next '<' or line break."""
    pattern = _tag_patterns.get(tag)
    if pattern is None:
        pattern = re.compile(rf"<{tag}>([^<\r\n]+)", re.IGNORECASE)
        _tag_patterns[tag] = pattern
    match = pattern.search(text)
    if not match:
        return None
    return match.group(1).strip() or None


def _parse_sgml(text: str) -> ParsedStatement:
    blocks = _STRICT_BLOCK.findall(text)
    if not blocks:
        blocks = _LOOSE_BLOCK.findall(text)

    transactions: list[ParsedTransaction] = []
    discarded = 0

    for idx, block in enumerate(blocks):
        posted_raw = _tag_value("DTPOSTED", block)
        amount_raw = _tag_value("TRNAMT", block)
        posted_date = parse_ofx_date(posted_raw)
        amount = parse_amount(amount_raw)

        if posted_date is None or amount is None:
            discarded += 1
            log.debug(
                "OFX: discarding block %d (DTPOSTED=%r, TRNAMT=%r)",
                idx, posted_raw, amount_raw,
            )
            continue

        transactions.append(ParsedTransaction(
            row_index=idx,
            posted_date=posted_date,
            amount_cents=to_cents(amount),
            memo=_tag_value("MEMO", block) or _tag_value("NAME", block) or "",
            fit_id=_tag_value("FITID", block),
            check_number=_tag_value("CHECKNUM", block),
            raw={"block": block},
        ))

    log.info("OFX: sgml blocks=%d parsed=%d discarded=%d", len(blocks), len(transactions), discarded)

    return ParsedStatement(
        format=FORMAT_SGML,
        transactions=transactions,
        from_date=parse_ofx_date(_tag_value("DTSTART", text)),
        to_date=parse_ofx_date(_tag_value("DTEND", text)),
        block_count=len(blocks),
        discarded_count=discarded,
    )


def _local_name(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _first_text(element: ET.Element, tag: str) -> str | None:
    for child in element.iter():
        if child is not element and _local_name(child.tag) == tag:
            value = "".join(child.itertext()).strip()
            return value or None
    return None


def _parse_xml(text: str) -> ParsedStatement:
    root = ET.fromstring(text.lstrip())

    elements = [el for el in root.iter() if _local_name(el.tag) == "STMTTRN"]
    transactions: list[ParsedTransaction] = []
    discarded = 0

    for idx, trn in enumerate(elements):
        posted_date = parse_ofx_date(_first_text(trn, "DTPOSTED"))
        amount = parse_amount(_first_text(trn, "TRNAMT"))

        if posted_date is None or amount is None:
            discarded += 1
            continue

        transactions.append(ParsedTransaction(
            row_index=idx,
            posted_date=posted_date,
            amount_cents=to_cents(amount),
            memo=_first_text(trn, "MEMO") or _first_text(trn, "NAME") or "",
            fit_id=_first_text(trn, "FITID"),
            check_number=_first_text(trn, "CHECKNUM"),
            raw={"xml": ET.tostring(trn, encoding="unicode")},
        ))

    log.info("OFX: xml elements=%d parsed=%d discarded=%d", len(elements), len(transactions), discarded)

    return ParsedStatement(
        format=FORMAT_XML,
        transactions=transactions,
        from_date=parse_ofx_date(_first_text(root, "DTSTART")),
        to_date=parse_ofx_date(_first_text(root, "DTEND")),
        block_count=len(elements),
        discarded_count=discarded,
    )
