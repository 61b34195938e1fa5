"""
XML parsers for product-sheet listings and issued offers.
"""

from __future__ import annotations

import html
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path

from lxml import etree

from catalogpdf.catalog.encoding import decode_document
from catalogpdf.catalog.models import FirmInfo, IssuedOffer, ProductPrice, ProductRow, ProductSheet
from catalogpdf.exceptions import XmlParseError
from catalogpdf.utils.logging import get_logger

logger = get_logger("catalogpdf.catalog.parsers")


def _parse_xml(data: bytes, what: str) -> etree._Element:
    try:
        text = decode_document(data)
    except UnicodeDecodeError as e:
        raise XmlParseError(f"Failed to decode {what} XML: {e}") from e
    # The prolog may declare a different encoding than the bytes had
    parser = etree.XMLParser(encoding="utf-8", resolve_entities=False, no_network=True)
    try:
        return etree.fromstring(text.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError as e:
        raise XmlParseError(f"Failed to parse {what} XML: {e}") from e


def _read(source: bytes | str | Path) -> bytes:
    if isinstance(source, bytes):
        return source
    try:
        return Path(source).read_bytes()
    except OSError as e:
        raise XmlParseError(f"Cannot read {source}: {e}") from e


def _first(parent: etree._Element, tag: str) -> etree._Element | None:
    """First descendant named ``tag`` (document order, parent excluded)."""
    for node in parent.iter(tag):
        if node is not parent:
            return node
    return None


def _text(parent: etree._Element, tag: str) -> str:
    node = _first(parent, tag)
    if node is None:
        return ""
    return "".join(node.itertext()).strip()


def _int(text: str) -> int:
    try:
        return int(text.strip()) if text.strip() else 0
    except ValueError:
        logger.debug(f"Failed to parse integer: {text}")
        return 0


def _decimal(text: str) -> Decimal | None:
    if not text.strip():
        return None
    try:
        return Decimal(text.strip())
    except InvalidOperation:
        logger.warning(f"Failed to parse decimal: {text}")
        return None


def _date(text: str) -> date | None:
    if not text.strip():
        return None
    try:
        return date.fromisoformat(text.strip()[:10])
    except ValueError:
        logger.warning(f"Failed to parse date: {text}")
        return None


class ProductSheetXmlParser:
    """Reads ``PRODUCT`` elements; products without code or name are skipped."""

    def parse(self, source: bytes | str | Path) -> list[ProductSheet]:
        root = _parse_xml(_read(source), "product sheet")

        products = []
        nodes = list(root.iter("PRODUCT"))
        logger.info(f"Found {len(nodes)} PRODUCT elements in XML")
        for index, node in enumerate(nodes):
            product = self._parse_product(node)
            if product.is_valid():
                products.append(product)
            else:
                logger.info(
                    f"Skipping invalid product at index {index}: "
                    f"code='{product.code}', name='{product.name}' (missing required fields)"
                )
        logger.info(f"Parsed {len(products)} valid products")
        return products

    def _parse_product(self, node: etree._Element) -> ProductSheet:
        return ProductSheet(
            code=_text(node, "code"),
            name=_text(node, "name"),
            ean=_text(node, "EAN"),
            package_count=_int(_text(node, "Package")),
            guarantee_length=_int(_text(node, "GuaranteeLength")),
            brand_name=_text(node, "Brand-Name"),
            brand=_text(node, "brand"),
            product_id=_text(node, "PRODUCT_ID"),
            description=html.unescape(_text(node, "Description")),
            pictures=[p for p in (_text(node, f"PICTURE{i}") for i in (1, 2, 3)) if p],
        )


class OfferXmlParser:
    """Reads one ``IssuedOffer`` with its firm header and ``ROW`` items."""

    def parse(self, source: bytes | str | Path) -> IssuedOffer:
        root = _parse_xml(_read(source), "offer")
        node = root if root.tag == "IssuedOffer" else _first(root, "IssuedOffer")
        if node is None:
            raise XmlParseError("No IssuedOffer element found in XML")

        offer = IssuedOffer(
            doc_number=_text(node, "DocNumber"),
            doc_date=_date(_text(node, "DocDate")),
            valid_till=_date(_text(node, "ValidTill")),
            description=_text(node, "Description"),
            currency=_text(node, "Currency"),
            creator=_text(node, "Creator"),
            creator_email=_text(node, "CreatorE-mail"),
            firm=self._parse_firm(node),
            products=[self._parse_row(row) for row in node.iter("ROW")],
        )
        logger.info(
            f"Parsed offer {offer.doc_number} with {len(offer.products)} products "
            f"for firm {offer.firm.name if offer.firm else 'unknown'}"
        )
        return offer

    def _parse_firm(self, node: etree._Element) -> FirmInfo | None:
        firm = _first(node, "FIRM_ID")
        if firm is None:
            return None
        return FirmInfo(
            name=firm.get("Name", ""),
            org_ident_number=firm.get("OrgIdentNumber", ""),
            vat_ident_number=firm.get("VATIdentNumber", ""),
            street=firm.get("Address_Street", ""),
            city=firm.get("Address_City", ""),
            post_code=firm.get("Address_PostCode", ""),
            country_code=firm.get("Address_CountryCode", ""),
        )

    def _parse_row(self, row: etree._Element) -> ProductRow:
        item = ProductRow(unit_price=_decimal(_text(row, "UPrice")))
        card = _first(row, "StoreCard_ID")
        if card is None:
            return item

        item.code = _text(card, "Code")
        item.name = _text(card, "Name")
        item.product_id = _text(card, "ID")
        item.brand = _text(card, "Brand")
        item.category = _text(card, "Category")
        item.ean = _text(card, "EAN")
        item.picture_path = _text(card, "PicturePath")
        item.description = format_offer_description(_text(card, "Description"))

        price = _first(card, "Price")
        if price is not None:
            item.price = ProductPrice(voc=_decimal(_text(price, "VOC")), moc=_decimal(_text(price, "MOC")))
        return item


_LI_CLOSE = re.compile(r"</li>", re.IGNORECASE)
_LI_OPEN = re.compile(r"<li>", re.IGNORECASE)
_UL = re.compile(r"</?ul>", re.IGNORECASE)


def format_offer_description(raw: str) -> str:
    """
    Normalize a store-card description to a single ``<ul>`` list.

    Long descriptions (over 1500 characters) keep 10 lines, shorter ones 15.
    """
    if not raw.strip():
        return ""
    text = _LI_CLOSE.sub("<br />", raw)
    text = _LI_OPEN.sub("### ", text)
    text = _UL.sub("", text)

    line_limit = 10 if len(text) > 1500 else 15
    text = "\n".join(text.split("\n")[:line_limit])

    text = text.replace("### ", "<li>").replace("<br />", "</li>")
    return f"<ul>{text}</ul>"
