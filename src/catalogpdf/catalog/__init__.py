"""
Catalog documents: models, encoding detection and XML parsers.
"""

from catalogpdf.catalog.encoding import decode_document, detect_encoding
from catalogpdf.catalog.models import FirmInfo, IssuedOffer, ProductPrice, ProductRow, ProductSheet
from catalogpdf.catalog.parsers import OfferXmlParser, ProductSheetXmlParser, format_offer_description

__all__ = [
    "FirmInfo",
    "IssuedOffer",
    "OfferXmlParser",
    "ProductPrice",
    "ProductRow",
    "ProductSheet",
    "ProductSheetXmlParser",
    "decode_document",
    "detect_encoding",
    "format_offer_description",
]
