"""
Catalog data parsed from the source XML documents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


@dataclass
class ProductSheet:
    """One ``PRODUCT`` element of a product-sheet listing."""

    code: str = ""
    name: str = ""
    ean: str = ""
    package_count: int = 0
    guarantee_length: int = 0
    brand_name: str = ""
    brand: str = ""
    product_id: str = ""
    description: str = ""
    # Raw picture references as found in the XML (PICTURE1..PICTURE3)
    pictures: list[str] = field(default_factory=list)

    def is_valid(self) -> bool:
        return bool(self.code.strip() and self.name.strip())


@dataclass
class FirmInfo:
    name: str = ""
    org_ident_number: str = ""
    vat_ident_number: str = ""
    street: str = ""
    city: str = ""
    post_code: str = ""
    country_code: str = ""


@dataclass
class ProductPrice:
    voc: Decimal | None = None
    moc: Decimal | None = None


@dataclass
class ProductRow:
    code: str = ""
    name: str = ""
    product_id: str = ""
    brand: str = ""
    category: str = ""
    ean: str = ""
    picture_path: str = ""
    description: str = ""
    price: ProductPrice = field(default_factory=ProductPrice)
    unit_price: Decimal | None = None


@dataclass
class IssuedOffer:
    doc_number: str = ""
    doc_date: date | None = None
    valid_till: date | None = None
    description: str = ""
    currency: str = ""
    creator: str = ""
    creator_email: str = ""
    firm: FirmInfo | None = None
    products: list[ProductRow] = field(default_factory=list)
