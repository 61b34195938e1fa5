"""
Image asset resolution.
"""

from catalogpdf.assets.resolver import (
    AssetResolver,
    HttpAssetProbe,
    bounded_case_variants,
    exhaustive_case_variants,
    extract_filename,
)

__all__ = [
    "AssetResolver",
    "HttpAssetProbe",
    "bounded_case_variants",
    "exhaustive_case_variants",
    "extract_filename",
]
