"""
Batch jobs and the document processors they run.
"""

from catalogpdf.jobs.batch import BatchJob
from catalogpdf.jobs.processors import OfferProcessor, ProductSheetProcessor, SheetFormat

__all__ = [
    "BatchJob",
    "OfferProcessor",
    "ProductSheetProcessor",
    "SheetFormat",
]
