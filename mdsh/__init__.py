"""Gather executable test plans from Markdown documentation."""

from .errors import (
    DirectoryNotFoundError,
    GatherError,
    InvalidAttributeError,
    InvalidFrontmatterError,
    MissingFrontmatterError,
)
from .gatherer import Gatherer, gather
from .models import Category, Page, Script

__version__ = "0.1.0"

__all__ = [
    "Category",
    "DirectoryNotFoundError",
    "GatherError",
    "Gatherer",
    "InvalidAttributeError",
    "InvalidFrontmatterError",
    "MissingFrontmatterError",
    "Page",
    "Script",
    "gather",
]
