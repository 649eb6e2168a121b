from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional


@dataclass
class ListingEntry:
    key: str
    last_modified: datetime


@dataclass
class RunResult:
    source_key: str
    entries_extracted: int = 0
    lines_written: int = 0
    output_path: Optional[Path] = None


class CovidListError(Exception):
    pass


class ListingError(CovidListError):
    """Listing XML ou CSV illisible."""


class NoMatchingObjectError(CovidListError):
    """Aucun objet du bucket ne correspond au préfixe attendu."""
