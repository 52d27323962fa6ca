"""
CSV Parser for loading directory records.
Requires 'name' and 'url' columns; submit_url, submit_button and status are optional.
"""

import csv
from pathlib import Path
from typing import List, Optional, Sequence
from loguru import logger

from models import DirectoryRecord


# Acceptable column names (case-insensitive)
NAME_VARIANTS = ['name', 'directory', 'directory_name']
URL_VARIANTS = ['url', 'website', 'link']
SUBMIT_URL_VARIANTS = ['submit_url', 'submiturl', 'submission_url']
REVEAL_VARIANTS = ['submit_button', 'reveal_control', 'button']
STATUS_VARIANTS = ['status']


def _find_column(fieldnames: Sequence[str], variants: List[str]) -> Optional[str]:
    for col in fieldnames:
        if col and col.strip().lower() in variants:
            return col
    return None


class DirectoryCSVParser:
    """
    Parse directory records from CSV files.
    Only the 'name' and 'url' columns are required.
    """

    def __init__(self, csv_path: str):
        self.csv_path = Path(csv_path)

    def parse(self) -> List[DirectoryRecord]:
        """
        Parse CSV file into directory records.

        Rows without a name or URL are skipped.

        Returns:
            List of DirectoryRecord (empty on missing file or missing columns)
        """
        records: List[DirectoryRecord] = []

        if not self.csv_path.exists():
            logger.error(f"CSV file not found: {self.csv_path}")
            return records

        try:
            # Use utf-8-sig to handle Excel BOM (Byte Order Mark)
            with open(self.csv_path, 'r', encoding='utf-8-sig', newline='') as f:
                reader = csv.DictReader(f)
                fieldnames = reader.fieldnames or []

                name_column = _find_column(fieldnames, NAME_VARIANTS)
                url_column = _find_column(fieldnames, URL_VARIANTS)
                if not name_column or not url_column:
                    logger.error("CSV needs a 'name' and a 'url' column")
                    logger.error(f"Available columns: {fieldnames}")
                    return records

                submit_url_column = _find_column(fieldnames, SUBMIT_URL_VARIANTS)
                reveal_column = _find_column(fieldnames, REVEAL_VARIANTS)
                status_column = _find_column(fieldnames, STATUS_VARIANTS)

                for row in reader:
                    name = (row.get(name_column) or "").strip()
                    url = (row.get(url_column) or "").strip()
                    if not name or not url:
                        continue

                    submit_url = (row.get(submit_url_column) or "").strip() if submit_url_column else ""
                    reveal = (row.get(reveal_column) or "").strip() if reveal_column else ""
                    status = (row.get(status_column) or "").strip() if status_column else ""

                    records.append(DirectoryRecord(
                        name=name,
                        url=url,
                        submit_url=submit_url or None,
                        reveal_control=reveal or None,
                        status=status,
                    ))

            logger.info(f"✅ Parsed {len(records)} directories from CSV")

        except (OSError, csv.Error) as e:
            logger.error(f"Error parsing CSV: {e}")

        return records


def filter_by_status(records: List[DirectoryRecord], status: str) -> List[DirectoryRecord]:
    """Records whose status equals the given one (case-insensitive)."""
    wanted = (status or "").strip().lower()
    return [r for r in records if r.status.strip().lower() == wanted]


def get_unsubmitted_directories(records: List[DirectoryRecord]) -> List[DirectoryRecord]:
    """Records that have no status yet."""
    return filter_by_status(records, "")
