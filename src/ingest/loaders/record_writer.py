"""
Structured and tabular writers for scraped listings.

- JSON: the full records, indented (4 spaces), UTF-8
- CSV: one flat row per record, built with pandas
"""

import json
import pandas as pd
from pathlib import Path
from typing import List
from loguru import logger

from src.schemas.listing import ListingRecord

# Flat column key -> CSV header title
CSV_COLUMNS = {
    "id": "ID",
    "img": "Image URL",
    "title": "Title",
    "price": "Price",
    "infos": "Infos",
    "others": "others",
}


def write_json(records: List[ListingRecord], output_path: Path) -> int:
    """
    Write records to an indented JSON file.

    Returns:
        Number of records written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    payload = [record.model_dump() for record in records or []]
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=4, ensure_ascii=False)

    logger.info(f"{output_path} has been written successfully")
    return len(payload)


def write_csv(records: List[ListingRecord], output_path: Path) -> int:
    """
    Write records to a flat CSV file.

    Columns: ID, Image URL, Title, Price ("<value> <unit>"),
    Infos (comma-joined tags), others ("<state> <relativeTime>").

    Returns:
        Number of rows written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df = pd.DataFrame(
        [record.to_csv_row() for record in records or []],
        columns=list(CSV_COLUMNS.keys()),
    )
    df.rename(columns=CSV_COLUMNS).to_csv(output_path, index=False, encoding="utf-8")

    logger.info(f"{output_path} has been written successfully")
    return len(df)
