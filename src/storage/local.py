"""Local filesystem storage for scraped catalogs."""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from loguru import logger

from src.config import ScraperConfig
from src.schemas.listing import ListingRecord
from src.ingest.loaders.record_writer import write_json, write_csv
from src.ingest.loaders.image_downloader import ImageDownloader


def prepare_results_dir(results_dir: Path) -> Path:
    """Create `<results_dir>` and its `images/` subdirectory. Returns the images dir."""
    images_dir = Path(results_dir) / "images"
    images_dir.mkdir(parents=True, exist_ok=True)
    return images_dir


def empty_directory(directory: Path) -> int:
    """Delete the files directly inside directory. Returns how many were removed."""
    removed = 0
    for path in Path(directory).iterdir():
        if path.is_file() or path.is_symlink():
            path.unlink()
            removed += 1
    if removed:
        logger.debug(f"Removed {removed} files from {directory}")
    return removed


def get_data_size(path: Path = Path("results")) -> str:
    """Return total size of a directory as human-readable string."""
    total = sum(f.stat().st_size for f in Path(path).rglob("*") if f.is_file())
    for unit in ["B", "KB", "MB", "GB"]:
        if total < 1024:
            return f"{total:.1f} {unit}"
        total /= 1024
    return f"{total:.1f} TB"


@dataclass
class PersistResult:
    output_path: Path
    json_path: Path
    csv_path: Path
    records_written: int
    images_downloaded: int = 0
    download_errors_count: int = 0


class LocalPersister:
    """
    Writes a finished run to `<output_dir>/<category>/`:
    `<category>.json`, `<category>.csv` and, when enabled, `images/<id>.jpg`.
    """

    def __init__(self, config: ScraperConfig, downloader: Optional[ImageDownloader] = None):
        self.config = config
        self.downloader = downloader

    def save(self, records: List[ListingRecord]) -> PersistResult:
        results_dir = self.config.results_dir
        images_dir = prepare_results_dir(results_dir)
        filename = results_dir / self.config.category

        json_path = filename.with_suffix(".json")
        csv_path = filename.with_suffix(".csv")
        written = write_json(records, json_path)
        write_csv(records, csv_path)

        result = PersistResult(
            output_path=results_dir,
            json_path=json_path,
            csv_path=csv_path,
            records_written=written,
        )

        if self.config.download_images:
            empty_directory(images_dir)
            downloader = self.downloader or ImageDownloader()
            report = downloader.download_all(records, images_dir)
            result.images_downloaded = report.downloaded
            result.download_errors_count = len(report.errors)

        logger.info(f"Saved {written} listings to {results_dir} ({get_data_size(results_dir)})")
        return result
