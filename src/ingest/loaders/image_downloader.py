"""
Listing image downloader.

Images are fetched one at a time in listing order and written to
`<images_dir>/<id>.jpg`. Inline base64 data URIs are decoded directly;
anything else is streamed over HTTP(S). A failed image is logged and skipped.
"""

import base64
import binascii
import re
import requests
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from loguru import logger

from src.schemas.listing import ListingRecord
from src.exceptions import DownloadError

DATA_URI_PATTERN = re.compile(r"^data:image/[a-z]+;base64,")
CHUNK_SIZE = 8192


@dataclass
class DownloadReport:
    downloaded: int = 0
    errors: List[DownloadError] = field(default_factory=list)


class ImageDownloader:
    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 30):
        self.session = session or self._create_session()
        self.timeout = timeout

    @staticmethod
    def _create_session() -> requests.Session:
        session = requests.Session()
        session.headers.update({
            "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
            "Accept": "image/*",
        })
        return session

    def download_all(self, records: List[ListingRecord], images_dir: Path) -> DownloadReport:
        """
        Download every record's image into images_dir.

        The caller is responsible for preparing (and clearing) the directory.
        """
        images_dir = Path(images_dir)
        report = DownloadReport()
        logger.info(f"downloading {len(records)} images ...")

        for record in records:
            try:
                self.download(record, images_dir / f"{record.id}.jpg")
                report.downloaded += 1
            except DownloadError as e:
                logger.warning(str(e))
                report.errors.append(e)

        logger.info(f"download complete in {images_dir}.")
        return report

    def download(self, record: ListingRecord, image_path: Path) -> Path:
        image_url = record.imageUrl
        if not image_url:
            raise DownloadError(record.id, image_url, "no image url")

        if DATA_URI_PATTERN.match(image_url):
            return self._write_data_uri(record, image_path)
        return self._fetch(record, image_path)

    def _write_data_uri(self, record: ListingRecord, image_path: Path) -> Path:
        payload = DATA_URI_PATTERN.sub("", record.imageUrl, count=1)
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DownloadError(record.id, "data-uri", f"invalid base64 payload: {e}") from e

        try:
            image_path.write_bytes(data)
        except OSError as e:
            raise DownloadError(record.id, "data-uri", str(e)) from e
        return image_path

    def _fetch(self, record: ListingRecord, image_path: Path) -> Path:
        url = record.imageUrl
        if not url.startswith(("http://", "https://")):
            raise DownloadError(record.id, url, "unsupported url scheme")

        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as resp:
                resp.raise_for_status()
                with open(image_path, "wb") as f:
                    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            f.write(chunk)
        except requests.RequestException as e:
            image_path.unlink(missing_ok=True)
            raise DownloadError(record.id, url, str(e)) from e
        except OSError as e:
            raise DownloadError(record.id, url, str(e)) from e
        return image_path
