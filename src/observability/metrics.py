"""
Operational metrics collection using DuckDB.

Tracks run-level and page-level metrics for observability.
"""

import duckdb
from datetime import datetime, timedelta
from pathlib import Path
from contextlib import contextmanager
from typing import Optional
import time


class MetricsCollector:
    """
    Metrics collector that persists operational data to DuckDB.

    Tables:
    - scraper_runs: One row per catalog run
    - scraper_pages: One row per page visit
    """

    def __init__(self, db_path: str = "data/metrics/runs.duckdb"):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

        # Current run context
        self.current_run_id: Optional[str] = None
        self.current_category: Optional[str] = None
        self.run_start_time: Optional[float] = None

    def _init_schema(self):
        """Create tables if they don't exist."""
        with duckdb.connect(str(self.db_path)) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS scraper_runs (
                    run_id VARCHAR PRIMARY KEY,
                    category VARCHAR NOT NULL,
                    start_url VARCHAR,
                    started_at TIMESTAMP NOT NULL,
                    finished_at TIMESTAMP,
                    status VARCHAR NOT NULL,  -- 'running', 'success', 'failed'

                    total_pages INTEGER,
                    pages_visited INTEGER,
                    products_scraped INTEGER,
                    extraction_gaps_count INTEGER DEFAULT 0,
                    images_downloaded INTEGER,
                    download_errors_count INTEGER DEFAULT 0,

                    duration_seconds DOUBLE,
                    error_message TEXT,
                    output_path VARCHAR
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS scraper_pages (
                    page_id VARCHAR PRIMARY KEY,
                    run_id VARCHAR NOT NULL,
                    page_index INTEGER,
                    url VARCHAR,
                    started_at TIMESTAMP,
                    finished_at TIMESTAMP,
                    products_count INTEGER,
                    duration_ms DOUBLE,
                    success BOOLEAN
                )
            """)

    def start_run(self, run_id: str, category: str, start_url: str = None):
        """Mark the start of a catalog run."""
        self.current_run_id = run_id
        self.current_category = category
        self.run_start_time = time.time()

        with duckdb.connect(str(self.db_path)) as conn:
            conn.execute("""
                INSERT INTO scraper_runs (
                    run_id, category, start_url, started_at, status
                ) VALUES (?, ?, ?, ?, 'running')
            """, [run_id, category, start_url, datetime.now()])

    def finish_run(
        self,
        status: str,
        total_pages: int = None,
        pages_visited: int = None,
        products_scraped: int = None,
        extraction_gaps_count: int = None,
        images_downloaded: int = None,
        download_errors_count: int = None,
        output_path: str = None,
        error_message: str = None,
    ):
        """Mark the end of a run with final metrics."""
        if not self.current_run_id:
            raise ValueError("No active run. Call start_run() first.")

        duration = time.time() - self.run_start_time if self.run_start_time else None

        with duckdb.connect(str(self.db_path)) as conn:
            conn.execute("""
                UPDATE scraper_runs
                SET finished_at = ?,
                    status = ?,
                    total_pages = ?,
                    pages_visited = ?,
                    products_scraped = ?,
                    extraction_gaps_count = ?,
                    images_downloaded = ?,
                    download_errors_count = ?,
                    duration_seconds = ?,
                    output_path = ?,
                    error_message = ?
                WHERE run_id = ?
            """, [
                datetime.now(),
                status,
                total_pages,
                pages_visited,
                products_scraped,
                extraction_gaps_count,
                images_downloaded,
                download_errors_count,
                duration,
                output_path,
                error_message,
                self.current_run_id
            ])

        # Reset context
        self.current_run_id = None
        self.current_category = None
        self.run_start_time = None

    def record_page(
        self,
        page_index: int,
        products_count: int,
        url: str = None,
        duration_ms: float = None,
        success: bool = True
    ):
        """Record page-level metrics."""
        if not self.current_run_id:
            return  # Silently skip if no active run

        page_id = f"{self.current_run_id}_page_{page_index}"
        finished_at = datetime.now()

        with duckdb.connect(str(self.db_path)) as conn:
            conn.execute("""
                INSERT INTO scraper_pages (
                    page_id, run_id, page_index, url,
                    started_at, finished_at,
                    products_count, duration_ms, success
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, [
                page_id,
                self.current_run_id,
                page_index,
                url,
                finished_at,
                finished_at,
                products_count,
                duration_ms,
                success
            ])

    @contextmanager
    def track_page(self, page_index: int, url: str = None):
        """
        Context manager for tracking one page visit.

        Usage:
            with metrics.track_page(1, url=page.url) as visit:
                records = extractor.extract(page)
                visit.products_count = len(records)
        """
        class PageContext:
            def __init__(self, page_index, url):
                self.page_index = page_index
                self.url = url
                self.products_count = 0
                self.success = True
                self.start_time = time.time()

        visit = PageContext(page_index, url)

        try:
            yield visit
        except Exception:
            visit.success = False
            raise
        finally:
            self.record_page(
                page_index=visit.page_index,
                products_count=visit.products_count,
                url=visit.url,
                duration_ms=(time.time() - visit.start_time) * 1000,
                success=visit.success
            )

    def get_run_stats(self, days: int = 7):
        """Get run statistics for the last N days."""
        with duckdb.connect(str(self.db_path)) as conn:
            return conn.execute("""
                SELECT
                    category,
                    COUNT(*) as total_runs,
                    SUM(CASE WHEN status = 'success' THEN 1 ELSE 0 END) as successful_runs,
                    AVG(duration_seconds) as avg_duration_seconds,
                    SUM(products_scraped) as total_products
                FROM scraper_runs
                WHERE started_at > ?
                GROUP BY category
            """, [datetime.now() - timedelta(days=days)]).fetchdf()


# Global instance (can be imported directly)
_metrics_instance = None


def get_metrics_collector(db_path: str = "data/metrics/runs.duckdb") -> MetricsCollector:
    """Get or create the global metrics collector instance."""
    global _metrics_instance
    if _metrics_instance is None:
        _metrics_instance = MetricsCollector(db_path)
    return _metrics_instance
