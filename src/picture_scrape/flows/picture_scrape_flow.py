"""
Headless picture scrape flow.

This Prefect flow plays the part of the desktop app: it takes what a user
would type in the URL box, finds every image on that page and optionally
saves them all.

1. Validates the job configuration (`ScrapeJobConfig`).
2. Adds a protocol to bare host names (https first, then http).
3. Extracts the domain; the scrape is restricted to it.
4. Scrapes the page once and logs how many pictures were found.
5. If `download` is set, saves every picture under `config.output_dir`
   through a bounded pool of workers.
"""

from __future__ import annotations

from typing import Any, Dict, List

from prefect import flow, get_run_logger

from picture_scrape.core.config import ScrapeJobConfig
from picture_scrape.core.scraping.prefect_tasks import (
    download_all_task,
    ensure_protocol_task,
    scrape_images_task,
)
from picture_scrape.core.scraping.probe import get_domain


@flow(name="Picture Scrape", log_prints=True)
def picture_scrape_flow(config_dict: dict) -> Dict[str, Any]:
    """Scrape one page for images and optionally download them.

    config_dict: must conform to `ScrapeJobConfig`.
    """
    logger = get_run_logger()
    try:
        config = ScrapeJobConfig(**config_dict)
        logger.info("Config valid for job: %s", config.job_name)
    except Exception as e:
        logger.error("Invalid config: %s", e)
        raise

    page_url = ensure_protocol_task(
        config.source_url, timeout=config.settings.probe_timeout
    )
    domain = get_domain(page_url)

    urls, error = scrape_images_task(domain, page_url, settings=config.settings)

    downloaded: List[dict] = []
    if config.download and urls:
        downloaded = download_all_task(
            urls, dest_dir=config.output_dir, max_workers=config.max_workers
        )

    logger.info(
        "Job %s completed. %d pictures found, %d downloaded.",
        config.job_name,
        len(urls),
        len(downloaded),
    )
    return {
        "page_url": page_url,
        "domain": domain,
        "images": urls,
        "error": str(error) if error is not None else None,
        "downloaded": downloaded,
    }


if __name__ == "__main__":
    payload = {
        "job_name": "example_gallery",
        "environment": "dev",
        "source_url": "example.com",
        "download": True,
        "destination_path": "data",
        "max_workers": 4,
    }
    picture_scrape_flow(payload)
