"""Pick the report store a client should use."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import config
from services.store.base import ReportStore
from services.store.http_store import HttpReportStore
from services.store.local_store import LocalSnapshotStore
from utils.local_storage import LocalStorage

LOGGER = logging.getLogger(__name__)


def create_report_store(
    store_url: Optional[str] = None,
    local_storage_dir: Optional[Path | str] = None,
    timeout: Optional[float] = None,
) -> ReportStore:
    """Return the remote store when a URL is configured, else the local snapshot store.

    Arguments default to `REPORT_STORE_URL`, `LOCAL_STORAGE_DIR` and
    `REPORT_STORE_TIMEOUT` from `config`.
    """
    url = store_url if store_url is not None else config.REPORT_STORE_URL
    if url:
        LOGGER.info("Using remote report store at %s", url)
        return HttpReportStore(url, timeout=timeout if timeout is not None else config.REPORT_STORE_TIMEOUT)

    directory = Path(local_storage_dir) if local_storage_dir is not None else config.LOCAL_STORAGE_DIR
    LOGGER.info("No remote report store configured; using local snapshot in %s", directory)
    return LocalSnapshotStore(LocalStorage(directory))
