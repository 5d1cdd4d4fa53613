"""HTTP client for the headless CMS that serves the hospital graph."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv

from directory.cms.graph_loader import parse_hospitals, unwrap_items
from directory.errors import GraphFetchError
from directory.logger import logger
from directory.models.hospital_model import HospitalModel

load_dotenv()


class CMSClient:
    """Reads the full hospital graph from the CMS `hospitals` endpoint.

    The endpoint is paged with `limit`/`offset` and answers
    `{"items": [...], "total": n}`. Failures surface as one
    `GraphFetchError`; there is no retry.
    """

    SOURCE = "cms"

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        page_size: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        base_url = base_url or os.getenv("CMS_API_URL")
        if not base_url:
            raise ValueError("CMS_API_URL missing in .env")

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key if api_key is not None else os.getenv("CMS_API_KEY")
        self.timeout = timeout if timeout is not None else float(os.getenv("CMS_TIMEOUT", "30"))
        self.page_size = page_size if page_size is not None else int(os.getenv("CMS_PAGE_SIZE", "100"))
        self.session = session or requests.Session()

        if self.api_key:
            self.session.headers.update({"Authorization": self.api_key})

    def _get_page(self, offset: int) -> Dict[str, Any]:
        url = f"{self.base_url}/hospitals"
        params = {"limit": self.page_size, "offset": offset}
        logger.debug("GET {} {}", url, params)
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            raise GraphFetchError(self.SOURCE, f"request to {url} failed: {exc}", exc) from exc
        except ValueError as exc:
            raise GraphFetchError(self.SOURCE, f"invalid JSON from {url}: {exc}", exc) from exc

    def fetch_raw_hospitals(self) -> List[Dict[str, Any]]:
        records: List[Dict[str, Any]] = []
        offset = 0
        while True:
            payload = self._get_page(offset)
            try:
                items = unwrap_items(payload)
            except ValueError as exc:
                raise GraphFetchError(self.SOURCE, str(exc), exc) from exc

            if not items:
                break
            records.extend(items)
            offset += len(items)

            total = payload.get("total") if isinstance(payload, dict) else None
            if total is None or offset >= int(total):
                break
        return records

    def fetch_hospital_graph(self) -> List[HospitalModel]:
        records = self.fetch_raw_hospitals()
        hospitals = parse_hospitals(records)
        logger.info("Fetched {} hospitals from CMS ({} records)", len(hospitals), len(records))
        return hospitals

    def close(self) -> None:
        self.session.close()
