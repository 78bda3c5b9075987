from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

import requests
from bs4 import BeautifulSoup
from bs4.element import Comment

from ssd_web.domain.errors import FetchFailure

logger = logging.getLogger(__name__)

EFETCH_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils/efetch.fcgi"

# PMC leaves this comment in place of <body> when the publisher forbids XML download.
_RESTRICTED_MARKER = re.compile(r"does not allow downloading of the full text", re.IGNORECASE)
_PMC_PREFIX = re.compile(r"^PMC", re.IGNORECASE)


class DocumentFetcher:
    """Port: canonical identifier -> parsed article document, or FetchFailure."""
    def fetch(self, canonical_id: str) -> BeautifulSoup:
        raise NotImplementedError


@dataclass
class PmcEfetchFetcher(DocumentFetcher):
    """
    Adapter around NCBI E-utilities efetch (db=pmc).
    Every failure mode is mapped onto FetchFailure so the batch service only
    has one exception type to catch.
    """
    base_url: str = EFETCH_URL
    timeout_seconds: float = 30
    tool: str = ""
    email: str = ""
    api_key: str = ""
    session: requests.Session = field(default_factory=requests.Session)

    def _params(self, canonical_id: str) -> dict:
        params = {"db": "pmc", "id": _PMC_PREFIX.sub("", canonical_id), "retmode": "xml"}
        if self.tool:
            params["tool"] = self.tool
        if self.email:
            params["email"] = self.email
        if self.api_key:
            params["api_key"] = self.api_key
        return params

    def fetch(self, canonical_id: str) -> BeautifulSoup:
        try:
            resp = self.session.get(
                self.base_url,
                params=self._params(canonical_id),
                timeout=self.timeout_seconds,
            )
        except requests.Timeout as e:
            raise FetchFailure(
                f"Request timed out after {self.timeout_seconds}s", FetchFailure.TIMEOUT
            ) from e
        except requests.ConnectionError as e:
            raise FetchFailure(f"Connection error: {e}", FetchFailure.NETWORK) from e
        except requests.RequestException as e:
            raise FetchFailure(f"Request failed: {e}", FetchFailure.NETWORK) from e

        logger.debug("efetch %s -> HTTP %s", canonical_id, resp.status_code)

        if resp.status_code == 404:
            raise FetchFailure(f"{canonical_id} not found (HTTP 404)", FetchFailure.NOT_FOUND)
        if resp.status_code in (401, 403):
            raise FetchFailure(
                f"Access denied for {canonical_id} (HTTP {resp.status_code})",
                FetchFailure.ACCESS_RESTRICTED,
            )
        if resp.status_code != 200:
            raise FetchFailure(f"HTTP {resp.status_code}: {resp.reason or ''}".strip(), FetchFailure.NETWORK)

        return self.parse(canonical_id, resp.content)

    @staticmethod
    def parse(canonical_id: str, content: bytes) -> BeautifulSoup:
        soup = BeautifulSoup(content or b"", "xml")

        article = soup.find("article")
        if article is None:
            err = soup.find("error") or soup.find("ERROR")
            detail = err.get_text(strip=True) if err is not None else "no article in response"
            raise FetchFailure(f"{canonical_id} not found: {detail}", FetchFailure.NOT_FOUND)

        if article.find("body") is None:
            restricted = soup.find(string=lambda s: isinstance(s, Comment) and _RESTRICTED_MARKER.search(s))
            if restricted is not None:
                raise FetchFailure(
                    f"{canonical_id} is not open access: publisher does not allow full-text XML download",
                    FetchFailure.ACCESS_RESTRICTED,
                )

        return soup


def build_session(user_agent: Optional[str] = None) -> requests.Session:
    session = requests.Session()
    if user_agent:
        session.headers["User-Agent"] = user_agent
    return session
