"""DOM snapshot handed to the content extractor."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlparse

from bs4 import BeautifulSoup


@dataclass
class PageDocument:
    """A parsed page plus the location it was loaded from."""

    soup: BeautifulSoup
    url: str = ""

    @classmethod
    def from_html(cls, html: str, url: str = "") -> PageDocument:
        return cls(soup=BeautifulSoup(html or "", "html.parser"), url=url)

    @property
    def title(self) -> str:
        tag = self.soup.title
        if tag is None:
            return ""
        return tag.get_text().strip()

    @property
    def hostname(self) -> str:
        return urlparse(self.url).hostname or ""

    @property
    def path(self) -> str:
        return urlparse(self.url).path

    def meta_content(self, name: str, attribute: str = "name") -> str:
        """Return the ``content`` of the first ``<meta {attribute}="{name}">``."""
        meta = self.soup.find("meta", attrs={attribute: name})
        if meta is None:
            return ""
        return meta.get("content") or ""
