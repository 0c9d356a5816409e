"""Class descriptions from generated javadoc HTML pages."""
from __future__ import annotations

from typing import Optional

from bs4 import BeautifulSoup


def javadoc_page_path(package_name: str, class_name: str) -> str:
    """Archive entry holding the javadoc page for a class."""
    if not package_name:
        return f"{class_name}.html"
    return f"{package_name.replace('.', '/')}/{class_name}.html"


def extract_class_description(html: str) -> Optional[str]:
    """Return the text of the first ``div.block`` in a javadoc page.

    Markup is stripped, entities unescaped and whitespace collapsed.
    Returns None when the page has no description block.
    """
    soup = BeautifulSoup(html, "html.parser")
    block = soup.find("div", class_="block")
    if block is None:
        return None
    text = " ".join(block.get_text().split())
    return text or None
