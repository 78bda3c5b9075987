"""
Plain-text extraction from JATS article XML.

extract_text() is total: it never raises and returns "" when the document has no
readable text or cannot be parsed. Callers treat "" as a reportable outcome.
"""
from __future__ import annotations

import logging
import re
from typing import Callable, List, Tuple, Union

from bs4 import BeautifulSoup, Tag
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_NON_CONTENT_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)

Document = Union[BeautifulSoup, Tag, str, bytes, None]


def _parent_name(el: Tag) -> str:
    return el.parent.name if isinstance(el.parent, Tag) else ""


def _is_paragraph(el: Tag) -> bool:
    return el.name == "p"


def _is_title_outside_table(el: Tag) -> bool:
    return el.name == "title" and el.find_parent("table-wrap") is None


def _is_abstract(el: Tag) -> bool:
    return el.name == "abstract"


def _is_caption(el: Tag) -> bool:
    return el.name == "caption"


def _is_section_title(el: Tag) -> bool:
    return el.name == "title" and _parent_name(el) == "sec"


def _is_figure_caption(el: Tag) -> bool:
    return el.name == "caption" and _parent_name(el) == "fig"


# Structural roles that carry readable article content, in priority order.
CONTENT_ROLES: Tuple[Tuple[str, Callable[[Tag], bool]], ...] = (
    ("paragraph", _is_paragraph),
    ("title", _is_title_outside_table),
    ("abstract", _is_abstract),
    ("caption", _is_caption),
    ("section title", _is_section_title),
    ("figure caption", _is_figure_caption),
)


def _as_tree(document: Document) -> Union[BeautifulSoup, Tag, None]:
    if document is None:
        return None
    if isinstance(document, (bytes, str)):
        if not document.strip():
            return None
        return BeautifulSoup(document, "xml")
    return document


def select_content_elements(root: Union[BeautifulSoup, Tag]) -> List[Tag]:
    """Elements matching any content role, in document order, each element once."""
    return [el for el in root.find_all(True) if any(is_role(el) for _, is_role in CONTENT_ROLES)]


def _fallback_fragments(root: Union[BeautifulSoup, Tag]) -> List[str]:
    return [
        str(s)
        for s in root.find_all(string=True)
        if not isinstance(s, _NON_CONTENT_STRINGS) and s.strip()
    ]


def normalize_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def extract_text(document: Document) -> str:
    try:
        root = _as_tree(document)
        if root is None:
            return ""

        elements = select_content_elements(root)
        if elements:
            fragments = [el.get_text() for el in elements]
        else:
            fragments = _fallback_fragments(root)

        return normalize_whitespace(" ".join(fragments))
    except Exception as e:
        logger.warning("Text extraction failed, treating document as empty: %s", e, exc_info=True)
        return ""
