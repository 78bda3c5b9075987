import re
from dataclasses import dataclass
from typing import List, Tuple

from ssd_web.domain.errors import InvalidIdentifier

_DIGITS = re.compile(r"^[0-9]+$")
_SEPARATORS = re.compile(r"[,;\r\n]+")


class IdentifierNormalizer:
    """Strategy interface."""
    def normalize(self, s: str) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class PmcIdentifierNormalizer(IdentifierNormalizer):
    prefix: str = "PMC"

    def normalize(self, s: str) -> str:
        raw = s
        s = (s or "").strip()
        if s[:len(self.prefix)].upper() == self.prefix.upper():
            s = s[len(self.prefix):]

        if not s or not _DIGITS.match(s):
            raise InvalidIdentifier(raw)

        return self.prefix + s


def split_identifiers(raw: str) -> List[str]:
    """
    Splits free-form user input (commas, semicolons, newlines) into identifier
    strings. Blanks are dropped and duplicates removed, preserving first-seen order.
    """
    parts = [p.strip() for p in _SEPARATORS.split(raw or "")]
    seen = set()
    return [p for p in parts if p and not (p in seen or seen.add(p))]


def cap_batch(identifiers: List[str], max_batch: int) -> Tuple[List[str], bool]:
    """Returns (capped list, truncated?)."""
    if len(identifiers) <= max_batch:
        return list(identifiers), False
    return list(identifiers[:max_batch]), True
