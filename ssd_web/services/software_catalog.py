"""
Statistical software catalog.

CATALOG_ROWS is the declarative table; SOFTWARE_CATALOG is the compiled, frozen
form built once at import. A bad row raises CatalogCompileError here, never at
request time.

Presence patterns are matched case-insensitively and anchored on word
boundaries. Version patterns capture the first group of the first match.

Per-entry notes:
  R                 the letter is matched case-sensitively so the correlation
                    coefficient ("r 0.52") is never R. A bare "R" still needs a
                    qualifier: a version number, "software", "package", "Core Team"
                    and the like, RStudio, CRAN or R-project. The other accepted
                    form is a citation such as "using R." or "in R and SPSS": "in",
                    "using", "with", "and" or "via" before R, followed by
                    punctuation, "and"/"or" or an opening parenthesis. Known
                    false positive: "changes in R (resistance)".
  GraphPad Prism    bare "Prism" only counts when followed by a version number.
  Python            negative lookahead excludes "Python snake" and
                    "Python programming" (the adjacent token only).
  Python Libraries  one bucket for NumPy, Pandas, SciPy, scikit-learn,
                    Matplotlib, Statsmodels and seaborn; no version. "Pandas"
                    is skipped after "giant" or "red" so the animal is not a
                    library; other zoological uses still match.
  MATLAB            version also accepts release tokens such as R2021a.
"""
import re
from typing import Iterable, Optional, Tuple

from ssd_web.domain.errors import CatalogCompileError
from ssd_web.domain.models import SoftwareEntry

# Separator run, optional version keyword, then the number.
_VERSION_LEAD = r"[\s,:(\[]*(?:version|release|ver\.|v\.?)?\s*"
_DOTTED = r"(\d+(?:\.\d+)*)"
# Uppercase only; lowercase "r" is the correlation coefficient.
_R = r"(?-i:\bR\b)"


def _versioned(names: str, number: str = _DOTTED) -> str:
    return r"\b(?:" + names + r")" + _VERSION_LEAD + number


# (key, display name, presence pattern, version pattern or None, color tag)
CATALOG_ROWS: Tuple[Tuple[str, str, str, Optional[str], str], ...] = (
    (
        "R",
        "R",
        _R + r"\s+(?:version|v\.?\s*\d|software|package|statistical|project|environment"
        r"|language|core\s+team|foundation|\(?\d+\.\d+)"
        r"|\b(?:in|using|with|and|via)\s+" + _R + r"(?=\s*[.,;:)]|\s+(?:and|or)\b|\s+\()"
        r"|(?-i:\bR)[-\s]project\b|\bRStudio\b|\bCRAN\b",
        _R + _VERSION_LEAD + r"(\d+\.\d+(?:\.\d+)*)",
        "#276DC3",
    ),
    (
        "SPSS",
        "SPSS",
        r"\b(?:IBM\s+)?SPSS\b|\bPASW\s+Statistics\b",
        _versioned(r"SPSS(?:\s+Statistics)?(?:\s+for\s+(?:Windows|Mac(?:intosh)?))?|PASW\s+Statistics"),
        "#CC2929",
    ),
    (
        "SAS",
        "SAS",
        r"\bSAS\b|\bSAS/STAT\b|\bSAS\s+Institute\b",
        _versioned(r"SAS(?:/STAT)?(?:\s+software)?"),
        "#1F3E7A",
    ),
    (
        "Stata",
        "Stata",
        r"\bStata(?:/(?:SE|MP|IC|BE))?\b|\bStataCorp\b",
        _versioned(r"Stata(?:/(?:SE|MP|IC|BE))?(?:\s+Statistical\s+Software)?"),
        "#135D8F",
    ),
    (
        "GraphPad Prism",
        "GraphPad Prism",
        r"\bGraphPad\b|\bPrism\s+(?:version\s*|v\.?\s*)?\d",
        _versioned(r"(?:GraphPad\s+)?Prism"),
        "#E8A33D",
    ),
    (
        "Python",
        "Python",
        r"\bPython\b(?!\s+(?:snake|programming)\b)",
        _versioned(r"Python"),
        "#3776AB",
    ),
    (
        "Python Libraries",
        "Python Libraries",
        r"\b(?:NumPy|(?<!giant\s)(?<!red\s)Pandas|SciPy|scikit-learn|sklearn|Matplotlib|Statsmodels|seaborn)\b",
        None,
        "#FFD43B",
    ),
    (
        "MATLAB",
        "MATLAB",
        r"\bMATLAB\b|\bMathWorks\b",
        _versioned(r"MATLAB", number=r"R?(\d{4}[ab]|\d+(?:\.\d+)*)"),
        "#E16737",
    ),
    (
        "Minitab",
        "Minitab",
        r"\bMinitab\b",
        _versioned(r"Minitab(?:\s+Statistical\s+Software)?"),
        "#5BAA46",
    ),
    (
        "JMP",
        "JMP",
        r"\bJMP\b",
        _versioned(r"JMP(?:\s+Pro)?"),
        "#0072BC",
    ),
    (
        "Jamovi",
        "Jamovi",
        r"\bjamovi\b",
        _versioned(r"jamovi"),
        "#6C8EBF",
    ),
    (
        "JASP",
        "JASP",
        r"\bJASP\b",
        _versioned(r"JASP"),
        "#A2C12F",
    ),
    (
        "RevMan",
        "RevMan",
        r"\bRevMan\b|\bReview\s+Manager\b",
        _versioned(r"RevMan|Review\s+Manager"),
        "#8E44AD",
    ),
)


def _compile(key: str, pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise CatalogCompileError(f"Pattern for {key!r} does not compile: {e}") from e


def build_catalog(rows: Iterable[Tuple[str, str, str, Optional[str], str]]) -> Tuple[SoftwareEntry, ...]:
    entries = []
    seen = set()
    for key, display_name, presence, version, color_tag in rows:
        if not key or key in seen:
            raise CatalogCompileError(f"Duplicate or empty catalog key: {key!r}")
        seen.add(key)

        version_pattern = _compile(key, version) if version else None
        if version_pattern is not None and version_pattern.groups < 1:
            raise CatalogCompileError(f"Version pattern for {key!r} has no capture group")

        entries.append(
            SoftwareEntry(
                key=key,
                display_name=display_name,
                presence_pattern=_compile(key, presence),
                version_pattern=version_pattern,
                color_tag=color_tag,
            )
        )
    return tuple(entries)


SOFTWARE_CATALOG: Tuple[SoftwareEntry, ...] = build_catalog(CATALOG_ROWS)


def catalog_entry(key: str, catalog: Tuple[SoftwareEntry, ...] = SOFTWARE_CATALOG) -> Optional[SoftwareEntry]:
    return next((e for e in catalog if e.key == key), None)
