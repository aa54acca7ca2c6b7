"""Pydantic data models for the redaction planner."""

from __future__ import annotations

from typing import Literal, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

class BBox(BaseModel):
    """Bounding box in PDF user space (points, bottom-left origin).

    ``x0``/``x1`` are the left/right edges, ``y0``/``y1`` the bottom/top.
    """
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0


# ---------------------------------------------------------------------------
# Page content (glyph source output)
# ---------------------------------------------------------------------------

class Glyph(BaseModel):
    """A single positioned character."""
    text: str
    bbox: BBox
    word_index: Optional[int] = None     # word boundary hint from the glyph source


class TextBlock(BaseModel):
    """A pre-grouped word with its spatial position on the page."""
    text: str
    bbox: BBox


class PageData(BaseModel):
    """Materialized text geometry for a single document page."""
    page_number: int                     # 1-based
    width: float = 0.0                   # Page width in points
    height: float = 0.0                  # Page height in points
    rotation: Literal[0, 90, 180, 270] = 0
    glyphs: list[Glyph] = []
    words: Optional[list[TextBlock]] = None


# ---------------------------------------------------------------------------
# Tokenization / matching (transient, per page and pass)
# ---------------------------------------------------------------------------

class Token(NamedTuple):
    """A reconstructed text unit: a word or a merged digit run."""
    text: str
    bbox: BBox


class TokenSpan(NamedTuple):
    """Half-open ``[start, end)`` range of *token* inside the search text."""
    start: int
    end: int
    token: Token


class TextMatch(NamedTuple):
    start: int
    end: int
    text: str


# ---------------------------------------------------------------------------
# Rules, regions and plans
# ---------------------------------------------------------------------------

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RedactionRule(_CamelModel):
    """A pattern to locate, literal or regular expression."""
    pattern: str
    is_regex: bool = False
    case_sensitive: bool = True
    # None = auto-detect from the pattern shape
    fragment_aware: Optional[bool] = None
    # Names of ``re.RegexFlag`` members; replaces the case-derived flags
    regex_flags: Optional[list[str]] = None
    description: Optional[str] = None


class RedactionRegion(_CamelModel):
    """A rectangle on a page slated for redaction."""
    page_number: int                     # 1-based
    x: float                             # lower-left corner
    y: float
    width: float
    height: float
    matched_text: Optional[str] = None
    rule_pattern: Optional[str] = None
    page_rotation: int = 0

    @property
    def bbox(self) -> BBox:
        return BBox(x0=self.x, y0=self.y, x1=self.x + self.width, y1=self.y + self.height)


class RedactionPlan(_CamelModel):
    """All regions located in one source document."""
    source_path: str = ""
    regions: list[RedactionRegion] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_redactions(self) -> int:
        return len(self.regions)
