"""Page geometry and colour themes for generated PDF reports.

All dimensions are in millimetres. Themes are immutable and selected by name;
an unknown name falls back to the Classic Blue palette.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)


# Page sizes in millimetres (portrait width, height)
PAGE_SIZES: dict[str, tuple[float, float]] = {
    "a4": (210.0, 297.0),
    "a3": (297.0, 420.0),
    "letter": (216.0, 279.0),
}

DEFAULT_THEME = "classic_blue"


@dataclass(frozen=True, slots=True)
class Margins:
    """Page margins in millimetres."""

    top: float = 20.0
    right: float = 20.0
    bottom: float = 20.0
    left: float = 20.0


@dataclass(frozen=True, slots=True)
class PDFConfig:
    """Document configuration: paper format, orientation and margins."""

    orientation: str = "portrait"
    format: str = "a4"
    margins: Margins = field(default_factory=Margins)

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.orientation not in ("portrait", "landscape"):
            raise ValueError(f"Unknown orientation: {self.orientation}")
        if self.format not in PAGE_SIZES:
            raise ValueError(f"Unknown page format: {self.format}")

    def geometry(self) -> "PageGeometry":
        """Resolve this configuration into concrete page dimensions."""
        width, height = PAGE_SIZES[self.format]
        if self.orientation == "landscape":
            width, height = height, width
        return PageGeometry(
            width=width,
            height=height,
            margin_top=self.margins.top,
            margin_right=self.margins.right,
            margin_bottom=self.margins.bottom,
            margin_left=self.margins.left,
        )


DEFAULT_PDF_CONFIG = PDFConfig()


@dataclass(frozen=True, slots=True)
class PageGeometry:
    """Concrete page dimensions with margins."""

    width: float
    height: float
    margin_top: float
    margin_right: float
    margin_bottom: float
    margin_left: float

    def __post_init__(self) -> None:
        """Validate that the margins leave a usable content area."""
        if self.content_width <= 0:
            raise ValueError("Margins leave no horizontal space for content")
        if self.content_bottom <= self.margin_top:
            raise ValueError("Margins leave no vertical space for content")

    @property
    def content_width(self) -> float:
        """Width between the left and right margins."""
        return self.width - self.margin_left - self.margin_right

    @property
    def content_bottom(self) -> float:
        """Lowest Y position body content may reach."""
        return self.height - self.margin_bottom

    @property
    def content_height(self) -> float:
        """Usable height of an empty page."""
        return self.content_bottom - self.margin_top

    @property
    def content_right(self) -> float:
        """X position of the right margin."""
        return self.width - self.margin_right


@dataclass(frozen=True, slots=True)
class ThemeColors:
    """Hex colour palette of a theme."""

    primary: str
    secondary: str
    accent: str
    text: str
    background: str
    border: str


@dataclass(frozen=True, slots=True)
class ThemeFonts:
    """Font family names of a theme."""

    primary: str
    secondary: str
    mono: str


@dataclass(frozen=True, slots=True)
class ThemeSpacing:
    """Spacing scale of a theme, in millimetres."""

    small: float
    medium: float
    large: float


@dataclass(frozen=True, slots=True)
class Theme:
    """Named colour/font/spacing palette applied to one document."""

    name: str
    colors: ThemeColors
    fonts: ThemeFonts
    spacing: ThemeSpacing


PDF_THEMES: dict[str, Theme] = {
    "classic_blue": Theme(
        name="Classic Blue",
        colors=ThemeColors(
            primary="#2563eb",
            secondary="#64748b",
            accent="#3b82f6",
            text="#1e293b",
            background="#ffffff",
            border="#e2e8f0",
        ),
        fonts=ThemeFonts(primary="Inter", secondary="Inter", mono="Courier"),
        spacing=ThemeSpacing(small=4, medium=8, large=16),
    ),
    "modern_green": Theme(
        name="Modern Green",
        colors=ThemeColors(
            primary="#059669",
            secondary="#64748b",
            accent="#10b981",
            text="#1e293b",
            background="#ffffff",
            border="#e2e8f0",
        ),
        fonts=ThemeFonts(primary="Inter", secondary="Inter", mono="Courier"),
        spacing=ThemeSpacing(small=4, medium=8, large=16),
    ),
    "executive": Theme(
        name="Executive",
        colors=ThemeColors(
            primary="#1f2937",
            secondary="#6b7280",
            accent="#374151",
            text="#111827",
            background="#ffffff",
            border="#d1d5db",
        ),
        fonts=ThemeFonts(primary="Times", secondary="Helvetica", mono="Courier"),
        spacing=ThemeSpacing(small=3, medium=6, large=12),
    ),
}


def get_theme(name: Optional[str]) -> Theme:
    """Look up a theme by key, falling back to Classic Blue.

    Args:
        name: Theme key (e.g. "modern_green")

    Returns:
        The matching Theme, or the default theme for unknown keys
    """
    theme = PDF_THEMES.get(name or "")
    if theme is None:
        logger.debug(f"Unknown theme {name!r}, using {DEFAULT_THEME}")
        return PDF_THEMES[DEFAULT_THEME]
    return theme


# Base-14 PDF fonts per family: (normal, bold, italic)
_FONT_FAMILIES: dict[str, tuple[str, str, str]] = {
    "helvetica": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique"),
    "inter": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique"),
    "times": ("Times-Roman", "Times-Bold", "Times-Italic"),
    "courier": ("Courier", "Courier-Bold", "Courier-Oblique"),
}

_STYLE_INDEX = {"normal": 0, "bold": 1, "italic": 2}


def resolve_font(family: str, style: str = "normal") -> str:
    """Map a theme font family and style onto a built-in PDF font name.

    Example:
        >>> resolve_font("Times", "bold")
        'Times-Bold'
    """
    if style not in _STYLE_INDEX:
        raise ValueError(f"Unknown font style: {style}")
    fonts = _FONT_FAMILIES.get(family.lower(), _FONT_FAMILIES["helvetica"])
    return fonts[_STYLE_INDEX[style]]
