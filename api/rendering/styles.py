"""Certificate style table and background asset lookup.

Each style pairs a background image with a fixed text layout. All backgrounds
are drawn at 4000x3091 px and stretched onto a letter-landscape page, so the
scale factor (792 / 4000 = 0.198) is the same for every style.

Y offsets are measured from the bottom edge of the page (PDF coordinates).
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

from core.config import get_rendering_settings
from rendering.errors import ResourceMissingError, ValidationError

PAGE_WIDTH = 792
PAGE_HEIGHT = 612

BACKGROUND_PIXEL_WIDTH = 4000
BACKGROUND_PIXEL_HEIGHT = 3091
BACKGROUND_SCALE = PAGE_WIDTH / BACKGROUND_PIXEL_WIDTH

_DEPLOYMENT_ROOT = Path(__file__).resolve().parent.parent.parent


class FontName(str, Enum):
    """PDF base-14 fonts available to a text slot.

    Values are the PostScript names reportlab knows them by.
    """

    SERIF = "Times-Roman"
    SERIF_BOLD = "Times-Bold"
    SERIF_ITALIC = "Times-Italic"
    SERIF_BOLD_ITALIC = "Times-BoldItalic"
    SANS = "Helvetica"
    SANS_BOLD = "Helvetica-Bold"
    SANS_OBLIQUE = "Helvetica-Oblique"
    MONO = "Courier"
    MONO_BOLD = "Courier-Bold"


class NameTransform(str, Enum):
    """How the display name and degree line are derived."""

    NONE = "none"
    # FIRST_LAST, upper-cased; the degree line is upper-cased too
    COMPACT = "compact"


class SlotRole(str, Enum):
    NAME = "name"
    DATE_LINE = "dateLine"
    DEGREE = "degree"
    ACHIEVEMENT = "achievement"


@dataclass(frozen=True)
class TextSlot:
    y: float
    font_size: float
    font: FontName


@dataclass(frozen=True)
class StyleDefinition:
    """Background and text layout for one certificate style."""

    key: str
    background: str
    name: TextSlot
    degree: TextSlot
    achievement: TextSlot
    date_line: TextSlot | None = None
    name_transform: NameTransform = NameTransform.NONE

    def slots(self) -> list[tuple[SlotRole, TextSlot]]:
        """Return the slots this style defines, in drawing order."""
        ordered: list[tuple[SlotRole, TextSlot | None]] = [
            (SlotRole.NAME, self.name),
            (SlotRole.DATE_LINE, self.date_line),
            (SlotRole.DEGREE, self.degree),
            (SlotRole.ACHIEVEMENT, self.achievement),
        ]
        return [(role, slot) for role, slot in ordered if slot is not None]


def _serif_layout(
    key: str, background: str, name_font: FontName = FontName.SERIF_BOLD
) -> StyleDefinition:
    return StyleDefinition(
        key=key,
        background=background,
        name=TextSlot(y=310, font_size=32, font=name_font),
        date_line=TextSlot(y=280, font_size=13, font=FontName.SERIF_ITALIC),
        degree=TextSlot(y=245, font_size=22, font=FontName.SERIF_BOLD),
        achievement=TextSlot(y=218, font_size=13, font=FontName.SERIF_ITALIC),
    )


_STYLES: dict[str, StyleDefinition] = {
    "classic": _serif_layout("classic", "CLASSIC_ACADEMIA_BG.png"),
    # Bold-italic name for extra flair
    "boujie": _serif_layout(
        "boujie", "BOUGIE___LUXE_BG.png", name_font=FontName.SERIF_BOLD_ITALIC
    ),
    "legal": _serif_layout("legal", "LAW_SCHOOL_BG.png"),
    "medical": StyleDefinition(
        key="medical",
        background="MEDICAL_BG.png",
        name=TextSlot(y=310, font_size=32, font=FontName.SANS_BOLD),
        date_line=TextSlot(y=280, font_size=13, font=FontName.SERIF_ITALIC),
        degree=TextSlot(y=245, font_size=22, font=FontName.SANS_BOLD),
        achievement=TextSlot(y=218, font_size=13, font=FontName.SERIF_ITALIC),
    ),
    "creative": _serif_layout("creative", "CREATIVES_BG.png"),
    "tech": StyleDefinition(
        key="tech",
        background="AI_TECH_BG.png",
        name=TextSlot(y=310, font_size=28, font=FontName.MONO_BOLD),
        date_line=TextSlot(y=280, font_size=13, font=FontName.SERIF_ITALIC),
        degree=TextSlot(y=245, font_size=20, font=FontName.MONO_BOLD),
        achievement=TextSlot(y=218, font_size=13, font=FontName.SERIF_ITALIC),
        name_transform=NameTransform.COMPACT,
    ),
    # No date line; everything sits a little higher
    "kids": StyleDefinition(
        key="kids",
        background="LIL_PHUCKERS_BG.png",
        name=TextSlot(y=320, font_size=32, font=FontName.SERIF),
        degree=TextSlot(y=285, font_size=22, font=FontName.SERIF_BOLD),
        achievement=TextSlot(y=250, font_size=13, font=FontName.SERIF_ITALIC),
    ),
}

STYLES = MappingProxyType(_STYLES)

STYLE_KEYS: tuple[str, ...] = tuple(STYLES)


def get_style(style: str) -> StyleDefinition:
    """Look up a style by identifier.

    Raises:
        ValidationError: If the identifier is not a known style.
    """
    try:
        return STYLES[style]
    except (KeyError, TypeError):
        raise ValidationError(f"Invalid style: {style}") from None


def background_search_paths(filename: str) -> list[Path]:
    """Candidate locations for a background asset, in lookup order."""
    candidates: list[Path] = []

    assets_dir = get_rendering_settings().assets_dir
    if assets_dir:
        candidates.append(Path(assets_dir) / filename)

    candidates.append(_DEPLOYMENT_ROOT / "public" / filename)

    cwd_candidate = Path.cwd() / "public" / filename
    if cwd_candidate not in candidates:
        candidates.append(cwd_candidate)

    return candidates


@lru_cache(maxsize=32)
def _read_asset(path: Path) -> bytes:
    return path.read_bytes()


def load_background(style: StyleDefinition) -> bytes:
    """Return the background image bytes for a style.

    Raises:
        ResourceMissingError: If no candidate location holds the asset.
    """
    searched = background_search_paths(style.background)
    for path in searched:
        if path.is_file():
            return _read_asset(path)
    raise ResourceMissingError(style.background, searched)


def resolve_style(style: str) -> tuple[StyleDefinition, bytes]:
    """Resolve a style identifier to its definition and background bytes."""
    definition = get_style(style)
    return definition, load_background(definition)


def clear_background_cache() -> None:
    """Drop cached background bytes (used by tests)."""
    _read_asset.cache_clear()
