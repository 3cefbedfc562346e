"""Tests for the certificate style table and background lookup."""

from pathlib import Path

import pytest

from rendering.errors import ResourceMissingError, ValidationError
from rendering.styles import (
    BACKGROUND_SCALE,
    PAGE_HEIGHT,
    PAGE_WIDTH,
    STYLE_KEYS,
    STYLES,
    FontName,
    NameTransform,
    SlotRole,
    background_search_paths,
    get_style,
    load_background,
    resolve_style,
)
from tests.factories import write_background

pytestmark = pytest.mark.unit


class TestStyleTable:
    """Tests for the fixed style definitions."""

    def test_page_is_letter_landscape(self):
        assert (PAGE_WIDTH, PAGE_HEIGHT) == (792, 612)

    def test_background_scale(self):
        assert BACKGROUND_SCALE == pytest.approx(0.198)

    def test_all_seven_styles_present(self):
        assert set(STYLE_KEYS) == {
            "classic",
            "boujie",
            "legal",
            "medical",
            "creative",
            "tech",
            "kids",
        }

    def test_style_keys_match_definitions(self):
        for key, style in STYLES.items():
            assert style.key == key

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            STYLES["new"] = STYLES["classic"]  # type: ignore[index]

    @pytest.mark.parametrize(
        "key,background",
        [
            ("classic", "CLASSIC_ACADEMIA_BG.png"),
            ("boujie", "BOUGIE___LUXE_BG.png"),
            ("legal", "LAW_SCHOOL_BG.png"),
            ("medical", "MEDICAL_BG.png"),
            ("creative", "CREATIVES_BG.png"),
            ("tech", "AI_TECH_BG.png"),
            ("kids", "LIL_PHUCKERS_BG.png"),
        ],
    )
    def test_background_file_names(self, key, background):
        assert STYLES[key].background == background

    def test_classic_layout(self):
        style = STYLES["classic"]
        assert (style.name.y, style.name.font_size) == (310, 32)
        assert style.name.font is FontName.SERIF_BOLD
        assert style.date_line is not None
        assert (style.date_line.y, style.date_line.font_size) == (280, 13)
        assert style.date_line.font is FontName.SERIF_ITALIC
        assert (style.degree.y, style.degree.font_size) == (245, 22)
        assert (style.achievement.y, style.achievement.font_size) == (218, 13)

    def test_boujie_uses_bold_italic_name(self):
        assert STYLES["boujie"].name.font is FontName.SERIF_BOLD_ITALIC

    def test_medical_uses_sans_for_name_and_degree(self):
        style = STYLES["medical"]
        assert style.name.font is FontName.SANS_BOLD
        assert style.degree.font is FontName.SANS_BOLD
        assert style.achievement.font is FontName.SERIF_ITALIC

    def test_tech_uses_monospace_and_compact_name(self):
        style = STYLES["tech"]
        assert style.name.font is FontName.MONO_BOLD
        assert style.name.font_size == 28
        assert style.degree.font is FontName.MONO_BOLD
        assert style.degree.font_size == 20
        assert style.name_transform is NameTransform.COMPACT

    def test_only_tech_is_compact(self):
        compact = [
            k for k, s in STYLES.items() if s.name_transform is NameTransform.COMPACT
        ]
        assert compact == ["tech"]

    def test_kids_has_no_date_slot(self):
        style = STYLES["kids"]
        assert style.date_line is None
        assert (style.name.y, style.degree.y, style.achievement.y) == (320, 285, 250)
        assert style.name.font is FontName.SERIF

    def test_slots_in_drawing_order(self):
        roles = [role for role, _ in STYLES["classic"].slots()]
        assert roles == [
            SlotRole.NAME,
            SlotRole.DATE_LINE,
            SlotRole.DEGREE,
            SlotRole.ACHIEVEMENT,
        ]

    def test_slots_skip_missing_date(self):
        roles = [role for role, _ in STYLES["kids"].slots()]
        assert SlotRole.DATE_LINE not in roles
        assert len(roles) == 3


class TestGetStyle:
    def test_known_style(self):
        assert get_style("legal") is STYLES["legal"]

    @pytest.mark.parametrize("bad", ["", "fancy", "Classic", "CLASSIC", " tech"])
    def test_unknown_style_raises(self, bad):
        with pytest.raises(ValidationError, match="Invalid style"):
            get_style(bad)

    def test_error_names_the_style(self):
        with pytest.raises(ValidationError) as exc_info:
            get_style("gothic")
        assert str(exc_info.value) == "Invalid style: gothic"


class TestBackgroundLookup:
    """Tests for background asset resolution."""

    def test_configured_dir_searched_first(self, backgrounds_dir: Path):
        paths = background_search_paths("MEDICAL_BG.png")
        assert paths[0] == backgrounds_dir / "MEDICAL_BG.png"

    def test_search_includes_public_dirs(self, backgrounds_dir: Path):
        paths = background_search_paths("MEDICAL_BG.png")
        assert Path.cwd() / "public" / "MEDICAL_BG.png" in paths
        assert all(p.parent.name in ("public", backgrounds_dir.name) for p in paths)

    def test_no_duplicate_candidates(self, backgrounds_dir: Path):
        paths = background_search_paths("MEDICAL_BG.png")
        assert len(paths) == len(set(paths))

    def test_loads_bytes(self, backgrounds_dir: Path):
        data = load_background(STYLES["classic"])
        assert data == (backgrounds_dir / "CLASSIC_ACADEMIA_BG.png").read_bytes()
        assert data.startswith(b"\x89PNG")

    def test_falls_back_to_working_directory_public(
        self, empty_assets_dir: Path, tmp_path: Path
    ):
        public = tmp_path / "public"
        public.mkdir()
        write_background(public / "LAW_SCHOOL_BG.png")

        data = load_background(STYLES["legal"])

        assert data == (public / "LAW_SCHOOL_BG.png").read_bytes()

    def test_missing_asset_lists_every_location(self, empty_assets_dir: Path):
        with pytest.raises(ResourceMissingError) as exc_info:
            load_background(STYLES["kids"])

        error = exc_info.value
        assert error.asset_name == "LIL_PHUCKERS_BG.png"
        assert str(error) == "Background image not found: LIL_PHUCKERS_BG.png"
        assert error.searched == background_search_paths("LIL_PHUCKERS_BG.png")
        assert empty_assets_dir / "LIL_PHUCKERS_BG.png" in error.searched

    def test_resolve_style_checks_style_before_assets(self, empty_assets_dir: Path):
        with pytest.raises(ValidationError):
            resolve_style("nope")

    def test_resolve_style_returns_definition_and_bytes(self, backgrounds_dir: Path):
        definition, background = resolve_style("tech")
        assert definition is STYLES["tech"]
        assert background.startswith(b"\x89PNG")
