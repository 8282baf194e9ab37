"""Tests for export option merging and customization profiles."""

from docforge.export.models import (
    ClientCustomizationProfile,
    ExportOptions,
    ExportPreferences,
    Watermark,
)
from docforge.export.profiles import (
    ProfileStore,
    coerce_export_options,
    merge_export_options,
    options_from_profile,
)


class TestMergeExportOptions:
    """Overlay of caller options onto profile defaults."""

    def test_only_set_fields_override(self):
        base = ExportOptions.model_validate({
            "format": "both",
            "quality": "high",
            "pdf": {"format": "Letter", "orientation": "landscape"},
        })
        merged = merge_export_options(base, {"pdf": {"orientation": "portrait"}})
        assert merged.format == "both"
        assert merged.quality == "high"
        assert merged.pdf.format == "Letter"
        assert merged.pdf.orientation == "portrait"

    def test_nested_margins(self):
        base = ExportOptions.model_validate({"pdf": {"margins": {"top": 10, "left": 5}}})
        merged = merge_export_options(base, {"pdf": {"margins": {"top": 30}}})
        assert merged.pdf.margins.top == 30
        assert merged.pdf.margins.left == 5

    def test_watermark_fields(self):
        base = ExportOptions.model_validate({"client_customization": {"watermark": {"text": "DRAFT", "opacity": 0.3}}})
        merged = merge_export_options(base, {"client_customization": {"watermark": {"text": "FINAL"}}})
        assert merged.client_customization.watermark.text == "FINAL"
        assert merged.client_customization.watermark.opacity == 0.3

    def test_base_untouched(self):
        base = ExportOptions()
        merge_export_options(base, {"format": "html", "optimization": {"minify": True}})
        assert base.format == "pdf"
        assert base.optimization.minify is False

    def test_coerce(self):
        assert coerce_export_options(None) == ExportOptions()
        assert coerce_export_options({"format": "html"}).format == "html"


class TestOptionsFromProfile:
    """Profile defaults become export options."""

    def test_profile_fields(self):
        profile = ClientCustomizationProfile(
            name="Acme",
            branding_id="acme",
            default_theme="dark",
            custom_css=".x{}",
            watermark=Watermark(text="ACME"),
            export_preferences=ExportPreferences(format="html"),
        )
        options = options_from_profile(profile)
        assert options.format == "html"
        assert options.quality == "standard"
        assert options.client_customization.branding_id == "acme"
        assert options.client_customization.theme == "dark"
        assert options.client_customization.custom_css == ".x{}"
        assert options.client_customization.watermark.text == "ACME"

    def test_defaults(self):
        options = options_from_profile(ClientCustomizationProfile(name="Bare"), default_quality="draft")
        assert options.format == "pdf"
        assert options.quality == "draft"


class TestProfileStore:
    def test_save_get_delete(self):
        store = ProfileStore()
        profile = ClientCustomizationProfile(name="Acme")
        assert store.save(profile) == profile.id
        assert store.get(profile.id) is profile
        assert store.list_all() == [profile]
        assert store.delete(profile.id) is True
        assert store.delete(profile.id) is False
        assert store.get(profile.id) is None
