"""Client customization profiles and export option merging."""

import threading
from typing import Any, Optional, Union

from pydantic import BaseModel

from docforge.export.models import (
    ClientCustomization,
    ClientCustomizationProfile,
    ExportOptions,
    HTMLExportOptions,
    OptimizationOptions,
    PDFExportOptions,
)

OptionsLike = Union[ExportOptions, dict[str, Any]]


def coerce_export_options(options: Optional[OptionsLike]) -> ExportOptions:
    if options is None:
        return ExportOptions()
    if isinstance(options, ExportOptions):
        return options
    return ExportOptions.model_validate(options)


def _overlay(base: BaseModel, patch: BaseModel) -> BaseModel:
    """Copy of ``base`` with the fields explicitly set on ``patch``."""
    return base.model_copy(
        update={name: getattr(patch, name) for name in patch.model_fields_set},
        deep=True,
    )


def merge_pdf_options(base: PDFExportOptions, patch: PDFExportOptions) -> PDFExportOptions:
    merged = _overlay(base, patch)
    if "margins" in patch.model_fields_set:
        merged.margins = _overlay(base.margins, patch.margins)
    if "watermark" in patch.model_fields_set and base.watermark and patch.watermark:
        merged.watermark = _overlay(base.watermark, patch.watermark)
    return merged


def merge_client_customization(base: ClientCustomization, patch: ClientCustomization) -> ClientCustomization:
    merged = _overlay(base, patch)
    if "watermark" in patch.model_fields_set and base.watermark and patch.watermark:
        merged.watermark = _overlay(base.watermark, patch.watermark)
    return merged


def merge_export_options(base: ExportOptions, patch: OptionsLike) -> ExportOptions:
    """Field-by-field overlay: anything the caller set in ``patch`` wins."""
    patch = coerce_export_options(patch)
    fields = patch.model_fields_set
    update: dict[str, Any] = {}
    for name in ("format", "quality"):
        if name in fields:
            update[name] = getattr(patch, name)
    if "html" in fields:
        update["html"] = _overlay(base.html, patch.html)
    if "pdf" in fields:
        update["pdf"] = merge_pdf_options(base.pdf, patch.pdf)
    if "client_customization" in fields:
        update["client_customization"] = merge_client_customization(
            base.client_customization, patch.client_customization
        )
    if "optimization" in fields:
        update["optimization"] = _overlay(base.optimization, patch.optimization)
    if "delivery" in fields:
        update["delivery"] = _overlay(base.delivery, patch.delivery)
    return base.model_copy(update=update, deep=True)


def options_from_profile(profile: ClientCustomizationProfile, default_quality: str = "standard") -> ExportOptions:
    prefs = profile.export_preferences
    return ExportOptions(
        format=prefs.format or "pdf",
        quality=prefs.quality or default_quality,
        html=prefs.html.model_copy(deep=True) if prefs.html else HTMLExportOptions(),
        pdf=prefs.pdf.model_copy(deep=True) if prefs.pdf else PDFExportOptions(),
        optimization=prefs.optimization.model_copy() if prefs.optimization else OptimizationOptions(),
        client_customization=ClientCustomization(
            branding_id=profile.branding_id,
            theme=profile.default_theme,
            custom_css=profile.custom_css,
            custom_js=profile.custom_js,
            watermark=profile.watermark.model_copy() if profile.watermark else None,
        ),
    )


class ProfileStore:
    """In-memory, lock-guarded profile registry."""

    def __init__(self):
        self._profiles: dict[str, ClientCustomizationProfile] = {}
        self._lock = threading.Lock()

    def save(self, profile: ClientCustomizationProfile) -> str:
        with self._lock:
            self._profiles[profile.id] = profile
        return profile.id

    def get(self, profile_id: str) -> Optional[ClientCustomizationProfile]:
        with self._lock:
            return self._profiles.get(profile_id)

    def delete(self, profile_id: str) -> bool:
        with self._lock:
            return self._profiles.pop(profile_id, None) is not None

    def list_all(self) -> list[ClientCustomizationProfile]:
        with self._lock:
            return list(self._profiles.values())
