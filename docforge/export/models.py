"""Export option and result models."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from docforge.templates.schema import Template, new_id


ExportFormat = Literal["pdf", "html", "both"]
ExportQuality = Literal["draft", "standard", "high"]
PageFormat = Literal["A4", "A3", "Letter", "Legal"]
LengthUnit = Literal["mm", "cm", "in", "px"]


# =============================================================================
# OPTIONS
# =============================================================================

class HTMLExportOptions(BaseModel):
    format: Literal["standalone", "embedded", "fragment"] = "standalone"
    inline_css: bool = True
    inline_js: bool = False
    include_analytics: bool = False
    analytics_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    language: str = "en"


class Watermark(BaseModel):
    text: str
    opacity: float = Field(default=0.1, ge=0, le=1)
    rotation: float = -45
    font_size: int = 72
    color: str = "#000000"


class PDFMargins(BaseModel):
    top: float = 20
    right: float = 20
    bottom: float = 20
    left: float = 20
    unit: LengthUnit = "mm"


class PDFExportOptions(BaseModel):
    format: PageFormat = "A4"
    orientation: Literal["portrait", "landscape"] = "portrait"
    margins: PDFMargins = Field(default_factory=PDFMargins)
    print_background: bool = True
    display_header_footer: bool = False
    header_template: str = ""
    footer_template: str = ""
    scale: float = Field(default=1.0, gt=0)
    watermark: Optional[Watermark] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)


class ClientCustomization(BaseModel):
    branding_id: Optional[str] = None
    theme: Optional[Literal["light", "dark", "auto"]] = None
    custom_css: Optional[str] = None
    custom_js: Optional[str] = None
    watermark: Optional[Watermark] = None


class OptimizationOptions(BaseModel):
    compress: bool = False
    minify: bool = False
    responsive: bool = True
    accessibility: bool = True
    seo: bool = True


class DeliveryOptions(BaseModel):
    """Descriptive only; the result records what was requested."""

    method: Literal["download", "email", "storage"] = "download"
    filename: Optional[str] = None
    recipients: list[str] = Field(default_factory=list)


class ExportOptions(BaseModel):
    format: ExportFormat = "pdf"
    quality: ExportQuality = "standard"
    html: HTMLExportOptions = Field(default_factory=HTMLExportOptions)
    pdf: PDFExportOptions = Field(default_factory=PDFExportOptions)
    client_customization: ClientCustomization = Field(default_factory=ClientCustomization)
    optimization: OptimizationOptions = Field(default_factory=OptimizationOptions)
    delivery: DeliveryOptions = Field(default_factory=DeliveryOptions)


# =============================================================================
# RESULTS
# =============================================================================

class HTMLExportResult(BaseModel):
    content: str
    size: int
    css: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


class PDFMetadata(BaseModel):
    title: str
    author: Optional[str] = None
    subject: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    creator: str = "DocForge"
    producer: str = "DocForge PDF Export"
    creation_date: datetime = Field(default_factory=datetime.utcnow)
    modification_date: datetime = Field(default_factory=datetime.utcnow)


class PDFExportResult(BaseModel):
    content: bytes
    size: int
    page_count: int = Field(description="Estimated from text length, not measured")
    metadata: PDFMetadata
    compressed: bool = False
    warnings: list[str] = Field(default_factory=list)


class ExportMetadata(BaseModel):
    export_id: str = Field(default_factory=lambda: new_id("export"))
    exported_at: datetime = Field(default_factory=datetime.utcnow)
    total_time_ms: float = 0.0
    template_id: Optional[str] = None
    cache_key: Optional[str] = None
    delivery: dict[str, Any] = Field(default_factory=dict)


class ExportResult(BaseModel):
    success: bool
    format: ExportFormat
    html: Optional[HTMLExportResult] = None
    pdf: Optional[PDFExportResult] = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    metadata: ExportMetadata = Field(default_factory=ExportMetadata)

    @property
    def total_size(self) -> int:
        return (self.html.size if self.html else 0) + (self.pdf.size if self.pdf else 0)


# =============================================================================
# BATCH & PROFILES
# =============================================================================

class BatchExportItem(BaseModel):
    id: str = Field(default_factory=lambda: new_id("item"))
    template: Template
    data: dict[str, Any] = Field(default_factory=dict)
    options: Optional[ExportOptions] = None


class BatchExportSummary(BaseModel):
    total: int = 0
    successful: int = 0
    failed: int = 0
    total_size: int = 0
    total_time_ms: float = 0.0
    errors: list[str] = Field(default_factory=list)
    results: list[ExportResult] = Field(default_factory=list)


class ExportPreferences(BaseModel):
    format: Optional[ExportFormat] = None
    quality: Optional[ExportQuality] = None
    optimization: Optional[OptimizationOptions] = None
    pdf: Optional[PDFExportOptions] = None
    html: Optional[HTMLExportOptions] = None


class ClientCustomizationProfile(BaseModel):
    """Reusable export defaults for one client."""

    id: str = Field(default_factory=lambda: new_id("profile"))
    name: str
    branding_id: Optional[str] = None
    default_theme: Optional[Literal["light", "dark", "auto"]] = None
    custom_css: Optional[str] = None
    custom_js: Optional[str] = None
    watermark: Optional[Watermark] = None
    export_preferences: ExportPreferences = Field(default_factory=ExportPreferences)
    created_at: datetime = Field(default_factory=datetime.utcnow)
