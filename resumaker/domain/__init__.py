"""Domain layer: errors, schemas and constants."""

from .errors import (
    ErrorCodes,
    RenderError,
    ResumeDataError,
    TemplateRenderError,
    UnsupportedTemplateError,
)
from .schemas import (
    ExportOptions,
    ExportResult,
    HistoryItem,
    ResumeConfig,
    TemplateEntry,
    TemplateFormat,
)

__all__ = [
    "ErrorCodes",
    "RenderError",
    "ResumeDataError",
    "TemplateRenderError",
    "UnsupportedTemplateError",
    "ExportOptions",
    "ExportResult",
    "HistoryItem",
    "ResumeConfig",
    "TemplateEntry",
    "TemplateFormat",
]
