from projectworks.export.docx_writer import (
    DOCX_MEDIA_TYPE,
    EXPORT_FILENAME,
    JSON_FALLBACK_FILENAME,
    JSON_MEDIA_TYPE,
    SUPPORTED_EXPORT_FORMATS,
    DocumentExportError,
    build_plan_docx,
    render_json_fallback,
)

__all__ = [
    "DOCX_MEDIA_TYPE",
    "DocumentExportError",
    "EXPORT_FILENAME",
    "JSON_FALLBACK_FILENAME",
    "JSON_MEDIA_TYPE",
    "SUPPORTED_EXPORT_FORMATS",
    "build_plan_docx",
    "render_json_fallback",
]
