"""
Render layer: 템플릿 + 이력서 → DOCX/XLSX 바이트.

역할:
- Word: 마커 → Jinja 태그 변환 후 docxtpl 렌더링
- Excel: sharedStrings/시트/스타일/드로잉 XML 직접 수정
"""

from .excel import ExcelRenderer, render_xlsx
from .package import OoxmlPackage, load_template_bytes
from .word import DocxRenderer, render_docx

__all__ = [
    "render_docx",
    "render_xlsx",
    "DocxRenderer",
    "ExcelRenderer",
    "OoxmlPackage",
    "load_template_bytes",
]
