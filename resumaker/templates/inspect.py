"""
템플릿 검사: 포맷 판별 + 사용된 마커 목록.

규칙:
- 포맷은 확장자 우선, 없으면 패키지 내용(word/document.xml, xl/workbook.xml)으로 판별
- 마커 목록은 섹션 기호(#, ^, /)를 제거한 이름의 정렬된 집합
"""

import io
import zipfile
from collections.abc import Iterator
from pathlib import PurePath

from docx import Document
from docx.table import Table
from docx.text.paragraph import Paragraph
from openpyxl import load_workbook

from resumaker.domain.constants import (
    DOCX_DOCUMENT_PART,
    EXCEL_EXTENSIONS,
    PORTRAIT_MARKER,
    WORD_EXTENSIONS,
    XLSX_WORKBOOK_PART,
)
from resumaker.domain.errors import ErrorCodes, TemplateRenderError, UnsupportedTemplateError
from resumaker.domain.schemas import TemplateEntry, TemplateFormat
from resumaker.render.docx_markers import find_markers

PORTRAIT_NAME = PORTRAIT_MARKER.strip("{}")


def detect_template_format(name: str, data: bytes | None = None) -> TemplateFormat:
    """
    템플릿 포맷 판별.

    Args:
        name: 파일명 (확장자 사용)
        data: 템플릿 바이트 (확장자로 판별 불가할 때 사용)

    Raises:
        UnsupportedTemplateError: UNKNOWN_TEMPLATE_FORMAT
    """
    suffix = PurePath(name).suffix.lower()
    if suffix in WORD_EXTENSIONS:
        return TemplateFormat.WORD
    if suffix in EXCEL_EXTENSIONS:
        return TemplateFormat.EXCEL

    if data:
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as zf:
                names = set(zf.namelist())
        except zipfile.BadZipFile:
            names = set()
        if DOCX_DOCUMENT_PART in names:
            return TemplateFormat.WORD
        if XLSX_WORKBOOK_PART in names:
            return TemplateFormat.EXCEL

    raise UnsupportedTemplateError(
        ErrorCodes.UNKNOWN_TEMPLATE_FORMAT,
        template=name,
    )


def list_markers(entry: TemplateEntry) -> list[str]:
    """
    템플릿에서 사용된 마커 이름 목록.

    Returns:
        정렬된 마커 이름 (예: ["dob \"gggee年\"", "education[0].content", "name", "portrait"])

    Raises:
        TemplateRenderError: INVALID_PACKAGE
        UnsupportedTemplateError: UNKNOWN_TEMPLATE_FORMAT
    """
    template_format = entry.format or detect_template_format(entry.name, entry.data)
    try:
        if template_format == TemplateFormat.EXCEL:
            names = _excel_markers(entry.data)
        else:
            names = _word_markers(entry.data)
    except (zipfile.BadZipFile, KeyError, ValueError) as e:
        raise TemplateRenderError(
            ErrorCodes.INVALID_PACKAGE,
            template=entry.name,
            error=str(e),
        ) from e
    return sorted(set(names))


# =============================================================================
# Excel
# =============================================================================

def _excel_markers(data: bytes) -> list[str]:
    """셀 텍스트/수식 + 드로잉의 {portrait}."""
    names: list[str] = []

    workbook = load_workbook(io.BytesIO(data))
    try:
        for sheet in workbook.worksheets:
            for row in sheet.iter_rows():
                for cell in row:
                    if isinstance(cell.value, str) and "{" in cell.value:
                        names.extend(find_markers(cell.value))
    finally:
        workbook.close()

    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        for part in zf.namelist():
            if part.startswith("xl/drawings/") and part.endswith(".xml"):
                if PORTRAIT_MARKER in zf.read(part).decode("utf-8"):
                    names.append(PORTRAIT_NAME)
                    break

    return names


# =============================================================================
# Word
# =============================================================================

def _iter_paragraphs(container) -> Iterator[Paragraph]:
    """문단 + 표 셀 안의 문단 (중첩 표 포함)."""
    yield from container.paragraphs
    for table in container.tables:
        yield from _iter_table_paragraphs(table)


def _iter_table_paragraphs(table: Table) -> Iterator[Paragraph]:
    for row in table.rows:
        for cell in row.cells:
            yield from _iter_paragraphs(cell)


def _word_markers(data: bytes) -> list[str]:
    """본문, 표, 머리글, 바닥글의 문단 텍스트."""
    document = Document(io.BytesIO(data))
    containers = [document]
    for section in document.sections:
        containers.extend([section.header, section.footer])

    names: list[str] = []
    for container in containers:
        for paragraph in _iter_paragraphs(container):
            if "{" in paragraph.text:
                names.extend(find_markers(paragraph.text))
    return names
