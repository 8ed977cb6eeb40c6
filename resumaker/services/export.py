"""
Export Service: 선택된 템플릿들을 순서대로 렌더링.

규칙:
- 템플릿은 입력 순서대로 하나씩 렌더링 (동시 실행 없음)
- 1개 → resume_<템플릿명> 단일 파일
- 2개 이상 → resumes.zip (입력 순서 = ZIP 항목 순서)
- 실패 정책은 호출자가 선택: 중단(기본) 또는 계속 + failures 보고
"""

import io
import logging
import zipfile
from datetime import date
from pathlib import PurePath

from resumaker.domain.constants import DOCX_MIME_TYPE, XLSX_MIME_TYPE, ZIP_MIME_TYPE
from resumaker.domain.errors import ErrorCodes, RenderError
from resumaker.domain.schemas import (
    ExportOptions,
    ExportResult,
    ResumeConfig,
    TemplateEntry,
    TemplateFormat,
)
from resumaker.render.excel import ExcelRenderer
from resumaker.render.word import DocxRenderer
from resumaker.templates.inspect import detect_template_format

logger = logging.getLogger(__name__)

BUNDLE_FILENAME = "resumes.zip"
SINGLE_FILE_PREFIX = "resume_"

MEDIA_TYPES = {
    TemplateFormat.WORD: DOCX_MIME_TYPE,
    TemplateFormat.EXCEL: XLSX_MIME_TYPE,
}


def render_template(
    resume: ResumeConfig,
    entry: TemplateEntry,
    options: ExportOptions | None = None,
    today: date | None = None,
) -> bytes:
    """
    템플릿 하나 렌더링 (포맷별 렌더러 선택).

    Raises:
        RenderError: 렌더러 에러 그대로
    """
    template_format = entry.format or detect_template_format(entry.name, entry.data)
    if template_format == TemplateFormat.EXCEL:
        return ExcelRenderer(entry.data, entry.name).render(resume, options, today)
    return DocxRenderer(entry.data, entry.name).render(resume, options, today)


def _unique_name(name: str, used: set[str]) -> str:
    """ZIP 항목 이름 중복 방지: a.docx, a_2.docx, ..."""
    candidate = name
    path = PurePath(name)
    counter = 2
    while candidate in used:
        candidate = f"{path.stem}_{counter}{path.suffix}"
        counter += 1
    used.add(candidate)
    return candidate


def export_templates(
    resume: ResumeConfig,
    templates: list[TemplateEntry],
    options: ExportOptions | None = None,
    continue_on_error: bool = False,
    today: date | None = None,
) -> ExportResult:
    """
    체크된 템플릿을 모두 렌더링해 단일 파일 또는 ZIP 으로 묶는다.

    Args:
        resume: 이력서
        templates: 템플릿 목록 (checked=False 는 제외)
        options: 출력 옵션
        continue_on_error: True 면 실패한 템플릿을 건너뛰고 failures 에 기록
        today: 기준일

    Returns:
        ExportResult

    Raises:
        RenderError: NO_TEMPLATE_SELECTED, RENDER_FAILED (모두 실패),
            그 외 continue_on_error=False 일 때 첫 실패
    """
    selected = [entry for entry in templates if entry.checked]
    if not selected:
        raise RenderError(ErrorCodes.NO_TEMPLATE_SELECTED)

    outputs: list[tuple[TemplateEntry, TemplateFormat, bytes]] = []
    failures: dict[str, dict] = {}

    for entry in selected:
        logger.info(f"Rendering template: {entry.name}")
        try:
            template_format = entry.format or detect_template_format(entry.name, entry.data)
            data = render_template(resume, entry, options, today)
        except RenderError as e:
            logger.error(f"Template render failed [{entry.name}]: {e}", exc_info=True)
            if not continue_on_error:
                raise
            failures[entry.name] = e.to_dict()
            continue
        outputs.append((entry, template_format, data))

    if not outputs:
        raise RenderError(
            ErrorCodes.RENDER_FAILED,
            error="all templates failed",
            templates=list(failures),
        )

    if len(selected) == 1:
        entry, template_format, data = outputs[0]
        return ExportResult(
            filename=f"{SINGLE_FILE_PREFIX}{entry.name}",
            data=data,
            media_type=MEDIA_TYPES[template_format],
            failures=failures,
        )

    # ZIP 파일 생성 (메모리에서)
    buffer = io.BytesIO()
    used: set[str] = set()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for entry, _, data in outputs:
            zf.writestr(_unique_name(entry.name, used), data)

    logger.info(f"Bundled {len(outputs)} documents into {BUNDLE_FILENAME}")
    return ExportResult(
        filename=BUNDLE_FILENAME,
        data=buffer.getvalue(),
        media_type=ZIP_MIME_TYPE,
        failures=failures,
    )
