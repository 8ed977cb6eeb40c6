"""
Word (DOCX) 렌더러: docxtpl 기반.

- 중괄호 마커 → Jinja 태그 변환 후 docxtpl 렌더링 (docx_markers 참조)
- 반복 섹션: 리스트 행이 자식 스코프, 없는 이름은 바깥 스코프에서 조회
- 값 안의 줄바꿈은 docxtpl 이 <w:br/> 로 변환
- {portrait} → InlineImage (30mm x 40mm)
"""

import io
import logging
import zipfile
from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any

import jinja2
from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from docx.shared import Mm
from docxtpl import DocxTemplate, InlineImage
from lxml import etree

from resumaker.core.dates import (
    calculate_age,
    format_date,
    format_dob,
    format_updated,
    parse_date,
)
from resumaker.core.history import (
    build_certificate_list,
    build_combined_history,
    process_work_history,
)
from resumaker.core.markers import MarkerResolver, to_text
from resumaker.core.portrait import decode_portrait
from resumaker.domain.constants import WORD_PORTRAIT_SIZE_MM
from resumaker.domain.errors import ErrorCodes, RenderError, TemplateRenderError
from resumaker.domain.schemas import ExportOptions, HistoryItem, ResumeConfig
from resumaker.render.docx_markers import MarkerTranslator
from resumaker.render.package import load_template_bytes

logger = logging.getLogger(__name__)


def _rows(items: list[HistoryItem]) -> list[dict[str, str]]:
    """Word 용 리스트 행: year, month, content 만."""
    return [{"year": item.year, "month": item.month, "content": item.content} for item in items]


class DocxRenderer:
    """
    Word 문서 렌더러.

    Usage:
        renderer = DocxRenderer(template_bytes)
        output = renderer.render(resume, options)
    """

    def __init__(self, template: bytes | Path, name: str | None = None):
        """
        Args:
            template: DOCX 템플릿 (바이트 또는 경로)
            name: 로그/에러용 템플릿 이름

        Raises:
            TemplateRenderError: TEMPLATE_NOT_FOUND
        """
        self.template_bytes = load_template_bytes(template)
        if name is None:
            name = template.name if isinstance(template, Path) else "template.docx"
        self.name = name

    def _translate(self) -> tuple[bytes, list[str]]:
        """
        템플릿 열기 + 마커 변환.

        Returns:
            (변환된 DOCX 바이트, 태그 인덱스 → 마커 이름)

        Raises:
            TemplateRenderError: INVALID_PACKAGE, MISSING_REQUIRED_PART, TEMPLATE_SYNTAX_ERROR
        """
        try:
            document = Document(io.BytesIO(self.template_bytes))
        except (PackageNotFoundError, zipfile.BadZipFile, ValueError) as e:
            raise TemplateRenderError(
                ErrorCodes.INVALID_PACKAGE,
                template=self.name,
                error=str(e),
            ) from e
        except KeyError as e:
            raise TemplateRenderError(
                ErrorCodes.MISSING_REQUIRED_PART,
                template=self.name,
                part=str(e),
            ) from e

        translator = MarkerTranslator(self.name)
        translator.translate(document)

        buffer = io.BytesIO()
        document.save(buffer)
        return buffer.getvalue(), translator.markers

    def render(
        self,
        resume: ResumeConfig,
        options: ExportOptions | None = None,
        today: date | None = None,
    ) -> bytes:
        """
        템플릿에 이력서를 채워 Word 문서 생성.

        Args:
            resume: 이력서
            options: 출력 옵션 (None 이면 기본값)
            today: 기준일 (나이/작성일/現在に至る 판정)

        Returns:
            새 DOCX 바이트

        Raises:
            TemplateRenderError: TEMPLATE_SYNTAX_ERROR, INVALID_PACKAGE, RENDER_FAILED
        """
        try:
            source, markers = self._translate()
            doc = DocxTemplate(io.BytesIO(source))

            # 컨텍스트 구성
            scope = self._build_context(resume, options, today, doc)
            context = self._template_context(scope, markers, MarkerResolver(resume.dob))

            # 렌더링
            doc.render(context, jinja_env=jinja2.Environment(autoescape=True), autoescape=True)

            # 저장
            output = io.BytesIO()
            doc.save(output)

            logger.info(f"Word render [{self.name}]: markers={len(markers)}")
            return output.getvalue()

        except RenderError:
            raise
        except (jinja2.TemplateError, etree.XMLSyntaxError) as e:
            raise TemplateRenderError(
                ErrorCodes.TEMPLATE_SYNTAX_ERROR,
                template=self.name,
                error=str(e),
            ) from e
        except Exception as e:
            raise TemplateRenderError(
                ErrorCodes.RENDER_FAILED,
                template=self.name,
                error=str(e),
            ) from e

    def _build_context(
        self,
        resume: ResumeConfig,
        options: ExportOptions | None,
        today: date | None,
        doc: DocxTemplate,
    ) -> dict[str, Any]:
        """렌더링 스코프 구성."""
        options = options or ExportOptions()
        birth = parse_date(resume.dob)
        age = calculate_age(resume.dob, today)

        # 스칼라 필드 (사용자 정의 필드 포함)
        context: dict[str, Any] = dict(resume.scalar_fields())

        context.update({
            # 별칭
            "phone": resume.tel,
            "mobile": resume.tel_mobile,
            # 생년월일
            "dob": {
                "year": str(birth.year) if birth else "",
                "month": str(birth.month) if birth else "",
                "day": str(birth.day) if birth else "",
                "full": resume.dob,
                "japan": format_dob(resume.dob, today) if options.dob_age else format_date(resume.dob),
            },
            "age": int(age) if age else "",
            "updated": format_updated(today),
            # 이력 리스트
            "education": _rows(resume.education),
            "work": _rows(process_work_history(resume.work_experience, options.work_current_marker, today)),
            "certificates": _rows(resume.certificates),
            "history": _rows(build_combined_history(resume, options, today)),
            "certificate": _rows(build_certificate_list(resume, options)),
            "portrait": "",
        })

        # 사진 추가 (InlineImage)
        portrait = decode_portrait(resume.portrait)
        if portrait:
            width, height = WORD_PORTRAIT_SIZE_MM
            context["portrait"] = InlineImage(
                doc,
                io.BytesIO(portrait.data),
                width=Mm(width),
                height=Mm(height),
            )

        return context

    @staticmethod
    def _template_context(
        scope: dict[str, Any],
        markers: list[str],
        resolver: MarkerResolver,
    ) -> dict[str, Any]:
        """변환된 태그가 호출하는 함수들 (_v, _section, _inverted) 과 루트 스코프."""

        def value(index: int, *scopes: Mapping[str, Any]) -> Any:
            found = resolver.lookup_chain(markers[index], scopes)
            # InlineImage 등 XML 조각은 그대로 출력
            if hasattr(found, "__html__"):
                return found
            return to_text(found)

        def section(index: int, *scopes: Mapping[str, Any]) -> list[Any]:
            found = resolver.lookup_chain(markers[index], scopes)
            if isinstance(found, (list, tuple)):
                return list(found)
            if isinstance(found, Mapping):
                return [found] if found else []
            return [scopes[0]] if found else []

        def inverted(index: int, *scopes: Mapping[str, Any]) -> bool:
            return not section(index, *scopes)

        return {"_s0": scope, "_v": value, "_section": section, "_inverted": inverted}

    def get_placeholders(self) -> list[str]:
        """
        템플릿에서 사용된 마커 목록 추출.

        Returns:
            마커 이름 목록 (섹션 기호 제외, 정렬)
        """
        _, markers = self._translate()
        return sorted(set(markers))


def render_docx(
    resume: ResumeConfig,
    template: bytes | Path,
    options: ExportOptions | None = None,
    today: date | None = None,
) -> bytes:
    """
    Word 문서 생성 (간편 함수).

    Args:
        resume: 이력서
        template: DOCX 템플릿 (바이트 또는 경로)
        options: 출력 옵션

    Returns:
        생성된 DOCX 바이트
    """
    renderer = DocxRenderer(template)
    return renderer.render(resume, options, today)
