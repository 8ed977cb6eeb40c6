"""
Pytest fixtures for the resume engine tests.

구성:
- 이력서/옵션 기본 데이터 (기준일 고정)
- 메모리 템플릿 생성 (python-docx, openpyxl)
- ZIP 파트 패치/조회 (drawing, calcChain 등 원시 파트가 필요한 경우)
"""

import io
import re
import zipfile
from collections.abc import Callable
from datetime import date
from typing import Any

import pytest
from docx import Document
from openpyxl import Workbook

from resumaker.domain.schemas import ExportOptions, HistoryItem, ResumeConfig

# 1x1 투명 PNG
PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

# {portrait} 텍스트 상자 하나가 있는 드로잉
PORTRAIT_DRAWING_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<xdr:wsDr xmlns:xdr="http://schemas.openxmlformats.org/drawingml/2006/spreadsheetDrawing" '
    'xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main">'
    '<xdr:twoCellAnchor editAs="oneCell">'
    "<xdr:from><xdr:col>5</xdr:col><xdr:colOff>0</xdr:colOff><xdr:row>1</xdr:row><xdr:rowOff>0</xdr:rowOff></xdr:from>"
    "<xdr:to><xdr:col>7</xdr:col><xdr:colOff>0</xdr:colOff><xdr:row>8</xdr:row><xdr:rowOff>0</xdr:rowOff></xdr:to>"
    '<xdr:sp macro="" textlink="">'
    '<xdr:nvSpPr><xdr:cNvPr id="2" name="TextBox 1"/><xdr:cNvSpPr txBox="1"/></xdr:nvSpPr>'
    "<xdr:spPr>"
    '<a:xfrm><a:off x="100" y="200"/><a:ext cx="1080000" cy="1440000"/></a:xfrm>'
    '<a:prstGeom prst="rect"><a:avLst/></a:prstGeom>'
    '<a:ln w="9525"><a:solidFill><a:srgbClr val="000000"/></a:solidFill></a:ln>'
    "</xdr:spPr>"
    "<xdr:txBody><a:bodyPr/><a:p><a:r><a:t>{portrait}</a:t></a:r></a:p></xdr:txBody>"
    "</xdr:sp>"
    "<xdr:clientData/>"
    "</xdr:twoCellAnchor>"
    "</xdr:wsDr>"
)

SHARED_STRINGS_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sharedStrings+xml"
SHARED_STRINGS_REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/sharedStrings"

_INLINE_CELL_RE = re.compile(
    r'<c ([^>]*?)\bt="inlineStr"([^>]*)><is><t\b[^>]*>(.*?)</t></is></c>', re.DOTALL
)


def to_shared_strings(data: bytes) -> bytes:
    """
    openpyxl 저장 결과를 공유 문자열 표 구조로 변환.

    openpyxl 은 문자열 셀을 inlineStr 로 쓰고 xl/sharedStrings.xml 을 만들지 않는다.
    Excel 이 저장한 템플릿처럼 t="s" 셀 + sharedStrings.xml (content type, 워크북 관계 포함) 로 맞춘다.
    같은 텍스트는 처음 나온 순서대로 하나의 인덱스를 공유한다.
    """
    strings: list[str] = []
    indices: dict[str, int] = {}
    references = 0

    def to_shared(match: re.Match) -> str:
        nonlocal references
        text = match.group(3)
        if text not in indices:
            indices[text] = len(strings)
            strings.append(text)
        references += 1
        return f'<c {match.group(1)}t="s"{match.group(2)}><v>{indices[text]}</v></c>'

    buffer = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(data)) as src, zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as dst:
        parts = {name: src.read(name) for name in src.namelist()}
        for name, content in parts.items():
            if name.startswith("xl/worksheets/") and name.endswith(".xml"):
                parts[name] = _INLINE_CELL_RE.sub(to_shared, content.decode("utf-8")).encode("utf-8")

        items = "".join(
            f'<si><t xml:space="preserve">{text}</t></si>' if text != text.strip() else f"<si><t>{text}</t></si>"
            for text in strings
        )
        parts["xl/sharedStrings.xml"] = (
            '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
            '<sst xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main" '
            f'count="{references}" uniqueCount="{len(strings)}">{items}</sst>'
        ).encode("utf-8")

        content_types = parts["[Content_Types].xml"].decode("utf-8")
        if "/xl/sharedStrings.xml" not in content_types:
            content_types = content_types.replace(
                "</Types>",
                f'<Override PartName="/xl/sharedStrings.xml" ContentType="{SHARED_STRINGS_CONTENT_TYPE}"/></Types>',
            )
        parts["[Content_Types].xml"] = content_types.encode("utf-8")

        rels = parts["xl/_rels/workbook.xml.rels"].decode("utf-8")
        if SHARED_STRINGS_REL_TYPE not in rels:
            next_id = max((int(n) for n in re.findall(r'\bId="rId(\d+)"', rels)), default=0) + 1
            rels = rels.replace(
                "</Relationships>",
                f'<Relationship Id="rId{next_id}" Type="{SHARED_STRINGS_REL_TYPE}" '
                'Target="sharedStrings.xml"/></Relationships>',
            )
        parts["xl/_rels/workbook.xml.rels"] = rels.encode("utf-8")

        for name, content in parts.items():
            dst.writestr(name, content)
    return buffer.getvalue()


# =============================================================================
# Resume Fixtures
# =============================================================================

@pytest.fixture
def today() -> date:
    """기준일 (나이/작성일/現在に至る 판정)."""
    return date(2024, 6, 1)


@pytest.fixture
def png_data_url() -> str:
    return f"data:image/png;base64,{PNG_BASE64}"


@pytest.fixture
def sample_resume() -> ResumeConfig:
    """
    기본 이력서.

    - 학력 2건, 직력 2건 (마지막 행은 종료 키워드 없음), 자격 1건
    """
    return ResumeConfig(
        name="山田太郎",
        name_kana="やまだたろう",
        dob="2000-04-15",
        zip="100-0001",
        address="東京都千代田区千代田1-1",
        email="taro@example.com",
        tel="03-1234-5678",
        tel_mobile="090-1234-5678",
        education=[
            HistoryItem(year="2016", month="4", content="東京高等学校 入学"),
            HistoryItem(year="2019", month="3", content="東京高等学校 卒業"),
        ],
        work_experience=[
            HistoryItem(year="2019", month="4", content="株式会社サンプル 入社"),
            HistoryItem(year="2022", month="10", content="開発部に配属"),
        ],
        certificates=[
            HistoryItem(year="2020", month="6", content="基本情報技術者試験 合格"),
        ],
        skills="Python\nTypeScript",
        motivation="貴社の理念に共感しました。",
        commute_time="45分",
    )


@pytest.fixture
def empty_resume() -> ResumeConfig:
    """이력 리스트가 모두 빈 이력서."""
    return ResumeConfig(name="佐藤花子")


@pytest.fixture
def default_options() -> ExportOptions:
    return ExportOptions()


# =============================================================================
# Template Factories
# =============================================================================

@pytest.fixture
def save_xlsx() -> Callable[[Workbook], bytes]:
    """openpyxl Workbook 저장 + 공유 문자열 표 구조로 변환."""

    def save(wb: Workbook) -> bytes:
        buffer = io.BytesIO()
        wb.save(buffer)
        return to_shared_strings(buffer.getvalue())

    return save


@pytest.fixture
def make_xlsx(save_xlsx) -> Callable[..., bytes]:
    """
    openpyxl 로 XLSX 템플릿 생성 (문자열 셀은 sharedStrings.xml 참조).

    Usage:
        data = make_xlsx({"A1": "{name}様", "B2": "={dob.year}+1"})
    """

    def factory(cells: dict[str, Any], title: str = "履歴書") -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = title
        for address, value in cells.items():
            ws[address] = value
        return save_xlsx(wb)

    return factory


@pytest.fixture
def make_docx() -> Callable[..., bytes]:
    """
    python-docx 로 DOCX 템플릿 생성.

    Usage:
        data = make_docx(["氏名: {name}", "{dob.japan}"])
    """

    def factory(paragraphs: list[str], header: str | None = None) -> bytes:
        doc = Document()
        for text in paragraphs:
            doc.add_paragraph(text)
        if header is not None:
            doc.sections[0].header.paragraphs[0].text = header
        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()

    return factory


# =============================================================================
# ZIP Helpers
# =============================================================================

@pytest.fixture
def patch_zip() -> Callable[..., bytes]:
    """
    ZIP 파트 교체/추가/삭제.

    Usage:
        data = patch_zip(data, {"xl/calcChain.xml": "<calcChain/>"}, remove={"xl/sharedStrings.xml"})
    """

    def patch(data: bytes, parts: dict[str, str | bytes] | None = None, remove: set[str] | None = None) -> bytes:
        parts = parts or {}
        remove = remove or set()
        buffer = io.BytesIO()
        with zipfile.ZipFile(io.BytesIO(data)) as src, zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as dst:
            for name in src.namelist():
                if name in remove or name in parts:
                    continue
                dst.writestr(name, src.read(name))
            for name, content in parts.items():
                dst.writestr(name, content)
        return buffer.getvalue()

    return patch


@pytest.fixture
def read_part() -> Callable[[bytes, str], str]:
    """ZIP 파트 텍스트 조회."""

    def read(data: bytes, name: str) -> str:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            return zf.read(name).decode("utf-8")

    return read


@pytest.fixture
def part_names() -> Callable[[bytes], list[str]]:
    def names(data: bytes) -> list[str]:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            return zf.namelist()

    return names


@pytest.fixture
def portrait_drawing_xml() -> str:
    return PORTRAIT_DRAWING_XML
