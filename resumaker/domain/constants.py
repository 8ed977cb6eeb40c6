"""
Domain Constants: 엔진 전역 정적 테이블.

원칙:
- 모두 불변 (tuple / frozenset / NamedTuple)
- 런타임에 수정하는 모듈 전역 상태 없음
"""

from datetime import date
from typing import NamedTuple

# =============================================================================
# Japanese Era (和暦)
# =============================================================================
# 시작일 이후(포함)가 해당 연호. 최신 연호부터 순서대로 검사한다.


class Era(NamedTuple):
    """연호 정의."""
    start: date
    letter: str  # g   (예: R)
    kanji: str   # gg  (예: 令)
    name: str    # ggg (예: 令和)
    offset: int  # 서기 연도 - offset = 연호 연도


ERAS: tuple[Era, ...] = (
    Era(date(2019, 5, 1), "R", "令", "令和", 2018),
    Era(date(1989, 1, 8), "H", "平", "平成", 1988),
    Era(date(1926, 12, 25), "S", "昭", "昭和", 1925),
    Era(date(1912, 7, 30), "T", "大", "大正", 1911),
    Era(date(1868, 10, 23), "M", "明", "明治", 1867),
)

# 연호 1년 표기
ERA_FIRST_YEAR = "元"

# =============================================================================
# Calendar Names
# =============================================================================
# 요일 인덱스: 월요일=0 (date.weekday() 기준)

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
MONTH_SHORT_NAMES = tuple(name[:3] for name in MONTH_NAMES)

WEEKDAY_NAMES = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)
WEEKDAY_SHORT_NAMES = tuple(name[:3] for name in WEEKDAY_NAMES)
WEEKDAY_JP_SHORT_NAMES = ("月", "火", "水", "木", "金", "土", "日")
WEEKDAY_JP_NAMES = tuple(f"{name}曜日" for name in WEEKDAY_JP_SHORT_NAMES)

# =============================================================================
# History Rows (履歴)
# =============================================================================

EDUCATION_HEADER = "学歴"
WORK_HEADER = "職歴"
END_MARKER = "以上"
EMPTY_PLACEHOLDER = "特になし"
CURRENT_MARKER = "現在に至る"

# 마지막 직력 행에 이미 포함되어 있으면 "現在に至る" 를 붙이지 않는다
ENDING_KEYWORDS: tuple[str, ...] = (
    "現在", "至る", "退職", "退社", "卒業", "修了", "終了", "完了", "満了", "予定",
)

ALIGNMENTS = frozenset({"left", "center", "right"})

# =============================================================================
# Resume Defaults
# =============================================================================

DEFAULT_GENDER = "男性"
DEFAULT_SPOUSE = "なし"
DEFAULT_REQUESTS = "貴社の規定に従います。"
DEFAULT_REMARKS = "特になし"

# =============================================================================
# OOXML Parts
# =============================================================================

CONTENT_TYPES_PART = "[Content_Types].xml"

XLSX_SHARED_STRINGS_PART = "xl/sharedStrings.xml"
XLSX_STYLES_PART = "xl/styles.xml"
XLSX_WORKBOOK_PART = "xl/workbook.xml"
XLSX_WORKBOOK_RELS_PART = "xl/_rels/workbook.xml.rels"
XLSX_CALC_CHAIN_PART = "xl/calcChain.xml"
XLSX_MEDIA_DIR = "xl/media"

DOCX_DOCUMENT_PART = "word/document.xml"

RELATIONSHIP_IMAGE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/image"
RELATIONSHIPS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
OFFICE_DOC_RELATIONSHIPS_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"

# Excel 드로잉 placeholder
PORTRAIT_MARKER = "{portrait}"

# 원본 앵커에서 크기를 얻지 못했을 때 사용하는 기본 크기 (EMU, 약 24mm x 32mm)
DEFAULT_PORTRAIT_EXTENT = (914400, 1219200)

# Word 인라인 사진 크기 (mm, 이력서 표준 3cm x 4cm)
WORD_PORTRAIT_SIZE_MM = (30, 40)

# =============================================================================
# MIME Types
# =============================================================================

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
ZIP_MIME_TYPE = "application/zip"

WORD_EXTENSIONS = (".docx", ".docm", ".dotx")
EXCEL_EXTENSIONS = (".xlsx", ".xlsm", ".xltx")

# data URL 서브타입 → 패키지 내 확장자
PORTRAIT_EXTENSIONS = {
    "png": "png",
    "jpeg": "jpeg",
    "jpg": "jpeg",
    "gif": "gif",
    "tiff": "tiff",
}

IMAGE_MIME_TYPES = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "tiff": "image/tiff",
}

# 파일 확장자 → data URL 서브타입
IMAGE_FILE_EXTENSIONS = {
    ".png": "png",
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".gif": "gif",
    ".tif": "tiff",
    ".tiff": "tiff",
}
