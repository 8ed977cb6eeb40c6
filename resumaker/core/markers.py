"""
마커 해석: {name}, {a.b}, {list[n].field}, {dob "pattern"}.

규칙:
- 해석 실패는 예외 없이 None/"" (부분 입력 이력서도 문서 생성 가능)
- dob 패턴 마커는 항상 날짜 포맷 결과 (원문 날짜 문자열 아님)
- Excel 경로에서만: .content 해석 시 정렬 힌트를 셀 주소별로 기록
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import date
from typing import Any

from resumaker.core.dates import (
    calculate_age,
    format_custom_date,
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
from resumaker.domain.schemas import ExportOptions, HistoryItem, ResumeConfig

logger = logging.getLogger(__name__)

# =============================================================================
# Marker Grammar
# =============================================================================

MARKER_RE = re.compile(r"\{([^{}]+)\}")

# Word 가 자동 변환한 인용부호(“ ” ‘ ’)도 허용
DOB_PATTERN_RE = re.compile(r"^dob\s+[\"'“”‘’](.+?)[\"'“”‘’]$")

INDEXED_PATH_RE = re.compile(r"^([A-Za-z0-9_]+)\[(\d+)\]\.([A-Za-z0-9_]+)$")

# 수식 안에서는 마커 이름 문법에 맞는 것만 치환 (배열 상수 {1,2,3} 등은 그대로)
FORMULA_MARKER_RE = re.compile(
    r"\{\s*("
    r"[A-Za-z_][A-Za-z0-9_]*(?:\[\d+\])?(?:\.[A-Za-z_][A-Za-z0-9_]*)*"
    r"|dob\s+[\"'“”‘’][^{}]+?[\"'“”‘’]"
    r")\s*\}"
)

HISTORY_FIELDS = frozenset(f.name for f in fields(HistoryItem))


def to_text(value: Any) -> str:
    """해석 결과 → 출력 문자열. 미해석/중첩 값은 ""."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list, tuple)):
        return ""
    return str(value)


class MarkerResolver:
    """
    마커 이름 → 값.

    Usage:
        resolver = MarkerResolver(resume.dob)
        resolver.resolve("dob \"gggee年\"", scope)    # → "平成12年"
        resolver.resolve("dob.year", scope)
    """

    def __init__(self, dob: str = "") -> None:
        self.dob = dob

    def lookup(self, tag: str, scope: Mapping[str, Any]) -> Any:
        """
        원시 값 조회 (섹션 판정 등에서 사용).

        Returns:
            값 또는 None (해석 불가)
        """
        tag = tag.strip()

        dob_match = DOB_PATTERN_RE.match(tag)
        if dob_match:
            return format_custom_date(self.dob, dob_match.group(1))

        if "." in tag:
            value: Any = scope
            for part in tag.split("."):
                value = _member(value, part)
                if value is None:
                    return None
            return value

        return _member(scope, tag)

    def resolve(self, tag: str, scope: Mapping[str, Any]) -> str:
        """마커 → 출력 문자열."""
        return to_text(self.lookup(tag, scope))

    def lookup_chain(self, tag: str, scopes: tuple[Mapping[str, Any], ...]) -> Any:
        """
        스코프 체인 조회 (안쪽 스코프 우선).

        반복 섹션 안에서 행 스코프에 없는 이름은 바깥 스코프에서 찾는다.
        """
        for scope in scopes:
            value = self.lookup(tag, scope)
            if value is not None:
                return value
        return None


def _member(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name)
    if isinstance(value, HistoryItem) and name in HISTORY_FIELDS:
        return getattr(value, name)
    return None


# =============================================================================
# Excel Scope (flattened)
# =============================================================================

@dataclass
class ExportData:
    """
    Excel 용 평탄화 데이터.

    values: 스칼라 ("dob.year" 같은 점 표기 키 포함)
    lists: 이름 → HistoryItem 리스트 (list[n].field 로 접근)
    """
    values: dict[str, str] = field(default_factory=dict)
    lists: dict[str, list[HistoryItem]] = field(default_factory=dict)
    portrait: str | None = None


def prepare_export_data(
    resume: ResumeConfig,
    options: ExportOptions | None = None,
    today: date | None = None,
) -> ExportData:
    """
    이력서 → Excel 마커 스코프.

    Args:
        resume: 이력서
        options: 출력 옵션 (None 이면 기본값)
        today: 기준일 (나이, 작성일, 現在に至る 판정)

    Returns:
        ExportData
    """
    options = options or ExportOptions()
    values: dict[str, str] = {}

    for key, value in resume.scalar_fields().items():
        values[key] = to_text(value)

    if resume.dob:
        japan = format_dob(resume.dob, today) if options.dob_age else format_date(resume.dob)
        values["dob"] = japan
        values["dob.full"] = resume.dob
        values["dob.japan"] = japan

        birth = parse_date(resume.dob)
        values["dob.year"] = str(birth.year) if birth else ""
        values["dob.month"] = str(birth.month) if birth else ""
        values["dob.day"] = str(birth.day) if birth else ""

    values["age"] = calculate_age(resume.dob, today)
    values["updated"] = format_updated(today)

    lists: dict[str, list[HistoryItem]] = {
        "education": list(resume.education),
        "work_experience": list(resume.work_experience),
        "certificates": list(resume.certificates),
        "work": process_work_history(resume.work_experience, options.work_current_marker, today),
        "history": build_combined_history(resume, options, today),
        "certificate": build_certificate_list(resume, options),
    }

    return ExportData(values=values, lists=lists, portrait=resume.portrait or None)


class CellMarkerResolver(MarkerResolver):
    """
    Excel 셀/수식 마커 해석.

    우선순위: 평탄화 값 → dob 패턴 → list[n].field
    .content 해석 시 항목에 정렬 힌트가 있으면 alignments[cell_key] 에 기록한다.
    """

    def __init__(self, data: ExportData, dob: str = "") -> None:
        super().__init__(dob)
        self.data = data
        self.alignments: dict[str, str] = {}

    def resolve_cell(self, tag: str, cell_key: str | None = None) -> str:
        """
        공유 문자열 셀의 마커 해석.

        Args:
            tag: 마커 이름 (중괄호 제외)
            cell_key: "xl/worksheets/sheet1.xml:B4" (정렬 힌트 기록용)
        """
        tag = tag.strip()
        if tag in self.data.values:
            return self.data.values[tag]

        dob_match = DOB_PATTERN_RE.match(tag)
        if dob_match:
            return format_custom_date(self.dob, dob_match.group(1))

        indexed = INDEXED_PATH_RE.match(tag)
        if indexed:
            items = self.data.lists.get(indexed.group(1))
            index = int(indexed.group(2))
            field_name = indexed.group(3).lower()
            if items is None or index >= len(items):
                return ""
            if field_name not in HISTORY_FIELDS:
                return ""
            item = items[index]
            if field_name == "content" and item.content_align and cell_key:
                self.alignments[cell_key] = item.content_align
            return to_text(getattr(item, field_name))

        logger.debug(f"Unresolved marker: {{{tag}}}")
        return ""

    def resolve_scalar(self, tag: str) -> str:
        """수식 마커 해석: 스칼라/dob 패턴만 (리스트 인덱스 없음)."""
        tag = tag.strip()
        if tag in self.data.values:
            return self.data.values[tag]
        dob_match = DOB_PATTERN_RE.match(tag)
        if dob_match:
            return format_custom_date(self.dob, dob_match.group(1))
        return ""

    def substitute(self, text: str, cell_key: str | None = None) -> str:
        """텍스트 내 모든 마커 치환 (공유 문자열용)."""
        return MARKER_RE.sub(lambda m: self.resolve_cell(m.group(1), cell_key), text)

    def substitute_formula(self, formula: str) -> str:
        """수식 텍스트 내 모든 마커 치환."""
        return FORMULA_MARKER_RE.sub(lambda m: self.resolve_scalar(m.group(1)), formula)
