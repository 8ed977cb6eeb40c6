"""
이력 리스트 구성: 학력/직력 통합 리스트, 자격 리스트.

규칙:
- 입력 리스트는 변경하지 않는다 (항상 새 리스트 반환)
- 자동 생성 행은 고정 id (edu-end, work-end, history-end 등)
- "以上" 과 "特になし" 는 동시에 나오지 않는다
"""

from datetime import date

from resumaker.domain.constants import (
    CURRENT_MARKER,
    EDUCATION_HEADER,
    EMPTY_PLACEHOLDER,
    END_MARKER,
    ENDING_KEYWORDS,
    WORK_HEADER,
)
from resumaker.domain.schemas import ExportOptions, HistoryItem, ResumeConfig


def _to_int(value: str) -> int | None:
    try:
        return int(value.strip())
    except (AttributeError, ValueError):
        return None


def is_future(year: str, month: str, today: date | None = None) -> bool:
    """
    연/월이 오늘보다 미래인지.

    월이 없으면 그 해 12월로 간주한다.
    (현재 2024년일 때 "2025" 입력 → 미래)
    """
    y = _to_int(year)
    if y is None:
        return False
    m = _to_int(month) if month else 12
    if m is None:
        m = 12

    today = today or date.today()
    if y > today.year:
        return True
    return y == today.year and m > today.month


def process_work_history(
    items: list[HistoryItem],
    add_current_marker: bool,
    today: date | None = None,
) -> list[HistoryItem]:
    """
    직력 후처리: 마지막 행 뒤에 "現在に至る" 추가.

    추가하지 않는 경우:
    - add_current_marker=False 또는 빈 리스트
    - 마지막 행 content 에 종료 키워드(退職, 現在 등) 포함
    - 마지막 행 연/월이 미래 (이미 예정된 종료로 간주)

    Args:
        items: 직력 리스트
        add_current_marker: 옵션 work_current_marker
        today: 기준일 (None 이면 오늘)

    Returns:
        처리된 새 리스트
    """
    processed = list(items)
    if not add_current_marker or not items:
        return processed

    last = items[-1]
    if last.content and any(keyword in last.content for keyword in ENDING_KEYWORDS):
        return processed

    if last.year and is_future(last.year, last.month, today):
        return processed

    processed.append(HistoryItem(id="auto-current", content=CURRENT_MARKER))
    return processed


def build_combined_history(
    resume: ResumeConfig,
    options: ExportOptions | None = None,
    today: date | None = None,
) -> list[HistoryItem]:
    """
    학력 + 직력 통합 리스트 (인쇄용).

    구성:
        学歴(center) → 학력 행 → [以上]
        職歴(center) → 직력 행 (+現在に至る) → [以上]
        [以上(right)]  ← 전체 끝, 데이터가 있을 때만
        特になし       ← 데이터가 전혀 없을 때만

    Returns:
        HistoryItem 리스트
    """
    options = options or ExportOptions()
    rows: list[HistoryItem] = []

    if resume.education:
        rows.append(HistoryItem(id="education-header", content=EDUCATION_HEADER, content_align="center"))
        rows.extend(resume.education)
        if options.education_end_marker:
            rows.append(HistoryItem(id="edu-end", content=END_MARKER, content_align="right"))

    if resume.work_experience:
        rows.append(HistoryItem(id="work-header", content=WORK_HEADER, content_align="center"))
        rows.extend(process_work_history(resume.work_experience, options.work_current_marker, today))
        if options.work_end_marker:
            rows.append(HistoryItem(id="work-end", content=END_MARKER, content_align="right"))

    if not rows:
        rows.append(HistoryItem(id="history-empty", content=EMPTY_PLACEHOLDER))
    elif options.history_end_marker:
        rows.append(HistoryItem(id="history-end", content=END_MARKER, content_align="right"))

    return rows


def build_certificate_list(
    resume: ResumeConfig,
    options: ExportOptions | None = None,
) -> list[HistoryItem]:
    """
    자격 리스트 (인쇄용).

    - 비어 있으면 "特になし" 한 행
    - certificate_end_marker 면 끝에 "以上"(right)
    """
    options = options or ExportOptions()
    rows = list(resume.certificates)

    if not rows:
        rows.append(HistoryItem(id="certificate-empty", content=EMPTY_PLACEHOLDER))
    elif options.certificate_end_marker:
        rows.append(HistoryItem(id="c-e", content=END_MARKER, content_align="right"))

    return rows
