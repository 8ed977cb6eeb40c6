"""
날짜 포맷: 생년월일, 나이, 사용자 지정 패턴 (和暦 포함).

규칙:
- 파싱 실패 시 원래 문자열 그대로 반환 (예외 없음)
- today 인자를 받는 함수는 테스트에서 기준일 고정 가능
"""

import re
from datetime import date

from resumaker.domain.constants import (
    ERA_FIRST_YEAR,
    ERAS,
    MONTH_NAMES,
    MONTH_SHORT_NAMES,
    WEEKDAY_JP_NAMES,
    WEEKDAY_JP_SHORT_NAMES,
    WEEKDAY_NAMES,
    WEEKDAY_SHORT_NAMES,
    Era,
)

# yyyy-mm-dd, yyyy/m/d, yyyy.mm.dd, ISO datetime 앞부분
_DATE_RE = re.compile(r"^\s*(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})(?:$|[T\s])")


def parse_date(value: str | None) -> date | None:
    """
    날짜 문자열 파싱.

    Args:
        value: "2024-05-01", "2024/5/1", "2024-05-01T09:00:00" 등

    Returns:
        date 또는 None (빈 값/형식 오류/존재하지 않는 날짜)
    """
    if not value:
        return None
    match = _DATE_RE.match(value)
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def format_date(value: str) -> str:
    """"2024-05-01" → "2024年 5月 1日". 파싱 실패 시 원문."""
    if not value:
        return ""
    d = parse_date(value)
    if d is None:
        return value
    return f"{d.year}年 {d.month}月 {d.day}日"


def calculate_age(dob: str, today: date | None = None) -> str:
    """
    만 나이 계산.

    Returns:
        나이 문자열 (dob 가 비었거나 파싱 실패 시 "")
    """
    birth = parse_date(dob)
    if birth is None:
        return ""
    today = today or date.today()
    age = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        age -= 1
    return str(age)


def format_dob(dob: str, today: date | None = None) -> str:
    """"2000-04-02" → "2000年 4月 2日　(満26歳)"."""
    if not dob:
        return ""
    age = calculate_age(dob, today)
    if not age:
        return format_date(dob)
    return f"{format_date(dob)}　(満{age}歳)"


def format_updated(today: date | None = None) -> str:
    """작성일 표기: "2026年10月19日　現在"."""
    today = today or date.today()
    return f"{today.year}年{today.month}月{today.day}日　現在"


# =============================================================================
# Custom Pattern (Excel 서식 유사 토큰)
# =============================================================================


def get_era(d: date) -> Era | None:
    """날짜가 속한 연호. 明治 이전이면 None."""
    for era in ERAS:
        if d >= era.start:
            return era
    return None


def _date_tokens(d: date) -> dict[str, str]:
    era = get_era(d)
    era_year = d.year - era.offset if era else d.year
    weekday = d.weekday()
    month_name = MONTH_NAMES[d.month - 1]

    return {
        "yyyy": str(d.year),
        "yy": str(d.year)[-2:],
        "mmmmm": month_name[0],
        "mmmm": month_name,
        "mmm": MONTH_SHORT_NAMES[d.month - 1],
        "mm": f"{d.month:02d}",
        "m": str(d.month),
        "dddd": WEEKDAY_NAMES[weekday],
        "ddd": WEEKDAY_SHORT_NAMES[weekday],
        "dd": f"{d.day:02d}",
        "d": str(d.day),
        "aaaa": WEEKDAY_JP_NAMES[weekday],
        "aaa": WEEKDAY_JP_SHORT_NAMES[weekday],
        "ggg": era.name if era else "",
        "gg": era.kanji if era else "",
        "g": era.letter if era else "",
        "ee": ERA_FIRST_YEAR if era_year == 1 else f"{era_year:02d}",
        "e": ERA_FIRST_YEAR if era_year == 1 else str(era_year),
    }


# 긴 토큰 우선. 한 번의 스캔으로 치환하므로 치환 결과가 다시 토큰으로 해석되지 않는다.
_TOKEN_NAMES = sorted(_date_tokens(date(2000, 1, 1)), key=len, reverse=True)
_TOKEN_RE = re.compile("|".join(_TOKEN_NAMES))


def format_custom_date(value: str, pattern: str) -> str:
    """
    패턴 토큰으로 날짜 포맷.

    토큰:
        yyyy/yy, mmmmm/mmmm/mmm/mm/m, dddd/ddd/dd/d,
        aaaa/aaa (日本語曜日), ggg/gg/g (元号), ee/e (元号年, 1년은 "元")

    알 수 없는 문자는 그대로 남는다.

    Args:
        value: 날짜 문자열
        pattern: 예) "yyyy年mm月dd日", "gggee年m月d日(aaa)"

    Returns:
        포맷 결과 (value 가 비었으면 "", 파싱 실패 시 value 그대로)
    """
    if not value:
        return ""
    d = parse_date(value)
    if d is None:
        return value

    tokens = _date_tokens(d)
    return _TOKEN_RE.sub(lambda m: tokens[m.group(0)], pattern)
