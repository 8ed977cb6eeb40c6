"""
Data schemas for the resume engine.

규칙:
- 필드명 통일: 이력서 JSON/YAML 키와 동일하게 사용
- 이력 항목은 id 를 제외하고 모두 문자열 (빈 문자열 == 미입력)
- 사용자 정의 필드는 extra 에 보존하고 렌더링 스코프에 노출
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from resumaker.core.ids import generate_item_id
from resumaker.domain.constants import (
    ALIGNMENTS,
    DEFAULT_GENDER,
    DEFAULT_REMARKS,
    DEFAULT_REQUESTS,
    DEFAULT_SPOUSE,
)
from resumaker.domain.errors import ErrorCodes, ResumeDataError

# =============================================================================
# History
# =============================================================================


def _as_text(value: Any) -> str:
    """None → "", 숫자 → 문자열."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass
class HistoryItem:
    """
    이력 항목 (학력/직력/자격).

    id 는 리스트 표시용 식별자이며 렌더러는 참조하지 않는다.
    content_align 이 None 이면 실효 정렬은 left.
    """
    id: str = field(default_factory=generate_item_id)
    year: str = ""
    month: str = ""
    day: str = ""
    dow: str = ""
    content: str = ""
    content_align: str | None = None

    @property
    def alignment(self) -> str:
        """실효 정렬값."""
        return self.content_align or "left"

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화용."""
        data: dict[str, Any] = {
            "id": self.id,
            "year": self.year,
            "month": self.month,
            "day": self.day,
            "dow": self.dow,
            "content": self.content,
        }
        if self.content_align is not None:
            data["content_align"] = self.content_align
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryItem":
        align = data.get("content_align")
        if align is not None and align not in ALIGNMENTS:
            align = None
        item = cls(
            year=_as_text(data.get("year")),
            month=_as_text(data.get("month")),
            day=_as_text(data.get("day")),
            dow=_as_text(data.get("dow")),
            content=_as_text(data.get("content")),
            content_align=align,
        )
        if data.get("id"):
            item.id = str(data["id"])
        return item


# =============================================================================
# Resume
# =============================================================================

# 스칼라 필드 (선언 순서 = 출력 순서)
RESUME_SCALAR_FIELDS = (
    "name",
    "name_kana",
    "dob",
    "zip",
    "address",
    "address_kana",
    "email",
    "tel",
    "tel_mobile",
    "gender",
    "spouse",
    "number_of_dependents",
    "skills",
    "motivation",
    "requests",
    "remarks",
    "commute_time",
)

RESUME_LIST_FIELDS = ("education", "work_experience", "certificates")


@dataclass
class ResumeConfig:
    """
    이력서 레코드.

    dob 는 yyyy-mm-dd 형식 문자열, portrait 는 base64 data URL.
    """
    name: str = ""
    name_kana: str = ""
    dob: str = ""
    zip: str = ""
    address: str = ""
    address_kana: str = ""
    email: str = ""
    tel: str = ""
    tel_mobile: str = ""
    gender: str = DEFAULT_GENDER
    spouse: str = DEFAULT_SPOUSE
    number_of_dependents: int = 0
    education: list[HistoryItem] = field(default_factory=list)
    work_experience: list[HistoryItem] = field(default_factory=list)
    certificates: list[HistoryItem] = field(default_factory=list)
    skills: str = ""
    motivation: str = ""
    requests: str = DEFAULT_REQUESTS
    remarks: str = DEFAULT_REMARKS
    commute_time: str = ""
    portrait: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    def scalar_fields(self) -> dict[str, Any]:
        """
        스칼라 필드 + 사용자 정의 스칼라 필드.

        portrait(data URL)와 리스트/중첩 값은 포함하지 않는다.
        """
        fields: dict[str, Any] = {}
        for key, value in self.extra.items():
            if isinstance(value, (str, int, float, bool)) or value is None:
                fields[key] = value
        for key in RESUME_SCALAR_FIELDS:
            fields[key] = getattr(self, key)
        return fields

    def to_dict(self) -> dict[str, Any]:
        """JSON/YAML 직렬화용."""
        data: dict[str, Any] = {key: getattr(self, key) for key in RESUME_SCALAR_FIELDS}
        for key in RESUME_LIST_FIELDS:
            data[key] = [item.to_dict() for item in getattr(self, key)]
        data["portrait"] = self.portrait
        data.update(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResumeConfig":
        """
        dict → ResumeConfig.

        - 누락 필드는 기본값
        - None 은 기본값으로 취급
        - 알 수 없는 키는 extra 로 보존
        """
        resume = cls()
        for key, value in data.items():
            if value is None:
                continue
            if key in RESUME_LIST_FIELDS:
                items = value if isinstance(value, list) else []
                setattr(
                    resume,
                    key,
                    [HistoryItem.from_dict(item) for item in items if isinstance(item, dict)],
                )
            elif key == "number_of_dependents":
                try:
                    resume.number_of_dependents = int(value)
                except (TypeError, ValueError):
                    resume.number_of_dependents = 0
            elif key in RESUME_SCALAR_FIELDS or key == "portrait":
                setattr(resume, key, _as_text(value))
            else:
                resume.extra[key] = value
        return resume


# =============================================================================
# Export Options
# =============================================================================

_TRUE_WORDS = {"true", "yes", "on", "1"}
_FALSE_WORDS = {"false", "no", "off", "0", ""}


def _as_bool(key: str, value: Any) -> bool:
    """옵션 값 → bool. 문자열은 true/false 계열 단어만 허용."""
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise ResumeDataError(
            ErrorCodes.RESUME_DATA_INVALID,
            option=key,
            error=f"not a boolean: {value!r}",
        )
    return bool(value)


# 원래 UI 설정 키 (camelCase) → 필드명
_OPTION_ALIASES = {
    "isHistoryEndMarker": "history_end_marker",
    "isEducationEndMarker": "education_end_marker",
    "isWorkEndMarker": "work_end_marker",
    "isWorkCurrentMarker": "work_current_marker",
    "isCertificateEndMarker": "certificate_end_marker",
    "hasDobAge": "dob_age",
}


@dataclass(frozen=True)
class ExportOptions:
    """출력 옵션. 옵션 객체가 없으면 이 기본값을 사용한다."""
    history_end_marker: bool = True      # 학력+직력 전체 끝에 "以上"
    education_end_marker: bool = False   # 학력 블록 끝에 "以上"
    work_end_marker: bool = False        # 직력 블록 끝에 "以上"
    work_current_marker: bool = True     # 직력 끝에 "現在に至る"
    certificate_end_marker: bool = True  # 자격 리스트 끝에 "以上"
    dob_age: bool = True                 # 생년월일 뒤에 "(満N歳)"

    def to_dict(self) -> dict[str, bool]:
        return {
            "history_end_marker": self.history_end_marker,
            "education_end_marker": self.education_end_marker,
            "work_end_marker": self.work_end_marker,
            "work_current_marker": self.work_current_marker,
            "certificate_end_marker": self.certificate_end_marker,
            "dob_age": self.dob_age,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ExportOptions":
        """snake_case / camelCase 키 모두 허용. 알 수 없는 키는 무시."""
        if not data:
            return cls()
        known = set(cls().to_dict())
        values: dict[str, bool] = {}
        for key, value in data.items():
            name = _OPTION_ALIASES.get(key, key)
            if name in known and value is not None:
                values[name] = _as_bool(key, value)
        return cls(**values)


# =============================================================================
# Templates / Export
# =============================================================================

class TemplateFormat(str, Enum):
    """템플릿 포맷."""
    WORD = "word"
    EXCEL = "excel"


@dataclass
class TemplateEntry:
    """출력 대상 템플릿."""
    name: str
    data: bytes
    format: TemplateFormat | None = None  # None 이면 자동 판별
    checked: bool = True


@dataclass
class ExportResult:
    """
    오케스트레이터 출력.

    failures: 템플릿 이름 → 에러 dict (continue_on_error 일 때만 채워짐)
    """
    filename: str
    data: bytes
    media_type: str
    failures: dict[str, dict[str, Any]] = field(default_factory=dict)
