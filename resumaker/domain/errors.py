"""
Error definitions for the document engine.

규칙:
- 패키지/파트 수준 실패 → 호출자로 전파 (재시도 없음)
- 마커 단위 실패 → 절대 전파하지 않음, 빈 문자열로 대체
- 모든 에러는 code + context 를 가짐 (UI 메시지는 호출자 책임)
"""

from typing import Any


class RenderError(Exception):
    """
    렌더링 엔진의 기본 에러.

    Usage:
        raise RenderError("INVALID_PACKAGE", template="resume.xlsx", error=str(e))
    """

    def __init__(self, code: str, **context: Any) -> None:
        self.code = code
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.code}] {ctx_str}" if ctx_str else f"[{self.code}]"

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            **self.context,
        }


class TemplateRenderError(RenderError):
    """
    템플릿을 열거나 해석할 수 없음.

    - ZIP 패키지가 아님 / 손상됨
    - 필수 파트 누락 (word/document.xml 등)
    - Word 마커 구문 오류 (섹션 짝 불일치 등)
    """


class UnsupportedTemplateError(RenderError):
    """Excel 템플릿에 sharedStrings.xml 이 없음 (지원 형식 아님)."""


class ResumeDataError(RenderError):
    """이력서/설정 파일을 읽을 수 없음."""


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Template package ===
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    INVALID_PACKAGE = "INVALID_PACKAGE"
    MISSING_REQUIRED_PART = "MISSING_REQUIRED_PART"
    UNKNOWN_TEMPLATE_FORMAT = "UNKNOWN_TEMPLATE_FORMAT"

    # === Render ===
    TEMPLATE_SYNTAX_ERROR = "TEMPLATE_SYNTAX_ERROR"
    RENDER_FAILED = "RENDER_FAILED"
    UNSUPPORTED_IMAGE_FORMAT = "UNSUPPORTED_IMAGE_FORMAT"  # warning, not raised

    # === Export ===
    NO_TEMPLATE_SELECTED = "NO_TEMPLATE_SELECTED"

    # === Resume data ===
    RESUME_DATA_INVALID = "RESUME_DATA_INVALID"
