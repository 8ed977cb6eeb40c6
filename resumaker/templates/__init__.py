"""
Templates layer: 템플릿 검사 모듈.

역할:
- 포맷 판별 (Word / Excel)
- 템플릿이 사용하는 마커 목록
"""

from .inspect import detect_template_format, list_markers

__all__ = [
    "detect_template_format",
    "list_markers",
]
