"""
ID 생성: 이력 항목 id

규칙:
- id 는 리스트 표시용 식별자 (렌더러는 참조하지 않음)
- 자동 생성 행은 고정 id 사용 (history.py 참조)
"""

import uuid


def generate_item_id() -> str:
    """
    이력 항목 ID 생성.

    고유성 보장: UUID v4

    Returns:
        id 문자열 (32자리 hex)
    """
    return uuid.uuid4().hex
