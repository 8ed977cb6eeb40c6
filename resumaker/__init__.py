"""
Resumaker: 이력서 데이터 → Word/Excel 템플릿 문서 생성 엔진.

레이어:
- domain: 에러, 스키마, 정적 상수 테이블
- core: 날짜 포맷, 이력 리스트 구성, 마커 해석
- render: DOCX/XLSX 렌더러 (템플릿 패키지 직접 조작)
- services: 여러 템플릿 일괄 출력 (오케스트레이터)
"""

__version__ = "0.4.0"
