"""
Core layer: 렌더러 공통 로직.

역할:
- dates: 생년월일/나이/사용자 지정 날짜 포맷 (和暦 포함)
- history: 학력/직력/자격 출력용 리스트 구성
- markers: {marker} 해석 (Word/Excel 공통)
- portrait: 증명사진 data URL 처리
- resume_io: 이력서/옵션 파일 입출력

주의: domain.schemas 가 core.ids 를 참조하므로 여기서는 재수출하지 않는다.
"""
