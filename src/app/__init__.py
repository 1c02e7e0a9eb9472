"""
App layer: REST 서버 (FastAPI).

역할:
- 사용자 확장 리소스 REST 라우팅 (expression, SSH 키)
- 토큰 검증, 요청 바디 스키마 검증
- job 제출 폼용 기본 SSH 키 조회 서비스
- ⚠️ extras 조정 로직 없음 (core에 위임)
"""
