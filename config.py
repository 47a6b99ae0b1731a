import os

# 기본 디렉토리 설정
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# 경로 설정
APP_SCRIPT = os.path.join(BASE_DIR, "streamlit_app.py")
LOG_FILE = os.path.join(BASE_DIR, "launch.log")

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
STREAMLIT_PORT = int(os.getenv("PORT", "0"))          # 0이면 빈 포트 자동 선택
SANDBOX_PORT = int(os.getenv("SANDBOX_PORT", "8080"))

# 백엔드 API 설정
API_BASE_URL = os.getenv("PPPK_API_BASE_URL", "http://localhost:8080/api/v1")
REQUEST_TIMEOUT = float(os.getenv("PPPK_REQUEST_TIMEOUT", "15.0"))

# 서버 시계 보정 (Date 헤더 기준)
SYNC_SERVER_CLOCK = os.getenv("PPPK_SYNC_SERVER_CLOCK", "1") not in ("0", "false", "False")
CLOCK_SKEW_TOLERANCE = 2.0   # 이 값(초) 미만의 오차는 무시

# 문제 관리 화면 설정
SEARCH_DEBOUNCE_SECONDS = 0.3
DEFAULT_PAGE_SIZE = 10
PAGE_SIZE_CHOICES = [5, 10, 25, 50, 0]   # 0 = 전체
QUESTION_MANAGER_PASSWORD = os.getenv("PPPK_QUESTION_PASSWORD", "moncos214")
ACCESS_GRANT_TTL = int(os.getenv("PPPK_ACCESS_TTL", "3600"))

# 관리자 대시보드 자동 새로고침 주기 (초)
ROSTER_REFRESH_SECONDS = 30
