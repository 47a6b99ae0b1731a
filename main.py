"""
main.py — PPPK 시험 포털 실행기

  python main.py            # Streamlit 포털 실행 후 브라우저 열기
  python main.py --sandbox  # 인메모리 샌드박스 백엔드도 함께 실행
"""

import argparse
import logging
import os
import socket
import subprocess
import sys
import threading
import time
import traceback
import webbrowser

from config import APP_SCRIPT, BASE_DIR, DEFAULT_HOST, LOG_FILE, SANDBOX_PORT, STREAMLIT_PORT

# ── 로깅 설정 ────────────────────────────────────────────────────────────────
try:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s',
        handlers=[
            logging.FileHandler(LOG_FILE, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )
except PermissionError:
    # 로그 파일 점유 시 콘솔 출력만 사용
    logging.basicConfig(level=logging.INFO)

logger = logging.getLogger(__name__)

# ── 서버 및 네트워크 유틸 ───────────────────────────────────────────────────

def _find_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((DEFAULT_HOST, 0))
        return s.getsockname()[1]

def _wait_for_port(port: int, timeout: float = 30.0) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            with socket.create_connection((DEFAULT_HOST, port), timeout=0.5):
                return True
        except OSError:
            time.sleep(0.1)
    return False

def _start_sandbox(port: int) -> None:
    try:
        import uvicorn
        from sandbox.app import create_app
        logger.info(f"샌드박스 백엔드 시작 - Port: {port}")
        uvicorn.run(create_app(), host=DEFAULT_HOST, port=port, log_level="warning")
    except Exception:
        logger.error(f"샌드박스 서버 오류 발생:\n{traceback.format_exc()}")

def _start_portal(port: int, env: dict) -> subprocess.Popen:
    cmd = [
        sys.executable, "-m", "streamlit", "run", APP_SCRIPT,
        "--server.address", DEFAULT_HOST,
        "--server.port", str(port),
        "--server.headless", "true",
    ]
    logger.info(f"Streamlit 포털 시작 - Port: {port}")
    return subprocess.Popen(cmd, cwd=BASE_DIR, env=env)

# ── 메인 실행 ────────────────────────────────────────────────────────────────

def main() -> int:
    parser = argparse.ArgumentParser(description="PPPK exam portal launcher")
    parser.add_argument("--sandbox", action="store_true", help="run the in-memory sandbox backend")
    parser.add_argument("--no-browser", action="store_true", help="do not open a browser window")
    args = parser.parse_args()

    logger.info("=== PPPK Exam Portal Started ===")
    env = dict(os.environ)

    if args.sandbox:
        t = threading.Thread(target=_start_sandbox, args=(SANDBOX_PORT,), daemon=True)
        t.start()
        if not _wait_for_port(SANDBOX_PORT):
            logger.error("샌드박스 백엔드 시작 제한 시간을 초과했습니다.")
            return 1
        env["PPPK_API_BASE_URL"] = f"http://{DEFAULT_HOST}:{SANDBOX_PORT}/api/v1"

    port = STREAMLIT_PORT or _find_free_port()
    proc = _start_portal(port, env)

    if not _wait_for_port(port):
        logger.error("포털 시작 제한 시간을 초과했습니다.")
        proc.terminate()
        return 1

    logger.info("포털 준비 완료.")
    if not args.no_browser:
        webbrowser.open(f"http://{DEFAULT_HOST}:{port}")

    # 포털 프로세스 유지
    try:
        return proc.wait()
    except KeyboardInterrupt:
        logger.info("사용자에 의해 종료되었습니다.")
        proc.terminate()
        return 0


if __name__ == "__main__":
    sys.exit(main())
