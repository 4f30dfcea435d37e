# taskapp/main.py  (엔트리포인트: uvicorn taskapp.main:app)
from dotenv import load_dotenv

# 루트 .env 로딩 (settings가 import 시점에 환경변수를 읽으므로 먼저 로딩)
load_dotenv()

from taskapp.backend.main import app as app  # noqa: E402
