# app/main.py  (통합 엔트리포인트)
from dotenv import load_dotenv

# 루트 .env 로딩
load_dotenv()

from app.backend.main import app as app  # noqa: E402, F401
