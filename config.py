import os

# 기본 디렉토리 설정
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# 경로 설정
STATIC_DIR = os.path.join(BASE_DIR, "static")
LOG_FILE = os.path.join(BASE_DIR, "server.log")
DATA_DIR = os.getenv("QB_DATA_DIR", os.path.join(BASE_DIR, "data"))
STORE_FILE = os.path.join(DATA_DIR, "store.json")
PERSIST = os.getenv("QB_PERSIST", "1").lower() in ("1", "true", "yes")

# 서버 설정
APP_ENV = os.getenv("APP_ENV", "development")
IS_PRODUCTION = APP_ENV == "production"
DEFAULT_HOST = os.getenv("HOST", "0.0.0.0")
DEFAULT_PORT = int(os.getenv("PORT", "3001"))
FRONTEND_URL = os.getenv("FRONTEND_URL", "")
CORS_ORIGINS = [FRONTEND_URL] if IS_PRODUCTION and FRONTEND_URL else ["*"]

# 인증 설정
JWT_SECRET = os.getenv("JWT_SECRET", "question-bank-dev-secret-change-me")
JWT_ALGORITHM = "HS256"
TOKEN_TTL_HOURS = 24
BCRYPT_ROUNDS = int(os.getenv("QB_BCRYPT_ROUNDS", "12"))
DEFAULT_PASSWORD = "123456"     # 관리자 생성/초기화 시 비밀번호 미지정(또는 너무 짧음)일 때
MIN_PASSWORD_LENGTH = 6

# 데모 데이터 (개발 환경 최초 실행 시)
SEED_DEMO_DATA = os.getenv("QB_SEED_DEMO", "0" if IS_PRODUCTION else "1").lower() in ("1", "true", "yes")

# 문제/시험 기본값
DEFAULT_EXAM_DURATION = 60      # 분
DEFAULT_QUESTION_SCORE = 5
DEFAULT_PAGE_SIZE = 10
DEFAULT_QUESTION_PAGE_SIZE = 20
