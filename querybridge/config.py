import os
from pathlib import Path

from sqlalchemy.engine import URL

# Configuração de banco
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = int(os.getenv("DB_PORT", "3306"))
DB_USER = os.getenv("DB_USER", "root")
DB_PASSWORD = os.getenv("DB_PASSWORD", "Admin")
DB_NAME = os.getenv("DB_NAME", "daily_job_automotive")
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))

# DATABASE_URL tem prioridade sobre as variáveis DB_*
DATABASE_URL = os.getenv("DATABASE_URL") or URL.create(
    "mysql+pymysql",
    username=DB_USER,
    password=DB_PASSWORD,
    host=DB_HOST,
    port=DB_PORT,
    database=DB_NAME,
)

# Config de LLM
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_API_BASE = os.getenv(
    "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
).rstrip("/")
USE_LLM = bool(GEMINI_API_KEY)

# Sem timeout por padrão
_timeout = os.getenv("LLM_TIMEOUT")
LLM_TIMEOUT = float(_timeout) if _timeout else None

SCHEMA_PROMPT_PATH = Path(
    os.getenv(
        "SCHEMA_PROMPT_PATH",
        Path(__file__).parent / "prompts" / "daily_job_automotive.v1.txt",
    )
)

# Servidor
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
