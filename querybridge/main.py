import logging
from contextlib import asynccontextmanager
from typing import Iterator

import httpx
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from querybridge.config import CORS_ORIGINS, HOST, LLM_TIMEOUT, LOG_LEVEL, PORT, USE_LLM
from querybridge.db import SQLExecutionError, dispose_engine, get_engine, run_query
from querybridge.llm import generate_sql
from querybridge.models import (
    ErrorResponse,
    ExecutionErrorResponse,
    QueryRequest,
    QueryResponse,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# httpx loga a URL completa no INFO, e a chave do Gemini vai na query string
logging.getLogger("httpx").setLevel(logging.WARNING)
LOG = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not USE_LLM:
        LOG.warning("GEMINI_API_KEY ausente: toda geração de SQL vai falhar.")
    LOG.info("Backend iniciado")
    yield
    dispose_engine()


app = FastAPI(title="QueryBridge NL-to-SQL API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_http_client() -> Iterator[httpx.Client]:
    with httpx.Client(timeout=LLM_TIMEOUT) as client:
        yield client


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(SQLExecutionError)
async def sql_execution_error_handler(request: Request, exc: SQLExecutionError):
    body = ExecutionErrorResponse(error="SQL Execution Failed", details=exc.message, sql=exc.sql)
    return JSONResponse(status_code=500, content=body.model_dump())


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post(
    "/query",
    response_model=QueryResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ExecutionErrorResponse},
    },
)
def query(
    req: QueryRequest | None = None,
    client: httpx.Client = Depends(get_http_client),
    engine: Engine = Depends(get_engine),
):
    """
    Pergunta em linguagem natural -> SQL (Gemini) -> linhas do banco.
    O banco só é chamado depois que a SQL foi gerada.
    """
    question = (req.nlQuery or "").strip() if req else ""
    if not question:
        return JSONResponse(status_code=400, content={"error": "Missing natural query"})

    sql = generate_sql(question, client)
    if not sql:
        return JSONResponse(status_code=500, content={"error": "AI failed to generate SQL"})

    rows = run_query(sql, engine)
    return QueryResponse(sql=sql, result=rows)


if __name__ == "__main__":
    uvicorn.run("querybridge.main:app", host=HOST, port=PORT)
