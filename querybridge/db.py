import logging
from typing import List

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, SQLAlchemyError

from querybridge.config import DATABASE_URL, DB_POOL_SIZE
from querybridge.models import Row

LOG = logging.getLogger(__name__)

# Engine global: o pool só abre conexões no primeiro uso
engine = create_engine(DATABASE_URL, pool_size=DB_POOL_SIZE, pool_pre_ping=True)


class SQLExecutionError(Exception):
    """Erro do banco ao executar a SQL gerada."""

    def __init__(self, message: str, sql: str):
        super().__init__(message)
        self.message = message
        self.sql = sql


def get_engine() -> Engine:
    return engine


def driver_message(exc: SQLAlchemyError) -> str:
    """
    Mensagem original do driver (pymysql, sqlite3...), sem o envelope
    que o SQLAlchemy adiciona com a SQL e o link de documentação.
    """
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


def run_query(sql: str, bind: Engine = engine) -> List[Row]:
    """
    Executa a SQL exatamente como veio, qualquer tipo de comando.

    Retorna as linhas como dicts. Comandos sem resultado
    (INSERT, UPDATE, DDL) retornam lista vazia.
    """
    try:
        with bind.begin() as conn:
            # no_parameters: o texto vai direto ao driver, sem interpretar % ou :nome
            result = conn.execution_options(no_parameters=True).exec_driver_sql(sql)
            if not result.returns_rows:
                LOG.info("SQL executada sem retorno de linhas (rowcount=%s)", result.rowcount)
                return []
            rows = result.mappings().all()
    except SQLAlchemyError as e:
        message = driver_message(e)
        LOG.error("Erro ao executar SQL: %s", message)
        raise SQLExecutionError(message, sql) from e

    return [dict(r) for r in rows]


def dispose_engine(bind: Engine = engine) -> None:
    bind.dispose()
    LOG.info("Pool de conexões encerrado")
