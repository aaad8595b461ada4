from typing import Dict, Any, List
from pydantic import BaseModel


Row = Dict[str, Any]


class QueryRequest(BaseModel):
    nlQuery: str | None = None


class QueryResponse(BaseModel):
    sql: str
    result: List[Row]


class ErrorResponse(BaseModel):
    error: str


class ExecutionErrorResponse(BaseModel):
    error: str
    details: str
    sql: str
