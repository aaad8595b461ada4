import json
import logging
import re
from pathlib import Path
from typing import Any, Dict

import httpx

from querybridge.config import (
    GEMINI_API_BASE,
    GEMINI_API_KEY,
    GEMINI_MODEL,
    SCHEMA_PROMPT_PATH,
)

LOG = logging.getLogger(__name__)

_SQL_FENCE = re.compile(r"```sql", re.IGNORECASE)


def load_schema_prompt(path: Path | None = None) -> str:
    return (path or SCHEMA_PROMPT_PATH).read_text(encoding="utf-8")


def build_prompt(question: str, schema_description: str | None = None) -> str:
    if schema_description is None:
        schema_description = load_schema_prompt()
    return f"{schema_description}\nUser: {question}"


def extract_text(data: Dict[str, Any]) -> str:
    """
    Primeiro texto de candidates[0].content.parts[0].text, ou "" se a
    resposta não tiver esse formato.
    """
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    return text.strip() if isinstance(text, str) else ""


def strip_code_fences(text: str) -> str:
    # Remove ```sql ... ``` se vier
    text = _SQL_FENCE.sub("", text)
    return text.replace("```", "").strip()


def generate_sql(question: str, client: httpx.Client) -> str | None:
    """
    Pede ao Gemini a SQL para a pergunta.

    Retorna None em qualquer falha (sem chave, erro de rede, resposta
    vazia); o chamador não distingue os casos.
    """
    if not GEMINI_API_KEY:
        LOG.error("LLM não configurado (GEMINI_API_KEY ausente).")
        return None

    url = f"{GEMINI_API_BASE}/models/{GEMINI_MODEL}:generateContent"
    try:
        prompt = build_prompt(question)
    except OSError as e:
        LOG.error("Falha ao ler o prompt de schema: %s", e)
        return None
    payload = {"contents": [{"parts": [{"text": prompt}]}]}

    try:
        resp = client.post(url, json=payload, params={"key": GEMINI_API_KEY})
        resp.raise_for_status()
        data = resp.json()
    except httpx.HTTPStatusError as e:
        LOG.error("Erro da API do Gemini (%s): %s", e.response.status_code, e.response.text)
        return None
    except httpx.HTTPError as e:
        LOG.error("Erro ao chamar o Gemini: %s", e)
        return None
    except ValueError as e:
        LOG.error("Resposta do Gemini não é JSON válido: %s", e)
        return None

    text = extract_text(data)
    if not text:
        LOG.error("Resposta vazia do Gemini: %s", json.dumps(data, indent=2, ensure_ascii=False))
        return None

    sql = strip_code_fences(text)
    if not sql:
        LOG.error("Gemini retornou apenas marcadores de código: %r", text)
        return None

    LOG.info("SQL gerada pelo Gemini: %s", sql)
    return sql
