import logging
import os
import random
import re
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from requests import RequestException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import configure_logging, cors_origins, load_settings
from database import create_db_engine, init_db, make_session_factory
from models import MessageResponse, QuizResult, ScoreBody, SearchHit, SearchResponse, SummaryResponse
from question_builders import search_items
from quiz_composer import (
    DEFAULT_QUESTIONS,
    SUSTAINABILITY_TITLE,
    clamp_count,
    compose_quiz,
    compose_sustainability_quiz,
)
from score_recorder import record_score
from wiki_client import WikipediaClient

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = load_settings()
    engine = create_db_engine(settings.database_url)
    init_db(engine)
    app.state.settings = settings
    app.state.session_factory = make_session_factory(engine)
    app.state.wiki_client = WikipediaClient(
        lang=settings.wiki_lang,
        timeout=settings.wiki_timeout,
        user_agent=settings.wiki_user_agent,
    )
    app.state.rng = random.Random()
    logger.info("Started with Wikipedia language %r", settings.wiki_lang)
    try:
        yield
    finally:
        app.state.wiki_client.close()
        engine.dispose()


app = FastAPI(title="Wiki Quiz API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(cors_origins()),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"message": "Requisição inválida"})


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_wiki_client(request: Request) -> WikipediaClient:
    return request.app.state.wiki_client


def get_rng(request: Request) -> random.Random:
    return request.app.state.rng


def get_attempts_factor(request: Request) -> int:
    return request.app.state.settings.max_attempts_factor


def parse_count(raw: Optional[str]) -> int:
    """
    Lenient ?n= parsing that reads the leading integer ("7abc" -> 7, "3.5" -> 3).
    Missing, non-numeric or zero means the default; the result is clamped to [1, 10].
    """
    match = re.match(r"\s*[+-]?\d+", raw or "")
    n = int(match.group()) if match else DEFAULT_QUESTIONS
    return clamp_count(n or DEFAULT_QUESTIONS)


@app.get("/")
def root():
    """API root endpoint with basic information."""
    return {
        "name": "Wiki Quiz API",
        "version": "1.0.0",
        "endpoints": ["/search", "/summary", "/quiz", "/quiz-sustentabilidade", "/score"],
    }


@app.get("/search", response_model=SearchResponse)
def search(q: Optional[str] = None, wiki: WikipediaClient = Depends(get_wiki_client)):
    """Full-text search on Wikipedia; snippets are returned as-is (with markup)."""
    query = (q or "").strip()
    if not query:
        raise HTTPException(status_code=400, detail="Parâmetro q é obrigatório")

    try:
        res = wiki.search(query)
        if not res.ok:
            raise ValueError(f"search returned status {res.status}")
        results = [
            SearchHit(title=s.get("title", ""), snippet=s.get("snippet", ""), pageid=s.get("pageid"))
            for s in search_items(res.json())
        ]
    except (RequestException, ValueError):
        logger.exception("Search failed for %r", query)
        raise HTTPException(status_code=500, detail="Erro ao buscar na Wikipédia")
    return SearchResponse(query=query, results=results)


@app.get("/summary", response_model=SummaryResponse)
def summary(title: Optional[str] = None, wiki: WikipediaClient = Depends(get_wiki_client)):
    """Page summary; upstream failures keep their status code."""
    title = (title or "").strip()
    if not title:
        raise HTTPException(status_code=400, detail="Parâmetro title é obrigatório")

    try:
        res = wiki.summary(title)
        if not res.ok:
            raise HTTPException(status_code=res.status, detail="Página não encontrada na Wikipédia")
        data = res.json()
        if not isinstance(data, dict):
            raise ValueError("summary payload is not an object")
        return SummaryResponse(
            title=data.get("title") or title,
            description=data.get("description") or "",
            extract=data.get("extract") or "",
            content_urls=data.get("content_urls") or None,
        )
    except (RequestException, ValueError):
        logger.exception("Summary failed for %r", title)
        raise HTTPException(status_code=500, detail="Erro ao obter resumo da Wikipédia")


@app.get("/quiz", response_model=QuizResult)
def quiz(
    title: Optional[str] = None,
    n: Optional[str] = None,
    wiki: WikipediaClient = Depends(get_wiki_client),
    rng: random.Random = Depends(get_rng),
    attempts_factor: int = Depends(get_attempts_factor),
):
    """Generate up to n (max 10) multiple-choice questions about a Wikipedia page."""
    title = (title or "").strip()
    count = parse_count(n)
    if not title:
        raise HTTPException(status_code=400, detail="Parâmetro title é obrigatório")

    try:
        questions = compose_quiz(wiki, title, count, rng, attempts_factor)
    except Exception:
        logger.exception("Quiz generation failed for %r", title)
        raise HTTPException(status_code=500, detail="Erro ao gerar quiz pela Wikipédia")

    if not questions:
        raise HTTPException(status_code=404, detail="Não foi possível gerar perguntas.")
    return QuizResult.from_questions(title, questions)


@app.get("/quiz-sustentabilidade", response_model=QuizResult)
def sustainability_quiz(
    n: Optional[str] = None,
    wiki: WikipediaClient = Depends(get_wiki_client),
    rng: random.Random = Depends(get_rng),
    attempts_factor: int = Depends(get_attempts_factor),
):
    """One question per curated sustainability topic."""
    count = parse_count(n)
    try:
        questions = compose_sustainability_quiz(wiki, count, rng, attempts_factor)
    except Exception:
        logger.exception("Sustainability quiz generation failed")
        raise HTTPException(status_code=500, detail="Erro ao gerar quiz de sustentabilidade")

    if not questions:
        raise HTTPException(status_code=404, detail="Não foi possível gerar perguntas.")
    return QuizResult.from_questions(SUSTAINABILITY_TITLE, questions)


@app.post("/score", response_model=MessageResponse)
def score(payload: Any = Body(None), db: Session = Depends(get_db)):
    """Store a quiz score, creating the user on first submission."""
    try:
        body = ScoreBody.model_validate(payload)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Informe { user, score:number }")

    try:
        record_score(db, body.user, body.score)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not save score for %r", body.user)
        raise HTTPException(status_code=500, detail="Erro ao salvar pontuação")
    return MessageResponse(message="Pontuação registrada no banco!")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "3000")), log_level="info")
