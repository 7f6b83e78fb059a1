#!/usr/bin/env python3
"""
Flappy Bird score server: identity, score submission and leaderboard over
HTTP/JSON, backed by SQLite. Sessions are signed HTTP-only cookies.
"""

import argparse
import logging
from dataclasses import replace
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .config import ServerConfig, load_server_config
from .constants import (
    DISPLAY_NAME_MAX_LENGTH, LEADERBOARD_DEFAULT_LIMIT, LEADERBOARD_MAX_LIMIT,
    SESSION_COOKIE, SESSION_MAX_AGE
)
from .data_models import User
from .logger import setup_logging
from .server_db import Database, DuplicateUserError, PasswordRequiredError

logger = logging.getLogger("flappy.server")


# -------- Request bodies --------

class LoginRequest(BaseModel):
    displayName: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=DISPLAY_NAME_MAX_LENGTH)
    password: str = Field(min_length=1)
    displayName: str = Field(min_length=1, max_length=DISPLAY_NAME_MAX_LENGTH)


class ScoreRequest(BaseModel):
    score: int = Field(ge=0)


def clean_display_name(raw: Optional[str]) -> str:
    name = (raw or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    if len(name) > DISPLAY_NAME_MAX_LENGTH:
        raise HTTPException(
            status_code=400,
            detail=f"Name must be no more than {DISPLAY_NAME_MAX_LENGTH} characters long")
    return name


def parse_limit(raw: Optional[str]) -> int:
    """Unparsable or non-positive limits fall back to the default; the rest is capped."""
    try:
        limit = int(raw) if raw is not None else LEADERBOARD_DEFAULT_LIMIT
    except ValueError:
        limit = LEADERBOARD_DEFAULT_LIMIT
    if limit <= 0:
        limit = LEADERBOARD_DEFAULT_LIMIT
    return min(limit, LEADERBOARD_MAX_LIMIT)


# -------- App factory --------

def create_app(config: ServerConfig, db: Optional[Database] = None) -> FastAPI:
    db = db or Database(config.db_file)
    app = FastAPI(title="Flappy Bird Score Server")
    app.state.db = db

    app.add_middleware(
        SessionMiddleware,
        secret_key=config.secret_key,
        session_cookie=SESSION_COOKIE,
        max_age=SESSION_MAX_AGE,
        same_site="lax",
        https_only=config.production,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if not config.production else [],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request", "details": details})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    def current_user(request: Request) -> User:
        user_id = request.session.get("user_id")
        if user_id is None:
            raise HTTPException(status_code=401, detail="Authentication required")
        user = db.get_user(user_id)
        if user is None:
            request.session.clear()
            raise HTTPException(status_code=401, detail="User not found")
        return user

    def own_user(user_id: int, user: User = Depends(current_user)) -> User:
        if user_id != user.id:
            raise HTTPException(status_code=403, detail="Access denied")
        return user

    def start_session(request: Request, user: User):
        request.session.clear()
        request.session["user_id"] = user.id

    # -------- Routes --------

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    @app.post("/api/login")
    def login(body: LoginRequest, request: Request):
        if body.username is not None or body.password is not None:
            if not body.username or not body.password:
                raise HTTPException(status_code=400, detail="Username and password required")
            user = db.check_credentials(body.username, body.password)
            if user is None:
                raise HTTPException(status_code=401, detail="Invalid username or password")
        else:
            try:
                user = db.get_or_create_user(clean_display_name(body.displayName))
            except PasswordRequiredError:
                raise HTTPException(status_code=401, detail="This account requires a password")

        start_session(request, user)
        logger.info("Login: %s (id=%d)", user.display_name, user.id)
        return {"user": user.to_dict()}

    @app.post("/api/register", status_code=201)
    def register(body: RegisterRequest, request: Request):
        display_name = clean_display_name(body.displayName)
        username = body.username.strip()
        if not username:
            raise HTTPException(status_code=400, detail="Username is required")
        if db.get_user_by_username(username) or db.get_user_by_display_name(display_name):
            raise HTTPException(status_code=409, detail="Username or display name already exists")
        try:
            user = db.create_user(display_name, username=username, password=body.password)
        except DuplicateUserError:
            raise HTTPException(status_code=409, detail="Username or display name already exists")

        start_session(request, user)
        logger.info("Registered: %s (id=%d)", user.display_name, user.id)
        return {"user": user.to_dict()}

    @app.post("/api/logout")
    def logout(request: Request):
        request.session.clear()
        return {"success": True}

    @app.post("/api/scores", status_code=201)
    def submit_score(body: ScoreRequest, user: User = Depends(current_user)):
        record = db.add_score(user.id, body.score)
        logger.info("Score %d submitted by %s", body.score, user.display_name)
        return {"score": record.to_dict()}

    @app.get("/api/leaderboard")
    def leaderboard(limit: Optional[str] = None):
        entries = db.get_top_scores(parse_limit(limit))
        return {"leaderboard": [entry.to_dict() for entry in entries]}

    @app.get("/api/me")
    def me(user: User = Depends(current_user)):
        return {"user": user.to_dict()}

    @app.get("/api/users/{user_id}")
    def get_user(user_id: int, user: User = Depends(own_user)):
        found = db.get_user(user_id)
        if found is None:
            raise HTTPException(status_code=404, detail="User not found")
        return {"user": found.to_dict()}

    @app.get("/api/users/{user_id}/scores")
    def get_user_scores(user_id: int, user: User = Depends(own_user)):
        return {"scores": [s.to_dict() for s in db.get_user_scores(user_id)]}

    return app


def main(argv=None):
    parser = argparse.ArgumentParser(description="Flappy Bird score server")
    parser.add_argument("--host", help="Bind address")
    parser.add_argument("--port", type=int, help="Bind port")
    parser.add_argument("--db", help="SQLite database file")
    args = parser.parse_args(argv)

    config = load_server_config()
    overrides = {k: v for k, v in (("host", args.host), ("port", args.port), ("db_file", args.db))
                 if v is not None}
    config = replace(config, **overrides)
    setup_logging(config.log_level)

    import uvicorn
    logger.info("Serving on %s:%d (db=%s)", config.host, config.port, config.db_file)
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
