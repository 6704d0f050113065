# main.py
import logging
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

import config
from database import init_db, ping_db
from errors import NotFound, ServerFault, register_exception_handlers
from routes import auth, chat, students

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Vikas Quiz API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials="*" not in config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(students.router)
app.include_router(chat.router)


@app.on_event("startup")
async def startup_event():
    await init_db()


@app.get("/health")
async def health():
    try:
        await ping_db()
    except Exception as e:
        logger.error(f"MongoDB connection check failed: {str(e)}")
        raise ServerFault("Database unavailable")
    return {"success": True, "database": "ok"}


def resolve_static(path: str):
    """File under the static directory for ``path``, or None when absent or outside it."""
    root = Path(config.STATIC_DIR).resolve()
    if not path:
        return None
    candidate = (root / path).resolve()
    if root not in candidate.parents or not candidate.is_file():
        return None
    return candidate


# Registered last so API routes always win
@app.get("/{full_path:path}", include_in_schema=False)
async def serve_frontend(full_path: str):
    asset = resolve_static(full_path)
    if asset is not None:
        return FileResponse(asset)
    index = Path(config.STATIC_DIR) / config.SPA_INDEX
    if not index.is_file():
        raise NotFound("Front-end entry document not found")
    return FileResponse(index)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=config.HOST, port=config.PORT)
