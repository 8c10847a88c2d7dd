import argparse
import uvicorn
from fastapi import FastAPI
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db
from config import load_config, CONFIG_DIR
from routes import auth, cards, review, tags  # Import routers
from utils.errors import register_exception_handlers

# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: init DB and config
    load_config()  # Ensures config exists
    init_db()
    yield

app = FastAPI(
    title="VocabDeck",
    description="Vocabulary flashcards scheduled with SM-2",
    lifespan=lifespan,
)
register_exception_handlers(app)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(cards.router, prefix="/api/v1/vocabulary", tags=["vocabulary"])
app.include_router(review.router, prefix="/api/review", tags=["review"])
app.include_router(tags.router, prefix="/api/tags", tags=["tags"])

@app.get("/health")
async def health():
    return {"status": "ok"}

def cli():
    parser = argparse.ArgumentParser(description="VocabDeck API")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()
    if args.init:
        load_config()  # Ensures config is copied if missing
        init_db()
        print(f"DB initialized and config copied to {CONFIG_DIR}/")
        sys.exit(0)
    uvicorn.run("main:app", host=args.host, port=args.port, reload=args.dev, log_level="info")

if __name__ == "__main__":
    cli()
