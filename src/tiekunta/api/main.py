from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import router as v1_router
from ..settings import settings

# ---------------- Logging ----------------
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("tiekunta-api")

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info(
        "Startup complete (version=%s, default forest zone=%s)",
        API_VERSION, settings.default_forest_zone or "unset",
    )
    yield


# ---------- App ----------
app = FastAPI(
    title="Tiekunta Road Cost Calculator",
    version=API_VERSION,
    description="Apportions a private road's annual maintenance cost among its owners by ton-kilometres",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

app.include_router(v1_router)

# ----- CORS -----
allow_origins = settings.origins
allow_all = (len(allow_origins) == 1 and allow_origins[0] == "*")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    # Browsers disallow credentials with "*"; use regex echo when fully open.
    allow_credentials=not allow_all,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_origin_regex=".*" if allow_all else None,
)


# ----- System -----
@app.get("/health", tags=["System"])
def health() -> Dict[str, Any]:
    return {
        "ok": True,
        "version": API_VERSION,
        "features": [
            "cost_apportionment",
            "usage_breakdown",
            "reference_tables",
        ],
    }

# ----- Dev entrypoint -----
if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
