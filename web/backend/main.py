from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from music_control import __version__
from music_control.core.store import StoreError

from web.backend.deps import get_config, require_auth

app = FastAPI(title="Music Control API", version=__version__)

# CORS: configured origins, otherwise reflect any origin (with credentials)
allowed_origins = get_config().web.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_origin_regex=None if allowed_origins else ".*",
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# Include routers
from web.backend.routers import events, streams, tracks

protected = [Depends(require_auth)]
app.include_router(streams.router, prefix="/api", dependencies=protected)
app.include_router(tracks.router, prefix="/api", tags=["tracks"], dependencies=protected)
app.include_router(events.router, prefix="/api", tags=["events"], dependencies=protected)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
