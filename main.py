import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from config import LOG_LEVEL
from middleware import PermissiveCORSMiddleware, ALLOWED_METHODS
from routes.auth import router as auth_router
from routes.profile import router as profile_router
from routes.posts import router as posts_router, NEXT_CURSOR_HEADER
from routes.comments import router as comments_router
from routes.videos import router as videos_router
from routes.curation import router as curation_router

# Configure logging
logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

app = FastAPI(title="Parenting Community API")

# Add CORS middleware
app.add_middleware(
    PermissiveCORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=ALLOWED_METHODS,
    allow_headers=["*"],
    expose_headers=[NEXT_CURSOR_HEADER],
)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 with a single-line message"""
    errors = exc.errors()
    error = errors[0] if errors else {}
    field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query"))
    message = str(error.get("msg", "Bad Request")).replace("Value error, ", "")
    detail = f"{field}: {message}" if field else message
    logger.warning("Bad request to %s %s: %s", request.method, request.url.path, detail)
    return JSONResponse(status_code=400, content={"detail": detail})

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

# Include routers
app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(posts_router)
app.include_router(comments_router)
app.include_router(videos_router)
app.include_router(curation_router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8081, reload=True)
