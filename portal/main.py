from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from portal.core.config import settings
from portal.core.exceptions import PortalError
from portal.core.logging import configure_logging
from portal.routes import course, quiz, quiz_attempt

configure_logging(settings.LOG_LEVEL)

app = FastAPI(title="College Course Portal API")

# CORS middleware configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})

@app.get("/health")
async def health():
    return {"status": "ok"}

# Include routers
app.include_router(course.router, prefix=settings.API_PREFIX, tags=["courses"])
app.include_router(quiz.router, prefix=settings.API_PREFIX, tags=["quizzes"])
app.include_router(quiz_attempt.router, prefix=settings.API_PREFIX, tags=["attempts"])
