import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.activities import router as activities_router
from app.api.athletes import router as athletes_router
from app.api.challenges import router as challenges_router
from app.api.strava import router as strava_router
from app.api.submissions import router as submissions_router
from app.core.config import settings
from app.core.errors import NotEligible, NotFound, ProofInvalid, ResubmitTooSoon, ValidationError
from app.db import Base, engine
# import ensures tables are registered
from app.models import athlete, catalog, challenge, division, gym, submission, xp  # noqa: F401

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Ascendant")

# Allow CORS for local frontend
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create DB tables on startup
Base.metadata.create_all(bind=engine)
logger.info("Database ready (%s)", engine.url.get_backend_name())


@app.exception_handler(ValidationError)
def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(NotFound)
def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(NotEligible)
def not_eligible_handler(request: Request, exc: NotEligible):
    return JSONResponse(status_code=403, content={"detail": "Not eligible", "reasons": exc.reasons})


@app.exception_handler(ProofInvalid)
def proof_invalid_handler(request: Request, exc: ProofInvalid):
    return JSONResponse(status_code=422, content={"detail": "Invalid proof", "errors": exc.errors})


@app.exception_handler(ResubmitTooSoon)
def resubmit_too_soon_handler(request: Request, exc: ResubmitTooSoon):
    return JSONResponse(
        status_code=429,
        content={"detail": str(exc), "retry_after_hours": exc.retry_after_hours},
        headers={"Retry-After": str(exc.retry_after_hours * 3600)},
    )


app.include_router(challenges_router)
app.include_router(submissions_router)
app.include_router(athletes_router)
app.include_router(strava_router)
app.include_router(activities_router)


@app.get("/")
def root():
    return {"message": "Ascendant backend is running"}
