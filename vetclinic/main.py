# vetclinic/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from vetclinic.core.config import get_settings
from vetclinic.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from vetclinic.models import clinic as _clinic_models  # noqa: F401
from vetclinic.models import profile as _profile_models  # noqa: F401
from vetclinic.models import animal as _animal_models  # noqa: F401
from vetclinic.models import appointment as _appointment_models  # noqa: F401
from vetclinic.models import medical as _medical_models  # noqa: F401
from vetclinic.models import invoice as _invoice_models  # noqa: F401


# Routers
from vetclinic.routers.auth import router as auth_router
from vetclinic.routers.clinics import router as clinics_router
from vetclinic.routers.veterinarians import router as veterinarians_router
from vetclinic.routers.receptionists import router as receptionists_router
from vetclinic.routers.tutors import router as tutors_router
from vetclinic.routers.animals import router as animals_router
from vetclinic.routers.appointments import router as appointments_router
from vetclinic.routers.appointment_requests import router as appointment_requests_router
from vetclinic.routers.medical import router as medical_router
from vetclinic.routers.invoices import router as invoices_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup; a DB failure aborts the boot."""
    logger.info("Startup: connecting to the clinic database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME or "Vet Clinic API",
    version="0.1.0",
    lifespan=lifespan,
)


# --- CORS configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Versioned API prefix, e.g. /api/v1
app.include_router(auth_router, prefix=settings.API_V1_STR)
app.include_router(clinics_router, prefix=settings.API_V1_STR)
app.include_router(veterinarians_router, prefix=settings.API_V1_STR)
app.include_router(receptionists_router, prefix=settings.API_V1_STR)
app.include_router(tutors_router, prefix=settings.API_V1_STR)
app.include_router(animals_router, prefix=settings.API_V1_STR)
app.include_router(appointments_router, prefix=settings.API_V1_STR)
app.include_router(appointment_requests_router, prefix=settings.API_V1_STR)
app.include_router(medical_router, prefix=settings.API_V1_STR)
app.include_router(invoices_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "vetclinic-backend"}
