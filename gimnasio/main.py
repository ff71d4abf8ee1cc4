import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from gimnasio.config import settings
from gimnasio.database import create_tables
from gimnasio.core.exceptions import ReservaError
from gimnasio.routers import (
    auth,
    entrenador,
    socio,
    membresias,
    notificaciones,
    recepcion,
    avisos,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    yield


app = FastAPI(
    title="Sistema de Gestión de Gimnasio",
    description="API para clases grupales, reservas y membresías",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configuración CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=[
        "Authorization",
        "Content-Type",
        "Accept",
        "Origin",
        "X-Requested-With",
    ],
    max_age=600,
)


@app.exception_handler(ReservaError)
async def reserva_error_handler(request: Request, exc: ReservaError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.mensaje, "categoria": exc.categoria},
    )


# Routers
app.include_router(auth.router, prefix="/auth", tags=["Autenticación"])
app.include_router(entrenador.router, prefix="/entrenador", tags=["Entrenador"])
app.include_router(socio.router, prefix="/socio", tags=["Socio"])
app.include_router(membresias.router, prefix="/admin/membresias", tags=["Membresías"])
app.include_router(notificaciones.router, prefix="/notificaciones", tags=["Notificaciones"])
app.include_router(recepcion.router, prefix="/recepcion", tags=["Recepción"])
app.include_router(avisos.router, prefix="/admin/avisos", tags=["Avisos"])


@app.get("/")
def read_root():
    return {
        "mensaje": "API del gimnasio funcionando correctamente",
        "version": "1.0.0"
    }


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "service": "Gimnasio API",
    }
