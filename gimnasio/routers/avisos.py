# gimnasio/routers/avisos.py
# Avisos generales de administración, entregados como notificaciones

import logging
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session
from gimnasio.database import get_db
from gimnasio.core.security import require_roles
from gimnasio.models.usuario import Usuario
from gimnasio.schemas.aviso import AvisoCreate, AvisoPublicadoResponse
from gimnasio.services.notificaciones import despachar_notificacion, publicar_aviso

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=AvisoPublicadoResponse, status_code=status.HTTP_202_ACCEPTED)
def crear_aviso(
    aviso: AvisoCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: Usuario = Depends(require_roles("admin"))
):
    """
    Publica un aviso para socios, entrenadores o ambos.
    Cada audiencia recibe en segundo plano un broadcast a sus miembros activos.
    """
    pendientes = publicar_aviso(db, aviso.titulo, aviso.mensaje, aviso.destinatarios)
    db.commit()
    for envio in pendientes:
        background_tasks.add_task(despachar_notificacion, **envio)

    logger.info(f"Aviso '{aviso.titulo}' publicado por {admin.email} para {aviso.destinatarios}")
    return {
        "message": "Aviso publicado",
        "destinatarios": aviso.destinatarios,
        "audiencias": len(pendientes),
    }
