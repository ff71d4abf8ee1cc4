import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from gimnasio.database import get_db
from gimnasio.core.security import require_roles
from gimnasio.models.socio import Socio
from gimnasio.models.usuario import Usuario
from gimnasio.schemas.credencial import VerificarCredencialRequest, VerificarCredencialResponse
from gimnasio.services.credencial import leer_token_credencial
from gimnasio.services.reservas import membresia_habilitante

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/verificar-credencial", response_model=VerificarCredencialResponse)
def verificar_credencial(
    request: VerificarCredencialRequest,
    db: Session = Depends(get_db),
    operador: Usuario = Depends(require_roles("recepcion", "admin"))
):
    """
    Verifica la credencial QR de un socio en la entrada.
    Solo permite el acceso con una membresía vigente hoy.
    """
    id_socio = leer_token_credencial(request.token)
    if id_socio is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Credencial no válida o expirada"
        )

    socio = db.query(Socio).filter(Socio.id_socio == id_socio).first()
    if not socio:
        logger.warning(f"Credencial de socio inexistente: {id_socio}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Credencial no válida o expirada"
        )

    hoy = date.today()
    membresia = membresia_habilitante(db, socio.id_socio, hoy, hoy=hoy)
    if membresia is None:
        logger.info(f"Acceso denegado a socio {socio.id_socio}: sin membresía vigente")
        return {
            "acceso_permitido": False,
            "message": "El socio no tiene una membresía vigente",
            "id_socio": socio.id_socio,
            "nombre_socio": socio.nombre_completo,
            "fecha_vencimiento": None,
        }

    logger.info(f"Acceso permitido a socio {socio.id_socio} por {operador.email}")
    return {
        "acceso_permitido": True,
        "message": "Acceso permitido",
        "id_socio": socio.id_socio,
        "nombre_socio": socio.nombre_completo,
        "fecha_vencimiento": membresia.fecha_vencimiento,
    }
