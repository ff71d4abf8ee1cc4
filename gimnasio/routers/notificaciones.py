from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from gimnasio.database import get_db
from gimnasio.core.exceptions import NotFoundException
from gimnasio.core.security import get_current_user
from gimnasio.models.notificacion import Notificacion
from gimnasio.models.usuario import Usuario
from gimnasio.schemas.notificacion import NotificacionResponse, MarcarLeidaRequest
from gimnasio.services.notificaciones import destinatario_de

router = APIRouter()


def _bandeja(db: Session, usuario: Usuario):
    tipo_usuario, usuario_id = destinatario_de(db, usuario)
    query = db.query(Notificacion).filter(Notificacion.tipo_usuario == tipo_usuario)
    if usuario_id is None:
        return query.filter(Notificacion.usuario_id.is_(None))
    return query.filter(Notificacion.usuario_id == usuario_id)


@router.get("/", response_model=List[NotificacionResponse])
def get_notificaciones(
    solo_no_leidas: bool = False,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    query = _bandeja(db, current_user)
    if solo_no_leidas:
        query = query.filter(Notificacion.leida == False)  # noqa: E712
    return query.order_by(Notificacion.id_notificacion.desc()).limit(100).all()


@router.patch("/leer")
def marcar_como_leida(
    datos: MarcarLeidaRequest,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    if not datos.marcar_todas and datos.id_notificacion is None:
        raise HTTPException(status_code=400, detail="Parámetros inválidos")

    query = _bandeja(db, current_user).filter(Notificacion.leida == False)  # noqa: E712
    if datos.marcar_todas:
        actualizadas = query.update({Notificacion.leida: True}, synchronize_session=False)
        db.commit()
        return {"detail": "Notificaciones marcadas como leídas", "actualizadas": actualizadas}

    notificacion = _bandeja(db, current_user).filter(
        Notificacion.id_notificacion == datos.id_notificacion
    ).first()
    if not notificacion:
        raise NotFoundException("Notificación no encontrada")

    notificacion.leida = True
    db.commit()
    return {"detail": "Notificación marcada como leída", "actualizadas": 1}
