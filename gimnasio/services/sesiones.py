# gimnasio/services/sesiones.py
"""
Sesiones personales entrenador-socio.

Un entrenador no puede tener dos sesiones Agendadas o Completadas que se
solapen el mismo día. El chequeo corre con la fila del entrenador bloqueada,
así que dos altas simultáneas para el mismo entrenador se serializan.
"""

import logging
from datetime import date, time
from typing import Optional
from fastapi import HTTPException
from sqlalchemy import and_
from sqlalchemy.orm import Session
from gimnasio.core.exceptions import ConflictException, NotFoundException
from gimnasio.models.entrenador import Entrenador
from gimnasio.models.sesion_personal import SesionPersonal, ESTADOS_SESION, ESTADOS_SESION_OCUPADA
from gimnasio.models.socio import Socio

logger = logging.getLogger(__name__)


def hay_solapamiento_sesion(
    db: Session,
    id_entrenador: int,
    fecha_sesion: date,
    hora_inicio: time,
    hora_fin: time,
    excluir_id: Optional[int] = None,
) -> bool:
    query = db.query(SesionPersonal.id_sesion).filter(
        SesionPersonal.id_entrenador == id_entrenador,
        SesionPersonal.fecha_sesion == fecha_sesion,
        SesionPersonal.estado.in_(ESTADOS_SESION_OCUPADA),
        and_(SesionPersonal.hora_inicio < hora_fin, SesionPersonal.hora_fin > hora_inicio),
    )
    if excluir_id is not None:
        query = query.filter(SesionPersonal.id_sesion != excluir_id)
    return query.first() is not None


def _bloquear_entrenador(db: Session, id_entrenador: int):
    db.query(Entrenador).filter(Entrenador.id_entrenador == id_entrenador).with_for_update().first()


def agendar_sesion(
    db: Session,
    id_entrenador: int,
    id_socio: int,
    fecha_sesion: date,
    hora_inicio: time,
    hora_fin: time,
    notas: Optional[str] = None,
) -> SesionPersonal:
    socio = db.query(Socio).filter(Socio.id_socio == id_socio).first()
    if not socio:
        raise NotFoundException("Socio no encontrado")

    _bloquear_entrenador(db, id_entrenador)
    if hay_solapamiento_sesion(db, id_entrenador, fecha_sesion, hora_inicio, hora_fin):
        db.rollback()
        raise ConflictException("Ya tienes otra sesión programada en este horario.")

    sesion = SesionPersonal(
        id_entrenador=id_entrenador,
        socio=socio,
        fecha_sesion=fecha_sesion,
        hora_inicio=hora_inicio,
        hora_fin=hora_fin,
        estado="Agendada",
        notas=notas,
    )
    db.add(sesion)
    db.commit()
    logger.info(f"Sesión personal {sesion.id_sesion} agendada: entrenador={id_entrenador} socio={id_socio} fecha={fecha_sesion}")
    return sesion


def cambiar_estado_sesion(db: Session, sesion: SesionPersonal, nuevo_estado: str) -> str:
    """
    Cambia el estado de la sesión y devuelve el anterior. Volver a ocupar la
    agenda desde NoAsistio o Cancelada repite el chequeo de solapamiento.
    """
    if nuevo_estado not in ESTADOS_SESION:
        raise ValueError(f"Estado inválido: {nuevo_estado}")

    id_sesion = sesion.id_sesion
    if nuevo_estado in ESTADOS_SESION_OCUPADA:
        _bloquear_entrenador(db, sesion.id_entrenador)
    db.refresh(sesion, attribute_names=["estado"], with_for_update=True)

    estado_anterior = sesion.estado
    if estado_anterior == nuevo_estado:
        db.commit()
        return estado_anterior

    if (
        nuevo_estado in ESTADOS_SESION_OCUPADA
        and estado_anterior not in ESTADOS_SESION_OCUPADA
        and hay_solapamiento_sesion(
            db, sesion.id_entrenador, sesion.fecha_sesion, sesion.hora_inicio, sesion.hora_fin, excluir_id=id_sesion
        )
    ):
        db.rollback()
        raise ConflictException("Ya tienes otra sesión programada en este horario.")

    sesion.estado = nuevo_estado
    db.commit()
    logger.info(f"Estado de sesión {id_sesion} actualizado: {estado_anterior} → {nuevo_estado}")
    return estado_anterior


def cancelar_sesion(db: Session, sesion: SesionPersonal) -> SesionPersonal:
    """Solo una sesión Agendada puede cancelarse"""
    db.refresh(sesion, attribute_names=["estado"], with_for_update=True)
    if sesion.estado != "Agendada":
        db.rollback()
        raise HTTPException(
            status_code=400,
            detail="Solo se pueden cancelar sesiones en estado 'Agendada'"
        )

    sesion.estado = "Cancelada"
    db.commit()
    logger.info(f"Sesión personal {sesion.id_sesion} cancelada")
    return sesion
