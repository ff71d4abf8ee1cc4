# gimnasio/routers/socio.py
# Autoservicio del socio: clases, reservas propias, sesiones personales, membresía y credencial

import logging
from datetime import date
from functools import partial
from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session, joinedload
from gimnasio.database import get_db
from gimnasio.core.exceptions import NotFoundException
from gimnasio.core.security import get_current_socio
from gimnasio.models.clase import Clase
from gimnasio.models.entrenador import Entrenador
from gimnasio.models.membresia import Membresia
from gimnasio.models.reserva_clase import ReservaClase
from gimnasio.models.sesion_personal import SesionPersonal
from gimnasio.models.socio import Socio
from gimnasio.schemas.clase import ClaseConCupos, ClaseResponse
from gimnasio.schemas.credencial import CredencialResponse
from gimnasio.schemas.membresia import MembresiaResponse
from gimnasio.schemas.sesion_personal import SesionPersonalResponse
from gimnasio.schemas.reserva_clase import (
    ClasesSocioResponse,
    InscripcionResponse,
    ReservaClaseResponse,
    ReservaSocioCreate,
)
from gimnasio.services import reservas as servicio_reservas
from gimnasio.services.credencial import generar_qr_base64, generar_token_credencial
from gimnasio.services.notificaciones import despachar_notificacion

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/clases", response_model=ClasesSocioResponse)
def listar_clases_disponibles(
    fecha_clase: Optional[date] = None,
    db: Session = Depends(get_db),
    socio: Socio = Depends(get_current_socio)
):
    """
    Clases activas y vigentes. Con `fecha_clase` se informan los cupos libres
    de esa fecha.
    """
    hoy = date.today()
    clases = db.query(Clase).options(joinedload(Clase.entrenador)).filter(
        Clase.activa == True,  # noqa: E712
        (Clase.fecha_fin.is_(None)) | (Clase.fecha_fin >= hoy)
    ).order_by(Clase.dia_semana, Clase.hora_inicio).all()

    clases_respuesta = []
    for clase in clases:
        datos = ClaseResponse.model_validate(clase).model_dump()
        if fecha_clase:
            ocupados = servicio_reservas.contar_cupos_ocupados(db, clase.id_clase, fecha_clase)
            datos["cupos_ocupados"] = ocupados
            datos["cupos_disponibles"] = max(clase.cupo_maximo - ocupados, 0)
        datos["nombre_entrenador"] = clase.entrenador.nombre_completo if clase.entrenador else None
        clases_respuesta.append(ClaseConCupos(**datos).model_dump())

    reservas = db.query(ReservaClase).filter(
        ReservaClase.id_socio == socio.id_socio,
        ReservaClase.fecha_clase >= hoy
    ).order_by(ReservaClase.fecha_clase).all()

    return {
        "clases": clases_respuesta,
        "reservaciones": [ReservaClaseResponse.model_validate(r) for r in reservas],
    }


@router.post("/reservas", response_model=InscripcionResponse, status_code=status.HTTP_201_CREATED)
def reservar_clase(
    datos: ReservaSocioCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    socio: Socio = Depends(get_current_socio)
):
    reserva = servicio_reservas.inscribir_socio(
        db,
        datos.id_clase,
        socio.id_socio,
        datos.fecha_clase,
        notificar=partial(background_tasks.add_task, despachar_notificacion),
    )
    return {"message": "Inscripción exitosa", "id_reserva": reserva.id_reserva}


@router.delete("/reservas/{id_reserva}")
def cancelar_reserva(
    id_reserva: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    socio: Socio = Depends(get_current_socio)
):
    reserva = db.query(ReservaClase).options(
        joinedload(ReservaClase.clase).joinedload(Clase.entrenador)
    ).filter(
        ReservaClase.id_reserva == id_reserva,
        ReservaClase.id_socio == socio.id_socio
    ).first()
    if not reserva:
        raise NotFoundException("Reserva no encontrada")
    if reserva.estado == "Cancelada":
        raise HTTPException(status_code=400, detail="La reserva ya está cancelada")

    servicio_reservas.cambiar_estado_reserva(db, reserva, "Cancelada")

    clase = reserva.clase
    if clase is not None and clase.entrenador is not None:
        background_tasks.add_task(
            despachar_notificacion,
            tipo_usuario="Entrenador",
            usuario_id=clase.entrenador.id_usuario,
            tipo_evento="reserva_cancelada_socio",
            titulo="Reserva cancelada",
            mensaje=f"{socio.nombre_completo} canceló su reserva de {clase.nombre_clase} del {reserva.fecha_clase.isoformat()}.",
        )
    return {"message": "Reserva cancelada correctamente", "id_reserva": id_reserva}


@router.get("/membresia", response_model=MembresiaResponse)
def obtener_membresia(
    db: Session = Depends(get_db),
    socio: Socio = Depends(get_current_socio)
):
    """Membresía vigente o suspendida más reciente"""
    membresia = db.query(Membresia).filter(
        Membresia.id_socio == socio.id_socio,
        Membresia.estado.in_(("Vigente", "Suspendida"))
    ).order_by(Membresia.id_membresia.desc()).first()
    if not membresia:
        raise NotFoundException("No tienes una membresía activa")
    return membresia


@router.get("/credencial", response_model=CredencialResponse)
def obtener_credencial(socio: Socio = Depends(get_current_socio)):
    token = generar_token_credencial(socio.id_socio)
    logger.info(f"Credencial generada para socio {socio.id_socio}")
    return {"token": token, "qr_base64": generar_qr_base64(token)}


@router.get("/sesiones", response_model=List[SesionPersonalResponse])
def mis_sesiones(
    db: Session = Depends(get_db),
    socio: Socio = Depends(get_current_socio)
):
    """Sesiones personales del socio desde hoy, la más próxima primero"""
    sesiones = db.query(SesionPersonal).options(
        joinedload(SesionPersonal.entrenador).joinedload(Entrenador.usuario)
    ).filter(
        SesionPersonal.id_socio == socio.id_socio,
        SesionPersonal.fecha_sesion >= date.today()
    ).order_by(SesionPersonal.fecha_sesion, SesionPersonal.hora_inicio).all()

    respuesta = []
    for sesion in sesiones:
        item = SesionPersonalResponse.model_validate(sesion)
        item.nombre_entrenador = sesion.entrenador.nombre_completo if sesion.entrenador else None
        respuesta.append(item)
    return respuesta
