# gimnasio/routers/entrenador.py
# Gestión de clases grupales, sus reservas y las sesiones personales del entrenador

import logging
from datetime import date
from functools import partial
from typing import List, Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy import and_
from sqlalchemy.orm import Session, joinedload
from gimnasio.database import get_db
from gimnasio.core.exceptions import ConflictException, ForbiddenException
from gimnasio.core.security import get_current_entrenador
from gimnasio.models.clase import Clase
from gimnasio.models.entrenador import Entrenador
from gimnasio.models.reserva_clase import ReservaClase, ESTADOS_RESERVA
from gimnasio.models.sesion_personal import SesionPersonal, ESTADOS_SESION
from gimnasio.schemas.clase import ClaseCreate, ClaseUpdate, ClaseResponse, ClaseConCupos
from gimnasio.schemas.reserva_clase import (
    InscripcionCreate,
    InscripcionResponse,
    ReservaEstadoUpdate,
    CambioEstadoResponse,
    ReservaClaseResponse,
)
from gimnasio.schemas.sesion_personal import SesionPersonalCreate, SesionEstadoUpdate, SesionPersonalResponse
from gimnasio.services import reservas as servicio_reservas
from gimnasio.services import sesiones as servicio_sesiones
from gimnasio.services.horario import construir_grilla
from gimnasio.services.notificaciones import despachar_notificacion

logger = logging.getLogger(__name__)
router = APIRouter()


def _clase_propia(db: Session, id_clase: int, entrenador: Entrenador) -> Clase:
    clase = db.query(Clase).filter(
        Clase.id_clase == id_clase,
        Clase.id_entrenador == entrenador.id_entrenador
    ).first()
    if not clase:
        raise ForbiddenException("No autorizado para gestionar esta clase")
    return clase


def _hay_solapamiento(db: Session, id_entrenador: int, dia_semana: str, hora_inicio, hora_fin, excluir_id: Optional[int] = None) -> bool:
    query = db.query(Clase.id_clase).filter(
        Clase.id_entrenador == id_entrenador,
        Clase.dia_semana == dia_semana,
        Clase.activa == True,  # noqa: E712
        and_(Clase.hora_inicio < hora_fin, Clase.hora_fin > hora_inicio)
    )
    if excluir_id is not None:
        query = query.filter(Clase.id_clase != excluir_id)
    return query.first() is not None


def _reserva_a_respuesta(reserva: ReservaClase) -> ReservaClaseResponse:
    respuesta = ReservaClaseResponse.model_validate(reserva)
    if reserva.socio is not None:
        respuesta.nombre_socio = reserva.socio.nombre_completo
        respuesta.email_socio = reserva.socio.email
    return respuesta


# ========== CLASES ==========

@router.get("/clases", response_model=List[ClaseConCupos])
def listar_clases(
    fecha_clase: Optional[date] = None,
    db: Session = Depends(get_db),
    entrenador: Entrenador = Depends(get_current_entrenador)
):
    """
    Clases activas y no expiradas del entrenador.
    Con `fecha_clase` los cupos se calculan para esa fecha; sin ella,
    `cupos_ocupados` suma las reservas activas desde hoy.
    """
    hoy = date.today()
    clases = db.query(Clase).filter(
        Clase.id_entrenador == entrenador.id_entrenador,
        Clase.activa == True,  # noqa: E712
        (Clase.fecha_fin.is_(None)) | (Clase.fecha_fin >= hoy)
    ).order_by(Clase.dia_semana, Clase.hora_inicio).all()

    resultado = []
    for clase in clases:
        datos = ClaseResponse.model_validate(clase).model_dump()
        if fecha_clase:
            ocupados = servicio_reservas.contar_cupos_ocupados(db, clase.id_clase, fecha_clase)
            datos["cupos_disponibles"] = max(clase.cupo_maximo - ocupados, 0)
        else:
            ocupados = db.query(ReservaClase).filter(
                ReservaClase.id_clase == clase.id_clase,
                ReservaClase.fecha_clase >= hoy,
                ReservaClase.estado.in_(("Reservada", "Asistió", "Reprogramada"))
            ).count()
        datos["cupos_ocupados"] = ocupados
        datos["nombre_entrenador"] = entrenador.nombre_completo
        resultado.append(ClaseConCupos(**datos))
    return resultado


@router.post("/clases", response_model=ClaseResponse, status_code=status.HTTP_201_CREATED)
def crear_clase(
    clase_data: ClaseCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    entrenador: Entrenador = Depends(get_current_entrenador)
):
    if _hay_solapamiento(db, entrenador.id_entrenador, clase_data.dia_semana, clase_data.hora_inicio, clase_data.hora_fin):
        raise ConflictException("Ya tienes otra clase programada en este horario.")

    clase = Clase(**clase_data.model_dump(), id_entrenador=entrenador.id_entrenador, activa=True)
    mensaje = f"{entrenador.nombre_completo} creó la clase {clase.nombre_clase} ({clase.dia_semana} {clase.hora_inicio.strftime('%H:%M')})."
    db.add(clase)
    db.commit()
    logger.info(f"Clase {clase.id_clase} '{clase.nombre_clase}' creada por entrenador {entrenador.id_entrenador}")

    background_tasks.add_task(
        despachar_notificacion,
        tipo_usuario="Admin",
        tipo_evento="clase_creada",
        titulo="Nueva clase",
        mensaje=mensaje,
    )
    return clase


@router.put("/clases/{id_clase}", response_model=ClaseResponse)
def actualizar_clase(
    id_clase: int,
    clase_data: ClaseUpdate,
    db: Session = Depends(get_db),
    entrenador: Entrenador = Depends(get_current_entrenador)
):
    clase = _clase_propia(db, id_clase, entrenador)
    cambios = clase_data.model_dump(exclude_unset=True)

    dia = cambios.get("dia_semana", clase.dia_semana)
    hora_inicio = cambios.get("hora_inicio", clase.hora_inicio)
    hora_fin = cambios.get("hora_fin", clase.hora_fin)
    fecha_inicio = cambios.get("fecha_inicio", clase.fecha_inicio)
    fecha_fin = cambios.get("fecha_fin", clase.fecha_fin)

    if hora_fin <= hora_inicio:
        raise HTTPException(status_code=400, detail="La hora de fin debe ser posterior a la de inicio")
    if fecha_inicio and fecha_fin and fecha_fin < fecha_inicio:
        raise HTTPException(status_code=400, detail="La fecha de fin no puede ser anterior a la de inicio")
    if cambios.get("activa", clase.activa) and _hay_solapamiento(
        db, entrenador.id_entrenador, dia, hora_inicio, hora_fin, excluir_id=clase.id_clase
    ):
        raise ConflictException("Ya tienes otra clase programada en este horario.")

    for campo, valor in cambios.items():
        setattr(clase, campo, valor)

    db.commit()
    logger.info(f"Clase {id_clase} actualizada. Campos: {list(cambios)}")
    return clase


@router.delete("/clases/{id_clase}")
def eliminar_clase(
    id_clase: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    entrenador: Entrenador = Depends(get_current_entrenador)
):
    """Desactiva la clase; sus reservas se conservan"""
    clase = _clase_propia(db, id_clase, entrenador)
    if not clase.activa:
        raise HTTPException(status_code=400, detail="La clase ya está desactivada")

    mensaje = f"{entrenador.nombre_completo} eliminó la clase {clase.nombre_clase}."
    clase.activa = False
    db.commit()
    logger.info(f"Clase {id_clase} desactivada por entrenador {entrenador.id_entrenador}")

    background_tasks.add_task(
        despachar_notificacion,
        tipo_usuario="Admin",
        tipo_evento="clase_eliminada",
        titulo="Clase eliminada",
        mensaje=mensaje,
    )
    return {"message": "Clase grupal eliminada.", "id_clase": id_clase}


@router.get("/horario")
def horario_semanal(
    db: Session = Depends(get_db),
    entrenador: Entrenador = Depends(get_current_entrenador)
):
    clases = db.query(Clase).filter(
        Clase.id_entrenador == entrenador.id_entrenador,
        Clase.activa == True  # noqa: E712
    ).all()
    return {"bloques": construir_grilla(clases)}


# ========== RESERVAS DE UNA CLASE ==========

@router.get("/clases/{id_clase}/reservas", response_model=List[ReservaClaseResponse])
def listar_reservas_clase(
    id_clase: int,
    fecha_clase: Optional[date] = None,
    db: Session = Depends(get_db),
    entrenador: Entrenador = Depends(get_current_entrenador)
):
    _clase_propia(db, id_clase, entrenador)

    query = db.query(ReservaClase).options(
        joinedload(ReservaClase.socio)
    ).filter(ReservaClase.id_clase == id_clase)
    if fecha_clase:
        query = query.filter(ReservaClase.fecha_clase == fecha_clase)

    reservas = query.order_by(ReservaClase.fecha_clase, ReservaClase.id_reserva).all()
    return [_reserva_a_respuesta(r) for r in reservas]


@router.post("/clases/{id_clase}/reservas", response_model=InscripcionResponse, status_code=status.HTTP_201_CREATED)
def inscribir_socio(
    id_clase: int,
    inscripcion: InscripcionCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    entrenador: Entrenador = Depends(get_current_entrenador)
):
    """
    Inscribe a un socio en una fecha concreta de la clase.
    Los rechazos (ReservaError) se convierten en respuesta en main.py.
    """
    reserva = servicio_reservas.inscribir_socio(
        db,
        id_clase,
        inscripcion.id_socio,
        inscripcion.fecha_clase,
        id_entrenador=entrenador.id_entrenador,
        notificar=partial(background_tasks.add_task, despachar_notificacion),
    )
    return {"message": "Inscripción exitosa", "id_reserva": reserva.id_reserva}


def _reserva_de_clase_propia(db: Session, id_clase: int, id_reserva: int, entrenador: Entrenador) -> ReservaClase:
    reserva = db.query(ReservaClase).join(Clase).filter(
        ReservaClase.id_reserva == id_reserva,
        ReservaClase.id_clase == id_clase,
        Clase.id_entrenador == entrenador.id_entrenador
    ).first()
    if not reserva:
        raise ForbiddenException("No autorizado para modificar esta reserva")
    return reserva


@router.put("/clases/{id_clase}/reservas/{id_reserva}", response_model=CambioEstadoResponse)
def actualizar_estado_reserva(
    id_clase: int,
    id_reserva: int,
    datos: ReservaEstadoUpdate,
    db: Session = Depends(get_db),
    entrenador: Entrenador = Depends(get_current_entrenador)
):
    if datos.estado not in ESTADOS_RESERVA:
        raise HTTPException(
            status_code=400,
            detail=f"Estado inválido. Debe ser uno de: {', '.join(ESTADOS_RESERVA)}"
        )

    reserva = _reserva_de_clase_propia(db, id_clase, id_reserva, entrenador)
    nombre_socio = reserva.socio.nombre_completo if reserva.socio else ""

    estado_anterior = servicio_reservas.cambiar_estado_reserva(db, reserva, datos.estado)

    return {
        "message": "Estado actualizado correctamente",
        "socio": nombre_socio,
        "estado_anterior": estado_anterior,
        "estado_nuevo": datos.estado,
    }


@router.delete("/clases/{id_clase}/reservas/{id_reserva}")
def eliminar_reserva(
    id_clase: int,
    id_reserva: int,
    db: Session = Depends(get_db),
    entrenador: Entrenador = Depends(get_current_entrenador)
):
    reserva = _reserva_de_clase_propia(db, id_clase, id_reserva, entrenador)
    db.delete(reserva)
    db.commit()
    logger.info(f"Reserva {id_reserva} eliminada por entrenador {entrenador.id_entrenador}")
    return {"message": "Reserva eliminada correctamente"}


# ========== SESIONES PERSONALES ==========

def _sesion_propia(db: Session, id_sesion: int, entrenador: Entrenador) -> SesionPersonal:
    sesion = db.query(SesionPersonal).options(joinedload(SesionPersonal.socio)).filter(
        SesionPersonal.id_sesion == id_sesion,
        SesionPersonal.id_entrenador == entrenador.id_entrenador
    ).first()
    if not sesion:
        raise ForbiddenException("No autorizado para gestionar esta sesión")
    return sesion


def _sesion_a_respuesta(sesion: SesionPersonal) -> SesionPersonalResponse:
    respuesta = SesionPersonalResponse.model_validate(sesion)
    if sesion.socio is not None:
        respuesta.nombre_socio = sesion.socio.nombre_completo
    return respuesta


@router.get("/sesiones", response_model=List[SesionPersonalResponse])
def listar_sesiones(
    estado: Optional[str] = None,
    desde: Optional[date] = None,
    db: Session = Depends(get_db),
    entrenador: Entrenador = Depends(get_current_entrenador)
):
    query = db.query(SesionPersonal).options(joinedload(SesionPersonal.socio)).filter(
        SesionPersonal.id_entrenador == entrenador.id_entrenador
    )
    if estado:
        query = query.filter(SesionPersonal.estado == estado)
    if desde:
        query = query.filter(SesionPersonal.fecha_sesion >= desde)

    sesiones = query.order_by(SesionPersonal.fecha_sesion.desc(), SesionPersonal.hora_inicio.desc()).all()
    return [_sesion_a_respuesta(s) for s in sesiones]


@router.post("/sesiones", response_model=SesionPersonalResponse, status_code=status.HTTP_201_CREATED)
def agendar_sesion(
    datos: SesionPersonalCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    entrenador: Entrenador = Depends(get_current_entrenador)
):
    nombre_entrenador = entrenador.nombre_completo
    sesion = servicio_sesiones.agendar_sesion(
        db,
        entrenador.id_entrenador,
        datos.id_socio,
        datos.fecha_sesion,
        datos.hora_inicio,
        datos.hora_fin,
        datos.notas,
    )

    background_tasks.add_task(
        despachar_notificacion,
        tipo_usuario="Socio",
        usuario_id=sesion.id_socio,
        tipo_evento="sesion_agendada",
        titulo="Sesión personal agendada",
        mensaje=(
            f"{nombre_entrenador} agendó una sesión personal el {sesion.fecha_sesion.isoformat()} "
            f"de {sesion.hora_inicio.strftime('%H:%M')} a {sesion.hora_fin.strftime('%H:%M')}."
        ),
    )
    respuesta = _sesion_a_respuesta(sesion)
    respuesta.nombre_entrenador = nombre_entrenador
    return respuesta


@router.patch("/sesiones/{id_sesion}/estado", response_model=CambioEstadoResponse)
def actualizar_estado_sesion(
    id_sesion: int,
    datos: SesionEstadoUpdate,
    db: Session = Depends(get_db),
    entrenador: Entrenador = Depends(get_current_entrenador)
):
    if datos.estado not in ESTADOS_SESION:
        raise HTTPException(
            status_code=400,
            detail=f"Estado inválido. Debe ser uno de: {', '.join(ESTADOS_SESION)}"
        )

    sesion = _sesion_propia(db, id_sesion, entrenador)
    nombre_socio = sesion.socio.nombre_completo if sesion.socio else ""

    estado_anterior = servicio_sesiones.cambiar_estado_sesion(db, sesion, datos.estado)

    return {
        "message": "Estado actualizado correctamente",
        "socio": nombre_socio,
        "estado_anterior": estado_anterior,
        "estado_nuevo": datos.estado,
    }


@router.delete("/sesiones/{id_sesion}")
def cancelar_sesion(
    id_sesion: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    entrenador: Entrenador = Depends(get_current_entrenador)
):
    """Cancela una sesión Agendada y avisa al socio y a administración"""
    sesion = _sesion_propia(db, id_sesion, entrenador)
    nombre_entrenador = entrenador.nombre_completo
    nombre_socio = sesion.socio.nombre_completo if sesion.socio else f"socio {sesion.id_socio}"
    id_socio = sesion.id_socio
    fecha = sesion.fecha_sesion.isoformat()
    horario = f"{sesion.hora_inicio.strftime('%H:%M')} a {sesion.hora_fin.strftime('%H:%M')}"

    servicio_sesiones.cancelar_sesion(db, sesion)

    background_tasks.add_task(
        despachar_notificacion,
        tipo_usuario="Socio",
        usuario_id=id_socio,
        tipo_evento="sesion_cancelada_entrenador",
        titulo="Sesión personal cancelada",
        mensaje=f"{nombre_entrenador} ha cancelado tu sesión personal del {fecha} de {horario}.",
    )
    background_tasks.add_task(
        despachar_notificacion,
        tipo_usuario="Admin",
        tipo_evento="sesion_cancelada_entrenador",
        titulo="Sesión personal cancelada",
        mensaje=f"{nombre_entrenador} ha cancelado su sesión personal con {nombre_socio} del {fecha}.",
    )
    return {"message": "Sesión personal cancelada", "id_sesion": id_sesion}
