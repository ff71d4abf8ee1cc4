# gimnasio/services/reservas.py
"""
Admisión de reservas a clases grupales.

Toda la admisión corre en una sola transacción con la fila de la clase
bloqueada (SELECT ... FOR UPDATE): dos inscripciones simultáneas a la misma
clase se serializan, y el conteo de cupos de la segunda ya ve el INSERT de la
primera. El índice único parcial de reserva_clase respalda la regla de
duplicados a nivel de base de datos.
"""

import logging
from datetime import date, datetime
from typing import Callable, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from gimnasio.core.exceptions import (
    ClaseNoDisponible,
    CupoAgotado,
    ReservaDuplicada,
    MembresiaNoVigente,
    ErrorAlmacenamiento,
    ReservaError,
)
from gimnasio.models.clase import Clase
from gimnasio.models.entrenador import Entrenador
from gimnasio.models.membresia import Membresia
from gimnasio.models.reserva_clase import ReservaClase, ESTADOS_RESERVA, ESTADOS_SIN_CUPO
from gimnasio.models.socio import Socio

logger = logging.getLogger(__name__)

Notificador = Callable[..., None]


# ========== VALIDACIÓN DE MEMBRESÍA ==========

def membresia_habilitante(
    db: Session, id_socio: int, fecha_clase: date, hoy: Optional[date] = None
) -> Optional[Membresia]:
    """
    Devuelve la membresía que habilita al socio para la fecha dada, o None.

    Habilita una membresía 'Vigente' cuyo vencimiento no es anterior ni a
    hoy ni a la fecha de la clase.
    """
    hoy = hoy or date.today()
    limite = max(hoy, fecha_clase)
    return db.query(Membresia).filter(
        Membresia.id_socio == id_socio,
        Membresia.estado == "Vigente",
        Membresia.fecha_vencimiento >= limite,
    ).order_by(Membresia.fecha_vencimiento.desc()).first()


# ========== CUPOS ==========

def contar_cupos_ocupados(db: Session, id_clase: int, fecha_clase: date) -> int:
    return db.query(func.count(ReservaClase.id_reserva)).filter(
        ReservaClase.id_clase == id_clase,
        ReservaClase.fecha_clase == fecha_clase,
        ReservaClase.estado.notin_(ESTADOS_SIN_CUPO),
    ).scalar() or 0


def cupos_disponibles(db: Session, clase: Clase, fecha_clase: date) -> int:
    ocupados = contar_cupos_ocupados(db, clase.id_clase, fecha_clase)
    return max(clase.cupo_maximo - ocupados, 0)


# ========== DUPLICADOS ==========

def existe_reserva_duplicada(db: Session, id_clase: int, id_socio: int, fecha_clase: date) -> bool:
    return db.query(ReservaClase.id_reserva).filter(
        ReservaClase.id_clase == id_clase,
        ReservaClase.id_socio == id_socio,
        ReservaClase.fecha_clase == fecha_clase,
        ReservaClase.estado != "Cancelada",
    ).first() is not None


# ========== ORQUESTACIÓN ==========

def _bloquear_clase(db: Session, id_clase: int) -> Optional[Clase]:
    return db.query(Clase).filter(Clase.id_clase == id_clase).with_for_update().first()


def _emitir(notificar: Optional[Notificador], **datos):
    if notificar is None:
        return
    try:
        notificar(**datos)
    except Exception:
        # La reserva ya está confirmada; una notificación fallida no la revierte
        logger.exception(f"Fallo al emitir notificación '{datos.get('tipo_evento')}'")


def inscribir_socio(
    db: Session,
    id_clase: int,
    id_socio: int,
    fecha_clase: date,
    *,
    id_entrenador: Optional[int] = None,
    hoy: Optional[date] = None,
    notificar: Optional[Notificador] = None,
) -> ReservaClase:
    """
    Inscribe a un socio en la ocurrencia `fecha_clase` de una clase.

    Si se pasa `id_entrenador`, la clase debe pertenecerle. Orden de
    validación: disponibilidad de la clase, cupo, duplicado, membresía.
    Cualquier rechazo deshace la transacción y levanta una subclase de
    ReservaError. Tras confirmar, se avisa al entrenador mediante `notificar`
    sin que un fallo allí afecte a la reserva.
    """
    try:
        clase = _bloquear_clase(db, id_clase)
        if clase is None or not clase.activa:
            raise ClaseNoDisponible()
        if id_entrenador is not None and clase.id_entrenador != id_entrenador:
            raise ClaseNoDisponible()
        if not clase.disponible_en(fecha_clase):
            raise ClaseNoDisponible(status_code=400)

        ocupados = contar_cupos_ocupados(db, id_clase, fecha_clase)
        if ocupados >= clase.cupo_maximo:
            raise CupoAgotado()

        if existe_reserva_duplicada(db, id_clase, id_socio, fecha_clase):
            raise ReservaDuplicada()

        if membresia_habilitante(db, id_socio, fecha_clase, hoy=hoy) is None:
            raise MembresiaNoVigente()

        socio = db.query(Socio).filter(Socio.id_socio == id_socio).first()
        entrenador = db.query(Entrenador).filter(Entrenador.id_entrenador == clase.id_entrenador).first()

        reserva = ReservaClase(
            id_clase=id_clase,
            id_socio=id_socio,
            fecha_clase=fecha_clase,
            estado="Reservada",
            fecha_reserva=datetime.now(),
        )
        db.add(reserva)
        db.commit()
    except ReservaError as e:
        db.rollback()
        logger.info(f"Inscripción rechazada clase={id_clase} socio={id_socio} fecha={fecha_clase}: {e.categoria}")
        raise
    except IntegrityError as exc:
        # Otra transacción insertó la misma reserva entre el chequeo y el INSERT
        db.rollback()
        logger.warning(f"Reserva duplicada detectada por la base de datos: clase={id_clase} socio={id_socio}")
        raise ReservaDuplicada() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Error de base de datos al inscribir socio {id_socio} en clase {id_clase}: {exc}")
        raise ErrorAlmacenamiento() from exc

    logger.info(
        f"Reserva {reserva.id_reserva} creada: clase={id_clase} socio={id_socio} fecha={fecha_clase} "
        f"({ocupados + 1}/{clase.cupo_maximo})"
    )

    nombre_socio = socio.nombre_completo if socio else f"socio {id_socio}"
    if id_entrenador is not None:
        mensaje = f"Inscribiste a {nombre_socio} para la clase del {fecha_clase.isoformat()}."
    else:
        mensaje = f"{nombre_socio} reservó {clase.nombre_clase} para el {fecha_clase.isoformat()}."

    _emitir(
        notificar,
        tipo_usuario="Entrenador",
        usuario_id=entrenador.id_usuario if entrenador else None,
        tipo_evento="inscripcion_clase",
        titulo="Nueva Inscripción",
        mensaje=mensaje,
    )
    return reserva


# ========== CAMBIOS DE ESTADO ==========

def cambiar_estado_reserva(db: Session, reserva: ReservaClase, nuevo_estado: str) -> str:
    """
    Cambia el estado de una reserva y devuelve el estado anterior.

    El estado anterior se relee de la base con la fila bloqueada, así que una
    copia en memoria desactualizada no decide la transición. Volver a un
    estado que ocupa cupo (desde Cancelada o NoAsistió) repite la validación
    de cupo con la clase bloqueada; reactivar una cancelada que duplicaría
    otra reserva activa se rechaza.
    """
    if nuevo_estado not in ESTADOS_RESERVA:
        raise ValueError(f"Estado inválido: {nuevo_estado}")

    id_reserva = reserva.id_reserva
    try:
        # Misma secuencia de bloqueos que inscribir_socio: primero la clase
        clase = None
        if nuevo_estado not in ESTADOS_SIN_CUPO:
            clase = _bloquear_clase(db, reserva.id_clase)
        db.refresh(reserva, attribute_names=["estado"], with_for_update=True)

        estado_anterior = reserva.estado
        if estado_anterior == nuevo_estado:
            db.commit()
            return estado_anterior

        if clase is not None and estado_anterior in ESTADOS_SIN_CUPO:
            ocupados = contar_cupos_ocupados(db, reserva.id_clase, reserva.fecha_clase)
            if ocupados >= clase.cupo_maximo:
                raise CupoAgotado()

        if estado_anterior == "Cancelada":
            otra_activa = db.query(ReservaClase.id_reserva).filter(
                ReservaClase.id_clase == reserva.id_clase,
                ReservaClase.id_socio == reserva.id_socio,
                ReservaClase.fecha_clase == reserva.fecha_clase,
                ReservaClase.estado != "Cancelada",
                ReservaClase.id_reserva != id_reserva,
            ).first()
            if otra_activa:
                raise ReservaDuplicada()

        reserva.estado = nuevo_estado
        db.commit()
    except ReservaError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        raise ReservaDuplicada() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Error al actualizar reserva {id_reserva}: {exc}")
        raise ErrorAlmacenamiento("Error al actualizar estado") from exc

    logger.info(f"Estado de reserva {id_reserva} actualizado: {estado_anterior} → {nuevo_estado}")
    return estado_anterior
