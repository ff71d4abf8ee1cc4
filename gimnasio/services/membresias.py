# gimnasio/services/membresias.py
"""
Acciones administrativas sobre membresías.

Cada acción deja una fila en historial_membresias_socios dentro de la misma
transacción que el cambio.
"""

import logging
from datetime import date, timedelta
from typing import List, Optional
from sqlalchemy.orm import Session
from gimnasio.core.exceptions import ConflictException, NotFoundException
from gimnasio.models.historial_membresia import HistorialMembresia
from gimnasio.models.membresia import Membresia
from gimnasio.models.socio import Socio

logger = logging.getLogger(__name__)


def _membresia_en_estado(db: Session, id_socio: int, *estados: str) -> Optional[Membresia]:
    return db.query(Membresia).filter(
        Membresia.id_socio == id_socio,
        Membresia.estado.in_(estados),
    ).order_by(Membresia.id_membresia.desc()).first()


def _verificar_socio(db: Session, id_socio: int) -> Socio:
    socio = db.query(Socio).filter(Socio.id_socio == id_socio).first()
    if not socio:
        raise NotFoundException("Socio no encontrado")
    return socio


def _registrar(
    db: Session,
    membresia: Membresia,
    accion: str,
    *,
    plan_anterior: Optional[str] = None,
    estado_anterior: Optional[str] = None,
    vencimiento_anterior: Optional[date] = None,
    motivo: Optional[str] = None,
    detalle: Optional[str] = None,
    registrado_por: Optional[int] = None,
):
    db.add(HistorialMembresia(
        id_socio=membresia.id_socio,
        id_membresia=membresia.id_membresia,
        accion=accion,
        plan_anterior=plan_anterior,
        plan_nuevo=membresia.plan,
        estado_anterior=estado_anterior,
        estado_nuevo=membresia.estado,
        vencimiento_anterior=vencimiento_anterior,
        vencimiento_nuevo=membresia.fecha_vencimiento,
        motivo=motivo,
        detalle=detalle,
        registrado_por=registrado_por,
    ))


def asignar_membresia(
    db: Session,
    id_socio: int,
    plan: str,
    duracion_dias: int,
    fecha_inicio: Optional[date] = None,
    registrado_por: Optional[int] = None,
) -> Membresia:
    _verificar_socio(db, id_socio)
    if _membresia_en_estado(db, id_socio, "Vigente"):
        raise ConflictException("El socio ya tiene una membresía vigente")

    fecha_inicio = fecha_inicio or date.today()
    membresia = Membresia(
        id_socio=id_socio,
        plan=plan,
        estado="Vigente",
        fecha_inicio=fecha_inicio,
        fecha_vencimiento=fecha_inicio + timedelta(days=duracion_dias),
    )
    db.add(membresia)
    db.flush()
    _registrar(
        db, membresia, "Asignada",
        detalle=f"Plan {plan} por {duracion_dias} días",
        registrado_por=registrado_por,
    )
    db.commit()
    logger.info(f"Membresía {membresia.id_membresia} ({plan}) asignada al socio {id_socio}")
    return membresia


def pausar_membresia(
    db: Session, id_socio: int, dias: int, motivo: Optional[str] = None, registrado_por: Optional[int] = None
) -> Membresia:
    membresia = _membresia_en_estado(db, id_socio, "Vigente")
    if not membresia:
        raise ConflictException("No existe membresía vigente para pausar")

    membresia.estado = "Suspendida"
    membresia.fecha_suspension = date.today()
    membresia.dias_suspension = dias
    membresia.motivo_estado = motivo
    _registrar(
        db, membresia, "Suspendida",
        plan_anterior=membresia.plan,
        estado_anterior="Vigente",
        vencimiento_anterior=membresia.fecha_vencimiento,
        motivo=motivo,
        detalle=f"Suspendida por {dias} días",
        registrado_por=registrado_por,
    )
    db.commit()
    logger.info(f"Membresía {membresia.id_membresia} suspendida por {dias} días")
    return membresia


def reanudar_membresia(
    db: Session, id_socio: int, extender_vencimiento: bool = True, registrado_por: Optional[int] = None
) -> Membresia:
    membresia = _membresia_en_estado(db, id_socio, "Suspendida")
    if not membresia:
        raise ConflictException("No hay membresía suspendida para reanudar")

    vencimiento_anterior = membresia.fecha_vencimiento
    dias = membresia.dias_suspension or 0
    if extender_vencimiento and dias > 0:
        membresia.fecha_vencimiento = membresia.fecha_vencimiento + timedelta(days=dias)

    membresia.estado = "Vigente"
    membresia.dias_suspension = None
    membresia.fecha_suspension = None
    _registrar(
        db, membresia, "Reanudada",
        plan_anterior=membresia.plan,
        estado_anterior="Suspendida",
        vencimiento_anterior=vencimiento_anterior,
        registrado_por=registrado_por,
    )
    db.commit()
    logger.info(f"Membresía {membresia.id_membresia} reanudada, vence {membresia.fecha_vencimiento}")
    return membresia


def cancelar_membresia(
    db: Session, id_socio: int, motivo: str, registrado_por: Optional[int] = None
) -> Membresia:
    membresia = _membresia_en_estado(db, id_socio, "Vigente", "Suspendida")
    if not membresia:
        raise ConflictException("No existe membresía vigente/suspendida para cancelar")

    estado_anterior = membresia.estado
    membresia.estado = "Cancelada"
    membresia.motivo_estado = motivo
    _registrar(
        db, membresia, "Cancelada",
        plan_anterior=membresia.plan,
        estado_anterior=estado_anterior,
        vencimiento_anterior=membresia.fecha_vencimiento,
        motivo=motivo,
        registrado_por=registrado_por,
    )
    db.commit()
    logger.info(f"Membresía {membresia.id_membresia} cancelada: {motivo}")
    return membresia


def cambiar_plan(
    db: Session,
    id_socio: int,
    plan_nuevo: str,
    duracion_dias: Optional[int] = None,
    mantener_fechas: bool = False,
    motivo: Optional[str] = None,
    registrado_por: Optional[int] = None,
) -> Membresia:
    """
    Cambia el plan de la membresía vigente o suspendida del socio.

    Con `mantener_fechas` solo cambia el plan; si no, la membresía arranca hoy
    y vence a los `duracion_dias` días.
    """
    _verificar_socio(db, id_socio)
    membresia = _membresia_en_estado(db, id_socio, "Vigente", "Suspendida")
    if not membresia:
        raise ConflictException("No existe membresía vigente/suspendida para cambiar de plan")
    if not mantener_fechas and not duracion_dias:
        raise ValueError("Se requiere la duración del nuevo plan si no se mantienen las fechas")

    plan_anterior = membresia.plan
    vencimiento_anterior = membresia.fecha_vencimiento
    if not mantener_fechas:
        membresia.fecha_inicio = date.today()
        membresia.fecha_vencimiento = membresia.fecha_inicio + timedelta(days=duracion_dias)
    membresia.plan = plan_nuevo

    detalle = f'Plan cambiado de "{plan_anterior}" a "{plan_nuevo}"'
    if mantener_fechas:
        detalle += " manteniendo fechas"
    _registrar(
        db, membresia, "Cambiada",
        plan_anterior=plan_anterior,
        estado_anterior=membresia.estado,
        vencimiento_anterior=vencimiento_anterior,
        motivo=motivo,
        detalle=detalle,
        registrado_por=registrado_por,
    )
    db.commit()
    logger.info(f"Membresía {membresia.id_membresia}: {detalle}")
    return membresia


def historial_membresias(db: Session, id_socio: int) -> List[Membresia]:
    _verificar_socio(db, id_socio)
    return db.query(Membresia).filter(
        Membresia.id_socio == id_socio
    ).order_by(Membresia.id_membresia.desc()).all()


def historial_acciones(db: Session, id_socio: int) -> List[HistorialMembresia]:
    """Bitácora del socio, la acción más reciente primero"""
    _verificar_socio(db, id_socio)
    return db.query(HistorialMembresia).filter(
        HistorialMembresia.id_socio == id_socio
    ).order_by(HistorialMembresia.id_historial.desc()).all()
