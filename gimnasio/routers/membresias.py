from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session
from gimnasio.database import get_db
from gimnasio.core.security import require_roles
from gimnasio.models.usuario import Usuario
from gimnasio.schemas.membresia import (
    MembresiaAsignar,
    MembresiaPausar,
    MembresiaReanudar,
    MembresiaCancelar,
    MembresiaCambiarPlan,
    MembresiaResponse,
    HistorialMembresiaResponse,
)
from gimnasio.services import membresias as servicio_membresias
from gimnasio.services.notificaciones import despachar_notificacion

router = APIRouter()


def _avisar_socio(background_tasks: BackgroundTasks, id_socio: int, tipo_evento: str, titulo: str, mensaje: str):
    background_tasks.add_task(
        despachar_notificacion,
        tipo_usuario="Socio",
        usuario_id=id_socio,
        tipo_evento=tipo_evento,
        titulo=titulo,
        mensaje=mensaje,
    )


@router.post("/asignar", response_model=MembresiaResponse, status_code=status.HTTP_201_CREATED)
def asignar_membresia(
    datos: MembresiaAsignar,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: Usuario = Depends(require_roles("admin"))
):
    membresia = servicio_membresias.asignar_membresia(
        db, datos.id_socio, datos.plan, datos.duracion_dias, datos.fecha_inicio,
        registrado_por=admin.id_usuario,
    )
    _avisar_socio(
        background_tasks, datos.id_socio, "membresia_asignada", "Membresía asignada",
        f"Se te asignó el plan {membresia.plan}, vigente hasta el {membresia.fecha_vencimiento.isoformat()}."
    )
    return membresia


@router.post("/pausar", response_model=MembresiaResponse)
def pausar_membresia(
    datos: MembresiaPausar,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: Usuario = Depends(require_roles("admin"))
):
    membresia = servicio_membresias.pausar_membresia(
        db, datos.id_socio, datos.dias, datos.motivo, registrado_por=admin.id_usuario
    )
    _avisar_socio(
        background_tasks, datos.id_socio, "membresia_actualizada", "Membresía suspendida",
        f"Tu membresía quedó suspendida por {datos.dias} días."
    )
    return membresia


@router.post("/reanudar", response_model=MembresiaResponse)
def reanudar_membresia(
    datos: MembresiaReanudar,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: Usuario = Depends(require_roles("admin"))
):
    membresia = servicio_membresias.reanudar_membresia(
        db, datos.id_socio, datos.extender_vencimiento, registrado_por=admin.id_usuario
    )
    _avisar_socio(
        background_tasks, datos.id_socio, "membresia_actualizada", "Membresía reanudada",
        f"Tu membresía está vigente nuevamente hasta el {membresia.fecha_vencimiento.isoformat()}."
    )
    return membresia


@router.post("/cancelar", response_model=MembresiaResponse)
def cancelar_membresia(
    datos: MembresiaCancelar,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: Usuario = Depends(require_roles("admin"))
):
    membresia = servicio_membresias.cancelar_membresia(
        db, datos.id_socio, datos.motivo, registrado_por=admin.id_usuario
    )
    _avisar_socio(
        background_tasks, datos.id_socio, "membresia_actualizada", "Membresía cancelada",
        f"Tu membresía fue cancelada. Motivo: {datos.motivo}"
    )
    return membresia


@router.post("/cambiar", response_model=MembresiaResponse)
def cambiar_plan(
    datos: MembresiaCambiarPlan,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    admin: Usuario = Depends(require_roles("admin"))
):
    membresia = servicio_membresias.cambiar_plan(
        db,
        datos.id_socio,
        datos.plan,
        duracion_dias=datos.duracion_dias,
        mantener_fechas=datos.mantener_fechas,
        motivo=datos.motivo,
        registrado_por=admin.id_usuario,
    )
    _avisar_socio(
        background_tasks, datos.id_socio, "membresia_actualizada", "Plan actualizado",
        f"Tu membresía cambió al plan {membresia.plan}, vigente hasta el {membresia.fecha_vencimiento.isoformat()}."
    )
    return membresia


@router.get("/socio/{id_socio}", response_model=List[MembresiaResponse])
def historial_membresias(
    id_socio: int,
    db: Session = Depends(get_db),
    admin: Usuario = Depends(require_roles("admin"))
):
    return servicio_membresias.historial_membresias(db, id_socio)


@router.get("/socio/{id_socio}/historial", response_model=List[HistorialMembresiaResponse])
def historial_acciones(
    id_socio: int,
    db: Session = Depends(get_db),
    admin: Usuario = Depends(require_roles("admin"))
):
    """Bitácora de acciones sobre las membresías del socio"""
    return servicio_membresias.historial_acciones(db, id_socio)
