# gimnasio/services/notificaciones.py

import logging
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from gimnasio.config import settings
from gimnasio.database import SessionLocal
from gimnasio.models.entrenador import Entrenador
from gimnasio.models.notificacion import Notificacion
from gimnasio.models.socio import Socio
from gimnasio.models.usuario import Usuario

logger = logging.getLogger(__name__)

TIPOS_EVENTO = (
    "clase_creada",
    "clase_eliminada",
    "inscripcion_clase",
    "reserva_cancelada_socio",
    "membresia_asignada",
    "membresia_actualizada",
    "sesion_agendada",
    "sesion_cancelada_entrenador",
    "aviso_general",
)


def _recortar_bandeja(db: Session, tipo_usuario: str, usuario_id: Optional[int]):
    """Conserva solo las notificaciones más recientes de una bandeja"""
    maximo = settings.NOTIFICACIONES_MAX_POR_USUARIO
    query = db.query(Notificacion.id_notificacion).filter(Notificacion.tipo_usuario == tipo_usuario)
    if usuario_id is None:
        query = query.filter(Notificacion.usuario_id.is_(None))
    else:
        query = query.filter(Notificacion.usuario_id == usuario_id)

    sobrantes = [
        fila.id_notificacion
        for fila in query.order_by(Notificacion.id_notificacion.desc()).offset(maximo).all()
    ]
    if sobrantes:
        db.query(Notificacion).filter(
            Notificacion.id_notificacion.in_(sobrantes)
        ).delete(synchronize_session=False)
        logger.info(f"Bandeja {tipo_usuario}/{usuario_id}: {len(sobrantes)} notificaciones antiguas eliminadas")


def _destinatarios_broadcast(db: Session, tipo_usuario: str) -> List[int]:
    if tipo_usuario == "Socio":
        filas = db.query(Socio.id_socio).filter(Socio.estado_socio == "Activo").all()
    else:
        filas = db.query(Entrenador.id_usuario).filter(Entrenador.activo == True).all()  # noqa: E712
    return [fila[0] for fila in filas]


def crear_notificacion(
    db: Session,
    tipo_usuario: str,
    tipo_evento: str,
    titulo: str,
    mensaje: str,
    usuario_id: Optional[int] = None,
) -> int:
    """
    Inserta la notificación (sin confirmar la transacción) y devuelve cuántas
    se crearon. Una notificación para socios o entrenadores sin usuario_id se
    replica a todos los activos de ese tipo.
    """
    if tipo_evento not in TIPOS_EVENTO:
        raise ValueError(f"Tipo de evento desconocido: {tipo_evento}")

    if tipo_usuario in ("Socio", "Entrenador") and usuario_id is None:
        destinatarios = _destinatarios_broadcast(db, tipo_usuario)
        for destinatario in destinatarios:
            db.add(Notificacion(
                tipo_usuario=tipo_usuario,
                usuario_id=destinatario,
                tipo_evento=tipo_evento,
                titulo=titulo,
                mensaje=mensaje,
            ))
        db.flush()
        for destinatario in destinatarios:
            _recortar_bandeja(db, tipo_usuario, destinatario)
        logger.info(f"Notificación broadcast para {len(destinatarios)} destinatarios {tipo_usuario}: {titulo}")
        return len(destinatarios)

    db.add(Notificacion(
        tipo_usuario=tipo_usuario,
        usuario_id=usuario_id,
        tipo_evento=tipo_evento,
        titulo=titulo,
        mensaje=mensaje,
    ))
    db.flush()
    _recortar_bandeja(db, tipo_usuario, usuario_id)
    logger.info(f"Notificación creada para {tipo_usuario}/{usuario_id}: {titulo}")
    return 1


def despachar_notificacion(**datos) -> bool:
    """
    Envío fire-and-forget: usa su propia sesión y nunca propaga errores.
    Pensado para correr como tarea en segundo plano después de la respuesta.
    """
    db = SessionLocal()
    try:
        crear_notificacion(db, **datos)
        db.commit()
        return True
    except Exception:
        db.rollback()
        logger.exception(f"No se pudo registrar la notificación: {datos.get('titulo')}")
        return False
    finally:
        db.close()


def destinatario_de(db: Session, usuario: Usuario) -> Tuple[str, Optional[int]]:
    """Bandeja (tipo_usuario, usuario_id) que corresponde a un usuario autenticado"""
    if usuario.rol in ("admin", "recepcion"):
        return "Admin", None
    if usuario.rol == "entrenador":
        return "Entrenador", usuario.id_usuario
    socio = db.query(Socio).filter(Socio.id_usuario == usuario.id_usuario).first()
    return "Socio", socio.id_socio if socio else None


AUDIENCIAS_AVISO = {
    "Socios": ("Socio",),
    "Entrenadores": ("Entrenador",),
    "Todos": ("Socio", "Entrenador"),
}
LARGO_RESUMEN_AVISO = 200


def publicar_aviso(db: Session, titulo: str, mensaje: str, destinatarios: str) -> List[dict]:
    """
    Registra la confirmación del aviso en la bandeja de administración (sin
    confirmar la transacción) y devuelve los broadcasts pendientes, uno por
    audiencia, listos para `despachar_notificacion`.
    """
    audiencias = AUDIENCIAS_AVISO[destinatarios]
    resumen = mensaje[:LARGO_RESUMEN_AVISO]
    if len(mensaje) > LARGO_RESUMEN_AVISO:
        resumen += "..."

    crear_notificacion(
        db,
        tipo_usuario="Admin",
        tipo_evento="aviso_general",
        titulo="Aviso publicado",
        mensaje=f'El aviso "{titulo}" ha sido publicado para {destinatarios}.',
    )
    return [
        dict(tipo_usuario=tipo_usuario, tipo_evento="aviso_general", titulo=f"Nuevo aviso: {titulo}", mensaje=resumen)
        for tipo_usuario in audiencias
    ]
