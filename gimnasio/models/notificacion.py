from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Index, func
from gimnasio.database import Base

TIPOS_USUARIO = ("Admin", "Entrenador", "Socio")

class Notificacion(Base):
    __tablename__ = "notificacion"
    __table_args__ = (
        Index("ix_notificacion_destinatario", "tipo_usuario", "usuario_id", "fecha_creacion"),
    )

    id_notificacion = Column(Integer, primary_key=True, index=True)
    tipo_usuario = Column(String(20), nullable=False)
    # NULL = bandeja compartida de administración
    usuario_id = Column(Integer, nullable=True)
    tipo_evento = Column(String(50), nullable=False)
    titulo = Column(String(255), nullable=False)
    mensaje = Column(Text, nullable=False)
    leida = Column(Boolean, default=False, nullable=False)
    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now())
