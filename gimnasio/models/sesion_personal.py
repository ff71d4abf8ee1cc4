from sqlalchemy import Column, String, Integer, Date, Time, Text, DateTime, ForeignKey, Index, func
from sqlalchemy.orm import relationship
from gimnasio.database import Base

ESTADOS_SESION = ("Agendada", "Completada", "NoAsistio", "Cancelada")
# Estados que ocupan la agenda del entrenador
ESTADOS_SESION_OCUPADA = ("Agendada", "Completada")

class SesionPersonal(Base):
    __tablename__ = "sesion_personal"
    __table_args__ = (
        Index("ix_sesion_personal_agenda", "id_entrenador", "fecha_sesion"),
    )
    __mapper_args__ = {"eager_defaults": True}

    id_sesion = Column(Integer, primary_key=True, index=True)
    id_entrenador = Column(Integer, ForeignKey("entrenador.id_entrenador", ondelete="CASCADE"), nullable=False)
    id_socio = Column(Integer, ForeignKey("socio.id_socio", ondelete="CASCADE"), nullable=False, index=True)
    fecha_sesion = Column(Date, nullable=False)
    hora_inicio = Column(Time, nullable=False)
    hora_fin = Column(Time, nullable=False)
    estado = Column(String(20), nullable=False, default="Agendada")
    notas = Column(Text)
    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now())
    fecha_modificacion = Column(DateTime(timezone=True), onupdate=func.now())

    # Relaciones
    entrenador = relationship("Entrenador")
    socio = relationship("Socio")
