from sqlalchemy import Column, String, Integer, Date, DateTime, ForeignKey, Index, text, func
from sqlalchemy.orm import relationship
from gimnasio.database import Base

ESTADOS_RESERVA = ("Reservada", "Asistió", "NoAsistió", "Cancelada", "Reprogramada")
# Estados que no ocupan cupo
ESTADOS_SIN_CUPO = ("Cancelada", "NoAsistió")

class ReservaClase(Base):
    __tablename__ = "reserva_clase"
    __table_args__ = (
        # Una sola reserva no cancelada por (clase, socio, fecha)
        Index(
            "uq_reserva_clase_activa",
            "id_clase", "id_socio", "fecha_clase",
            unique=True,
            postgresql_where=text("estado <> 'Cancelada'"),
            sqlite_where=text("estado <> 'Cancelada'"),
        ),
        Index("ix_reserva_clase_fecha", "id_clase", "fecha_clase"),
    )
    __mapper_args__ = {"eager_defaults": True}

    id_reserva = Column(Integer, primary_key=True, index=True)
    id_clase = Column(Integer, ForeignKey("clase.id_clase", ondelete="CASCADE"), nullable=False)
    id_socio = Column(Integer, ForeignKey("socio.id_socio", ondelete="CASCADE"), nullable=False)
    fecha_clase = Column(Date, nullable=False)
    estado = Column(String(20), nullable=False, default="Reservada")
    fecha_reserva = Column(DateTime(timezone=True), server_default=func.now())
    fecha_actualizacion = Column(DateTime(timezone=True), onupdate=func.now())

    # Relaciones
    clase = relationship("Clase", back_populates="reservas")
    socio = relationship("Socio", back_populates="reservas")
