from sqlalchemy import Column, String, Integer, Date, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from gimnasio.database import Base

ESTADOS_MEMBRESIA = ("Vigente", "Suspendida", "Cancelada", "Vencida")

class Membresia(Base):
    __tablename__ = "membresia"
    __mapper_args__ = {"eager_defaults": True}

    id_membresia = Column(Integer, primary_key=True, index=True)
    id_socio = Column(Integer, ForeignKey("socio.id_socio", ondelete="CASCADE"), nullable=False, index=True)
    plan = Column(String(100))
    estado = Column(String(20), nullable=False, default="Vigente")
    fecha_inicio = Column(Date, nullable=False)
    fecha_vencimiento = Column(Date, nullable=False)
    dias_suspension = Column(Integer)
    fecha_suspension = Column(Date)
    motivo_estado = Column(Text)
    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now())

    # Relaciones
    socio = relationship("Socio", back_populates="membresias")
