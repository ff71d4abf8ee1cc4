from sqlalchemy import Column, String, Integer, Date, Text, DateTime, ForeignKey, func
from gimnasio.database import Base

ACCIONES_MEMBRESIA = ("Asignada", "Suspendida", "Reanudada", "Cancelada", "Cambiada")

class HistorialMembresia(Base):
    """Bitácora de acciones administrativas sobre membresías"""
    __tablename__ = "historial_membresias_socios"
    __mapper_args__ = {"eager_defaults": True}

    id_historial = Column(Integer, primary_key=True, index=True)
    id_socio = Column(Integer, ForeignKey("socio.id_socio", ondelete="CASCADE"), nullable=False, index=True)
    id_membresia = Column(Integer, ForeignKey("membresia.id_membresia", ondelete="SET NULL"))
    accion = Column(String(20), nullable=False)
    plan_anterior = Column(String(100))
    plan_nuevo = Column(String(100))
    estado_anterior = Column(String(20))
    estado_nuevo = Column(String(20))
    vencimiento_anterior = Column(Date)
    vencimiento_nuevo = Column(Date)
    motivo = Column(Text)
    detalle = Column(Text)
    registrado_por = Column(Integer, ForeignKey("usuario.id_usuario", ondelete="SET NULL"))
    fecha = Column(DateTime(timezone=True), server_default=func.now())
