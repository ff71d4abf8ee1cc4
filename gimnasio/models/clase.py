from sqlalchemy import Column, String, Integer, Date, Time, Text, Boolean, DateTime, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import relationship
from gimnasio.database import Base

DIAS_SEMANA = ("Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo")

class Clase(Base):
    __tablename__ = "clase"
    __table_args__ = (
        CheckConstraint("cupo_maximo >= 1", name="ck_clase_cupo_positivo"),
    )
    __mapper_args__ = {"eager_defaults": True}

    id_clase = Column(Integer, primary_key=True, index=True)
    id_entrenador = Column(Integer, ForeignKey("entrenador.id_entrenador"), nullable=False, index=True)
    nombre_clase = Column(String(100), nullable=False)
    descripcion = Column(Text)
    categoria = Column(String(50))
    dia_semana = Column(String(20), nullable=False)
    hora_inicio = Column(Time, nullable=False)
    hora_fin = Column(Time, nullable=False)
    cupo_maximo = Column(Integer, nullable=False)
    fecha_inicio = Column(Date)
    fecha_fin = Column(Date)
    activa = Column(Boolean, default=True, nullable=False)
    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now())
    fecha_actualizacion = Column(DateTime(timezone=True), onupdate=func.now())

    # Relaciones
    entrenador = relationship("Entrenador", back_populates="clases")
    reservas = relationship("ReservaClase", back_populates="clase")

    def disponible_en(self, fecha) -> bool:
        """La clase está activa y la fecha cae dentro de su rango de vigencia"""
        if not self.activa:
            return False
        if self.fecha_inicio is not None and fecha < self.fecha_inicio:
            return False
        if self.fecha_fin is not None and fecha > self.fecha_fin:
            return False
        return True
