from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from gimnasio.database import Base

class Socio(Base):
    __tablename__ = "socio"

    id_socio = Column(Integer, primary_key=True, index=True)
    id_usuario = Column(Integer, ForeignKey("usuario.id_usuario", ondelete="SET NULL"), unique=True)
    nombre = Column(String(100), nullable=False)
    apellido = Column(String(100), nullable=False)
    email = Column(String(150), unique=True, index=True)
    estado_socio = Column(String(20), default="Activo")  # Activo, Inactivo
    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now())

    # Relaciones
    usuario = relationship("Usuario", back_populates="socio")
    membresias = relationship("Membresia", back_populates="socio")
    reservas = relationship("ReservaClase", back_populates="socio")

    @property
    def nombre_completo(self) -> str:
        return f"{self.nombre} {self.apellido}"
