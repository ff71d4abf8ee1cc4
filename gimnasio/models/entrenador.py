from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from gimnasio.database import Base

class Entrenador(Base):
    __tablename__ = "entrenador"

    id_entrenador = Column(Integer, primary_key=True, index=True)
    id_usuario = Column(Integer, ForeignKey("usuario.id_usuario", ondelete="CASCADE"), nullable=False, unique=True)
    especialidad = Column(String(100))
    activo = Column(Boolean, default=True, nullable=False)
    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now())

    # Relaciones
    usuario = relationship("Usuario", back_populates="entrenador")
    clases = relationship("Clase", back_populates="entrenador")

    @property
    def nombre_completo(self) -> str:
        if self.usuario is None:
            return ""
        return f"{self.usuario.nombre} {self.usuario.apellido}"
