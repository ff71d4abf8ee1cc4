from sqlalchemy import Column, String, Integer, DateTime, func
from sqlalchemy.orm import relationship
from gimnasio.database import Base

class Usuario(Base):
    __tablename__ = "usuario"

    id_usuario = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(100), nullable=False)
    apellido = Column(String(100), nullable=False)
    email = Column(String(150), unique=True, nullable=False, index=True)
    contrasenia = Column(String(255), nullable=False)
    estado = Column(String(20), default="activo")
    rol = Column(String(20), nullable=False)  # admin, entrenador, socio, recepcion
    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now())
    fecha_actualizacion = Column(DateTime(timezone=True), onupdate=func.now())

    # Relaciones
    entrenador = relationship("Entrenador", back_populates="usuario", uselist=False)
    socio = relationship("Socio", back_populates="usuario", uselist=False)
