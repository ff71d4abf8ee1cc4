from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime

class InscripcionCreate(BaseModel):
    """Inscripción hecha por el entrenador dueño de la clase"""
    id_socio: int = Field(..., gt=0)
    fecha_clase: date

class ReservaSocioCreate(BaseModel):
    """Reserva hecha por el propio socio"""
    id_clase: int = Field(..., gt=0)
    fecha_clase: date

class ReservaEstadoUpdate(BaseModel):
    estado: str = Field(..., description="Reservada, Asistió, NoAsistió, Cancelada o Reprogramada")

class InscripcionResponse(BaseModel):
    message: str
    id_reserva: int

class CambioEstadoResponse(BaseModel):
    message: str
    socio: str
    estado_anterior: str
    estado_nuevo: str

class ReservaClaseResponse(BaseModel):
    id_reserva: int
    id_clase: int
    id_socio: int
    fecha_clase: date
    estado: str
    fecha_reserva: Optional[datetime] = None
    nombre_socio: Optional[str] = None
    email_socio: Optional[str] = None

    class Config:
        from_attributes = True

class ClasesSocioResponse(BaseModel):
    clases: List[dict]
    reservaciones: List[ReservaClaseResponse]
