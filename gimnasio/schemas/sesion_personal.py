from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import date, time, datetime

class SesionPersonalCreate(BaseModel):
    id_socio: int = Field(..., gt=0)
    fecha_sesion: date
    hora_inicio: time
    hora_fin: time
    notas: Optional[str] = None

    @model_validator(mode="after")
    def validate_horario(self):
        if self.hora_fin <= self.hora_inicio:
            raise ValueError("La hora de fin debe ser posterior a la de inicio")
        return self

class SesionEstadoUpdate(BaseModel):
    estado: str = Field(..., description="Agendada, Completada, NoAsistio o Cancelada")

class SesionPersonalResponse(BaseModel):
    id_sesion: int
    id_entrenador: int
    id_socio: int
    fecha_sesion: date
    hora_inicio: time
    hora_fin: time
    estado: str
    notas: Optional[str] = None
    fecha_creacion: Optional[datetime] = None
    nombre_socio: Optional[str] = None
    nombre_entrenador: Optional[str] = None

    class Config:
        from_attributes = True
