from pydantic import BaseModel, Field, validator, model_validator
from typing import Optional
from datetime import date, time, datetime
from gimnasio.models.clase import DIAS_SEMANA

CAMPOS_NO_NULOS = ("nombre_clase", "dia_semana", "hora_inicio", "hora_fin", "cupo_maximo", "activa")

def _validar_dia(v):
    if v is None:
        return v
    v = v.strip()
    if v not in DIAS_SEMANA:
        raise ValueError(f"Día inválido. Debe ser uno de: {', '.join(DIAS_SEMANA)}")
    return v

class ClaseBase(BaseModel):
    nombre_clase: str = Field(..., min_length=1, max_length=100)
    descripcion: Optional[str] = None
    categoria: Optional[str] = Field(None, max_length=50)
    dia_semana: str
    hora_inicio: time
    hora_fin: time
    cupo_maximo: int = Field(..., ge=1, description="Cupo máximo por fecha")
    fecha_inicio: Optional[date] = None
    fecha_fin: Optional[date] = None

    @validator('dia_semana')
    def validate_dia(cls, v):
        return _validar_dia(v)

    @model_validator(mode="after")
    def validate_rangos(self):
        if self.hora_fin <= self.hora_inicio:
            raise ValueError("La hora de fin debe ser posterior a la de inicio")
        if self.fecha_inicio and self.fecha_fin and self.fecha_fin < self.fecha_inicio:
            raise ValueError("La fecha de fin no puede ser anterior a la de inicio")
        return self

class ClaseCreate(ClaseBase):
    pass

class ClaseUpdate(BaseModel):
    nombre_clase: Optional[str] = Field(None, min_length=1, max_length=100)
    descripcion: Optional[str] = None
    categoria: Optional[str] = Field(None, max_length=50)
    dia_semana: Optional[str] = None
    hora_inicio: Optional[time] = None
    hora_fin: Optional[time] = None
    cupo_maximo: Optional[int] = Field(None, ge=1)
    fecha_inicio: Optional[date] = None
    fecha_fin: Optional[date] = None
    activa: Optional[bool] = None

    @model_validator(mode="before")
    @classmethod
    def rechazar_nulos(cls, data):
        # Omitir un campo lo conserva; null solo vale para los opcionales de la tabla
        if isinstance(data, dict):
            nulos = [campo for campo in CAMPOS_NO_NULOS if campo in data and data[campo] is None]
            if nulos:
                raise ValueError(f"Estos campos no admiten null: {', '.join(nulos)}")
        return data

    @validator('dia_semana')
    def validate_dia(cls, v):
        return _validar_dia(v)

class ClaseResponse(ClaseBase):
    id_clase: int
    id_entrenador: int
    activa: bool
    fecha_creacion: Optional[datetime] = None

    class Config:
        from_attributes = True

class ClaseConCupos(ClaseResponse):
    cupos_ocupados: int = 0
    cupos_disponibles: Optional[int] = None
    nombre_entrenador: Optional[str] = None
