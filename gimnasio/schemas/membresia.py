from pydantic import BaseModel, Field, model_validator
from typing import Optional
from datetime import date, datetime

class MembresiaAsignar(BaseModel):
    id_socio: int = Field(..., gt=0)
    plan: str = Field(..., min_length=1, max_length=100)
    duracion_dias: int = Field(..., gt=0, description="Duración del plan en días")
    fecha_inicio: Optional[date] = None

class MembresiaPausar(BaseModel):
    id_socio: int = Field(..., gt=0)
    dias: int = Field(..., gt=0)
    motivo: Optional[str] = None

class MembresiaReanudar(BaseModel):
    id_socio: int = Field(..., gt=0)
    extender_vencimiento: bool = True

class MembresiaCancelar(BaseModel):
    id_socio: int = Field(..., gt=0)
    motivo: str = Field(..., min_length=1)

class MembresiaResponse(BaseModel):
    id_membresia: int
    id_socio: int
    plan: Optional[str] = None
    estado: str
    fecha_inicio: date
    fecha_vencimiento: date
    dias_suspension: Optional[int] = None
    fecha_suspension: Optional[date] = None
    motivo_estado: Optional[str] = None
    fecha_creacion: Optional[datetime] = None

    class Config:
        from_attributes = True

class MembresiaCambiarPlan(BaseModel):
    id_socio: int = Field(..., gt=0)
    plan: str = Field(..., min_length=1, max_length=100)
    duracion_dias: Optional[int] = Field(None, gt=0, description="Obligatoria si no se mantienen las fechas")
    mantener_fechas: bool = False
    motivo: Optional[str] = None

    @model_validator(mode="after")
    def validate_duracion(self):
        if not self.mantener_fechas and self.duracion_dias is None:
            raise ValueError("Indica duracion_dias o mantener_fechas")
        return self

class HistorialMembresiaResponse(BaseModel):
    id_historial: int
    id_socio: int
    id_membresia: Optional[int] = None
    accion: str
    plan_anterior: Optional[str] = None
    plan_nuevo: Optional[str] = None
    estado_anterior: Optional[str] = None
    estado_nuevo: Optional[str] = None
    vencimiento_anterior: Optional[date] = None
    vencimiento_nuevo: Optional[date] = None
    motivo: Optional[str] = None
    detalle: Optional[str] = None
    registrado_por: Optional[int] = None
    fecha: Optional[datetime] = None

    class Config:
        from_attributes = True
