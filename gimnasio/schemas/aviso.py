from pydantic import BaseModel, Field
from typing import Literal

class AvisoCreate(BaseModel):
    titulo: str = Field(..., min_length=1, max_length=200)
    mensaje: str = Field(..., min_length=1)
    destinatarios: Literal["Socios", "Entrenadores", "Todos"] = "Todos"

class AvisoPublicadoResponse(BaseModel):
    message: str
    destinatarios: str
    audiencias: int
