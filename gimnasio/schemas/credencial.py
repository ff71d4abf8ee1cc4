from pydantic import BaseModel
from typing import Optional
from datetime import date

class CredencialResponse(BaseModel):
    token: str
    qr_base64: str

class VerificarCredencialRequest(BaseModel):
    token: str

class VerificarCredencialResponse(BaseModel):
    acceso_permitido: bool
    message: str
    id_socio: int
    nombre_socio: str
    fecha_vencimiento: Optional[date] = None
