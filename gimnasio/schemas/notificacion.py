from pydantic import BaseModel
from datetime import datetime
from typing import Optional

class NotificacionResponse(BaseModel):
    id_notificacion: int
    tipo_usuario: str
    usuario_id: Optional[int] = None
    tipo_evento: str
    titulo: str
    mensaje: str
    leida: bool
    fecha_creacion: Optional[datetime] = None

    class Config:
        from_attributes = True

class MarcarLeidaRequest(BaseModel):
    id_notificacion: Optional[int] = None
    marcar_todas: bool = False
