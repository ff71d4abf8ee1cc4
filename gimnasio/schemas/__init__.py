from .auth import *
from .clase import *
from .reserva_clase import *
from .membresia import *
from .notificacion import *
from .credencial import *
from .sesion_personal import *
from .aviso import *

__all__ = [
    # Auth
    "Token",

    # Clase
    "ClaseBase", "ClaseCreate", "ClaseUpdate", "ClaseResponse", "ClaseConCupos",

    # Reserva de clase
    "InscripcionCreate", "ReservaSocioCreate", "ReservaEstadoUpdate",
    "InscripcionResponse", "CambioEstadoResponse", "ReservaClaseResponse", "ClasesSocioResponse",

    # Membresía
    "MembresiaAsignar", "MembresiaPausar", "MembresiaReanudar", "MembresiaCancelar",
    "MembresiaCambiarPlan", "MembresiaResponse", "HistorialMembresiaResponse",

    # Notificación
    "NotificacionResponse", "MarcarLeidaRequest",

    # Credencial
    "CredencialResponse", "VerificarCredencialRequest", "VerificarCredencialResponse",

    # Sesión personal
    "SesionPersonalCreate", "SesionEstadoUpdate", "SesionPersonalResponse",

    # Aviso
    "AvisoCreate", "AvisoPublicadoResponse",
]
