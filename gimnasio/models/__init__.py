from .usuario import Usuario
from .entrenador import Entrenador
from .socio import Socio
from .membresia import Membresia
from .historial_membresia import HistorialMembresia
from .clase import Clase
from .reserva_clase import ReservaClase
from .sesion_personal import SesionPersonal
from .notificacion import Notificacion

__all__ = [
    "Usuario", "Entrenador", "Socio", "Membresia", "HistorialMembresia", "Clase",
    "ReservaClase", "SesionPersonal", "Notificacion"
]
