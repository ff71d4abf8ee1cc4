# gimnasio/core/exceptions.py

from fastapi import HTTPException, status

class AuthException(HTTPException):
    def __init__(self, detail: str = "No autorizado"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

class ForbiddenException(HTTPException):
    def __init__(self, detail: str = "No tiene permisos para realizar esta acción"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)

class NotFoundException(HTTPException):
    def __init__(self, detail: str = "Recurso no encontrado"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

class ConflictException(HTTPException):
    def __init__(self, detail: str = "El recurso está en un estado incompatible"):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)

# =======================================================
# ERRORES DE ADMISIÓN DE RESERVAS
# =======================================================
class ReservaError(Exception):
    """
    Rechazo de una inscripción a clase.

    Cada subclase es una categoría distinta que el cliente puede distinguir
    por `categoria`; `status_code` es el código HTTP con el que se responde.
    """
    status_code: int = status.HTTP_400_BAD_REQUEST
    categoria: str = "error_reserva"
    mensaje: str = "No se pudo procesar la reserva"

    def __init__(self, mensaje: str = None, status_code: int = None):
        if mensaje:
            self.mensaje = mensaje
        if status_code:
            self.status_code = status_code
        super().__init__(self.mensaje)

class ClaseNoDisponible(ReservaError):
    status_code = status.HTTP_403_FORBIDDEN
    categoria = "clase_no_disponible"
    mensaje = "La clase no está disponible para esta fecha o ya expiró."

class CupoAgotado(ReservaError):
    status_code = status.HTTP_400_BAD_REQUEST
    categoria = "cupo_agotado"
    mensaje = "No hay cupos disponibles para esta fecha."

class ReservaDuplicada(ReservaError):
    status_code = status.HTTP_409_CONFLICT
    categoria = "reserva_duplicada"
    mensaje = "Este socio ya está inscrito en esta clase para esta fecha."

class MembresiaNoVigente(ReservaError):
    status_code = status.HTTP_403_FORBIDDEN
    categoria = "membresia_no_vigente"
    mensaje = "El socio no tiene una membresía vigente."

class ErrorAlmacenamiento(ReservaError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    categoria = "error_interno"
    mensaje = "Error en el servidor al procesar la inscripción"
