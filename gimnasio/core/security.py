import logging
from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from gimnasio.config import settings
from gimnasio.database import get_db
from gimnasio.core.core import allowed_roles
from gimnasio.core.exceptions import AuthException, ForbiddenException
from gimnasio.models.usuario import Usuario
from gimnasio.models.entrenador import Entrenador
from gimnasio.models.socio import Socio

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})

    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt

def verify_token(token: str):
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        return None

def get_current_user(token: Optional[str] = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> Usuario:
    """
    Identidad del operador a partir del bearer token.
    Sin token, token inválido o usuario inexistente: 401.
    """
    if token is None:
        raise AuthException("No autorizado")

    payload = verify_token(token)
    if payload is None:
        raise AuthException("No se pudieron validar las credenciales")

    email = payload.get("sub")
    if email is None:
        raise AuthException("No se pudieron validar las credenciales")

    user = db.query(Usuario).filter(Usuario.email == email).first()
    if user is None:
        logger.warning(f"Token válido para usuario inexistente: {email}")
        raise AuthException("No se pudieron validar las credenciales")

    if user.estado != "activo":
        raise ForbiddenException("Usuario inactivo")

    return user

def require_roles(*roles: str):
    """Dependencia que exige que el usuario tenga uno de los roles dados"""
    def _verificar(current_user: Usuario = Depends(get_current_user)) -> Usuario:
        if not allowed_roles(current_user, list(roles)):
            raise ForbiddenException()
        return current_user
    return _verificar

def get_current_entrenador(
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Entrenador:
    entrenador = db.query(Entrenador).filter(
        Entrenador.id_usuario == current_user.id_usuario,
        Entrenador.activo == True  # noqa: E712
    ).first()
    if not entrenador:
        raise ForbiddenException("No se encontró un perfil de entrenador activo.")
    return entrenador

def get_current_socio(
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Socio:
    socio = db.query(Socio).filter(Socio.id_usuario == current_user.id_usuario).first()
    if not socio:
        raise ForbiddenException("El usuario no tiene un perfil de socio.")
    return socio
