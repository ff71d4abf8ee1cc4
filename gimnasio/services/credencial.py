# gimnasio/services/credencial.py

import io
import base64
import logging
from datetime import datetime, timedelta
from typing import Optional
import qrcode
from jose import JWTError, jwt
from gimnasio.config import settings

logger = logging.getLogger(__name__)

TIPO_CREDENCIAL = "credencial"


def generar_token_credencial(id_socio: int) -> str:
    """Token firmado que identifica al socio en recepción"""
    expira = datetime.utcnow() + timedelta(days=settings.CREDENCIAL_EXPIRE_DAYS)
    datos = {"sub": str(id_socio), "tipo": TIPO_CREDENCIAL, "exp": expira}
    return jwt.encode(datos, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def leer_token_credencial(token: str) -> Optional[int]:
    """id_socio del token, o None si es inválido, expiró o no es una credencial"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"Credencial inválida: {e}")
        return None

    if payload.get("tipo") != TIPO_CREDENCIAL:
        return None
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None


def generar_qr_base64(qr_data: str) -> str:
    """Genera una imagen QR en PNG codificada en base64"""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(qr_data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffered = io.BytesIO()
    img.save(buffered, format="PNG")
    return base64.b64encode(buffered.getvalue()).decode()
