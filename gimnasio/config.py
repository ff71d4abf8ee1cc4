# gimnasio/config.py

from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./gimnasio.db"

    # JWT
    SECRET_KEY: str = "cambiar-en-produccion"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    CREDENCIAL_EXPIRE_DAYS: int = 30

    # Logging
    LOG_LEVEL: str = "INFO"

    # Notificaciones: cuántas se conservan por bandeja
    NOTIFICACIONES_MAX_POR_USUARIO: int = 100

    # CORS
    FRONTEND_URLS: str = "http://localhost:3000,http://localhost:5173"

    @property
    def allowed_origins(self) -> List[str]:
        urls = self.FRONTEND_URLS.split(",")
        all_urls = []
        for url in urls:
            url = url.strip()
            if url:
                all_urls.append(url)
                # Añadir versión HTTPS si es HTTP
                if url.startswith("http://") and "localhost" not in url:
                    all_urls.append(url.replace("http://", "https://"))
        return all_urls

    class Config:
        env_file = ".env"

settings = Settings()
