# tests/conftest.py
"""
Fixtures comunes: una base SQLite en archivo por test, el cliente HTTP con
`get_db` sustituido y helpers para sembrar datos.

Con SQLite cada transacción toma el bloqueo de escritura al empezar, así que
los helpers abren su propia sesión, confirman y la cierran antes de devolver
ids. Ninguna sesión del test debe quedar abierta mientras se llama a la API.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test_gimnasio.db")

from datetime import date, time, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from gimnasio.core.security import create_access_token, get_password_hash
from gimnasio.database import Base, crear_engine, get_db
from gimnasio.main import app
from gimnasio.models import Clase, Entrenador, Membresia, ReservaClase, SesionPersonal, Socio, Usuario
from gimnasio.services import notificaciones

PASSWORD = "secreta123"
_hash_cache = {}


def _password_hash() -> str:
    if PASSWORD not in _hash_cache:
        _hash_cache[PASSWORD] = get_password_hash(PASSWORD)
    return _hash_cache[PASSWORD]


def proximo_lunes(desde: date = None) -> date:
    desde = desde or date.today()
    return desde + timedelta(days=(7 - desde.weekday()) % 7 or 7)


class Semillas:
    """Crea filas en una sesión propia y devuelve sus ids"""

    def __init__(self, session_factory):
        self.session_factory = session_factory
        self._contador = 0

    def _siguiente(self) -> int:
        self._contador += 1
        return self._contador

    def usuario(self, rol: str, email: str = None, estado: str = "activo") -> int:
        n = self._siguiente()
        with self.session_factory() as db:
            usuario = Usuario(
                nombre=f"Nombre{n}",
                apellido=f"Apellido{n}",
                email=email or f"{rol}{n}@gimnasio.test",
                contrasenia=_password_hash(),
                estado=estado,
                rol=rol,
            )
            db.add(usuario)
            db.commit()
            return usuario.id_usuario

    def entrenador(self, activo: bool = True) -> dict:
        id_usuario = self.usuario("entrenador")
        with self.session_factory() as db:
            entrenador = Entrenador(id_usuario=id_usuario, especialidad="Funcional", activo=activo)
            db.add(entrenador)
            db.commit()
            email = db.get(Usuario, id_usuario).email
            return {"id_entrenador": entrenador.id_entrenador, "id_usuario": id_usuario, "email": email}

    def socio(self, con_usuario: bool = False, estado_socio: str = "Activo") -> dict:
        n = self._siguiente()
        id_usuario = self.usuario("socio") if con_usuario else None
        with self.session_factory() as db:
            socio = Socio(
                id_usuario=id_usuario,
                nombre=f"Socio{n}",
                apellido="Prueba",
                email=f"socio{n}@correo.test",
                estado_socio=estado_socio,
            )
            db.add(socio)
            db.commit()
            email = db.get(Usuario, id_usuario).email if id_usuario else None
            return {"id_socio": socio.id_socio, "id_usuario": id_usuario, "email": email}

    def membresia(self, id_socio: int, estado: str = "Vigente", dias: int = 60, inicio: date = None) -> int:
        inicio = inicio or date.today() - timedelta(days=1)
        with self.session_factory() as db:
            membresia = Membresia(
                id_socio=id_socio,
                plan="Mensual",
                estado=estado,
                fecha_inicio=inicio,
                fecha_vencimiento=inicio + timedelta(days=dias),
            )
            db.add(membresia)
            db.commit()
            return membresia.id_membresia

    def clase(
        self,
        id_entrenador: int,
        cupo_maximo: int = 10,
        dia_semana: str = "Lunes",
        hora_inicio: time = time(8, 0),
        hora_fin: time = time(9, 0),
        fecha_inicio: date = None,
        fecha_fin: date = None,
        activa: bool = True,
        nombre_clase: str = "Spinning",
    ) -> int:
        with self.session_factory() as db:
            clase = Clase(
                id_entrenador=id_entrenador,
                nombre_clase=nombre_clase,
                categoria="Cardio",
                dia_semana=dia_semana,
                hora_inicio=hora_inicio,
                hora_fin=hora_fin,
                cupo_maximo=cupo_maximo,
                fecha_inicio=fecha_inicio,
                fecha_fin=fecha_fin,
                activa=activa,
            )
            db.add(clase)
            db.commit()
            return clase.id_clase

    def reserva(self, id_clase: int, id_socio: int, fecha_clase: date, estado: str = "Reservada") -> int:
        with self.session_factory() as db:
            reserva = ReservaClase(id_clase=id_clase, id_socio=id_socio, fecha_clase=fecha_clase, estado=estado)
            db.add(reserva)
            db.commit()
            return reserva.id_reserva

    def sesion(
        self,
        id_entrenador: int,
        id_socio: int,
        fecha_sesion: date,
        hora_inicio: time = time(18, 0),
        hora_fin: time = time(19, 0),
        estado: str = "Agendada",
    ) -> int:
        with self.session_factory() as db:
            sesion = SesionPersonal(
                id_entrenador=id_entrenador,
                id_socio=id_socio,
                fecha_sesion=fecha_sesion,
                hora_inicio=hora_inicio,
                hora_fin=hora_fin,
                estado=estado,
            )
            db.add(sesion)
            db.commit()
            return sesion.id_sesion

    def socio_habilitado(self, con_usuario: bool = False) -> dict:
        socio = self.socio(con_usuario=con_usuario)
        self.membresia(socio["id_socio"])
        return socio


@pytest.fixture
def engine(tmp_path):
    engine = crear_engine(f"sqlite:///{tmp_path / 'gimnasio_test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine, monkeypatch):
    factory = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    # Las notificaciones en segundo plano abren su propia sesión
    monkeypatch.setattr(notificaciones, "SessionLocal", factory)
    return factory


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def semillas(session_factory):
    return Semillas(session_factory)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(email: str) -> dict:
        token = create_access_token(data={"sub": email})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def fecha_clase():
    """Un lunes futuro, dentro de la vigencia de las membresías sembradas"""
    return proximo_lunes()
