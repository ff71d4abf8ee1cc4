from datetime import time, timedelta

import pytest

from gimnasio.core.exceptions import ConflictException, NotFoundException
from gimnasio.models import Notificacion, SesionPersonal
from gimnasio.services import sesiones as servicio_sesiones


def _sesion_payload(id_socio, fecha, **cambios):
    datos = {
        "id_socio": id_socio,
        "fecha_sesion": fecha.isoformat(),
        "hora_inicio": "18:00:00",
        "hora_fin": "19:00:00",
        "notas": "Evaluación inicial",
    }
    datos.update(cambios)
    return datos


class TestServicioSesiones:
    def test_agendar(self, db, semillas, fecha_clase):
        entrenador = semillas.entrenador()
        socio = semillas.socio()

        sesion = servicio_sesiones.agendar_sesion(
            db, entrenador["id_entrenador"], socio["id_socio"], fecha_clase, time(18, 0), time(19, 0)
        )

        assert sesion.estado == "Agendada"
        assert sesion.id_socio == socio["id_socio"]

    def test_socio_inexistente(self, db, semillas, fecha_clase):
        entrenador = semillas.entrenador()

        with pytest.raises(NotFoundException):
            servicio_sesiones.agendar_sesion(
                db, entrenador["id_entrenador"], 999, fecha_clase, time(18, 0), time(19, 0)
            )

    def test_solapamiento(self, db, semillas, fecha_clase):
        entrenador = semillas.entrenador()
        socio = semillas.socio()
        semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase)

        with pytest.raises(ConflictException):
            servicio_sesiones.agendar_sesion(
                db, entrenador["id_entrenador"], socio["id_socio"], fecha_clase, time(18, 30), time(19, 30)
            )

    def test_contiguas_no_se_solapan(self, db, semillas, fecha_clase):
        entrenador = semillas.entrenador()
        socio = semillas.socio()
        semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase)

        sesion = servicio_sesiones.agendar_sesion(
            db, entrenador["id_entrenador"], socio["id_socio"], fecha_clase, time(19, 0), time(20, 0)
        )

        assert sesion.id_sesion is not None

    def test_cancelada_libera_el_horario(self, db, semillas, fecha_clase):
        entrenador = semillas.entrenador()
        socio = semillas.socio()
        semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase, estado="Cancelada")

        sesion = servicio_sesiones.agendar_sesion(
            db, entrenador["id_entrenador"], socio["id_socio"], fecha_clase, time(18, 0), time(19, 0)
        )

        assert sesion.estado == "Agendada"

    def test_otro_entrenador_mismo_horario(self, db, semillas, fecha_clase):
        uno = semillas.entrenador()
        otro = semillas.entrenador()
        socio = semillas.socio()
        semillas.sesion(uno["id_entrenador"], socio["id_socio"], fecha_clase)

        sesion = servicio_sesiones.agendar_sesion(
            db, otro["id_entrenador"], socio["id_socio"], fecha_clase, time(18, 0), time(19, 0)
        )

        assert sesion.id_entrenador == otro["id_entrenador"]

    def test_reagendar_cancelada_con_horario_ocupado(self, db, semillas, fecha_clase):
        entrenador = semillas.entrenador()
        socio = semillas.socio()
        id_cancelada = semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase, estado="Cancelada")
        semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase)
        sesion = db.get(SesionPersonal, id_cancelada)

        with pytest.raises(ConflictException):
            servicio_sesiones.cambiar_estado_sesion(db, sesion, "Agendada")

    def test_completar_devuelve_estado_anterior(self, db, semillas, fecha_clase):
        entrenador = semillas.entrenador()
        socio = semillas.socio()
        id_sesion = semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase)
        sesion = db.get(SesionPersonal, id_sesion)

        anterior = servicio_sesiones.cambiar_estado_sesion(db, sesion, "Completada")

        assert anterior == "Agendada"
        assert sesion.estado == "Completada"

    def test_estado_invalido(self, db, semillas, fecha_clase):
        entrenador = semillas.entrenador()
        socio = semillas.socio()
        id_sesion = semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase)
        sesion = db.get(SesionPersonal, id_sesion)

        with pytest.raises(ValueError):
            servicio_sesiones.cambiar_estado_sesion(db, sesion, "Perdida")


class TestApiSesiones:
    def test_agendar_notifica_al_socio(self, client, semillas, auth_headers, session_factory, fecha_clase):
        entrenador = semillas.entrenador()
        socio = semillas.socio()

        response = client.post(
            "/entrenador/sesiones",
            json=_sesion_payload(socio["id_socio"], fecha_clase),
            headers=auth_headers(entrenador["email"]),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["estado"] == "Agendada"
        assert body["nombre_socio"].endswith("Prueba")
        with session_factory() as db:
            aviso = db.query(Notificacion).filter(Notificacion.tipo_evento == "sesion_agendada").one()
            assert aviso.tipo_usuario == "Socio"
            assert aviso.usuario_id == socio["id_socio"]

    def test_agendar_solapada(self, client, semillas, auth_headers, fecha_clase):
        entrenador = semillas.entrenador()
        socio = semillas.socio()
        semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase)

        response = client.post(
            "/entrenador/sesiones",
            json=_sesion_payload(socio["id_socio"], fecha_clase, hora_inicio="17:30:00", hora_fin="18:30:00"),
            headers=auth_headers(entrenador["email"]),
        )

        assert response.status_code == 409

    def test_horario_invertido(self, client, semillas, auth_headers, fecha_clase):
        entrenador = semillas.entrenador()
        socio = semillas.socio()

        response = client.post(
            "/entrenador/sesiones",
            json=_sesion_payload(socio["id_socio"], fecha_clase, hora_inicio="19:00:00", hora_fin="18:00:00"),
            headers=auth_headers(entrenador["email"]),
        )

        assert response.status_code == 422

    def test_listar_solo_las_propias(self, client, semillas, auth_headers, fecha_clase):
        entrenador = semillas.entrenador()
        otro = semillas.entrenador()
        socio = semillas.socio()
        semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase)
        semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase + timedelta(days=7))
        semillas.sesion(otro["id_entrenador"], socio["id_socio"], fecha_clase)

        response = client.get("/entrenador/sesiones", headers=auth_headers(entrenador["email"]))

        assert response.status_code == 200
        fechas = [s["fecha_sesion"] for s in response.json()]
        assert fechas == [(fecha_clase + timedelta(days=7)).isoformat(), fecha_clase.isoformat()]

    def test_cambiar_estado(self, client, semillas, auth_headers, fecha_clase):
        entrenador = semillas.entrenador()
        socio = semillas.socio()
        id_sesion = semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase)

        response = client.patch(
            f"/entrenador/sesiones/{id_sesion}/estado",
            json={"estado": "Completada"},
            headers=auth_headers(entrenador["email"]),
        )

        assert response.status_code == 200
        assert response.json()["estado_anterior"] == "Agendada"

    def test_cambiar_estado_invalido(self, client, semillas, auth_headers, fecha_clase):
        entrenador = semillas.entrenador()
        socio = semillas.socio()
        id_sesion = semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase)

        response = client.patch(
            f"/entrenador/sesiones/{id_sesion}/estado",
            json={"estado": "Reservada"},
            headers=auth_headers(entrenador["email"]),
        )

        assert response.status_code == 400

    def test_sesion_ajena(self, client, semillas, auth_headers, fecha_clase):
        duenio = semillas.entrenador()
        intruso = semillas.entrenador()
        socio = semillas.socio()
        id_sesion = semillas.sesion(duenio["id_entrenador"], socio["id_socio"], fecha_clase)

        response = client.delete(f"/entrenador/sesiones/{id_sesion}", headers=auth_headers(intruso["email"]))

        assert response.status_code == 403

    def test_cancelar_notifica_socio_y_administracion(
        self, client, semillas, auth_headers, session_factory, fecha_clase
    ):
        entrenador = semillas.entrenador()
        socio = semillas.socio()
        id_sesion = semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase)
        headers = auth_headers(entrenador["email"])

        response = client.delete(f"/entrenador/sesiones/{id_sesion}", headers=headers)

        assert response.status_code == 200
        with session_factory() as db:
            assert db.get(SesionPersonal, id_sesion).estado == "Cancelada"
            avisos = db.query(Notificacion).filter(
                Notificacion.tipo_evento == "sesion_cancelada_entrenador"
            ).all()
            assert sorted(a.tipo_usuario for a in avisos) == ["Admin", "Socio"]

        segunda = client.delete(f"/entrenador/sesiones/{id_sesion}", headers=headers)
        assert segunda.status_code == 400

    def test_socio_ve_sus_sesiones(self, client, semillas, auth_headers, fecha_clase):
        entrenador = semillas.entrenador()
        socio = semillas.socio(con_usuario=True)
        otro = semillas.socio()
        semillas.sesion(entrenador["id_entrenador"], socio["id_socio"], fecha_clase)
        semillas.sesion(entrenador["id_entrenador"], otro["id_socio"], fecha_clase, hora_inicio=time(7, 0), hora_fin=time(8, 0))

        response = client.get("/socio/sesiones", headers=auth_headers(socio["email"]))

        assert response.status_code == 200
        sesiones = response.json()
        assert len(sesiones) == 1
        assert sesiones[0]["nombre_entrenador"]
