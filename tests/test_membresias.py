from datetime import date, timedelta

import pytest

from gimnasio.core.exceptions import ConflictException, NotFoundException
from gimnasio.models import Membresia, Notificacion
from gimnasio.services import membresias as servicio_membresias


@pytest.fixture
def admin(semillas):
    email = "admin@gimnasio.test"
    semillas.usuario("admin", email=email)
    return email


class TestServicioMembresias:
    def test_asignar_calcula_vencimiento(self, db, semillas):
        socio = semillas.socio()
        inicio = date(2026, 3, 1)

        membresia = servicio_membresias.asignar_membresia(db, socio["id_socio"], "Trimestral", 90, inicio)

        assert membresia.estado == "Vigente"
        assert membresia.fecha_vencimiento == inicio + timedelta(days=90)

    def test_asignar_con_vigente_existente(self, db, semillas):
        socio = semillas.socio_habilitado()

        with pytest.raises(ConflictException):
            servicio_membresias.asignar_membresia(db, socio["id_socio"], "Mensual", 30)

    def test_socio_inexistente(self, db):
        with pytest.raises(NotFoundException):
            servicio_membresias.asignar_membresia(db, 999, "Mensual", 30)

    def test_pausar_y_reanudar_extiende_vencimiento(self, db, semillas):
        socio = semillas.socio()
        id_membresia = semillas.membresia(socio["id_socio"])
        vencimiento_original = db.get(Membresia, id_membresia).fecha_vencimiento

        pausada = servicio_membresias.pausar_membresia(db, socio["id_socio"], 10, "Viaje")
        assert pausada.estado == "Suspendida"
        assert pausada.dias_suspension == 10

        reanudada = servicio_membresias.reanudar_membresia(db, socio["id_socio"])
        assert reanudada.estado == "Vigente"
        assert reanudada.fecha_vencimiento == vencimiento_original + timedelta(days=10)
        assert reanudada.dias_suspension is None

    def test_reanudar_sin_extender(self, db, semillas):
        socio = semillas.socio()
        id_membresia = semillas.membresia(socio["id_socio"])
        vencimiento_original = db.get(Membresia, id_membresia).fecha_vencimiento
        servicio_membresias.pausar_membresia(db, socio["id_socio"], 5)

        reanudada = servicio_membresias.reanudar_membresia(db, socio["id_socio"], extender_vencimiento=False)

        assert reanudada.fecha_vencimiento == vencimiento_original

    def test_pausar_sin_vigente(self, db, semillas):
        socio = semillas.socio()

        with pytest.raises(ConflictException):
            servicio_membresias.pausar_membresia(db, socio["id_socio"], 5)

    def test_cancelar_suspendida(self, db, semillas):
        socio = semillas.socio()
        semillas.membresia(socio["id_socio"], estado="Suspendida")

        cancelada = servicio_membresias.cancelar_membresia(db, socio["id_socio"], "Baja voluntaria")

        assert cancelada.estado == "Cancelada"
        assert cancelada.motivo_estado == "Baja voluntaria"

    def test_historial_mas_reciente_primero(self, db, semillas):
        socio = semillas.socio()
        primera = semillas.membresia(socio["id_socio"], estado="Cancelada")
        segunda = semillas.membresia(socio["id_socio"])

        historial = servicio_membresias.historial_membresias(db, socio["id_socio"])

        assert [m.id_membresia for m in historial] == [segunda, primera]

    def test_cada_accion_queda_en_la_bitacora(self, db, semillas):
        socio = semillas.socio()
        id_admin = semillas.usuario("admin")

        servicio_membresias.asignar_membresia(db, socio["id_socio"], "Mensual", 30, registrado_por=id_admin)
        servicio_membresias.pausar_membresia(db, socio["id_socio"], 5, "Lesión")
        servicio_membresias.reanudar_membresia(db, socio["id_socio"])
        servicio_membresias.cancelar_membresia(db, socio["id_socio"], "Mudanza")

        bitacora = servicio_membresias.historial_acciones(db, socio["id_socio"])

        assert [h.accion for h in bitacora] == ["Cancelada", "Reanudada", "Suspendida", "Asignada"]
        assert bitacora[-1].registrado_por == id_admin
        assert bitacora[2].motivo == "Lesión"
        assert bitacora[1].vencimiento_nuevo == bitacora[1].vencimiento_anterior + timedelta(days=5)
        assert bitacora[0].estado_anterior == "Vigente"
        assert bitacora[0].estado_nuevo == "Cancelada"

    def test_cambiar_plan_reinicia_fechas(self, db, semillas):
        socio = semillas.socio()
        semillas.membresia(socio["id_socio"], dias=30)

        membresia = servicio_membresias.cambiar_plan(db, socio["id_socio"], "Anual", duracion_dias=365, motivo="Upgrade")

        assert membresia.plan == "Anual"
        assert membresia.fecha_inicio == date.today()
        assert membresia.fecha_vencimiento == date.today() + timedelta(days=365)
        registro = servicio_membresias.historial_acciones(db, socio["id_socio"])[0]
        assert registro.accion == "Cambiada"
        assert registro.plan_anterior == "Mensual"
        assert registro.plan_nuevo == "Anual"
        assert registro.motivo == "Upgrade"

    def test_cambiar_plan_manteniendo_fechas(self, db, semillas):
        socio = semillas.socio()
        id_membresia = semillas.membresia(socio["id_socio"], dias=30)
        vencimiento = db.get(Membresia, id_membresia).fecha_vencimiento

        membresia = servicio_membresias.cambiar_plan(db, socio["id_socio"], "Mensual Plus", mantener_fechas=True)

        assert membresia.plan == "Mensual Plus"
        assert membresia.fecha_vencimiento == vencimiento
        registro = servicio_membresias.historial_acciones(db, socio["id_socio"])[0]
        assert registro.detalle.endswith("manteniendo fechas")

    def test_cambiar_plan_sin_membresia(self, db, semillas):
        socio = semillas.socio()
        semillas.membresia(socio["id_socio"], estado="Cancelada")

        with pytest.raises(ConflictException):
            servicio_membresias.cambiar_plan(db, socio["id_socio"], "Anual", duracion_dias=365)

    def test_cambiar_plan_sin_duracion(self, db, semillas):
        socio = semillas.socio_habilitado()

        with pytest.raises(ValueError):
            servicio_membresias.cambiar_plan(db, socio["id_socio"], "Anual")


class TestApiMembresias:
    def test_asignar_notifica_al_socio(self, client, semillas, auth_headers, admin, session_factory):
        socio = semillas.socio()

        response = client.post(
            "/admin/membresias/asignar",
            json={"id_socio": socio["id_socio"], "plan": "Mensual", "duracion_dias": 30},
            headers=auth_headers(admin),
        )

        assert response.status_code == 201
        assert response.json()["estado"] == "Vigente"
        with session_factory() as db:
            aviso = db.query(Notificacion).filter(Notificacion.tipo_evento == "membresia_asignada").one()
            assert aviso.tipo_usuario == "Socio"
            assert aviso.usuario_id == socio["id_socio"]

    def test_asignar_duplicada(self, client, semillas, auth_headers, admin):
        socio = semillas.socio_habilitado()

        response = client.post(
            "/admin/membresias/asignar",
            json={"id_socio": socio["id_socio"], "plan": "Mensual", "duracion_dias": 30},
            headers=auth_headers(admin),
        )

        assert response.status_code == 409

    def test_solo_admin(self, client, semillas, auth_headers):
        entrenador = semillas.entrenador()
        socio = semillas.socio()

        response = client.post(
            "/admin/membresias/asignar",
            json={"id_socio": socio["id_socio"], "plan": "Mensual", "duracion_dias": 30},
            headers=auth_headers(entrenador["email"]),
        )

        assert response.status_code == 403

    def test_pausar_reanudar_cancelar(self, client, semillas, auth_headers, admin):
        socio = semillas.socio_habilitado()
        headers = auth_headers(admin)

        pausa = client.post(
            "/admin/membresias/pausar", json={"id_socio": socio["id_socio"], "dias": 7}, headers=headers
        )
        assert pausa.status_code == 200
        assert pausa.json()["estado"] == "Suspendida"

        reanuda = client.post("/admin/membresias/reanudar", json={"id_socio": socio["id_socio"]}, headers=headers)
        assert reanuda.status_code == 200
        assert reanuda.json()["estado"] == "Vigente"

        cancela = client.post(
            "/admin/membresias/cancelar",
            json={"id_socio": socio["id_socio"], "motivo": "Mudanza"},
            headers=headers,
        )
        assert cancela.status_code == 200
        assert cancela.json()["estado"] == "Cancelada"

        historial = client.get(f"/admin/membresias/socio/{socio['id_socio']}", headers=headers)
        assert historial.status_code == 200
        assert len(historial.json()) == 1

    def test_reanudar_sin_suspendida(self, client, semillas, auth_headers, admin):
        socio = semillas.socio_habilitado()

        response = client.post(
            "/admin/membresias/reanudar", json={"id_socio": socio["id_socio"]}, headers=auth_headers(admin)
        )

        assert response.status_code == 409

    def test_cambiar_plan_y_bitacora(self, client, semillas, auth_headers, admin, session_factory):
        socio = semillas.socio_habilitado()
        headers = auth_headers(admin)

        response = client.post(
            "/admin/membresias/cambiar",
            json={"id_socio": socio["id_socio"], "plan": "Trimestral", "duracion_dias": 90, "motivo": "Promoción"},
            headers=headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["plan"] == "Trimestral"
        assert body["fecha_vencimiento"] == (date.today() + timedelta(days=90)).isoformat()
        with session_factory() as db:
            aviso = db.query(Notificacion).filter(Notificacion.tipo_evento == "membresia_actualizada").one()
            assert aviso.usuario_id == socio["id_socio"]

        bitacora = client.get(f"/admin/membresias/socio/{socio['id_socio']}/historial", headers=headers)
        assert bitacora.status_code == 200
        registro = bitacora.json()[0]
        assert registro["accion"] == "Cambiada"
        assert registro["plan_anterior"] == "Mensual"
        assert registro["plan_nuevo"] == "Trimestral"
        assert registro["registrado_por"] is not None

    def test_cambiar_plan_sin_duracion_ni_mantener_fechas(self, client, semillas, auth_headers, admin):
        socio = semillas.socio_habilitado()

        response = client.post(
            "/admin/membresias/cambiar",
            json={"id_socio": socio["id_socio"], "plan": "Trimestral"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 422

    def test_bitacora_de_socio_inexistente(self, client, auth_headers, admin):
        response = client.get("/admin/membresias/socio/999/historial", headers=auth_headers(admin))

        assert response.status_code == 404
