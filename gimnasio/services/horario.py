# gimnasio/services/horario.py
"""
Grilla semanal del entrenador: bloques de horario x días de la semana.

Cada clase se ubica en el bloque donde empieza; `altura` y `posicion` son
porcentajes del bloque para dibujarla con posición absoluta.
"""

import unicodedata
from datetime import time
from typing import Iterable, List, Tuple
from gimnasio.models.clase import DIAS_SEMANA

BLOQUES_HORARIO: List[Tuple[time, time]] = [
    (time(6, 0), time(8, 0)),
    (time(8, 0), time(10, 0)),
    (time(10, 0), time(12, 0)),
    (time(12, 0), time(14, 0)),
    (time(14, 0), time(16, 0)),
    (time(16, 0), time(18, 0)),
    (time(18, 0), time(20, 0)),
    (time(20, 0), time(22, 0)),
    (time(22, 0), time(23, 0)),
]

# Porcentaje del bloque ocupado a partir del cual se considera lleno
UMBRAL_BLOQUE_COMPLETO = 90


def minutos(hora: time) -> int:
    return hora.hour * 60 + hora.minute


def normalizar_dia(dia: str) -> str:
    """'Miércoles' -> 'miercoles'"""
    if not dia:
        return ""
    descompuesto = unicodedata.normalize("NFD", dia.strip())
    return "".join(c for c in descompuesto if unicodedata.category(c) != "Mn").lower()


def altura_proporcional(hora_inicio: time, hora_fin: time, bloque_inicio: time, bloque_fin: time) -> float:
    duracion_bloque = minutos(bloque_fin) - minutos(bloque_inicio)
    if duracion_bloque == 0:
        return 0
    duracion_clase = minutos(hora_fin) - minutos(hora_inicio)
    return min(duracion_clase / duracion_bloque * 100, 100)


def posicion_vertical(hora_inicio: time, bloque_inicio: time, bloque_fin: time) -> float:
    duracion_bloque = minutos(bloque_fin) - minutos(bloque_inicio)
    if duracion_bloque == 0:
        return 0
    offset = minutos(hora_inicio) - minutos(bloque_inicio)
    return max(offset / duracion_bloque * 100, 0)


def bloque_completo(clases: Iterable, bloque_inicio: time, bloque_fin: time) -> bool:
    inicio_bloque = minutos(bloque_inicio)
    fin_bloque = minutos(bloque_fin)
    duracion_bloque = fin_bloque - inicio_bloque
    if duracion_bloque <= 0:
        return True

    ocupados = 0
    for clase in clases:
        inicio = max(minutos(clase.hora_inicio), inicio_bloque)
        fin = min(minutos(clase.hora_fin), fin_bloque)
        ocupados += max(0, fin - inicio)

    return ocupados / duracion_bloque * 100 >= UMBRAL_BLOQUE_COMPLETO


def construir_grilla(clases: Iterable) -> List[dict]:
    """
    Devuelve una fila por bloque con una celda por día. Las clases cuyo inicio
    cae fuera de todos los bloques no aparecen.
    """
    clases = list(clases)
    grilla = []
    for bloque_inicio, bloque_fin in BLOQUES_HORARIO:
        celdas = []
        for dia in DIAS_SEMANA:
            dia_normalizado = normalizar_dia(dia)
            en_bloque = [
                c for c in clases
                if normalizar_dia(c.dia_semana) == dia_normalizado
                and minutos(bloque_inicio) <= minutos(c.hora_inicio) < minutos(bloque_fin)
            ]
            celdas.append({
                "dia": dia,
                "completo": bool(en_bloque) and bloque_completo(en_bloque, bloque_inicio, bloque_fin),
                "clases": [
                    {
                        "id_clase": c.id_clase,
                        "nombre_clase": c.nombre_clase,
                        "categoria": c.categoria,
                        "hora_inicio": c.hora_inicio.strftime("%H:%M"),
                        "hora_fin": c.hora_fin.strftime("%H:%M"),
                        "altura": round(altura_proporcional(c.hora_inicio, c.hora_fin, bloque_inicio, bloque_fin), 2),
                        "posicion": round(posicion_vertical(c.hora_inicio, bloque_inicio, bloque_fin), 2),
                    }
                    for c in sorted(en_bloque, key=lambda c: c.hora_inicio)
                ],
            })
        grilla.append({
            "inicio": bloque_inicio.strftime("%H:%M"),
            "fin": bloque_fin.strftime("%H:%M"),
            "dias": celdas,
        })
    return grilla
