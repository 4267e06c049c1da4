# -*- coding: utf-8 -*-
"""
Cálculo de Períodos de Corte
Diferencia de contadores entre el corte anterior y el último estado
"""

from collections.abc import Mapping
from datetime import datetime, timezone

from .telemetry import coerce_counter, parse_timestamp

FIRST_CUT_PERIOD_LABEL = 'Desde instalación'


def _value(obj, name):
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def format_period_label(start, end):
    """Etiqueta legible del período: 'dd/mm/YYYY - dd/mm/YYYY'"""
    start = parse_timestamp(start)
    end = parse_timestamp(end)
    start_label = start.strftime('%d/%m/%Y') if start else 'Sin fecha'
    end_label = end.strftime('%d/%m/%Y') if end else 'Sin fecha'
    return f"{start_label} - {end_label}"


def calculate_cut_period(previous_cut, latest, now=None):
    """
    Calcula los contadores de un nuevo corte

    Reglas:
    - Primer corte: inicio = 0, total = contador actual
    - Cortes siguientes: inicio = fin del corte anterior,
      total = max(0, fin - inicio). Un contador que retrocede (reset de
      firmware, cambio de equipo) genera un período con 0 páginas

    Args:
        previous_cut: Corte anterior (registro printer.cut o dict), o None
        latest: Último estado (registro printer.latest.state o dict)
        now: Fin del período (UTC). Por defecto el instante actual

    Returns:
        dict con counter_start, counter_end, total_pages, period_label,
        is_first_cut
    """
    counter_end = coerce_counter(_value(latest, 'last_page_count') if latest else None) or 0

    if not previous_cut:
        return {
            'counter_start': 0,
            'counter_end': counter_end,
            'total_pages': counter_end,
            'period_label': FIRST_CUT_PERIOD_LABEL,
            'is_first_cut': True,
        }

    if now is None:
        now = datetime.now(timezone.utc).replace(tzinfo=None)

    counter_start = coerce_counter(_value(previous_cut, 'counter_end')) or 0
    return {
        'counter_start': counter_start,
        'counter_end': counter_end,
        'total_pages': max(0, counter_end - counter_start),
        'period_label': format_period_label(_value(previous_cut, 'cut_date'), now),
        'is_first_cut': False,
    }
