# -*- coding: utf-8 -*-
"""
Utilidades de Telemetría
Normalización de los datos que envían los agentes de monitoreo
"""

import math
import logging
from datetime import datetime, timezone

_logger = logging.getLogger(__name__)

LOW_TONER_PERCENT = 20

IDENTITY_SIGNAL_FIELDS = ('sysName', 'sysDescr', 'serial', 'model')


def parse_timestamp(value):
    """
    Parsea un timestamp y lo convierte a datetime naive en UTC

    Soporta formatos:
    - ISO con microsegundos: "2025-10-19T10:57:00.161493"
    - ISO con zona horaria: "2025-10-19T10:57:00Z", "2025-10-19T10:57:00-05:00"
    - Formato Odoo: "2025-10-19 10:57:00"

    Returns:
        datetime o None si el valor no es interpretable
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith('Z') or text.endswith('z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            _logger.debug(f"Timestamp no interpretable: '{value}'")
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _is_number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def coerce_counter(value):
    """Devuelve el contador como entero, o None si no es un número"""
    if not _is_number(value) or math.isinf(value):
        return None
    return int(value)


def normalize_supplies(value):
    """Solo se aceptan listas; los elementos se guardan tal cual"""
    return list(value) if isinstance(value, list) else []


def has_snmp_signal(payload):
    """
    Determina si el agente obtuvo respuesta SNMP de la impresora

    True si hay contador numérico, suministros, o algún dato de identidad.
    """
    if _is_number(payload.get('pageCount')):
        return True
    supplies = payload.get('supplies')
    if isinstance(supplies, list) and supplies:
        return True
    return any(payload.get(key) for key in IDENTITY_SIGNAL_FIELDS)


def _to_float(value):
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def supply_percentage(supply):
    """
    Porcentaje de un suministro: level/max*100 si max es positivo,
    si no el level se toma como porcentaje directo

    Returns:
        float o None si el suministro no reporta nivel o no es numérico
    """
    if not isinstance(supply, dict) or 'level' not in supply:
        return None
    # Un nivel nulo o vacío cuenta como 0 (suministro agotado)
    raw_level = supply['level']
    level = 0.0 if raw_level is None or raw_level == '' else _to_float(raw_level)
    if level is None:
        return None
    maximum = _to_float(supply.get('max'))
    if maximum is not None and maximum > 0:
        return level / maximum * 100
    return level


def is_low_toner(supplies):
    """True si algún suministro está al 20% o menos"""
    if not isinstance(supplies, list):
        return False
    for supply in supplies:
        percentage = supply_percentage(supply)
        if percentage is not None and percentage <= LOW_TONER_PERCENT:
            return True
    return False
