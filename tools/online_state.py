# -*- coding: utf-8 -*-
"""
Estado En Línea Derivado
Clasifica una impresora como en línea / fuera de línea según la antigüedad
de su último reporte
"""

import os
import logging
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone

from .telemetry import parse_timestamp

_logger = logging.getLogger(__name__)

DEFAULT_ONLINE_STALE_MS = 2 * 60 * 1000


def read_stale_threshold(environ):
    """
    Lee el umbral de antigüedad (ms) desde la variable ONLINE_STALE_MS

    Valores ausentes, no numéricos o negativos usan el valor por defecto.
    """
    raw = environ.get('ONLINE_STALE_MS')
    if raw in (None, ''):
        return DEFAULT_ONLINE_STALE_MS
    try:
        value = int(float(raw))
    except (TypeError, ValueError, OverflowError):
        _logger.warning(f"ONLINE_STALE_MS inválido '{raw}', usando {DEFAULT_ONLINE_STALE_MS} ms")
        return DEFAULT_ONLINE_STALE_MS
    if value < 0:
        _logger.warning(f"ONLINE_STALE_MS negativo ({value}), usando {DEFAULT_ONLINE_STALE_MS} ms")
        return DEFAULT_ONLINE_STALE_MS
    return value


# Se lee una sola vez al iniciar el proceso
ONLINE_STALE_MS = read_stale_threshold(os.environ)


def _snapshot_values(latest):
    if isinstance(latest, Mapping):
        return latest.get('last_seen_at'), latest.get('online')
    return (
        getattr(latest, 'last_seen_at', None),
        getattr(latest, 'online_signal', None),
    )


def compute_derived_online(latest, now=None, stale_ms=ONLINE_STALE_MS):
    """
    Decide si una impresora está en línea

    Args:
        latest: Último estado (dict con last_seen_at/online o registro
            printer.latest.state), o None
        now: Instante de referencia (UTC). Por defecto el instante actual
        stale_ms: Umbral máximo de antigüedad en milisegundos

    Returns:
        bool: True solo si el último reporte no supera el umbral y el agente
        no reportó explícitamente la impresora como caída
    """
    if not latest:
        return False

    last_seen, online = _snapshot_values(latest)
    if not last_seen:
        return False

    # Un negativo explícito del agente manda sobre la antigüedad
    if online is False:
        return False

    last_seen = parse_timestamp(last_seen)
    if last_seen is None:
        return False

    now = parse_timestamp(now) if now is not None else None
    if now is None:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
    return now - last_seen <= timedelta(milliseconds=stale_ms)
