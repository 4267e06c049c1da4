# -*- coding: utf-8 -*-
"""
Último Estado de Impresora
Un único registro por impresora que se sobrescribe con cada reporte del agente
"""

from odoo import models, fields, api
import logging

from ..tools.online_state import ONLINE_STALE_MS, compute_derived_online

_logger = logging.getLogger(__name__)

STALE_MS_PARAM = 'print_monitor.online_stale_ms'


class PrinterLatestState(models.Model):
    _name = 'printer.latest.state'
    _description = 'Último Estado de Impresora'
    _order = 'last_seen_at desc'
    _rec_name = 'printer_id'

    printer_id = fields.Many2one(
        'printer.device',
        string='Impresora',
        required=True,
        ondelete='cascade',
        index=True
    )
    tenant_id = fields.Many2one(
        'printer.tenant',
        string='Empresa',
        related='printer_id.tenant_id',
        store=True,
        readonly=True,
        index=True
    )

    # Contadores (el ORM no guarda enteros nulos: *_known indica si se reportó)
    last_page_count = fields.Integer(string='Contador Total')
    page_count_known = fields.Boolean(string='Contador Total Reportado')
    last_page_mono = fields.Integer(string='Contador Monocromático')
    mono_known = fields.Boolean(string='Contador Mono Reportado')
    last_page_color = fields.Integer(string='Contador Color')
    color_known = fields.Boolean(string='Contador Color Reportado')

    # Suministros: [{"name": ..., "level": ..., "max": ...}]
    last_supplies = fields.Json(string='Suministros')

    # Estado
    last_seen_at = fields.Datetime(string='Última Vez Visto', index=True)
    online_signal = fields.Boolean(
        string='Respuesta SNMP',
        help='El agente obtuvo datos de la impresora en su último reporte'
    )
    low_toner = fields.Boolean(string='Tóner Bajo', index=True)
    agent_version = fields.Char(string='Versión del Agente')
    derived_online = fields.Boolean(
        string='En Línea',
        compute='_compute_derived_online'
    )

    # Puntero al último corte
    last_cut_id = fields.Many2one(
        'printer.cut',
        string='Último Corte',
        ondelete='set null'
    )
    last_cut_date = fields.Datetime(string='Fecha del Último Corte')

    _sql_constraints = [
        ('unique_printer', 'UNIQUE(printer_id)',
         'Cada impresora tiene un único registro de último estado'),
    ]

    @api.model
    def _get_online_stale_ms(self):
        """
        Umbral de antigüedad en ms: parámetro del sistema si existe, si no
        el valor leído de ONLINE_STALE_MS al iniciar el proceso
        """
        value = self.env['ir.config_parameter'].sudo().get_param(STALE_MS_PARAM)
        if value:
            try:
                parsed = int(value)
            except ValueError:
                _logger.warning(f"{STALE_MS_PARAM} inválido '{value}', usando {ONLINE_STALE_MS} ms")
            else:
                if parsed >= 0:
                    return parsed
                _logger.warning(f"{STALE_MS_PARAM} negativo ({parsed}), usando {ONLINE_STALE_MS} ms")
        return ONLINE_STALE_MS

    def _compute_derived_online(self):
        stale_ms = self._get_online_stale_ms()
        now = fields.Datetime.now()
        for record in self:
            record.derived_online = compute_derived_online(record, now=now, stale_ms=stale_ms)

    @api.model
    def _upsert_for_printer(self, printer, values):
        """
        Sobrescribe el último estado de la impresora (o lo crea)

        No se compara el timestamp recibido con el almacenado: un reporte
        atrasado reemplaza datos más recientes.
        """
        Latest = self.sudo()
        latest = Latest.search([('printer_id', '=', printer.id)], limit=1)
        if latest:
            latest.write(values)
        else:
            latest = Latest.create(dict(values, printer_id=printer.id))
        return latest

    def _to_api_dict(self, derived_online=None):
        self.ensure_one()
        if derived_online is None:
            derived_online = self.derived_online
        return {
            'lastPageCount': self.last_page_count if self.page_count_known else None,
            'lastPageMono': self.last_page_mono if self.mono_known else None,
            'lastPageColor': self.last_page_color if self.color_known else None,
            'lastSupplies': self.last_supplies or [],
            'lastSeenAt': self.last_seen_at.isoformat() if self.last_seen_at else None,
            'lowToner': self.low_toner,
            'online': self.online_signal,
            'derivedOnline': derived_online,
            'agentVersion': self.agent_version or None,
            'lastCutId': self.last_cut_id.id or None,
            'lastCutDate': self.last_cut_date.isoformat() if self.last_cut_date else None,
        }
