# -*- coding: utf-8 -*-
"""
Modelo de Impresoras
Se crean y actualizan a partir de la telemetría que envían los agentes
"""

from odoo import models, fields, api
from odoo.exceptions import UserError, ValidationError
import logging

from ..tools.online_state import compute_derived_online
from ..tools.telemetry import (
    coerce_counter,
    has_snmp_signal,
    is_low_toner,
    normalize_supplies,
    parse_timestamp,
)

_logger = logging.getLogger(__name__)

DEFAULT_AGENT_VERSION = '1.0.0'


def _text(value):
    """Texto limpio o False (el ORM guarda False como NULL)"""
    if value is None or value is False:
        return False
    value = str(value).strip()
    return value or False


class Printer(models.Model):
    _name = 'printer.device'
    _description = 'Impresora'
    _order = 'name'
    _rec_name = 'name'

    # Información Básica
    name = fields.Char(
        string='Nombre',
        compute='_compute_name',
        store=True
    )
    host = fields.Char(
        string='Host / IP',
        required=True,
        index=True
    )
    serial_number = fields.Char(
        string='Número de Serie',
        index=True
    )
    printer_name = fields.Char(string='Nombre Reportado')
    sys_name = fields.Char(string='sysName')
    sys_descr = fields.Char(string='sysDescr')
    model = fields.Char(string='Modelo')
    model_label = fields.Char(
        string='Modelo / Descripción',
        compute='_compute_model_label'
    )

    # Empresa
    tenant_id = fields.Many2one(
        'printer.tenant',
        string='Empresa',
        required=True,
        ondelete='cascade',
        index=True
    )
    city = fields.Char(
        string='Ciudad',
        index=True
    )

    # Último Estado
    latest_state_ids = fields.One2many(
        'printer.latest.state',
        'printer_id',
        string='Estados'
    )
    latest_state_id = fields.Many2one(
        'printer.latest.state',
        string='Último Estado',
        compute='_compute_latest_state'
    )
    last_seen_at = fields.Datetime(
        string='Última Vez Visto',
        related='latest_state_id.last_seen_at'
    )
    last_page_count = fields.Integer(
        string='Contador Total',
        related='latest_state_id.last_page_count'
    )
    low_toner = fields.Boolean(
        string='Tóner Bajo',
        related='latest_state_id.low_toner'
    )
    online = fields.Boolean(
        string='En Línea',
        compute='_compute_online',
        help='Se recalcula en cada lectura según el umbral de antigüedad'
    )

    # Cortes
    cut_ids = fields.One2many(
        'printer.cut',
        'printer_id',
        string='Cortes'
    )
    cut_count = fields.Integer(
        string='Cortes',
        compute='_compute_cut_count'
    )
    last_cut_id = fields.Many2one(
        'printer.cut',
        string='Último Corte',
        related='latest_state_id.last_cut_id'
    )

    _sql_constraints = [
        ('unique_serial_per_tenant',
         'UNIQUE(tenant_id, serial_number)',
         'Ya existe una impresora con este número de serie en esta empresa'),
    ]

    @api.depends('printer_name', 'sys_name', 'host')
    def _compute_name(self):
        for record in self:
            record.name = record.printer_name or record.sys_name or record.host or 'Nueva Impresora'

    @api.depends('model', 'sys_descr')
    def _compute_model_label(self):
        for record in self:
            record.model_label = record.model or record.sys_descr or ''

    @api.depends('latest_state_ids')
    def _compute_latest_state(self):
        for record in self:
            record.latest_state_id = record.latest_state_ids[:1]

    def _compute_online(self):
        """Estado en línea derivado, nunca almacenado"""
        stale_ms = self.env['printer.latest.state']._get_online_stale_ms()
        now = fields.Datetime.now()
        for record in self:
            record.online = compute_derived_online(
                record.latest_state_id, now=now, stale_ms=stale_ms
            )

    @api.depends('cut_ids')
    def _compute_cut_count(self):
        for record in self:
            record.cut_count = len(record.cut_ids)

    @api.model
    def _prepare_identity_values(self, tenant, payload):
        """
        Valores de identidad reportados por el agente

        Se escriben siempre (última escritura gana), incluso vacíos.
        """
        return {
            'tenant_id': tenant.id,
            'host': _text(payload.get('host')),
            'serial_number': _text(payload.get('serial')),
            'sys_name': _text(payload.get('sysName')),
            'sys_descr': _text(payload.get('sysDescr')),
            'printer_name': _text(payload.get('printerName')),
            'model': _text(payload.get('model')),
            'city': _text(payload.get('ciudad')),
        }

    @api.model
    def _find_or_create_for_telemetry(self, tenant, payload):
        """
        Busca la impresora de la empresa por número de serie (si viene) o por
        host, y la crea si no existe

        Returns:
            tuple: (printer.device, bool creada)
        """
        values = self._prepare_identity_values(tenant, payload)
        domain = [('tenant_id', '=', tenant.id)]
        if values['serial_number']:
            domain.append(('serial_number', '=', values['serial_number']))
        else:
            domain.append(('host', '=', values['host']))

        Printer = self.sudo()
        printer = Printer.search(domain, limit=1)
        if printer:
            printer.write(values)
            _logger.info(f"Impresora actualizada: {printer.name} ({printer.host}) en {tenant.name}")
            return printer, False

        printer = Printer.create(values)
        _logger.info(f"Impresora creada: {printer.name} ({printer.host}) en {tenant.name}")
        return printer, True

    @api.model
    def ingest_telemetry(self, api_key, payload):
        """
        Procesa un reporte de telemetría de un agente

        Payload esperado:
        {
            "host": "10.0.0.14",
            "serial": "XYZ123",
            "pageCount": 12345,
            "pageCountMono": 10000,
            "pageCountColor": 2345,
            "supplies": [{"name": "Black Toner", "level": 40, "max": 100}],
            "sysName": "printer-01",
            "sysDescr": "HP LaserJet",
            "printerName": "Recepción",
            "model": "M404",
            "ciudad": "Lima",
            "ts": "2025-10-13T10:30:00Z",
            "agentVersion": "1.2.0"
        }

        Raises:
            AccessDenied: sin API Key
            AccessError: API Key inválida
            ValidationError: falta host

        Returns:
            dict con printer_id, tenant_id, agent_version, created
        """
        tenant = self.env['printer.tenant']._authenticate_api_key(api_key)

        if not isinstance(payload, dict):
            raise ValidationError("El cuerpo de la petición debe ser un objeto JSON")
        if not _text(payload.get('host')):
            raise ValidationError("host requerido")

        printer, created = self._find_or_create_for_telemetry(tenant, payload)

        ts = payload.get('ts')
        # Un ts ilegible deja la impresora sin última vez visto (fuera de línea)
        last_seen_at = parse_timestamp(ts) if ts else fields.Datetime.now()

        supplies = normalize_supplies(payload.get('supplies'))
        page_count = coerce_counter(payload.get('pageCount'))
        page_mono = coerce_counter(payload.get('pageCountMono'))
        page_color = coerce_counter(payload.get('pageCountColor'))
        agent_version = _text(payload.get('agentVersion')) or DEFAULT_AGENT_VERSION

        self.env['printer.latest.state']._upsert_for_printer(printer, {
            'last_page_count': page_count or 0,
            'page_count_known': page_count is not None,
            'last_page_mono': page_mono or 0,
            'mono_known': page_mono is not None,
            'last_page_color': page_color or 0,
            'color_known': page_color is not None,
            'last_supplies': supplies,
            'last_seen_at': last_seen_at or False,
            'low_toner': is_low_toner(supplies),
            'online_signal': has_snmp_signal(payload),
            'agent_version': agent_version,
        })

        return {
            'printer_id': printer.id,
            'tenant_id': tenant.id,
            'agent_version': agent_version,
            'created': created,
        }

    def _to_api_dict(self):
        self.ensure_one()
        return {
            'id': self.id,
            'tenant_id': self.tenant_id.id,
            'name': self.name,
            'host': self.host,
            'serial': self.serial_number or None,
            'printer_name': self.printer_name or None,
            'sys_name': self.sys_name or None,
            'sys_descr': self.sys_descr or None,
            'model': self.model or None,
            'city': self.city or None,
            'created_at': self.create_date.isoformat() if self.create_date else None,
        }

    def action_register_cut(self):
        """Registra un corte con los contadores actuales"""
        self.ensure_one()
        cut = self.env['printer.cut'].register_cut(self.id)
        return {
            'type': 'ir.actions.client',
            'tag': 'display_notification',
            'params': {
                'title': 'Corte Registrado',
                'message': f'{cut.name}: {cut.total_pages:,} páginas ({cut.period_label})',
                'type': 'success',
                'sticky': False,
                'next': {'type': 'ir.actions.client', 'tag': 'soft_reload'},
            }
        }

    def action_view_cuts(self):
        """Abre el historial de cortes"""
        self.ensure_one()
        return {
            'type': 'ir.actions.act_window',
            'name': f'Cortes - {self.name}',
            'res_model': 'printer.cut',
            'view_mode': 'tree,form',
            'domain': [('printer_id', '=', self.id)],
            'context': {'create': False},
        }

    def action_download_report(self):
        """Descarga el PDF del último corte"""
        self.ensure_one()
        if not self.last_cut_id:
            raise UserError("Primero debe registrar un corte para generar el PDF")
        return {
            'type': 'ir.actions.act_url',
            'url': f'/api/impresoras/{self.id}/generar-pdf',
            'target': 'self',
        }
