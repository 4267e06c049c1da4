# -*- coding: utf-8 -*-
"""
Modelo de Empresas
Cada empresa agrupa impresoras y posee la API Key con la que sus agentes
envían telemetría
"""

from odoo import models, fields, api
from odoo.exceptions import AccessDenied, AccessError, ValidationError
import secrets
import logging

from ..tools.online_state import compute_derived_online

_logger = logging.getLogger(__name__)

API_KEY_PREFIX = 'emp_'


class PrinterTenant(models.Model):
    _name = 'printer.tenant'
    _description = 'Empresa'
    _inherit = ['mail.thread']
    _order = 'create_date desc, id desc'
    _rec_name = 'name'

    name = fields.Char(
        string='Nombre',
        required=True,
        tracking=True
    )
    company_code = fields.Char(
        string='Código de Empresa',
        index=True,
        help='Identificador de la cuenta propietaria (empresaId)'
    )
    city = fields.Char(
        string='Ciudad',
        index=True,
        tracking=True
    )

    # API Key (UNA POR EMPRESA)
    api_key = fields.Char(
        string='API Key',
        readonly=True,
        copy=False,
        index=True,
        help='Clave que los agentes envían en el header Authorization: Bearer'
    )
    api_key_last_used = fields.Datetime(
        string='API Key Usada Por Última Vez',
        readonly=True
    )
    api_key_requests_count = fields.Integer(
        string='Peticiones con API Key',
        readonly=True,
        default=0
    )
    is_active = fields.Boolean(
        string='Activa',
        default=True,
        index=True
    )

    # Relaciones
    printer_ids = fields.One2many(
        'printer.device',
        'tenant_id',
        string='Impresoras'
    )
    printer_count = fields.Integer(
        string='Total de Impresoras',
        compute='_compute_printer_stats'
    )
    online_printer_count = fields.Integer(
        string='Impresoras En Línea',
        compute='_compute_printer_stats'
    )

    _sql_constraints = [
        ('unique_api_key', 'UNIQUE(api_key)', 'La API Key debe ser única'),
        ('unique_name_scope', 'UNIQUE(name, company_code, city)',
         'La empresa ya existe en este ámbito'),
    ]

    @api.depends('printer_ids')
    def _compute_printer_stats(self):
        for record in self:
            record.printer_count = len(record.printer_ids)
            record.online_printer_count = len(
                record.printer_ids.filtered(lambda p: p.online)
            )

    @api.constrains('name')
    def _check_name(self):
        for record in self:
            if not record.name or len(record.name.strip()) < 3:
                raise ValidationError(
                    "El nombre de la empresa debe tener al menos 3 caracteres"
                )

    @api.model
    def _generate_api_key(self):
        """Genera una API Key con prefijo emp_"""
        return API_KEY_PREFIX + secrets.token_urlsafe(24)

    @api.model_create_multi
    def create(self, vals_list):
        """Al crear, normaliza el nombre y genera la API Key"""
        for vals in vals_list:
            if vals.get('name'):
                vals['name'] = vals['name'].strip()
            if not vals.get('api_key'):
                vals['api_key'] = self._generate_api_key()
        return super().create(vals_list)

    def write(self, vals):
        if vals.get('name'):
            vals['name'] = vals['name'].strip()
        return super().write(vals)

    def action_generate_api_key(self):
        """Rota la API Key; los agentes con la clave anterior quedan rechazados"""
        self.ensure_one()
        old_key = self.api_key
        self.write({
            'api_key': self._generate_api_key(),
            'api_key_last_used': False,
            'api_key_requests_count': 0,
        })
        _logger.info(
            f"Nueva API Key generada para empresa '{self.name}'. "
            f"Clave anterior: {old_key[:8] if old_key else 'N/A'}..."
        )
        return {
            'type': 'ir.actions.client',
            'tag': 'display_notification',
            'params': {
                'title': 'API Key Generada',
                'message': f'La API Key de {self.name} fue regenerada. '
                           'Actualice la configuración de sus agentes.',
                'type': 'warning',
                'sticky': False,
            }
        }

    def action_view_printers(self):
        """Abre vista de impresoras de esta empresa"""
        self.ensure_one()
        return {
            'type': 'ir.actions.act_window',
            'name': f'Impresoras - {self.name}',
            'res_model': 'printer.device',
            'view_mode': 'tree,form',
            'domain': [('tenant_id', '=', self.id)],
            'context': {'default_tenant_id': self.id},
        }

    @api.model
    def _authenticate_api_key(self, api_key):
        """
        Resuelve la empresa dueña de una API Key

        Raises:
            AccessDenied: no se envió API Key
            AccessError: la API Key no existe o la empresa está inactiva

        Returns:
            printer.tenant
        """
        if not api_key:
            _logger.warning("Intento de ingesta sin API Key")
            raise AccessDenied("Falta ApiKey")

        tenant = self.sudo().search([
            ('api_key', '=', api_key),
            ('is_active', '=', True),
        ], limit=1)
        if not tenant:
            _logger.warning(f"Intento de ingesta con API Key inválida: {api_key[:8]}...")
            raise AccessError("ApiKey inválida")

        tenant.write({
            'api_key_last_used': fields.Datetime.now(),
            'api_key_requests_count': tenant.api_key_requests_count + 1,
        })
        return tenant

    def list_printers(self, city=None, now=None):
        """
        Impresoras de la empresa con su estado en línea derivado

        Args:
            city: Filtro opcional por ciudad
            now: Instante de referencia para la antigüedad

        Returns:
            Lista de diccionarios listos para serializar
        """
        self.ensure_one()
        domain = [('tenant_id', '=', self.id)]
        if city:
            domain.append(('city', '=', city))
        printers = self.env['printer.device'].search(domain)

        stale_ms = self.env['printer.latest.state']._get_online_stale_ms()
        now = now or fields.Datetime.now()
        result = []
        for printer in printers:
            latest = printer.latest_state_id
            online = compute_derived_online(latest, now=now, stale_ms=stale_ms)
            data = printer._to_api_dict()
            data['online'] = online
            data['latest'] = latest._to_api_dict(derived_online=online) if latest else None
            result.append(data)
        return result

    @api.depends('name', 'city')
    def _compute_display_name(self):
        for record in self:
            name = record.name or ''
            if record.city:
                name += f" ({record.city})"
            record.display_name = name
