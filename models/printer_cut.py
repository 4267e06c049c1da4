# -*- coding: utf-8 -*-
"""
Cortes de Contadores (PERSISTENTE, SOLO INSERCIÓN)
Historial inmutable de períodos de consumo por impresora
"""

from odoo import models, fields, api
from odoo.exceptions import MissingError, UserError
import logging

from ..report.cut_report import CutReportPDFGenerator
from ..tools.cut_period import calculate_cut_period

_logger = logging.getLogger(__name__)


class PrinterCut(models.Model):
    _name = 'printer.cut'
    _description = 'Corte de Contadores'
    _order = 'cut_date desc, id desc'
    _rec_name = 'name'

    name = fields.Char(
        string='Referencia',
        required=True,
        copy=False,
        readonly=True,
        default='Nuevo'
    )

    # Relaciones
    printer_id = fields.Many2one(
        'printer.device',
        string='Impresora',
        required=True,
        readonly=True,
        ondelete='cascade',
        index=True
    )
    tenant_id = fields.Many2one(
        'printer.tenant',
        string='Empresa',
        required=True,
        readonly=True,
        ondelete='cascade',
        index=True
    )
    previous_cut_id = fields.Many2one(
        'printer.cut',
        string='Corte Anterior',
        readonly=True,
        ondelete='set null',
        help='Corte que este corte cerró'
    )

    # Fechas
    cut_date = fields.Datetime(
        string='Fecha de Corte',
        required=True,
        readonly=True,
        index=True
    )
    month = fields.Integer(string='Mes', readonly=True)
    year = fields.Integer(string='Año', readonly=True, index=True)
    period_label = fields.Char(string='Período', readonly=True)
    is_first_cut = fields.Boolean(string='Primer Corte', readonly=True)

    # Contadores
    counter_start = fields.Integer(string='Inicio Período', readonly=True)
    counter_end = fields.Integer(string='Fin Período', readonly=True)
    total_pages = fields.Integer(string='Consumo Total', readonly=True)

    # Suministros
    supplies_start = fields.Json(string='Suministros al Inicio', readonly=True)
    supplies_end = fields.Json(string='Suministros al Final', readonly=True)

    # Copia de la identidad de la impresora al momento del corte
    printer_name = fields.Char(string='Nombre de Impresora', readonly=True)
    printer_model = fields.Char(string='Modelo de Impresora', readonly=True)

    @api.model_create_multi
    def create(self, vals_list):
        """Genera secuencia automática para el nombre"""
        for vals in vals_list:
            if vals.get('name', 'Nuevo') == 'Nuevo':
                vals['name'] = self.env['ir.sequence'].next_by_code('printer.cut') or 'Nuevo'
        return super().create(vals_list)

    def write(self, vals):
        raise UserError("Los cortes son registros históricos y no se pueden modificar")

    @api.ondelete(at_uninstall=False)
    def _unlink_never(self):
        # La eliminación en cascada de la empresa se hace en la base de datos
        raise UserError("Los cortes son registros históricos y no se pueden eliminar")

    @api.model
    def _lock_latest_state(self, latest):
        """Bloquea el último estado de la impresora hasta el fin de la transacción"""
        self.env.cr.execute(
            "SELECT id FROM printer_latest_state WHERE id = %s FOR UPDATE",
            [latest.id]
        )
        latest.invalidate_recordset()

    @api.model
    def register_cut(self, printer_id):
        """
        Registra un nuevo corte para la impresora

        Flujo:
        1. La impresora y su último estado deben existir
        2. Se bloquea el último estado (un corte simultáneo de la misma
           impresora falla por serialización y Odoo reintenta la petición,
           que se encadena al corte recién creado)
        3. Se calculan los contadores desde el corte anterior
        4. Se guarda el corte (como superusuario: los usuarios no crean cortes
           directamente) y solo después se actualiza el puntero
           last_cut_id del último estado

        No es idempotente: dos llamadas seguidas crean dos cortes.

        Raises:
            MissingError: impresora o datos de impresora inexistentes

        Returns:
            printer.cut
        """
        printer = self.env['printer.device'].browse(printer_id).exists()
        if not printer:
            raise MissingError("Impresora no encontrada")

        latest = self.env['printer.latest.state'].search([
            ('printer_id', '=', printer.id)
        ], limit=1)
        if not latest:
            raise MissingError("Datos de impresora no encontrados")

        self._lock_latest_state(latest)
        previous = latest.last_cut_id

        now = fields.Datetime.now()
        calculation = calculate_cut_period(previous, latest, now=now)

        cut = self.sudo().create({
            'printer_id': printer.id,
            'tenant_id': printer.tenant_id.id,
            'previous_cut_id': previous.id or False,
            'cut_date': now,
            'month': now.month,
            'year': now.year,
            'counter_start': calculation['counter_start'],
            'counter_end': calculation['counter_end'],
            'total_pages': calculation['total_pages'],
            'period_label': calculation['period_label'],
            'is_first_cut': calculation['is_first_cut'],
            'supplies_start': list(previous.supplies_end or []) if previous else [],
            'supplies_end': list(latest.last_supplies or []),
            'printer_name': printer.name,
            'printer_model': printer.model_label or '',
        })
        cut.flush_recordset()

        latest.sudo().write({
            'last_cut_id': cut.id,
            'last_cut_date': now,
        })

        _logger.info(
            f"Corte registrado: {cut.name} para {printer.name} "
            f"({cut.counter_start:,} → {cut.counter_end:,}, {cut.total_pages:,} páginas, "
            f"primer corte: {cut.is_first_cut})"
        )
        return cut.with_env(self.env)

    def _iter_history(self):
        """Recorre la cadena de cortes hacia atrás, empezando por este"""
        self.ensure_one()
        cut = self
        seen = set()
        while cut and cut.id not in seen:
            seen.add(cut.id)
            yield cut
            cut = cut.previous_cut_id

    def get_history(self):
        """Historial completo como recordset, del más reciente al más antiguo"""
        self.ensure_one()
        return self.browse([cut.id for cut in self._iter_history()])

    def _to_api_dict(self):
        self.ensure_one()
        return {
            'id': self.id,
            'name': self.name,
            'printerId': self.printer_id.id,
            'tenantId': self.tenant_id.id,
            'previousCutId': self.previous_cut_id.id or None,
            'cutDate': self.cut_date.isoformat() if self.cut_date else None,
            'month': self.month,
            'year': self.year,
            'counterStart': self.counter_start,
            'counterEnd': self.counter_end,
            'totalPages': self.total_pages,
            'period': self.period_label,
            'isFirstCut': self.is_first_cut,
            'suppliesStart': self.supplies_start or [],
            'suppliesEnd': self.supplies_end or [],
            'printerName': self.printer_name,
            'printerModel': self.printer_model,
        }

    def _render_report_pdf(self):
        """
        Genera el reporte PDF del corte

        Returns:
            tuple: (nombre de archivo, contenido PDF en bytes)
        """
        self.ensure_one()
        generator = CutReportPDFGenerator(self, self.printer_id, self.tenant_id)
        return generator.get_filename(), generator.render()

    def action_download_report(self):
        """Descarga el PDF de este corte"""
        self.ensure_one()
        return {
            'type': 'ir.actions.act_url',
            'url': f'/api/cortes/{self.id}/generar-pdf',
            'target': 'self',
        }

    def action_view_previous_cut(self):
        self.ensure_one()
        if not self.previous_cut_id:
            raise UserError("Este es el primer corte de la impresora")
        return {
            'type': 'ir.actions.act_window',
            'res_model': 'printer.cut',
            'res_id': self.previous_cut_id.id,
            'view_mode': 'form',
            'target': 'current',
        }
