# -*- coding: utf-8 -*-
"""
Reporte PDF de Consumo por Corte
Encabezado, datos de la impresora, contadores del período, estado de
suministros, información adicional y pie de página
"""

import math
from datetime import datetime
from io import BytesIO

from reportlab.lib.colors import HexColor, white
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from ..tools.telemetry import supply_percentage

MAX_REPORT_SUPPLIES = 4

SUPPLY_COLOR_CRITICAL = '#ef4444'
SUPPLY_COLOR_WARNING = '#f59e0b'
SUPPLY_COLOR_OK = '#22c55e'

SPANISH_MONTHS = [
    'enero', 'febrero', 'marzo', 'abril', 'mayo', 'junio',
    'julio', 'agosto', 'septiembre', 'octubre', 'noviembre', 'diciembre',
]


def supply_color(percentage):
    """Color de la barra: rojo <= 20%, ámbar <= 50%, verde el resto"""
    if percentage <= 20:
        return SUPPLY_COLOR_CRITICAL
    if percentage <= 50:
        return SUPPLY_COLOR_WARNING
    return SUPPLY_COLOR_OK


def _format_number(value):
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value:,}" if isinstance(value, (int, float)) else str(value)


def supply_status_rows(supplies, limit=MAX_REPORT_SUPPLIES):
    """
    Filas de suministros para el reporte (máximo 4)

    Returns:
        Lista de dict con name, level, max, percentage, percentage_label,
        color, label
    """
    rows = []
    for index, supply in enumerate((supplies or [])[:limit]):
        if not isinstance(supply, dict):
            supply = {}
        percentage = supply_percentage(supply) or 0.0
        level = supply.get('level') or 0
        maximum = supply.get('max')
        if isinstance(maximum, bool) or not isinstance(maximum, (int, float)) or maximum <= 0:
            maximum = 100
        rows.append({
            'name': str(supply.get('name') or f'Supply {index + 1}').upper(),
            'level': level,
            'max': maximum,
            'percentage': percentage,
            'percentage_label': f"{math.floor(percentage + 0.5)}%",
            'color': supply_color(percentage),
            'label': f"{_format_number(level)}/{_format_number(maximum)}",
        })
    return rows


def format_generation_date(value):
    """'18 de octubre de 2026, 10:30'"""
    return f"{value.day} de {SPANISH_MONTHS[value.month - 1]} de {value.year}, {value:%H:%M}"


class CutReportPDFGenerator:
    """
    Genera el reporte PDF de un corte

    Las posiciones se expresan desde el borde superior de la página, como se
    diseñó el formato; _y() las convierte al sistema de coordenadas de
    reportlab (origen abajo a la izquierda).
    """

    margin = 20
    bottom_margin = 20

    def __init__(self, cut, printer, tenant, generated_at=None):
        self.cut = cut
        self.printer = printer
        self.tenant = tenant
        self.generated_at = generated_at or datetime.now()
        self.buffer = BytesIO()
        self.canvas = canvas.Canvas(self.buffer, pagesize=A4)
        self.width, self.height = A4

    def render(self):
        """Genera el documento completo y devuelve los bytes del PDF"""
        self.canvas.setTitle(f"Reporte de consumo {self.cut.name or ''}")
        self._create_pdf_document()
        self.canvas.showPage()
        self.canvas.save()
        return self.buffer.getvalue()

    def get_filename(self):
        printer_label = self.printer.printer_name or self.printer.host or 'impresora'
        safe_label = ''.join(c if c.isalnum() or c in '-_.' else '_' for c in printer_label)
        return f"reporte-{safe_label}-{int(self.generated_at.timestamp() * 1000)}.pdf"

    def _create_pdf_document(self):
        self._render_header()
        self._render_general_information(120)
        self._render_statistics(220)
        self._render_supplies(320)
        self._render_additional_information(420)
        self._render_footer()

    # Primitivas de dibujo

    def _y(self, top):
        return self.height - top

    def _box(self, x, top, width, height, fill, stroke=None):
        c = self.canvas
        c.setFillColor(HexColor(fill))
        if stroke:
            c.setStrokeColor(HexColor(stroke))
        c.rect(x, self._y(top + height), width, height, fill=1, stroke=1 if stroke else 0)

    def _text(self, text, x, top, size, color, bold=False, width=None):
        """Texto con la línea superior en 'top'; centrado si se indica ancho"""
        c = self.canvas
        c.setFont('Helvetica-Bold' if bold else 'Helvetica', size)
        c.setFillColor(color if not isinstance(color, str) else HexColor(color))
        baseline = self._y(top + size)
        if width is None:
            c.drawString(x, baseline, text)
        else:
            c.drawCentredString(x + width / 2, baseline, text)

    # Secciones

    def _render_header(self):
        self._box(0, 0, self.width, 100, '#1e3a8a')
        self._text('REPORTE DE CONSUMO', 0, 35, 24, white, bold=True, width=self.width)
        self._text('Sistema de Gestión de Impresoras', 0, 65, 12, white, width=self.width)

    def _render_general_information(self, top):
        self._box(self.margin, top, self.width - 2 * self.margin, 80, '#f8fafc', '#e2e8f0')
        col1 = 30
        col2 = self.width / 2

        self._text('INFORMACIÓN GENERAL', col1, top + 15, 10, '#1e293b', bold=True)

        printer = self.printer
        lines_left = [
            f"Empresa: {self.tenant.name or 'N/A'}",
            f"Impresora: {printer.printer_name or printer.sys_name or printer.host}",
            f"Modelo: {printer.model or printer.sys_descr or 'N/A'}",
        ]
        lines_right = [
            f"Número de Serie: {printer.serial_number or 'No disponible'}",
            f"Ubicación: {printer.city or 'N/A'}",
            f"Período: {self.cut.period_label or 'No especificado'}",
        ]
        for offset, (left, right) in zip((35, 50, 65), zip(lines_left, lines_right)):
            self._text(left, col1, top + offset, 9, '#475569')
            self._text(right, col2, top + offset, 9, '#475569')

    def _render_statistics(self, top):
        stat_width = (self.width - 60) / 3
        stats = [
            ('INICIO PERÍODO', self.cut.counter_start, '#f0f9ff', '#bae6fd', '#0c4a6e', 18),
            ('FIN PERÍODO', self.cut.counter_end, '#f0fdf4', '#bbf7d0', '#15803d', 18),
            ('CONSUMO TOTAL', self.cut.total_pages, '#fef7ed', '#fed7aa', '#c2410c', 22),
        ]
        for i, (label, value, background, stroke, color, size) in enumerate(stats):
            x = self.margin + i * (stat_width + 10)
            self._box(x, top, stat_width, 80, background, stroke)
            self._text(label, x, top + 15, 11, '#0369a1', bold=True, width=stat_width)
            self._text(_format_number(value or 0), x, top + 35, size, color, bold=True, width=stat_width)
            self._text('PÁGINAS', x, top + 60, 8, '#64748b', width=stat_width)

    def _render_supplies(self, top):
        self._text('ESTADO DE SUMINISTROS', self.margin, top, 12, '#1e293b', bold=True)

        rows = supply_status_rows(self.cut.supplies_end)
        if not rows:
            self._text('No hay datos de suministros disponibles', self.margin, top + 40, 10, '#94a3b8')
            return

        supply_width = (self.width - 60) / len(rows)
        x = self.margin
        for row in rows:
            self._box(x, top + 25, supply_width - 10, 60, '#f8fafc', '#e2e8f0')
            self._text(row['name'], x + 5, top + 35, 8, '#475569', bold=True, width=supply_width - 20)

            bar_width = supply_width - 30
            bar_x = x + 5
            bar_top = top + 50
            self._box(bar_x, bar_top, bar_width, 8, '#e2e8f0')
            fill_ratio = min(max(row['percentage'], 0), 100) / 100
            if fill_ratio > 0:
                self._box(bar_x, bar_top, fill_ratio * bar_width, 8, row['color'])

            self._text(row['percentage_label'], bar_x, bar_top + 12, 7, '#1e293b', bold=True, width=bar_width)
            self._text(row['label'], bar_x, bar_top + 25, 7, '#64748b', width=bar_width)
            x += supply_width

    def _render_additional_information(self, top):
        self._box(self.margin, top, self.width - 2 * self.margin, 60, '#f8fafc', '#e2e8f0')
        self._text('INFORMACIÓN ADICIONAL', 30, top + 15, 10, '#1e293b', bold=True)
        self._text(
            f"Fecha de generación: {format_generation_date(self.generated_at)}",
            30, top + 35, 8, '#475569'
        )
        self._text(f"ID del reporte: {self.cut.name or self.cut.id or 'N/A'}", 30, top + 50, 8, '#475569')

    def _render_footer(self):
        footer_top = self.height - 40 - self.bottom_margin
        self._box(0, footer_top, self.width, 40, '#1e293b')
        self._text(
            'Sistema de Monitoreo de Impresoras • Reporte generado automáticamente',
            self.margin, footer_top + 15, 7, white
        )
        self._text(f"Página 1 de 1 • {self.generated_at.year}", 0, footer_top + 15, 7, white, width=self.width)
