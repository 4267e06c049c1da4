# -*- coding: utf-8 -*-
"""
API REST de Monitoreo de Impresoras
Ingesta de métricas por API Key, registro de cortes y reportes PDF
"""

import json
import logging
from functools import wraps

from odoo import http
from odoo.exceptions import AccessDenied, AccessError, MissingError, UserError, ValidationError
from odoo.http import request, Response, content_disposition
from odoo.service.model import PG_CONCURRENCY_ERRORS_TO_RETRY

_logger = logging.getLogger(__name__)


def _json_response(payload, status=200):
    return Response(
        json.dumps(payload, default=str),
        status=status,
        mimetype='application/json'
    )


def _error_response(message, status):
    return _json_response({'ok': False, 'error': message}, status=status)


def _bearer_token():
    """API Key del header 'Authorization: Bearer <apiKey>'"""
    auth = request.httprequest.headers.get('Authorization') or ''
    return auth[7:].strip() if auth.startswith('Bearer ') else None


def _is_concurrency_error(error):
    """Bloqueos y conflictos de serialización que Odoo reintenta por sí mismo"""
    return getattr(error, 'pgcode', None) in PG_CONCURRENCY_ERRORS_TO_RETRY


def handle_api_errors(internal_message):
    """
    Decorador que traduce las excepciones del ORM a respuestas JSON

    - ValidationError / UserError → 400
    - AccessDenied → 401
    - AccessError → 403
    - MissingError → 404
    - Cualquier otra → 500 (se registra con traceback)
    - Conflictos de concurrencia de PostgreSQL se propagan para que Odoo
      reintente la petición completa

    En los demás casos se descartan los cambios de la transacción.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except UserError as e:
                request.env.cr.rollback()
                message = str(e.args[0]) if e.args else ''
                if isinstance(e, AccessDenied):
                    return _error_response(message or 'No autorizado', 401)
                if isinstance(e, MissingError):
                    return _error_response(message, 404)
                if isinstance(e, AccessError):
                    return _error_response(message, 403)
                return _error_response(message, 400)
            except Exception as e:
                if _is_concurrency_error(e):
                    raise
                request.env.cr.rollback()
                _logger.error(f"{internal_message}: {e}", exc_info=True)
                return _error_response(internal_message, 500)
        return wrapper
    return decorator


class PrinterAPIController(http.Controller):
    """
    Controlador de API REST para agentes y tablero de monitoreo
    """

    @http.route('/api/metrics/impresoras', type='http', auth='public', methods=['POST'], csrf=False)
    @handle_api_errors('Error ingesta impresoras')
    def ingest_metrics(self, **kwargs):
        """
        Ingesta de métricas desde el agente

        Header requerido:
            Authorization: Bearer <API Key de la empresa>

        Returns:
        {
            "ok": true,
            "printerId": 12,
            "empresaId": 3,
            "agentVersion": "1.2.0"
        }
        """
        try:
            payload = json.loads(request.httprequest.data or b'{}')
        except ValueError:
            raise ValidationError("JSON inválido")

        result = request.env['printer.device'].sudo().ingest_telemetry(_bearer_token(), payload)
        return _json_response({
            'ok': True,
            'printerId': result['printer_id'],
            'empresaId': result['tenant_id'],
            'agentVersion': result['agent_version'],
        })

    @http.route('/api/impresoras/<int:printer_id>/registrar-corte', type='http', auth='user',
                methods=['POST'], csrf=False)
    @handle_api_errors('Error interno registrando corte')
    def register_cut(self, printer_id, **kwargs):
        """Registra un corte con los contadores actuales de la impresora"""
        cut = request.env['printer.cut'].register_cut(printer_id)
        return _json_response({
            'ok': True,
            'corteId': cut.id,
            'mensaje': 'Corte registrado correctamente',
            'datos': {
                'periodo': f"{cut.counter_start} → {cut.counter_end}",
                'etiquetaPeriodo': cut.period_label,
                'totalPaginas': cut.total_pages,
                'fecha': cut.cut_date.strftime('%d/%m/%Y'),
            },
            'corte': cut._to_api_dict(),
        })

    @http.route('/api/impresoras/<int:printer_id>/generar-pdf', type='http', auth='user',
                methods=['GET'], csrf=False)
    @handle_api_errors('Error interno generando PDF')
    def printer_report_pdf(self, printer_id, **kwargs):
        """PDF del último corte de la impresora"""
        printer = request.env['printer.device'].browse(printer_id).exists()
        if not printer:
            raise MissingError("Impresora no encontrada")
        if not printer.last_cut_id:
            raise MissingError("Primero debe registrar un corte para generar el PDF")
        return self._pdf_response(printer.last_cut_id)

    @http.route('/api/cortes/<int:cut_id>/generar-pdf', type='http', auth='user',
                methods=['GET'], csrf=False)
    @handle_api_errors('Error interno generando PDF')
    def cut_report_pdf(self, cut_id, **kwargs):
        """PDF de un corte específico del historial"""
        cut = request.env['printer.cut'].browse(cut_id).exists()
        if not cut:
            raise MissingError("Corte no encontrado")
        return self._pdf_response(cut)

    def _pdf_response(self, cut):
        filename, content = cut._render_report_pdf()
        return request.make_response(content, headers=[
            ('Content-Type', 'application/pdf'),
            ('Content-Length', str(len(content))),
            ('Content-Disposition', content_disposition(filename)),
        ])

    @http.route('/api/empresas/<int:tenant_id>/impresoras', type='http', auth='user',
                methods=['GET'], csrf=False)
    @handle_api_errors('Error listando impresoras')
    def list_printers(self, tenant_id, ciudad=None, **kwargs):
        """Impresoras de una empresa con su estado en línea derivado"""
        tenant = request.env['printer.tenant'].browse(tenant_id).exists()
        if not tenant:
            raise MissingError("Empresa no encontrada")
        return _json_response({'ok': True, 'data': tenant.list_printers(city=ciudad)})

    @http.route('/api/online-policy', type='http', auth='public', methods=['GET'], csrf=False)
    def online_policy(self, **kwargs):
        """Umbral de antigüedad vigente para considerar una impresora en línea"""
        stale_ms = request.env['printer.latest.state'].sudo()._get_online_stale_ms()
        return _json_response({
            'ok': True,
            'ONLINE_STALE_MS': stale_ms,
            'note': 'Impresora se considera offline si lastSeenAt es más viejo que este umbral.',
        })

    @http.route('/api/printer/health', type='http', auth='none', methods=['GET'], csrf=False)
    def health_check(self, **kwargs):
        """
        Health check endpoint - Sin autenticación
        """
        return _json_response({
            'status': 'ok',
            'service': 'Print Monitor API',
            'version': '1.0.0',
            'authentication': 'Authorization: Bearer <apiKey> requerido para ingesta',
        })
