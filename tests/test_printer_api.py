# -*- coding: utf-8 -*-

import json

from odoo.tests import HttpCase, tagged
from odoo.tests.common import BaseCase

from ..controllers.printer_api import handle_api_errors
from ..tools.online_state import ONLINE_STALE_MS


class SerializationFailure(Exception):
    pgcode = '40001'


@tagged('post_install', '-at_install')
class TestApiErrorHandling(BaseCase):

    def test_concurrency_errors_propagate_for_retry(self):
        @handle_api_errors('Error interno registrando corte')
        def register():
            raise SerializationFailure('could not serialize access due to concurrent update')

        with self.assertRaises(SerializationFailure):
            register()


@tagged('post_install', '-at_install')
class TestPrinterAPI(HttpCase):

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.tenant = cls.env['printer.tenant'].create({
            'name': 'Estudio Contable Andes',
            'company_code': 'EMP-001',
            'city': 'Lima',
        })

    def _post_metrics(self, payload, api_key=None):
        headers = {'Content-Type': 'application/json'}
        if api_key:
            headers['Authorization'] = f'Bearer {api_key}'
        return self.url_open('/api/metrics/impresoras', data=json.dumps(payload), headers=headers)

    def test_health(self):
        response = self.url_open('/api/printer/health')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'ok')

    def test_online_policy(self):
        response = self.url_open('/api/online-policy')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['ok'])
        self.assertEqual(data['ONLINE_STALE_MS'], ONLINE_STALE_MS)

    def test_public_routes_ignore_query_string(self):
        self.assertEqual(self.url_open('/api/printer/health?origen=monitor').status_code, 200)
        self.assertEqual(self.url_open('/api/online-policy?origen=monitor').status_code, 200)

    def test_ingest(self):
        response = self._post_metrics({
            'host': '10.0.0.14',
            'serial': 'XYZ123',
            'pageCount': 1500,
            'agentVersion': '1.2.0',
        }, api_key=self.tenant.api_key)
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['ok'])
        self.assertEqual(data['empresaId'], self.tenant.id)
        self.assertEqual(data['agentVersion'], '1.2.0')

        printer = self.env['printer.device'].browse(data['printerId'])
        self.assertEqual(printer.serial_number, 'XYZ123')
        self.assertEqual(printer.latest_state_id.last_page_count, 1500)

    def test_ingest_errors(self):
        response = self._post_metrics({'host': '10.0.0.14'})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error'], 'Falta ApiKey')

        response = self._post_metrics({'host': '10.0.0.14'}, api_key='emp_no_existe')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error'], 'ApiKey inválida')

        response = self._post_metrics({'serial': 'XYZ123'}, api_key=self.tenant.api_key)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'host requerido')

    def test_register_cut_and_pdf(self):
        self._post_metrics({'host': '10.0.0.14', 'pageCount': 1500}, api_key=self.tenant.api_key)
        printer = self.env['printer.device'].search([('tenant_id', '=', self.tenant.id)])
        self.authenticate('admin', 'admin')

        response = self.url_open(f'/api/impresoras/{printer.id}/generar-pdf')
        self.assertEqual(response.status_code, 404)

        response = self.url_open(f'/api/impresoras/{printer.id}/registrar-corte', data='{}')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['datos']['totalPaginas'], 1500)
        self.assertEqual(data['datos']['etiquetaPeriodo'], 'Desde instalación')

        response = self.url_open(f'/api/impresoras/{printer.id}/generar-pdf')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

        response = self.url_open(f'/api/cortes/{data["corteId"]}/generar-pdf')
        self.assertEqual(response.status_code, 200)

    def test_register_cut_unknown_printer(self):
        self.authenticate('admin', 'admin')
        response = self.url_open('/api/impresoras/999999/registrar-corte', data='{}')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'Impresora no encontrada')

    def test_list_printers(self):
        self._post_metrics({'host': '10.0.0.1', 'ciudad': 'Lima', 'pageCount': 5}, api_key=self.tenant.api_key)
        self._post_metrics({'host': '10.0.0.2', 'ciudad': 'Cusco', 'pageCount': 9}, api_key=self.tenant.api_key)
        self.authenticate('admin', 'admin')

        response = self.url_open(f'/api/empresas/{self.tenant.id}/impresoras?ciudad=Lima')
        self.assertEqual(response.status_code, 200)
        rows = response.json()['data']
        self.assertEqual([row['host'] for row in rows], ['10.0.0.1'])
        self.assertTrue(rows[0]['online'])
