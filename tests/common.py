# -*- coding: utf-8 -*-

from odoo.tests import TransactionCase


class PrintMonitorCommon(TransactionCase):
    """Empresas de prueba y atajos para simular reportes de agentes"""

    @classmethod
    def setUpClass(cls):
        super().setUpClass()
        cls.Tenant = cls.env['printer.tenant']
        cls.Printer = cls.env['printer.device']
        cls.LatestState = cls.env['printer.latest.state']
        cls.Cut = cls.env['printer.cut']

        cls.tenant = cls.Tenant.create({
            'name': 'Estudio Contable Andes',
            'company_code': 'EMP-001',
            'city': 'Lima',
        })
        cls.other_tenant = cls.Tenant.create({
            'name': 'Clínica San Martín',
            'company_code': 'EMP-002',
            'city': 'Arequipa',
        })

    def ingest(self, tenant=None, **payload):
        payload.setdefault('host', '10.0.0.14')
        tenant = tenant or self.tenant
        result = self.Printer.ingest_telemetry(tenant.api_key, payload)
        return self.Printer.browse(result['printer_id'])
