# -*- coding: utf-8 -*-
{
    'name': 'Print Monitor',
    'version': '17.0.1.0.0',
    'category': 'Services/Management',
    'summary': 'Monitoreo de impresoras por empresa con cortes de contadores y reportes de consumo',
    'description': """
Print Monitor - Monitoreo y Cortes de Contadores
=================================================

Recibe la telemetría de los agentes de monitoreo instalados en cada empresa,
mantiene el último estado de cada impresora y registra cortes de contadores
para medir el consumo por período.

Características Principales:
-----------------------------
* **Multi-Empresa**: Cada empresa tiene su propia API Key para sus agentes
* **Estado En Línea Derivado**: Calculado en cada lectura según la antigüedad
  del último reporte (ONLINE_STALE_MS, por defecto 2 minutos)
* **Cortes de Contadores**: Historial inmutable encadenado por impresora
* **Control de Tóner**: Marca de tóner bajo al 20% o menos
* **Reporte PDF**: Consumo del período y estado de suministros

Configuración:
--------------
* Variable de entorno ONLINE_STALE_MS (milisegundos), leída al iniciar
* Parámetro del sistema print_monitor.online_stale_ms (opcional, por base de datos)

Licencia: LGPL-3
    """,
    'author': 'Custom Development',
    'license': 'LGPL-3',

    # Dependencias
    'depends': [
        'base',
        'mail',  # Para chatter y tracking de empresas
    ],

    # Datos
    'data': [
        # Seguridad
        'security/ir.model.access.csv',

        # Datos iniciales (secuencias)
        'data/printer_sequences.xml',

        # Vistas principales
        'views/printer_tenant_views.xml',
        'views/printer_views.xml',
        'views/printer_cut_views.xml',

        # Menús (al final para que todo esté definido)
        'views/printer_menus.xml',
    ],

    'demo': [],

    'installable': True,
    'application': True,
    'auto_install': False,

    'external_dependencies': {
        'python': ['reportlab'],
    },
}
