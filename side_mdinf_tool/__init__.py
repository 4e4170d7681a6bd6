# -*- coding: utf-8 -*-
"""
SIDE MDInf Tool Plugin
Side separated stream contributions (Grabs et al., 2010) with MDInf routing for QGIS

License: GPL v3+
"""

__author__ = 'SIDE MDInf Tool'
__date__ = '2026-10-18'
__copyright__ = '(C) 2026, SIDE MDInf Tool'
__version__ = '1.0.0'


def classFactory(iface):
    """Load SidePlugin class from file side_plugin."""
    from .side_plugin import SidePlugin
    return SidePlugin(iface)
