# -*- coding: utf-8 -*-

import os
from qgis.PyQt.QtCore import QCoreApplication
from qgis.core import QgsApplication, QgsMessageLog, Qgis

from .side_provider import SideProvider

LOG_TAG = 'SIDE MDInf Tool'


class SidePlugin:
    """QGIS Plugin Implementation for the SIDE MDInf Tool."""

    def __init__(self, iface):
        """Initialize the plugin.

        Args:
            iface: A QGIS interface instance
        """
        self.iface = iface
        self.provider = None
        self.plugin_dir = os.path.dirname(__file__)

    def initProcessing(self):
        """Initialize Processing provider."""
        self.provider = SideProvider()
        QgsApplication.processingRegistry().addProvider(self.provider)

    def initGui(self):
        """Register the processing provider."""
        try:
            self.initProcessing()

            import numba
            QgsMessageLog.logMessage(f"Numba {numba.__version__} - using compiled SIDE kernels",
                                     LOG_TAG, Qgis.Info)

        except Exception as e:
            QgsMessageLog.logMessage(f"SIDE Plugin Init Error: {str(e)}", LOG_TAG, Qgis.Critical)
            self.iface.messageBar().pushMessage("SIDE Plugin", f"Init Error: {str(e)}", level=Qgis.Critical)
            raise e

    def unload(self):
        """Remove the processing provider."""
        try:
            if self.provider:
                QgsApplication.processingRegistry().removeProvider(self.provider)
        except RuntimeError:
            # Provider might have been deleted already
            pass

    def tr(self, message):
        """Get the translation for a string using Qt translation API."""
        return QCoreApplication.translate('SidePlugin', message)
