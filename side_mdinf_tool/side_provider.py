# -*- coding: utf-8 -*-
import importlib
import os

from qgis.core import QgsProcessingProvider, QgsMessageLog, Qgis
from qgis.PyQt.QtGui import QIcon


class SideProvider(QgsProcessingProvider):
    """SIDE MDInf Tool provider."""

    ALGORITHMS = [
        ('.algorithms.hydrological.side_contribution', 'SideMDInfAlgorithm'),
    ]

    def __init__(self):
        """Initialize provider."""
        super().__init__()

    def loadAlgorithms(self):
        """Load algorithms."""
        for module_path, class_name in self.ALGORITHMS:
            try:
                module = importlib.import_module(module_path, package=__package__)
                alg_class = getattr(module, class_name)
                self.addAlgorithm(alg_class())
            except Exception as e:
                QgsMessageLog.logMessage(f"Failed to load {class_name}: {str(e)}", "SIDE MDInf Tool", Qgis.Critical)

    def id(self):
        """Return provider ID."""
        return 'side_mdinf_tool'

    def name(self):
        """Return provider name."""
        return self.tr('SIDE MDInf Tool')

    def icon(self):
        """Return provider icon."""
        return QIcon(os.path.join(os.path.dirname(__file__), 'icons', 'side_icon.svg'))
