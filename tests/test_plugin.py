"""Plugin and provider wiring with QGIS mocked."""

import sys
from unittest.mock import MagicMock


def test_provider_loads_side_algorithm(qgis_stubs):
    from side_mdinf_tool.side_provider import SideProvider
    from side_mdinf_tool.algorithms.hydrological.side_contribution import SideMDInfAlgorithm

    provider = SideProvider()
    provider.addAlgorithm = MagicMock()
    provider.loadAlgorithms()

    assert provider.id() == 'side_mdinf_tool'
    (alg,), _ = provider.addAlgorithm.call_args
    assert isinstance(alg, SideMDInfAlgorithm)
    sys.modules['qgis.core'].QgsMessageLog.logMessage.assert_not_called()


def test_provider_logs_broken_algorithm(qgis_stubs):
    from side_mdinf_tool.side_provider import SideProvider

    provider = SideProvider()
    provider.ALGORITHMS = [('.algorithms.hydrological.side_contribution', 'NoSuchAlgorithm')]
    provider.addAlgorithm = MagicMock()
    provider.loadAlgorithms()

    provider.addAlgorithm.assert_not_called()
    message = sys.modules['qgis.core'].QgsMessageLog.logMessage.call_args.args[0]
    assert 'NoSuchAlgorithm' in message


def test_class_factory_registers_provider(qgis_stubs):
    from side_mdinf_tool import classFactory

    iface = MagicMock()
    plugin = classFactory(iface)
    plugin.initGui()

    registry = sys.modules['qgis.core'].QgsApplication.processingRegistry.return_value
    registry.addProvider.assert_called_once_with(plugin.provider)

    plugin.unload()
    registry.removeProvider.assert_called_once_with(plugin.provider)
