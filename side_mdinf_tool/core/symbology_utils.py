# -*- coding: utf-8 -*-
"""
core/symbology_utils.py
Symbology for SIDE output layers
"""

from qgis.core import (
    QgsRasterLayer,
    QgsColorRampShader,
    QgsSingleBandPseudoColorRenderer,
    QgsRasterShader,
    QgsRasterBandStats,
)
from qgis.PyQt.QtGui import QColor


# Blue-to-yellow ramp, stops given as fraction of the data range
BLUE_YELLOW_RAMP = [
    (0.0, QColor(8, 48, 107)),
    (0.25, QColor(33, 113, 181)),
    (0.5, QColor(107, 174, 214)),
    (0.75, QColor(199, 233, 180)),
    (1.0, QColor(255, 255, 0)),
]


def apply_side_symbology(layer: QgsRasterLayer):
    """
    Apply a continuous blue-yellow ramp to a SIDE contribution layer.

    Only stream cells carry non-zero values, so the ramp stretches from the
    layer minimum to its maximum.
    """
    if not layer or not layer.isValid():
        return False

    stats = layer.dataProvider().bandStatistics(1, QgsRasterBandStats.All)
    min_val = stats.minimumValue
    max_val = stats.maximumValue
    range_val = max_val - min_val

    shader = QgsRasterShader()
    color_ramp_shader = QgsColorRampShader()
    color_ramp_shader.setColorRampType(QgsColorRampShader.Interpolated)

    items = []
    for fraction, color in BLUE_YELLOW_RAMP:
        value = min_val + range_val * fraction
        label = f'{value:,.1f}' if fraction in (0.0, 1.0) else ''
        items.append(QgsColorRampShader.ColorRampItem(value, color, label))

    color_ramp_shader.setColorRampItemList(items)
    shader.setRasterShaderFunction(color_ramp_shader)

    renderer = QgsSingleBandPseudoColorRenderer(layer.dataProvider(), 1, shader)
    renderer.setClassificationMin(min_val)
    renderer.setClassificationMax(max_val)
    layer.setRenderer(renderer)

    layer.emitStyleChanged()
    layer.triggerRepaint()

    return True
