# -*- coding: utf-8 -*-
"""
algorithms/hydrological/side_contribution.py
SIDE (MDInf): side separated contributions to a stream network
"""

import os

from qgis.core import (
    QgsProcessingAlgorithm,
    QgsProcessingParameterRasterLayer,
    QgsProcessingParameterRasterDestination,
    QgsProcessingParameterNumber,
    QgsProcessingParameterEnum,
    QgsProcessingException
)
from ...core.dem_utils import DEMProcessor
from ...core.side_accumulation import SideAccumulator, OUTPUT_UNITS, OUTPUT_UNIT_LABELS


class SideMDInfAlgorithm(QgsProcessingAlgorithm):
    """Left/right bank contributing area of stream cells (MDInf routing)."""

    INPUT_DEM = 'INPUT_DEM'
    INPUT_FLOW_ACC = 'INPUT_FLOW_ACC'
    INPUT_STREAMS = 'INPUT_STREAMS'
    EXPONENT = 'EXPONENT'
    OUTPUT_TYPE = 'OUTPUT_TYPE'
    THRESHOLD = 'THRESHOLD'
    OUTPUT_TOTAL = 'OUTPUT_TOTAL'
    OUTPUT_RIGHT = 'OUTPUT_RIGHT'
    OUTPUT_LEFT = 'OUTPUT_LEFT'

    OUTPUT_TYPE_OPTIONS = [OUTPUT_UNIT_LABELS[unit] for unit in OUTPUT_UNITS]

    def __init__(self):
        super().__init__()

    def createInstance(self):
        return SideMDInfAlgorithm()

    def name(self):
        return 'side_mdinf'

    def displayName(self):
        return 'SIDE (MDInf)'

    def group(self):
        return 'Hydrological Analysis'

    def groupId(self):
        return 'hydrological'

    def shortHelpString(self):
        return """
        Computes the side separated contributions to a stream (Grabs et al., 2010)
        using the MDInf flow routing (Seibert and McGlynn, 2007).

        Inputs:
        - DEM
        - Flow accumulation raster, in the selected output type
        - Stream raster (cells > 0 are streams)

        Outputs the total, right bank and left bank contributing area of
        every stream cell, facing downstream. Contributions whose bank cannot
        be determined (junctions, channel heads) are split evenly.

        An MDInf exponent of 10 or more routes flow to the steepest facet only.
        """

    def initAlgorithm(self, config=None):
        self.addParameter(
            QgsProcessingParameterRasterLayer(
                self.INPUT_DEM,
                'Input DEM'
            )
        )

        self.addParameter(
            QgsProcessingParameterRasterLayer(
                self.INPUT_FLOW_ACC,
                'Input flow accumulation'
            )
        )

        self.addParameter(
            QgsProcessingParameterRasterLayer(
                self.INPUT_STREAMS,
                'Input streams'
            )
        )

        self.addParameter(
            QgsProcessingParameterNumber(
                self.EXPONENT,
                'MDInf exponent',
                type=QgsProcessingParameterNumber.Double,
                defaultValue=1.1,
                minValue=0.01
            )
        )

        self.addParameter(
            QgsProcessingParameterEnum(
                self.OUTPUT_TYPE,
                'Output type',
                options=self.OUTPUT_TYPE_OPTIONS,
                defaultValue=0
            )
        )

        self.addParameter(
            QgsProcessingParameterNumber(
                self.THRESHOLD,
                'Channel initiation threshold (grid cells)',
                type=QgsProcessingParameterNumber.Double,
                defaultValue=0.0,
                minValue=0.0
            )
        )

        self.addParameter(
            QgsProcessingParameterRasterDestination(
                self.OUTPUT_TOTAL,
                'Output total contribution'
            )
        )

        self.addParameter(
            QgsProcessingParameterRasterDestination(
                self.OUTPUT_RIGHT,
                'Output right bank contribution'
            )
        )

        self.addParameter(
            QgsProcessingParameterRasterDestination(
                self.OUTPUT_LEFT,
                'Output left bank contribution'
            )
        )

    def processAlgorithm(self, parameters, context, feedback):
        """Execute algorithm."""
        try:
            dem_layer = self.parameterAsRasterLayer(parameters, self.INPUT_DEM, context)
            acc_layer = self.parameterAsRasterLayer(parameters, self.INPUT_FLOW_ACC, context)
            streams_layer = self.parameterAsRasterLayer(parameters, self.INPUT_STREAMS, context)
            exponent = self.parameterAsDouble(parameters, self.EXPONENT, context)
            output_idx = self.parameterAsEnum(parameters, self.OUTPUT_TYPE, context)
            threshold = self.parameterAsDouble(parameters, self.THRESHOLD, context)
            outputs = {
                self.OUTPUT_TOTAL: self.parameterAsOutputLayer(parameters, self.OUTPUT_TOTAL, context),
                self.OUTPUT_RIGHT: self.parameterAsOutputLayer(parameters, self.OUTPUT_RIGHT, context),
                self.OUTPUT_LEFT: self.parameterAsOutputLayer(parameters, self.OUTPUT_LEFT, context),
            }

            if dem_layer is None or acc_layer is None or streams_layer is None:
                raise QgsProcessingException('Invalid input raster')

            feedback.pushInfo('Loading DEM...')
            processor = DEMProcessor(dem_layer.source())
            feedback.pushInfo('Loading flow accumulation...')
            acc_processor = DEMProcessor(acc_layer.source())
            feedback.pushInfo('Loading streams...')
            streams_processor = DEMProcessor(streams_layer.source())

            processor.check_alignment(acc_processor, 'Flow accumulation raster')
            processor.check_alignment(streams_processor, 'Stream raster')

            accumulator = SideAccumulator(
                processor.array,
                acc_processor.array,
                streams_processor.array,
                processor.cellsize_x
            )
            acc_processor.close()
            streams_processor.close()

            output_unit = OUTPUT_UNITS[output_idx]
            feedback.pushInfo(
                f'MDInf exponent: {exponent}, output type: {OUTPUT_UNIT_LABELS[output_unit]}, '
                f'threshold: {threshold}'
            )

            result = accumulator.run(
                flow_exponent=exponent,
                output_unit=output_unit,
                threshold=threshold,
                feedback=feedback
            )
            if result is None:
                processor.close()
                return {}

            metadata = {
                'CREATED_BY': f'Created by the {self.displayName()} tool.',
                'MDINF_EXPONENT': exponent,
                'OUTPUT_TYPE': OUTPUT_UNIT_LABELS[output_unit],
                'CHANNEL_THRESHOLD': threshold,
            }

            grids = {
                self.OUTPUT_TOTAL: result.total,
                self.OUTPUT_RIGHT: result.right,
                self.OUTPUT_LEFT: result.left,
            }
            for key, output_path in outputs.items():
                feedback.pushInfo(f'Saving {os.path.basename(output_path)}...')
                processor.save_raster(output_path, grids[key], metadata=metadata)
                self._style_output(output_path, context, feedback)

            processor.close()

            feedback.pushInfo('SIDE (MDInf) complete!')
            feedback.setProgress(100)

            return outputs

        except Exception as e:
            raise QgsProcessingException(f'Error in SIDE (MDInf): {str(e)}')

    def _style_output(self, output_path, context, feedback):
        """Load an output with the blue-yellow ramp if QGIS will open it."""
        try:
            from ...core.symbology_utils import apply_side_symbology
            from qgis.core import QgsRasterLayer, QgsProject

            if not context.willLoadLayerOnCompletion(output_path):
                return

            layer_name = os.path.splitext(os.path.basename(output_path))[0]
            styled_layer = QgsRasterLayer(output_path, layer_name)

            if styled_layer.isValid():
                apply_side_symbology(styled_layer)
                QgsProject.instance().addMapLayer(styled_layer)

                # Styled layer is already in the project
                layers_to_load = context.layersToLoadOnCompletion()
                new_layers = {k: v for k, v in layers_to_load.items() if k != output_path}
                context.setLayersToLoadOnCompletion(new_layers)
            else:
                feedback.pushInfo(f'Warning: Could not load styled layer {layer_name}')

        except Exception as e:
            feedback.pushInfo(f'Note: Could not apply symbology: {e}')
