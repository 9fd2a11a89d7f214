from .render_request import Background, RenderRequest, Viewport
from .geometry import CanvasGeometry, CaptionMetrics, geometry_for
from .layers import BlendMode, DensityFieldLayer
from .placement import IconPlacement

__all__ = [
    'Background', 'RenderRequest', 'Viewport',
    'CanvasGeometry', 'CaptionMetrics', 'geometry_for',
    'BlendMode', 'DensityFieldLayer', 'IconPlacement',
]
