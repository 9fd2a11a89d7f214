class ArtworkError(Exception):
    """Excepción base de los errores de renderizado"""
    pass


class InvalidRenderRequest(ArtworkError):
    """Parámetros de render ausentes o inválidos; se lanza antes de dibujar"""
    pass


class AssetLoadError(ArtworkError):
    """No se pudo cargar una imagen o fuente requerida"""
    pass


class RenderTimeoutError(ArtworkError):
    """Un render headless superó su tiempo límite"""
    pass


class RendererUnavailableError(ArtworkError):
    """No se pudo iniciar el navegador headless"""
    pass
