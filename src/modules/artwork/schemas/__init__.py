from .artwork_schemas import GenerateArtworkRequest

__all__ = ['GenerateArtworkRequest']
