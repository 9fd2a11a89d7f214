class StorageError(Exception):
    """Falló la subida a IPFS"""
    pass


class StorageConfigurationError(StorageError):
    """Faltan las credenciales de Pinata"""
    pass
