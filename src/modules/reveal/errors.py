class RevealError(Exception):
    """Excepción base de los errores de revelado"""
    pass


class TokenNotMintedError(RevealError):
    """El contrato no tiene firma para este token"""
    pass
