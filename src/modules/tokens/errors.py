class ContractError(Exception):
    """Falló una llamada o transacción al contrato"""
    pass


class ContractConfigurationError(ContractError):
    """Falta configurar la URL RPC, la dirección del contrato o la clave del dueño"""
    pass
