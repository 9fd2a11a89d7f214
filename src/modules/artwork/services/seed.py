import struct

INT32_MASK = 0xFFFFFFFF
INT32_SIGN = 0x80000000


def _wrap_int32(value: int) -> int:
    value &= INT32_MASK
    return value - (1 << 32) if value & INT32_SIGN else value


def _utf16_code_units(text: str):
    data = text.encode("utf-16-le", "surrogatepass")
    return struct.unpack(f"<{len(data) // 2}H", data)


def derive_seed(signature: str) -> int:
    """Convierte el texto de la firma en la semilla no negativa de su obra.

    ``hash = hash * 31 + code`` sobre las unidades UTF-16, truncado a entero
    de 32 bits con signo en cada paso, así el sketch del navegador y los
    renderers del servidor coinciden bit a bit.
    """
    value = 0
    for code in _utf16_code_units(signature):
        value = _wrap_int32(value * 31 + code)
    return abs(value)
