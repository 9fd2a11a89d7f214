from typing import Any, Dict, List

from modules.artwork.models.layers import RGBA, BlendMode
from modules.artwork.services.surface import TextStyle

PRECISION = 3


def _num(value) -> float:
    return round(float(value), PRECISION)


class RecordingSurface:
    """Graba las operaciones de dibujo como una display list serializable a JSON.

    Las secuencias de círculos de un mismo color se guardan como una sola
    operación ``circles`` con una lista plana ``[x, y, d, x, y, d, ...]``.
    """

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.ops: List[Dict[str, Any]] = []

    def fill_rect(self, x, y, w, h, color: RGBA) -> None:
        self.ops.append({"op": "fill_rect", "x": _num(x), "y": _num(y), "w": _num(w), "h": _num(h), "color": list(color)})

    def draw_image(self, key: str, x, y, w, h, alpha: float = 1.0, rotation: float = 0.0) -> None:
        self.ops.append({
            "op": "image",
            "key": key,
            "x": _num(x),
            "y": _num(y),
            "w": _num(w),
            "h": _num(h),
            "alpha": _num(alpha),
            "rotation": round(float(rotation), 6),
        })

    def draw_circle(self, cx, cy, diameter, color: RGBA) -> None:
        color = list(color)
        last = self.ops[-1] if self.ops else None
        if last is None or last["op"] != "circles" or last["color"] != color:
            last = {"op": "circles", "color": color, "dots": []}
            self.ops.append(last)
        last["dots"].extend((_num(cx), _num(cy), _num(diameter)))

    def draw_text(self, text: str, x, y, style: TextStyle) -> None:
        self.ops.append({
            "op": "text",
            "text": text,
            "x": _num(x),
            "y": _num(y),
            "font": style.font.value,
            "size": style.size,
            "color": list(style.color),
            "align": style.align.value,
        })

    def clip_rect(self, x, y, w, h) -> None:
        self.ops.append({"op": "clip", "x": _num(x), "y": _num(y), "w": _num(w), "h": _num(h)})

    def reset_clip(self) -> None:
        self.ops.append({"op": "reset_clip"})

    def set_blend_mode(self, mode: BlendMode) -> None:
        self.ops.append({"op": "blend", "mode": BlendMode(mode).value})

    def image_keys(self) -> List[str]:
        keys = []
        for op in self.ops:
            if op["op"] == "image" and op["key"] not in keys:
                keys.append(op["key"])
        return keys

    def dot_count(self) -> int:
        return sum(len(op["dots"]) // 3 for op in self.ops if op["op"] == "circles")
