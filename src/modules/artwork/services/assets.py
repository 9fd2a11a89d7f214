import asyncio
import logging
import threading
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple

from PIL import Image, ImageFont, UnidentifiedImageError

from modules.artwork.errors import AssetLoadError
from modules.artwork.services.surface import FontRole

logger = logging.getLogger(__name__)

PAPER_BACKGROUND = "paper-background"
MANIFESTO_TEXT = "manifesto-text"

IMAGE_FILES = {
    PAPER_BACKGROUND: "images/paperbackground.jpg",
    MANIFESTO_TEXT: "images/manifesto-text.png",
}

ICON_FILES = (
    "images/smileyface.png", "images/starburst.png", "images/globe.png", "images/lightningbolt.png",
    "images/prism.png", "images/hurricane.png", "images/atom.png", "images/circle.png",
    "images/starburstsolid.png", "images/ring.png", "images/squiggle.png", "images/football.png",
    "images/wave.png", "images/spiral.png", "images/mushroom.png", "images/glitchsmiley.png",
    "images/pill.png", "images/striped.png", "images/shades.png", "images/disc.png",
    "images/planet.png", "images/headphones.png", "images/headphones2.png", "images/cd.png",
    "images/bottle.png",
) + tuple(f"images/{n}.png" for n in range(1, 47))

FONT_FILES = {
    FontRole.TITLE: "fonts/VideoCond-Regular.ttf",
    FontRole.SIGNED_BY: "fonts/ArgentPixelCF-Italic.ttf",
    FontRole.SIGNATURE: "fonts/VideoCond-Light.ttf",
    FontRole.ORDINAL: "fonts/Professor-Regular.ttf",
}


def icon_key(index: int) -> str:
    return f"icon-{index}"


@lru_cache(maxsize=64)
def _truetype(path: str, size: int) -> ImageFont.FreeTypeFont:
    return ImageFont.truetype(path, size)


def _load_image(path: Path) -> Image.Image:
    try:
        with Image.open(path) as img:
            return img.convert("RGBA")
    except (OSError, UnidentifiedImageError) as e:
        raise AssetLoadError(f"Failed to load image {path}: {e}") from e


def _check_font(path: Path, required: bool = False) -> Optional[Path]:
    if not path.exists():
        if required:
            raise AssetLoadError(f"Font {path} not found")
        logger.warning("Font %s not found, captions fall back to the default font", path)
        return None
    try:
        _truetype(str(path), 12)
    except OSError as e:
        raise AssetLoadError(f"Failed to load font {path}: {e}") from e
    return path


@dataclass(frozen=True)
class AssetBundle:
    """Imágenes y fuentes de una obra, ya cargadas"""

    images: Mapping[str, Image.Image]
    paths: Mapping[str, Path]
    icon_keys: Tuple[str, ...]
    fonts: Mapping[FontRole, Optional[Path]] = field(default_factory=dict)

    @property
    def icon_count(self) -> int:
        return len(self.icon_keys)

    def image(self, key: str) -> Image.Image:
        try:
            return self.images[key]
        except KeyError:
            raise AssetLoadError(f"Unknown asset '{key}'")

    def font(self, role: FontRole, size: int):
        path = self.fonts.get(role)
        if path is None:
            return ImageFont.load_default(size=size)
        return _truetype(str(path), size)

    @classmethod
    def load(
        cls,
        root,
        icon_files: Sequence[str] = ICON_FILES,
        font_files: Mapping[FontRole, str] = FONT_FILES,
        require_fonts: bool = False,
    ) -> "AssetBundle":
        """Carga todos los assets bajo ``root``.

        Una imagen faltante aborta la carga, y también una fuente faltante si
        ``require_fonts`` está activo.
        """
        root = Path(root)
        files: Dict[str, str] = dict(IMAGE_FILES)
        icon_keys = tuple(icon_key(i) for i in range(len(icon_files)))
        files.update(zip(icon_keys, icon_files))

        paths = {key: root / relative for key, relative in files.items()}
        images = {key: _load_image(path) for key, path in paths.items()}
        fonts = {role: _check_font(root / relative, require_fonts) for role, relative in font_files.items()}

        logger.info("Loaded %d images (%d icons) from %s", len(images), len(icon_keys), root)
        return cls(images=images, paths=paths, icon_keys=icon_keys, fonts=fonts)


class AssetRegistry:
    """Carga el bundle de assets una vez y lo comparte entre todos los renders.

    Una carga fallida no queda en caché; el siguiente llamado reintenta.
    """

    def __init__(self, root, icon_files: Sequence[str] = ICON_FILES,
                 font_files: Mapping[FontRole, str] = FONT_FILES, require_fonts: bool = False):
        self.root = Path(root)
        self._icon_files = tuple(icon_files)
        self._font_files = dict(font_files)
        self._require_fonts = require_fonts
        self._bundle: Optional[AssetBundle] = None
        self._lock = threading.Lock()

    def get(self) -> AssetBundle:
        with self._lock:
            if self._bundle is None:
                self._bundle = AssetBundle.load(
                    self.root, self._icon_files, self._font_files, self._require_fonts
                )
            return self._bundle

    async def aget(self) -> AssetBundle:
        return await asyncio.to_thread(self.get)
