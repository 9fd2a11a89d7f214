import asyncio
import base64
import json
import logging
import mimetypes
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from modules.artwork.backends.recording import RecordingSurface
from modules.artwork.errors import AssetLoadError, RendererUnavailableError, RenderTimeoutError
from modules.artwork.models.render_request import RenderRequest
from modules.artwork.services.assets import AssetBundle, AssetRegistry
from modules.artwork.services.composition import build_render_context, compose_artwork
from modules.artwork.services.surface import FontRole

logger = logging.getLogger(__name__)

FALLBACK_FONT = "sans-serif"

PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>html,body{margin:0;padding:0;background:#fff;overflow:hidden}canvas{display:block}</style>
</head>
<body>
<canvas id="artwork" width="__WIDTH__" height="__HEIGHT__"></canvas>
<script>
const OPS = __OPS__;
const IMAGES = __IMAGES__;
const FONTS = __FONTS__;
const BLEND = {normal: "source-over", multiply: "multiply", darken: "darken"};

function css(c) {
  return `rgba(${c[0]},${c[1]},${c[2]},${c[3] / 255})`;
}

function loadImage(key, src) {
  return new Promise((resolve, reject) => {
    const img = new Image();
    img.onload = () => resolve([key, img]);
    img.onerror = () => reject(new Error(`Failed to load image ${key}`));
    img.src = src;
  });
}

async function loadFonts() {
  const families = {};
  for (const [role, src] of Object.entries(FONTS)) {
    if (!src) {
      families[role] = "__FALLBACK_FONT__";
      continue;
    }
    const face = new FontFace(`artwork-${role}`, `url(${src})`);
    await face.load();
    document.fonts.add(face);
    families[role] = `"artwork-${role}"`;
  }
  return families;
}

function replay(ctx, images, families) {
  let clipped = false;
  for (const op of OPS) {
    switch (op.op) {
      case "fill_rect":
        ctx.fillStyle = css(op.color);
        ctx.fillRect(op.x, op.y, op.w, op.h);
        break;
      case "image":
        ctx.save();
        ctx.globalAlpha = op.alpha;
        ctx.translate(op.x + op.w / 2, op.y + op.h / 2);
        ctx.rotate(op.rotation);
        ctx.drawImage(images[op.key], -op.w / 2, -op.h / 2, op.w, op.h);
        ctx.restore();
        break;
      case "circles":
        ctx.fillStyle = css(op.color);
        for (let i = 0; i < op.dots.length; i += 3) {
          ctx.beginPath();
          ctx.arc(op.dots[i], op.dots[i + 1], op.dots[i + 2] / 2, 0, Math.PI * 2);
          ctx.fill();
        }
        break;
      case "text":
        ctx.font = `${op.size}px ${families[op.font] || "__FALLBACK_FONT__"}`;
        ctx.textAlign = op.align;
        ctx.textBaseline = "alphabetic";
        ctx.fillStyle = css(op.color);
        ctx.fillText(op.text, op.x, op.y);
        break;
      case "clip":
        if (clipped) ctx.restore();
        ctx.save();
        ctx.beginPath();
        ctx.rect(op.x, op.y, op.w, op.h);
        ctx.clip();
        clipped = true;
        break;
      case "reset_clip":
        if (clipped) ctx.restore();
        clipped = false;
        break;
      case "blend":
        ctx.globalCompositeOperation = BLEND[op.mode];
        break;
    }
  }
}

(async () => {
  const ctx = document.getElementById("artwork").getContext("2d");
  const images = Object.fromEntries(
    await Promise.all(Object.entries(IMAGES).map(([key, src]) => loadImage(key, src)))
  );
  const families = await loadFonts();
  replay(ctx, images, families);
  window.artworkReady = true;
})().catch((err) => {
  window.artworkError = String(err && err.message ? err.message : err);
});
</script>
</body>
</html>
"""


def _data_uri(path: Path, default_type: str = "application/octet-stream") -> str:
    try:
        payload = path.read_bytes()
    except OSError as e:
        raise AssetLoadError(f"Failed to read asset {path}: {e}") from e
    mime = mimetypes.guess_type(path.name)[0] or default_type
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


def _script_json(value) -> str:
    return json.dumps(value, separators=(",", ":")).replace("</", "<\\/")


def build_page(recording: RecordingSurface, bundle: AssetBundle) -> str:
    """Página HTML autocontenida que reproduce ``recording`` en un canvas"""
    images = {key: _data_uri(bundle.paths[key]) for key in recording.image_keys()}
    fonts = {}
    for role in FontRole:
        path = bundle.fonts.get(role)
        fonts[role.value] = _data_uri(path, "font/ttf") if path is not None else None

    return (
        PAGE_TEMPLATE
        .replace("__WIDTH__", str(recording.width))
        .replace("__HEIGHT__", str(recording.height))
        .replace("__FALLBACK_FONT__", FALLBACK_FONT)
        .replace("__IMAGES__", _script_json(images))
        .replace("__FONTS__", _script_json(fonts))
        .replace("__OPS__", _script_json(recording.ops))
    )


class BrowserPool:
    """Cantidad fija de instancias de Chromium, lanzadas en el primer uso"""

    def __init__(self, size: int = 2):
        self.size = max(1, size)
        self._playwright = None
        self._browsers: List = []
        self._queue: Optional[asyncio.Queue] = None
        self._lock = asyncio.Lock()

    async def _start(self) -> None:
        async with self._lock:
            if self._queue is not None:
                return
            try:
                self._playwright = await async_playwright().start()
                queue = asyncio.Queue()
                for _ in range(self.size):
                    browser = await self._launch()
                    self._browsers.append(browser)
                    queue.put_nowait(browser)
            except PlaywrightError as e:
                await self.close()
                raise RendererUnavailableError(f"Could not start headless browser: {e}") from e
            self._queue = queue
            logger.info("Started %d headless browser(s)", self.size)

    async def _launch(self):
        return await self._playwright.chromium.launch(headless=True, args=["--no-sandbox"])

    @asynccontextmanager
    async def browser(self):
        await self._start()
        browser = await self._queue.get()
        try:
            if not browser.is_connected():
                logger.warning("Headless browser disconnected, relaunching")
                # Si falla, el navegador caído conserva su lugar y el próximo uso reintenta.
                try:
                    fresh = await self._launch()
                except PlaywrightError as e:
                    raise RendererUnavailableError(f"Could not relaunch headless browser: {e}") from e
                self._browsers[self._browsers.index(browser)] = fresh
                browser = fresh
            yield browser
        finally:
            self._queue.put_nowait(browser)

    async def close(self) -> None:
        for browser in self._browsers:
            try:
                await browser.close()
            except PlaywrightError as e:
                logger.warning("Error closing headless browser: %s", e)
        self._browsers = []
        self._queue = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None


class HeadlessRenderer:
    """Renderiza en el canvas de un navegador real y captura el resultado"""

    def __init__(self, assets: AssetRegistry, pool: BrowserPool, timeout_ms: int = 30000, noise_mode: str = "perlin"):
        self.assets = assets
        self.pool = pool
        self.timeout_ms = timeout_ms
        self.noise_mode = noise_mode

    async def render(self, request: RenderRequest) -> bytes:
        bundle = await self.assets.aget()
        context = await asyncio.to_thread(build_render_context, request, bundle.icon_count, self.noise_mode)
        recording = RecordingSurface(context.geometry.width, context.geometry.height)
        report = await asyncio.to_thread(compose_artwork, recording, context)
        page = await asyncio.to_thread(build_page, recording, bundle)

        try:
            png = await asyncio.wait_for(
                self._capture(page, context.geometry.width, context.geometry.height),
                timeout=self.timeout_ms / 1000,
            )
        except (asyncio.TimeoutError, PlaywrightTimeoutError) as e:
            logger.error("Headless render of #%d timed out after %d ms", request.signer_ordinal, self.timeout_ms)
            raise RenderTimeoutError(f"Render exceeded {self.timeout_ms} ms") from e

        logger.info(
            "Headless render #%d: %d ops, %d icons, %d bytes",
            request.signer_ordinal, len(recording.ops), report.icon_count, len(png),
        )
        return png

    async def _capture(self, page_html: str, width: int, height: int) -> bytes:
        async with self.pool.browser() as browser:
            context = await browser.new_context(viewport={"width": width, "height": height}, device_scale_factor=1)
            try:
                page = await context.new_page()
                await page.set_content(page_html, wait_until="load", timeout=self.timeout_ms)
                await page.wait_for_function(
                    "() => window.artworkReady === true || window.artworkError !== undefined",
                    timeout=self.timeout_ms,
                )
                error = await page.evaluate("() => window.artworkError || null")
                if error:
                    raise AssetLoadError(f"Headless page failed: {error}")
                return await page.screenshot(type="png", clip={"x": 0, "y": 0, "width": width, "height": height})
            finally:
                await context.close()
