from functools import lru_cache

import config
from modules.artwork.backends.headless import BrowserPool, HeadlessRenderer
from modules.artwork.backends.native import NativeRenderer
from modules.artwork.services.assets import AssetRegistry


@lru_cache
def get_asset_registry() -> AssetRegistry:
    return AssetRegistry(config.ASSETS_DIR, require_fonts=config.ARTWORK_REQUIRE_FONTS)


@lru_cache
def get_native_renderer() -> NativeRenderer:
    return NativeRenderer(get_asset_registry(), noise_mode=config.ARTWORK_NOISE)


@lru_cache
def get_browser_pool() -> BrowserPool:
    return BrowserPool(size=config.HEADLESS_POOL_SIZE)


@lru_cache
def get_headless_renderer() -> HeadlessRenderer:
    return HeadlessRenderer(
        get_asset_registry(),
        get_browser_pool(),
        timeout_ms=config.HEADLESS_RENDER_TIMEOUT_MS,
        noise_mode=config.ARTWORK_NOISE,
    )
