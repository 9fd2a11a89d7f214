import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

import config
from create_tables import create_tables

from modules.artwork.dependencies import get_browser_pool
from modules.reveal.job import start_publication_retry_job
from modules.artwork.controllers.artwork_controller import router as artwork_router
from modules.reveal.controllers.reveal_controller import router as reveal_router
from modules.tokens.controllers.token_controller import router as token_router
from modules.storage.controllers.storage_controller import router as storage_router
from modules.zine.controllers.zine_controller import router as zine_router
from modules.auth.controllers.auth_controller import router as auth_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- Startup logic ---
    print("🚀 Iniciando aplicación...")
    create_tables()
    print("✅ Tablas creadas exitosamente")
    scheduler = start_publication_retry_job()
    print("✅ Job de reintento de publicaciones iniciado")
    yield
    # --- Shutdown logic ---
    scheduler.shutdown(wait=False)
    await get_browser_pool().close()
    print("🛑 Aplicación detenida")

app = FastAPI(
    title="Digital Maverick Manifesto",
    description="API para firmar el manifiesto, generar la obra y publicarla en IPFS",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=[
        "Accept",
        "Content-Type",
        "Authorization",
        "X-Wallet-Address",
        "X-Requested-With",
        "Origin",
    ],
    expose_headers=["Content-Disposition", "Content-Length"],
    max_age=86400,
)
# Routers
app.include_router(auth_router)
app.include_router(artwork_router)
app.include_router(reveal_router)
app.include_router(token_router)
app.include_router(storage_router)
app.include_router(zine_router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
