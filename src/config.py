import os

from dotenv import load_dotenv

load_dotenv()

# Base de datos
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./manifesto.db")

# Artwork
ASSETS_DIR = os.getenv("ARTWORK_ASSETS_DIR", "public/generative-art")
ARTWORK_NOISE = os.getenv("ARTWORK_NOISE", "perlin")  # perlin | hash
# Sin fuentes, los textos usan la fuente por defecto salvo que esto sea true
ARTWORK_REQUIRE_FONTS = os.getenv("ARTWORK_REQUIRE_FONTS", "false").lower() == "true"
HEADLESS_POOL_SIZE = int(os.getenv("HEADLESS_POOL_SIZE", "2"))
HEADLESS_RENDER_TIMEOUT_MS = int(os.getenv("HEADLESS_RENDER_TIMEOUT_MS", "30000"))
INTERACTIVE_FPS = float(os.getenv("INTERACTIVE_FPS", "1"))

# Contrato
RPC_URL = os.getenv("RPC_URL")
CONTRACT_ADDRESS = os.getenv("CONTRACT_ADDRESS")
CONTRACT_OWNER_PRIVATE_KEY = os.getenv("CONTRACT_OWNER_PRIVATE_KEY")
ENS_RPC_URL = os.getenv("ENS_RPC_URL")

# IPFS (Pinata)
PINATA_JWT = os.getenv("PINATA_JWT")
PINATA_API_URL = os.getenv("PINATA_API_URL", "https://api.pinata.cloud")

# EmailJS
EMAILJS_API_URL = os.getenv("EMAILJS_API_URL", "https://api.emailjs.com/api/v1.0/email/send")
EMAILJS_SERVICE_ID = os.getenv("EMAILJS_SERVICE_ID")
EMAILJS_TEMPLATE_ID = os.getenv("EMAILJS_TEMPLATE_ID")
EMAILJS_PUBLIC_KEY = os.getenv("EMAILJS_PUBLIC_KEY")
EMAILJS_PRIVATE_KEY = os.getenv("EMAILJS_PRIVATE_KEY")

# Privy
PRIVY_APP_ID = os.getenv("PRIVY_APP_ID")
PRIVY_VERIFICATION_KEY = os.getenv("PRIVY_VERIFICATION_KEY", "").replace("\\n", "\n")

# Reintentos de publicación
PUBLICATION_RETRY_MINUTES = int(os.getenv("PUBLICATION_RETRY_MINUTES", "15"))
MAX_PUBLICATION_ATTEMPTS = int(os.getenv("MAX_PUBLICATION_ATTEMPTS", "5"))
PUBLICATION_STALE_MINUTES = int(os.getenv("PUBLICATION_STALE_MINUTES", "30"))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
