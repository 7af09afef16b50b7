import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mindmint.chain import routes as wallet_router
from mindmint.core import config
from mindmint.core.dependency import get_sync_coordinator
from mindmint.journals import routes as journals_router
from mindmint.mint import routes as mint_router
from mindmint.sync import routes as sync_router
from mindmint.users import routes as users_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="MindMint API",
    version=config.VERSION,
    description="Local API for MindMint: journaling, clarity points, cloud sync and journal NFTs.",
)

# CORS config
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(users_router.router)
app.include_router(journals_router.router)
app.include_router(sync_router.router)
app.include_router(mint_router.router)
app.include_router(wallet_router.router)


# Stores and mirror reachability
@app.on_event("startup")
async def startup():
    coordinator = get_sync_coordinator()
    online = await coordinator.check_online_status()
    logger.info(f"{config.APP_NAME} {config.VERSION} started on {config.SOLANA_NETWORK} (cloud online: {online})")
