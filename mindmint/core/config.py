import os
from dotenv import load_dotenv

from mindmint.ledger.schemas import PointsConfig

load_dotenv()  # Load from .env file

APP_NAME = "MindMint"
VERSION = "1.0.0"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "http://localhost:8081").split(",") if origin.strip()]

# Storage
LOCAL_DATABASE_URL = os.getenv("LOCAL_DATABASE_URL", "sqlite:///./mindmint.db")
CLOUD_DATABASE_URL = os.getenv("CLOUD_DATABASE_URL", "")  # empty disables the mirror
CLOUD_CONNECT_TIMEOUT_SECONDS = int(os.getenv("CLOUD_CONNECT_TIMEOUT_SECONDS", "2"))
DEVICE_IDENTITY_PATH = os.getenv("DEVICE_IDENTITY_PATH", "./.mindmint_user_id")

# Solana
SOLANA_NETWORK = os.getenv("SOLANA_NETWORK", "devnet").strip().lower()
DEFAULT_RPC_URLS = {
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
}
SOLANA_RPC_URL = os.getenv("SOLANA_RPC_URL") or DEFAULT_RPC_URLS.get(SOLANA_NETWORK, DEFAULT_RPC_URLS["devnet"])
TEST_NETWORKS = ("devnet", "testnet")
WALLET_PRIVATE_KEY = os.getenv("WALLET_PRIVATE_KEY", "")
CHAIN_CONFIRM_TIMEOUT_SECONDS = float(os.getenv("CHAIN_CONFIRM_TIMEOUT_SECONDS", "60"))

# NFT metadata
METADATA_UPLOAD_URL = os.getenv("METADATA_UPLOAD_URL", "https://api.pinata.cloud/pinning/pinJSONToIPFS")
METADATA_API_KEY = os.getenv("METADATA_API_KEY", "")
METADATA_GATEWAY_URL = os.getenv("METADATA_GATEWAY_URL", "https://gateway.pinata.cloud/ipfs")
METADATA_UPLOAD_TIMEOUT_SECONDS = float(os.getenv("METADATA_UPLOAD_TIMEOUT_SECONDS", "20"))
NFT_CREATOR_ADDRESS = os.getenv("NFT_CREATOR_ADDRESS", "")
NFT_IMAGE_BASE_URL = os.getenv("NFT_IMAGE_BASE_URL", "https://mindmint.app/api/journal-image")
MINT_ESTIMATED_COST_SOL = os.getenv("MINT_ESTIMATED_COST_SOL", "0.01")

# Clarity points
POINTS_DAILY_ENTRY = int(os.getenv("POINTS_DAILY_ENTRY", "10"))
POINTS_MOOD_TRACKING = int(os.getenv("POINTS_MOOD_TRACKING", "5"))
POINTS_NFT_MINTING = int(os.getenv("POINTS_NFT_MINTING", "20"))
POINTS_STREAK_SHORT = int(os.getenv("POINTS_STREAK_SHORT", "15"))
POINTS_STREAK_MEDIUM = int(os.getenv("POINTS_STREAK_MEDIUM", "50"))
POINTS_STREAK_LONG = int(os.getenv("POINTS_STREAK_LONG", "200"))
STREAK_SHORT_DAYS = int(os.getenv("STREAK_SHORT_DAYS", "3"))
STREAK_MEDIUM_DAYS = int(os.getenv("STREAK_MEDIUM_DAYS", "7"))
STREAK_LONG_DAYS = int(os.getenv("STREAK_LONG_DAYS", "30"))

# Notifications defaults for new users
DEFAULT_NOTIFICATION_TIME = os.getenv("DEFAULT_NOTIFICATION_TIME", "20:00")
DEFAULT_NOTIFICATIONS_ENABLED = os.getenv("DEFAULT_NOTIFICATIONS_ENABLED", "true").lower() in ("1", "true", "yes")


def get_points_config() -> PointsConfig:
    return PointsConfig(
        daily_entry=POINTS_DAILY_ENTRY,
        mood_tracking=POINTS_MOOD_TRACKING,
        nft_minting=POINTS_NFT_MINTING,
        streak_short_bonus=POINTS_STREAK_SHORT,
        streak_medium_bonus=POINTS_STREAK_MEDIUM,
        streak_long_bonus=POINTS_STREAK_LONG,
        streak_short_days=STREAK_SHORT_DAYS,
        streak_medium_days=STREAK_MEDIUM_DAYS,
        streak_long_days=STREAK_LONG_DAYS,
    )


def is_test_network() -> bool:
    return SOLANA_NETWORK in TEST_NETWORKS
