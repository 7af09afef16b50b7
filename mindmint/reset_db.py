# mindmint/reset_db.py
import sys

from mindmint.core import config
from mindmint.core.database import Base, build_engine, init_db


def reset_database(url: str) -> None:
    """Drops and recreates every table of the store at `url`."""
    engine = build_engine(url)
    init_db(engine)
    print(f"⚠️ Dropping all tables at {engine.url.render_as_string(hide_password=True)}...")
    Base.metadata.drop_all(bind=engine)

    print("🚀 Recreating tables...")
    Base.metadata.create_all(bind=engine)
    print("✅ Tables recreated successfully.")


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else "local"
    if target == "cloud":
        if not config.CLOUD_DATABASE_URL:
            sys.exit("CLOUD_DATABASE_URL is not set")
        reset_database(config.CLOUD_DATABASE_URL)
    else:
        reset_database(config.LOCAL_DATABASE_URL)
