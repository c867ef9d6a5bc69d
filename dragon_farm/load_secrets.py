import os
import pathlib
from dotenv import load_dotenv

load_dotenv()

package_dir = pathlib.Path(__file__).parent

user = os.getenv("DB_USER")
password = os.getenv("DB_PASSWORD")
host = os.getenv("DB_HOST")
port = os.getenv("DB_PORT", "5432")
db_name = os.getenv("DB_NAME", "dragon_farm")
pepper_data = os.getenv("PEPPER_DATA", "")

if os.getenv("DATABASE_URL"):
    database_url = os.getenv("DATABASE_URL")
elif host:
    database_url = f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db_name}"
else:
    database_url = f"sqlite+aiosqlite:///{package_dir / 'dragon_farm.sqlite3'}"

auth_db_path = os.getenv("AUTH_DB_PATH", str(package_dir / "basic_authentication.sqlite3"))

rarity_recessive_weight = float(os.getenv("RARITY_RECESSIVE_WEIGHT", "1.0"))
breeding_commit_attempts = int(os.getenv("BREEDING_COMMIT_ATTEMPTS", "3"))
breeding_poll_seconds = int(os.getenv("BREEDING_POLL_SECONDS", "5"))
log_level = os.getenv("LOG_LEVEL", "INFO").upper()

if __name__ == "__main__":
    print(user, host, port, db_name, database_url, auth_db_path)
