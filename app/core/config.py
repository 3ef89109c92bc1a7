from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./weight_tracker.db"
    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "INFO"

    # Bounded wait for the global store lock (seconds)
    LOCK_TIMEOUT_SECONDS: float = 10.0

    # Backend URL baked into the client; when empty the saved connection is used
    API_URL: str = ""
    CONNECTION_FILE: str = "./weight_tracker_connection.json"
    CLIENT_TIMEOUT_SECONDS: float = 15.0


settings = Settings()
