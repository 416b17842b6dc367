from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # JWT
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Banco de dados
    DATABASE_URL: str
    DB_ECHO: bool = False

    # Logging
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # json or text

    # Buddy matching tolerances
    FTP_TOLERANCE_PCT: float = 20.0
    HOURS_TOLERANCE_PCT: float = 25.0
    SENSOR_SPEED_TOLERANCE_MPH: float = 1.5
    LEGACY_SPEED_TOLERANCE_MPH: float = 2.0

    # Buddy matching limits
    SIMPLE_CANDIDATE_LIMIT: int = 50
    SEARCH_CANDIDATE_LIMIT: int = 100
    MATCH_TOP_N: int = 10
    LOCATION_FLOOR_COMPATIBILITY: int = 50
    DEFAULT_SIMULATION_LOCATION: str = "San Jose, CA"

    class Config:
        env_file = ".env"


settings = Settings()
