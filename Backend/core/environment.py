from enum import StrEnum

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class SQLConfig(BaseModel):
    driver: str
    username: str
    password: str
    host: str
    port: int
    database: str
    additional_config: dict[str, str] | None = {}


class CatalogSource(StrEnum):
    MOCK = "mock"
    DATABASE = "database"


class FormStore(StrEnum):
    MEMORY = "memory"
    DATABASE = "database"


class WeightOrder(StrEnum):
    LEFT_TO_RIGHT = "left_to_right"
    RIGHT_TO_LEFT = "right_to_left"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    ALLOWED_ORIGINS: str = "http://localhost"

    ENVIRONMENT: str = "development"

    CATALOG_SOURCE: CatalogSource = CatalogSource.MOCK
    FORM_STORE: FormStore = FormStore.MEMORY

    NIT_WEIGHT_ORDER: WeightOrder = WeightOrder.LEFT_TO_RIGHT
    FOREIGN_KEY_OPTIONS_LIMIT: int = 500

    # Database config
    PG_DB_HOST: str = ""
    PG_DB_NAME: str = ""
    PG_DB_PASSWORD: str = ""
    PG_DB_USER: str = ""
    PG_DB_PORT: int = 5432

    @property
    def PG_DB_CONFIG(self) -> SQLConfig:
        sql_driver: str = "postgresql+asyncpg"
        additional_config: dict = {}

        return SQLConfig(
            driver=sql_driver,
            host=self.PG_DB_HOST,
            port=self.PG_DB_PORT,
            database=self.PG_DB_NAME,
            username=self.PG_DB_USER,
            password=self.PG_DB_PASSWORD,
            additional_config=additional_config,
        )

    @property
    def PARSED_ALLOWED_ORIGINS(self):
        return [x.strip() for x in self.ALLOWED_ORIGINS.split(",")]


settings = Settings()

__all__ = ["settings"]
