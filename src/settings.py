from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='allow', env_prefix='course_api_')

    invoice_prefix: str = Field(default='FEOC')

    student_page_sizes: list[int] = Field(default=[5, 10, 20, 50])
    default_student_page_size: int = Field(default=5)
    lecturer_page_size: int = Field(default=10)

    enrollment_notification_loop_sleep_duration: float = Field(default=1.0)


class PostgresSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='allow', env_prefix='course_postgres_')

    host: str = Field(default='127.0.0.1')
    port: int = Field(default=5432)
    user: str = Field(default='postgres')
    password: str = Field(default='postgres')
    db: str = Field(default='course')

    pool_size: int = Field(default=20)
    max_overflow: int = Field(default=30)

    def get_url(self, driver: str | None, db: str | None = None):
        scheme = f"postgresql{f'+{driver}' if driver else ''}"
        return f'{scheme}://{self.user}:{self.password}@{self.host}:{self.port}/{db or self.db}'


class KafkaSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='allow', env_prefix='course_kafka_')

    bootstrap_servers: str = Field(default='localhost:19092')
    enrollment_topic: str = Field(default='enrollment')


settings = Settings()
pg_settings = PostgresSettings()
kafka_settings = KafkaSettings()
