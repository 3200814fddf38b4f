from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    transport_backend: str = Field("httpx", validation_alias="SNAPHTTP_TRANSPORT_BACKEND")
    # Certificate verification for the secure transport.
    tls_verify: bool = Field(True, validation_alias="SNAPHTTP_TLS_VERIFY")
    # Empty keeps the transport's own User-Agent.
    user_agent: str = Field("", validation_alias="SNAPHTTP_USER_AGENT")
