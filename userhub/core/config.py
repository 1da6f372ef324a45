# userhub/core/config.py
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # 기본 앱 설정
    app_env: str = Field("dev", alias="APP_ENV")
    app_version: str = Field("0.1.0", alias="APP_VERSION")
    cors_allow_origins: str = Field("http://localhost:3000,http://localhost:5173", alias="CORS_ALLOW_ORIGINS")

    # JWT
    jwt_access_secret: str = Field("userhub-access-secret", alias="JWT_ACCESS_SECRET")
    jwt_refresh_secret: str = Field("dev_refresh_secret_change_me", alias="JWT_REFRESH_SECRET")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(15, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    refresh_token_expire_days: int = Field(10, alias="REFRESH_TOKEN_EXPIRE_DAYS")

    # 쿠키
    cookie_secure: bool = Field(True, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("lax", alias="COOKIE_SAMESITE")

    # 비밀번호 해시
    bcrypt_rounds: int = Field(12, alias="BCRYPT_ROUNDS")

    # 미디어 업로드 (Cloudinary unsigned upload)
    media_upload_url: str = Field("", alias="MEDIA_UPLOAD_URL")
    media_upload_preset: str = Field("", alias="MEDIA_UPLOAD_PRESET")
    media_upload_timeout_sec: float = Field(30.0, alias="MEDIA_UPLOAD_TIMEOUT_SEC")
    upload_tmp_dir: str = Field("./public/temp", alias="UPLOAD_TMP_DIR")

    @model_validator(mode="after")
    def _check_token_lifetimes(self) -> "Settings":
        if self.access_token_expire_minutes < 1:
            raise ValueError("ACCESS_TOKEN_EXPIRE_MINUTES must be at least 1")
        if self.refresh_token_expire_days * 24 * 60 <= self.access_token_expire_minutes:
            raise ValueError("REFRESH_TOKEN_EXPIRE_DAYS must outlive the access token")
        if self.jwt_access_secret == self.jwt_refresh_secret:
            raise ValueError("JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ")
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return self

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
