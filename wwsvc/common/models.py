"""
Pydantic models for configuration and the WEBSERVICES wire format.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urljoin

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
    model_validator,
)

from wwsvc.common.config import Config
from wwsvc.common.exceptions import ConfigurationError


class TlsMode(str, Enum):
    SYSTEM = "system"
    PINNED = "pinned"
    INSECURE = "insecure"


class Credentials(BaseModel):
    """Service pass and application id issued by a REGISTER call."""

    service_pass: str = Field(min_length=1)
    app_id: str


class ClientConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: HttpUrl
    vendor_hash: str = Field(min_length=1)
    app_hash: str = Field(min_length=1)
    secret: str = Field(min_length=1)
    revision: int = Field(ge=0)
    tls_mode: TlsMode = TlsMode.SYSTEM
    ca_bundle: Path | None = None
    timeout: float = Field(default_factory=lambda: Config().DEFAULT_TIMEOUT, gt=0)
    result_max_lines: int = Field(default_factory=lambda: Config().RESULT_MAX_LINES, gt=0)
    credentials: Credentials | None = None
    log_level: int | None = None

    @model_validator(mode="after")
    def _check_tls(self) -> ClientConfig:
        if self.tls_mode is TlsMode.PINNED and self.ca_bundle is None:
            msg = "tls_mode 'pinned' requires a ca_bundle path"
            raise ValueError(msg)
        return self

    @property
    def service_url(self) -> str:
        """Base URL joined with the WEBSERVICES path, e.g. ``https://host/WWSVC/``."""
        return urljoin(str(self.base_url), Config().WWSVC_PATH)

    @classmethod
    def build(cls, **values: Any) -> ClientConfig:
        """Validate values, reporting problems as ConfigurationError."""
        try:
            return cls(**values)
        except ValidationError as e:
            msg = f"Invalid client configuration: {e}"
            raise ConfigurationError(msg) from e

    @classmethod
    def from_env(cls, **overrides: Any) -> ClientConfig:
        """Build a config from WWSVC_* environment variables plus overrides."""
        config = Config()
        values: dict[str, Any] = {}
        env_fields = {
            "base_url": config.ENV_URL,
            "vendor_hash": config.ENV_VENDOR_HASH,
            "app_hash": config.ENV_APP_HASH,
            "secret": config.ENV_SECRET,
            "revision": config.ENV_REVISION,
        }
        for field, env_name in env_fields.items():
            value = os.getenv(env_name)
            if value is not None:
                values[field] = value
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.build(**values)


class ComResult(BaseModel):
    """COMRESULT block present in every WEBSERVICES response."""

    model_config = ConfigDict(populate_by_name=True)

    status: int = Field(alias="STATUS")
    code: str = Field(default="", alias="CODE")
    info: str = Field(default="", alias="INFO")
    info2: str | None = Field(default=None, alias="INFO2")
    info3: str | None = Field(default=None, alias="INFO3")
    errno: str | None = Field(default=None, alias="ERRNO")

    @field_validator("code", "info", "info2", "info3", "errno", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @property
    def message(self) -> str:
        parts = [p for p in (self.info, self.info2, self.info3) if p]
        return " ".join(parts) or self.code


class ServicePass(BaseModel):
    pass_id: str = Field(alias="PASSID")
    app_id: str = Field(default="", alias="APPID")


class RegisterResponse(BaseModel):
    com_result: ComResult = Field(alias="COMRESULT")
    service_pass: ServicePass = Field(alias="SERVICEPASS")


class ServiceFunctionParameter(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="PNAME")
    content: str = Field(alias="PCONTENT")


class ServiceFunction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    function_name: str = Field(alias="FUNCTIONNAME")
    parameters: list[ServiceFunctionParameter] = Field(alias="PARAMETER")
    revision: int = Field(alias="REVISION")


class ServicePassInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    service_pass: str = Field(alias="SERVICEPASS")
    app_hash: str = Field(alias="APPHASH")
    timestamp: str = Field(alias="TIMESTAMP")
    request_id: int = Field(alias="REQUESTID")
    execute_mode: str = Field(default="SYNCHRON", alias="EXECUTE_MODE")


class ExecJsonRequest(BaseModel):
    """Request body for the EXECJSON endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    function: ServiceFunction = Field(alias="WWSVC_FUNCTION")
    pass_info: ServicePassInfo = Field(alias="WWSVC_PASSINFO")
