"""
Data models for proxy resolution.
"""
from typing import Dict, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

ProxyScheme = Literal["http", "https"]


class AgentProxyConfig(BaseModel):
    """Explicit HTTP_PROXY/HTTPS_PROXY values.

    These are used by the fallback tier ahead of the process environment,
    so a host can pin the proxy it resolved once without exporting it.
    """
    http_proxy: Optional[str] = Field(default=None, description="HTTP proxy URL")
    https_proxy: Optional[str] = Field(default=None, description="HTTPS proxy URL")


class NetworkConfig(BaseModel):
    """Network configuration settings from app.yaml.

    Contains environment-specific proxy URLs and bypass rules.
    """
    default_environment: Optional[str] = Field(default="dev", description="Default environment to use if parsing fails")
    proxy_urls: Dict[str, Optional[str]] = Field(default_factory=dict, description="Map of environment names to proxy URLs")
    agent_proxy: Optional[AgentProxyConfig] = Field(default=None, description="Agent proxy configuration")
    no_proxy: Optional[str] = Field(default=None, description="Comma separated hosts that bypass the proxy")


class Direct(BaseModel):
    """Connect without a proxy."""
    model_config = ConfigDict(frozen=True)

    @property
    def url(self) -> None:
        return None

    def __str__(self) -> str:
        return "DIRECT"


class ProxyEndpoint(BaseModel):
    """A proxy server to route a connection through."""
    model_config = ConfigDict(frozen=True)

    scheme: Optional[ProxyScheme] = None
    host: str = Field(min_length=1)
    port: int = Field(gt=0, lt=65536)
    userinfo: Optional[str] = None

    @property
    def url(self) -> str:
        """Fully qualified proxy URL, defaulting to http when no scheme is known."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        auth = f"{self.userinfo}@" if self.userinfo else ""
        return f"{self.scheme or 'http'}://{auth}{host}:{self.port}"

    def with_scheme(self, scheme: ProxyScheme) -> "ProxyEndpoint":
        return self.model_copy(update={"scheme": scheme})

    def __str__(self) -> str:
        return self.url


ProxySpec = Union[Direct, ProxyEndpoint]

DIRECT = Direct()
