from __future__ import annotations

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HOSTNAME = "default--main--aem-boilerplate--adobe.aem.reviews"


class RouterSettings(BaseSettings):
    """Runtime configuration for the review router.

    Environment variables are prefixed with REVIEW_ROUTER_. Owner tokens may also be
    provided as raw ``{owner}-org-token`` variables.
    """

    model_config = SettingsConfigDict(env_prefix="REVIEW_ROUTER_", extra="ignore")

    # HTTP
    bind_host: str = "0.0.0.0"
    bind_port: int = 8787

    # Logging
    log_level: str = "INFO"

    # Hostnames
    reviews_suffixes: list[str] = Field(default_factory=lambda: [".hlx.reviews", ".aem.reviews"])
    default_hostname: str = DEFAULT_HOSTNAME
    aem_domain: str = "aem"

    # Auth
    login_script_url: str = "https://labs.aem.live/tools/snapshot-admin/401.js"
    org_tokens: dict[str, str] = Field(
        default_factory=dict,
        description="Secrets keyed by '{owner}-org-token'",
    )

    # Upstream
    upstream_timeout: float = 30.0

    def org_token(self, owner: str | None) -> str | None:
        if not owner:
            return None
        key = f"{owner}-org-token"
        return self.org_tokens.get(key) or os.environ.get(key) or None


settings = RouterSettings()
