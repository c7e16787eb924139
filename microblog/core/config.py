from dataclasses import dataclass, field
from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # Basic settings
    PROJECT_NAME: str = "Microblog ActivityPub Server"
    API_V1_STR: str = "/api/v1"
    ACTIVITYPUB_PREFIX: str = "/activitypub"
    LOG_LEVEL: str = "INFO"

    # Database settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./microblog.db"

    # ActivityPub settings
    ACTIVITYPUB_USERNAME: str = "default"
    ACTIVITYPUB_DOMAIN: str = "mb.example.com"
    ACTIVITYPUB_PROTOCOL: str = "https"
    # Historical domains still accepted by WebFinger
    ACTIVITYPUB_ALLOWED_DOMAINS: List[str] = []
    ACTIVITYPUB_BASE_URL: Optional[str] = None
    SITE_URL: Optional[str] = None

    # Actor profile
    ACTOR_NAME: str = "Microblog User"
    ACTOR_SUMMARY: str = "Personal microblog"
    ACTOR_ICON_URL: Optional[str] = None

    FEATURED_COUNT: int = 5

    # Federation settings
    FEDERATION_TIMEOUT: float = 10.0
    FEDERATION_USER_AGENT: str = "microblog-ap/1.0"

    # CORS settings
    ALLOWED_HOSTS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True

@dataclass(frozen=True)
class AccountConfig:
    """Identity of the single hosted account, injected into every component."""
    account_id: str
    domains: List[str]
    endpoint_base_url: str
    site_url: str
    display_name: str = ""
    summary: str = ""
    icon_url: Optional[str] = None
    featured_count: int = 5

    @property
    def primary_domain(self) -> str:
        return self.domains[0]

    @property
    def actor_id(self) -> str:
        return f"{self.endpoint_base_url}/actor"

    @property
    def key_id(self) -> str:
        return f"{self.actor_id}#main-key"

    @property
    def inbox_url(self) -> str:
        return f"{self.endpoint_base_url}/inbox"

    @property
    def outbox_url(self) -> str:
        return f"{self.endpoint_base_url}/outbox"

    @property
    def followers_url(self) -> str:
        return f"{self.endpoint_base_url}/followers"

    @property
    def following_url(self) -> str:
        return f"{self.endpoint_base_url}/following"

    @property
    def featured_url(self) -> str:
        return f"{self.endpoint_base_url}/featured"

    def note_id(self, post_id) -> str:
        return f"{self.endpoint_base_url}/posts/{post_id}"

    def post_page_url(self, post_id) -> str:
        return f"{self.site_url}/posts/{post_id}"

def build_account_config(conf: Settings) -> AccountConfig:
    site_url = (conf.SITE_URL or f"{conf.ACTIVITYPUB_PROTOCOL}://{conf.ACTIVITYPUB_DOMAIN}").rstrip("/")
    base_url = conf.ACTIVITYPUB_BASE_URL or f"{site_url}{conf.ACTIVITYPUB_PREFIX}"
    domains = [conf.ACTIVITYPUB_DOMAIN]
    for alias in conf.ACTIVITYPUB_ALLOWED_DOMAINS:
        if alias not in domains:
            domains.append(alias)
    return AccountConfig(
        account_id=conf.ACTIVITYPUB_USERNAME,
        domains=domains,
        endpoint_base_url=base_url.rstrip("/"),
        site_url=site_url,
        display_name=conf.ACTOR_NAME,
        summary=conf.ACTOR_SUMMARY,
        icon_url=conf.ACTOR_ICON_URL,
        featured_count=conf.FEATURED_COUNT,
    )

settings = Settings()
account_config = build_account_config(settings)
