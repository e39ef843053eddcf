"""Configuration management for the MasterData export tool.

Loads configuration from environment variables with .env file support.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)

DEFAULT_BASE_URL_TEMPLATE = "https://{account}.vtexcommercestable.com.br"
MAX_BATCHES = 200


@dataclass
class MDXConfig:
    """Export engine configuration."""

    base_url_template: str = DEFAULT_BASE_URL_TEMPLATE
    request_timeout: float = 60.0
    max_batches: int = MAX_BATCHES

    # Page sizes per retrieval strategy
    scroll_page_size: int = 100
    window_page_size: int = 100
    paged_page_size: int = 100

    # Inbound rate limits (requests per window, per client)
    export_rate_limit: int = 30
    page_rate_limit: int = 120
    rate_limit_window_ms: int = 60_000

    rest_debug: bool = False

    # CLI defaults only, never required by the engine
    account_name: Optional[str] = None
    app_key: Optional[str] = None
    app_token: Optional[str] = None

    def base_url(self, account_name: str) -> str:
        """MasterData base URL for an account."""
        return self.base_url_template.format(account=account_name)

    def validate(self) -> list[str]:
        """Validate configuration values.

        Returns:
            List of validation error messages, empty if valid.
        """
        errors = []
        if "{account}" not in self.base_url_template:
            errors.append("MDX_BASE_URL_TEMPLATE must contain an {account} placeholder")
        if self.request_timeout <= 0:
            errors.append("MDX_REQUEST_TIMEOUT must be positive")
        if not 1 <= self.max_batches <= MAX_BATCHES:
            errors.append(f"MDX_MAX_BATCHES must be between 1 and {MAX_BATCHES}")
        for name in ("scroll_page_size", "window_page_size", "paged_page_size"):
            if getattr(self, name) < 1:
                errors.append(f"MDX_{name.upper()} must be at least 1")
        if self.export_rate_limit < 1 or self.page_rate_limit < 1:
            errors.append("Rate limits must be at least 1 request per window")
        if self.rate_limit_window_ms < 1:
            errors.append("MDX_RATE_LIMIT_WINDOW_MS must be positive")
        return errors


def get_config() -> MDXConfig:
    """Load configuration from environment variables.

    Returns:
        MDXConfig instance populated from environment.
    """
    return MDXConfig(
        base_url_template=os.environ.get("MDX_BASE_URL_TEMPLATE", DEFAULT_BASE_URL_TEMPLATE),
        request_timeout=float(os.environ.get("MDX_REQUEST_TIMEOUT", "60")),
        max_batches=int(os.environ.get("MDX_MAX_BATCHES", str(MAX_BATCHES))),
        scroll_page_size=int(os.environ.get("MDX_SCROLL_PAGE_SIZE", "100")),
        window_page_size=int(os.environ.get("MDX_WINDOW_PAGE_SIZE", "100")),
        paged_page_size=int(os.environ.get("MDX_PAGED_PAGE_SIZE", "100")),
        export_rate_limit=int(os.environ.get("MDX_EXPORT_RATE_LIMIT", "30")),
        page_rate_limit=int(os.environ.get("MDX_PAGE_RATE_LIMIT", "120")),
        rate_limit_window_ms=int(os.environ.get("MDX_RATE_LIMIT_WINDOW_MS", "60000")),
        rest_debug=os.environ.get("MDX_REST_DEBUG", "").lower() == "true",
        account_name=os.environ.get("VTEX_ACCOUNT_NAME"),
        app_key=os.environ.get("VTEX_APP_KEY"),
        app_token=os.environ.get("VTEX_APP_TOKEN"),
    )
