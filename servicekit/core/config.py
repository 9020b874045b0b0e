"""
Service configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here, read once at process start.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from servicekit.domain.negotiation.entities import TemplatePaths


class Settings(BaseSettings):
    """Service settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Forces DEBUG logging.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        host: Interface the HTTP listener binds to.
        port: Port the HTTP listener binds to.
        shutdown_grace_seconds: Ceiling on how long in-flight requests may
            run after a termination signal.
        html_page_template: Template file used for ``text/html`` responses.
            Unset disables that format.
        html_fragment_template: Template file used for ``application/html``
            responses. Unset disables that format.
        service_key: Shared token required in ``Authorization``. Unset
            disables authorization.
        debug_with_health: Access-log calls to ``/health`` as well.
        rpc_address: Address the gRPC server binds to.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "servicekit"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080
    shutdown_grace_seconds: float = 5.0

    html_page_template: Optional[str] = None
    html_fragment_template: Optional[str] = None

    service_key: Optional[str] = None
    debug_with_health: bool = False

    rpc_address: str = "[::]:5000"

    def template_paths(self) -> TemplatePaths:
        """Return the immutable HTML template configuration.

        Empty strings are treated the same as unset paths.
        """
        return TemplatePaths(
            html_page=self.html_page_template or None,
            html_fragment=self.html_fragment_template or None,
        )

    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level


settings = Settings()
