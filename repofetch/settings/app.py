"""Getter settings powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from repofetch.getter.constants import DEFAULT_TIMEOUT_SECONDS
from repofetch.getter.options import (
    Option,
    with_basic_auth,
    with_insecure_skip_verify_tls,
    with_pass_credentials_all,
    with_timeout,
    with_tls_client_config,
    with_user_agent,
)
from repofetch.version import default_user_agent


class GetterSettings(BaseSettings):
    """Process-wide getter configuration read from the environment.

    Every field maps to ``REPOFETCH_<FIELD>``, e.g. ``REPOFETCH_CA_FILE``.
    """

    model_config = SettingsConfigDict(
        env_prefix="REPOFETCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    user_agent: str = Field(default_factory=default_user_agent, min_length=1)
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0.0)
    cert_file: str = ""
    key_file: str = ""
    ca_file: str = ""
    insecure_skip_tls_verify: bool = False
    pass_credentials_all: bool = False
    username: str = ""
    password: str = ""

    def base_options(self) -> list[Option]:
        """Build the base option set a scheme registry hands to getters.

        The user agent is not included: it is passed to the getter as its
        default so request-level options can still override it.

        Returns:
            Option functions reflecting these settings.
        """
        options: list[Option] = [
            with_timeout(self.timeout_seconds),
            with_insecure_skip_verify_tls(self.insecure_skip_tls_verify),
            with_pass_credentials_all(self.pass_credentials_all),
        ]
        if self.cert_file or self.key_file or self.ca_file:
            options.append(
                with_tls_client_config(self.cert_file, self.key_file, self.ca_file)
            )
        if self.username or self.password:
            options.append(with_basic_auth(self.username, self.password))
        return options


def get_settings() -> GetterSettings:
    """Get a settings instance."""
    return GetterSettings()
