"""Version information and the default user agent."""

VERSION = "0.1.0"

USER_AGENT_PRODUCT = "repofetch"


def default_user_agent(version: str = VERSION) -> str:
    """Build the default User-Agent header value.

    Args:
        version: Version string; a leading "v" is stripped.

    Returns:
        User agent such as ``repofetch/0.1.0``.
    """
    return f"{USER_AGENT_PRODUCT}/{version.removeprefix('v')}"
