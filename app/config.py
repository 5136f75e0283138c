import os
from typing import Optional, Tuple


DEFAULT_NEO4J_URI = "bolt://localhost:7687"
DEFAULT_NEO4J_USER = "neo4j"
DEFAULT_OPENCORPORATES_API_URL = "https://api.opencorporates.com/"
DEFAULT_RPVS_API_URL = "https://rpvs.gov.sk/OpenData"
DEFAULT_HTTP_TIMEOUT = 10.0


def load_env_from_file(env_path: Optional[str] = None) -> None:
    """Load environment variables from a .env file at the project root if present.

    Only sets variables that aren't already present in the process environment.
    """
    if env_path is None:
        root_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
        env_path = os.path.join(root_dir, ".env")
    if not os.path.isfile(env_path):
        return
    with open(env_path, "r", encoding="utf-8") as f:
        for line in f:
            s = line.strip()
            if not s or s.startswith("#"):
                continue
            if "=" not in s:
                continue
            key, val = s.split("=", 1)
            key = key.strip()
            val = val.strip().strip('"').strip("'")
            # Allow space around '=' like KEY = value
            if key and (key not in os.environ or not os.environ[key]):
                os.environ[key] = val


def get_neo4j_config() -> Tuple[str, str, str]:
    """Get Neo4j URI, user, and password, loading .env if necessary and applying defaults.

    Returns (uri, user, password). Raises a helpful RuntimeError when the password is missing.
    """
    load_env_from_file()

    uri = os.getenv("NEO4J_URI") or DEFAULT_NEO4J_URI
    user = os.getenv("NEO4J_USER") or DEFAULT_NEO4J_USER
    pwd = os.getenv("NEO4J_PASSWORD")

    if not pwd:
        raise RuntimeError(
            "NEO4J_PASSWORD is not set.\n"
            "Define it in your environment or in a .env file at the project root, e.g.\n"
            "NEO4J_URI=bolt://localhost:7687\nNEO4J_USER=neo4j\nNEO4J_PASSWORD=your_password"
        )

    return uri, user, pwd


def get_opencorporates_config() -> Tuple[Optional[str], str]:
    """Return (api_token, api_url) for the OpenCorporates API."""
    load_env_from_file()
    token = os.getenv("OPENCORPORATES_API_TOKEN") or None
    url = os.getenv("OPENCORPORATES_API_URL") or DEFAULT_OPENCORPORATES_API_URL
    return token, url


def get_rpvs_api_url() -> str:
    load_env_from_file()
    return os.getenv("RPVS_API_URL") or DEFAULT_RPVS_API_URL


def get_http_timeout() -> float:
    load_env_from_file()
    raw = os.getenv("HTTP_TIMEOUT")
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"HTTP_TIMEOUT must be a number of seconds, got {raw!r}") from exc
