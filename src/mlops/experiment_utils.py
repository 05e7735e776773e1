"""MLflow experiment utilities."""
import logging
import pathlib
from typing import Optional

import mlflow
import requests

from .config import EXPERIMENT_NAME, TRACKING_URI

_HEALTH_ENDPOINTS = ("/health", "/version")
logger = logging.getLogger(__name__)


def _ping_tracking_server(uri: str, timeout: float = 2.0) -> bool:
    """Return True iff an HTTP MLflow server is reachable at *uri*."""
    if not uri.startswith("http"):
        return False
    try:
        for ep in _HEALTH_ENDPOINTS:
            response = requests.get(uri.rstrip("/") + ep, timeout=timeout)
            response.raise_for_status()
        return True
    except requests.RequestException as exc:
        logger.debug("MLflow server ping failed: %s", exc)
        return False


def _fallback_uri() -> str:
    """SQLite tracking store under ./mlruns_local."""
    local = pathlib.Path.cwd() / "mlruns_local"
    local.mkdir(exist_ok=True)
    return f"sqlite:///{(local / 'mlflow.db').resolve().as_posix()}"


def setup_mlflow_experiment(
    experiment_name: Optional[str] = None,
    tracking_uri: Optional[str] = None,
) -> str:
    """
    Resolve a usable MLflow tracking URI and make sure the experiment exists.

    An explicit non-HTTP *tracking_uri* (e.g. a ``sqlite:`` store) is used as is;
    an HTTP one that does not answer falls back to a local SQLite store.
    Returns the URI in use.
    """
    exp_name = experiment_name or EXPERIMENT_NAME
    uri = tracking_uri or TRACKING_URI

    if uri.startswith("http") and not _ping_tracking_server(uri):
        uri = _fallback_uri()
        logger.warning("⚠️  MLflow server unreachable – using local store %s", uri)

    mlflow.set_tracking_uri(uri)
    if mlflow.get_experiment_by_name(exp_name) is None:
        mlflow.create_experiment(exp_name)
    mlflow.set_experiment(exp_name)
    logger.info("🗂  Using MLflow experiment '%s' @ %s", exp_name, uri)
    return uri
