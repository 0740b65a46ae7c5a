import logging
from typing import Any, Dict, Optional, Set

from starlette.datastructures import URL
from starlette.routing import NoMatchFound

from autologin.core.exceptions import ConfigurationError
from autologin.services.interfaces import PathSpec

logger = logging.getLogger(__name__)


class StarletteLinkBuilder:
    """Builds URLs from the routes of a FastAPI/Starlette application.

    ``routes`` is anything exposing ``url_path_for`` (the application itself,
    or an ``APIRouter``); ``base_url`` is the public origin links point at.
    """

    def __init__(self, routes, base_url: str):
        self.routes = routes
        self.base_url = URL(base_url)

    def _join(self, path: str) -> str:
        return self.base_url.path.rstrip("/") + "/" + path.lstrip("/")

    def to(self, path: str, extra: Optional[Dict[str, Any]] = None,
           secure: Optional[bool] = None) -> str:
        """Absolute URL for a literal path, with ``extra`` as query parameters.

        Paths that are already absolute URLs are kept as they are. ``secure``
        forces https (True) or http (False); None keeps the base scheme.
        """
        target = URL(path)
        if target.scheme and target.netloc:
            url = target
        else:
            url = self.base_url.replace(path=self._join(target.path), query=target.query, fragment=target.fragment)

        if extra:
            url = url.include_query_params(**extra)

        if secure is not None:
            url = url.replace(scheme="https" if secure else "http")

        return str(url)

    def _path_parameter_names(self, name: str) -> Optional[Set[str]]:
        for candidate in getattr(self.routes, "routes", []):
            if getattr(candidate, "name", None) == name and hasattr(candidate, "param_convertors"):
                return set(candidate.param_convertors)
        return None

    def route(self, name: str, parameters: Optional[Dict[str, Any]] = None,
              absolute: bool = True) -> str:
        """URL of the named route.

        Parameters the route's path does not declare are appended as query
        parameters.
        """
        parameters = parameters or {}
        path_names = self._path_parameter_names(name)
        if path_names is None:
            path_params, query = parameters, {}
        else:
            path_params = {k: v for k, v in parameters.items() if k in path_names}
            query = {k: v for k, v in parameters.items() if k not in path_names}

        try:
            path = self.routes.url_path_for(name, **path_params)
        except NoMatchFound as e:
            logger.error(f"No route named '{name}' accepts parameters {sorted(parameters)}")
            raise ConfigurationError(f"Cannot build URL for route '{name}'") from e

        url = path.make_absolute_url(base_url=self.base_url) if absolute else URL(str(path))
        if query:
            url = url.include_query_params(**query)
        return str(url)

    def resolve(self, spec: PathSpec) -> str:
        """Resolve a literal path or a ``(route_name, parameters)`` pair."""
        if isinstance(spec, str):
            return self.to(spec)
        name, parameters = spec
        return self.route(name, parameters)
