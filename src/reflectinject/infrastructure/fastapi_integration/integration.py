import logging
from typing import Awaitable, Callable, Optional, Type, TypeVar

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from reflectinject.domain import CloneError, IRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


def create_fastapi_dependency(registry: IRegistry, dependency_type: Type[T]) -> Callable[[], Optional[T]]:
    """Create a FastAPI Depends() callable that resolves from the registry.

    The resolved instance follows the binding's lifecycle (singleton or
    transient). Like any resolution, an unresolvable type yields None.

    Args:
        registry: The registry to resolve dependencies from.
        dependency_type: The type to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> registry = Registry("myapp")
        >>> get_user_repo = create_fastapi_dependency(registry, UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """

    def dependency() -> Optional[T]:
        """Resolve the dependency from the registry."""
        return registry.resolve(dependency_type)

    return dependency


def create_request_dependency(registry: IRegistry, dependency_type: Type[T]) -> Callable[[Request], Optional[T]]:
    """Create a FastAPI dependency that can receive the current request.

    The request is made available as an extra instance for this resolution
    only, so constructors declaring a ``Request`` parameter get the current one.

    Example:
        >>> class RequestContext:
        ...     def __init__(self, request: Request):
        ...         self.path = request.url.path
        >>>
        >>> get_context = create_request_dependency(registry, RequestContext)
    """

    def request_dependency(request: Request) -> Optional[T]:
        """Resolve with the request bound."""
        return registry.resolve_with_extras(dependency_type, request)

    return request_dependency


def create_scoped_dependency(dependency_type: Type[T]) -> Callable[[Request], Optional[T]]:
    """Create a FastAPI dependency that resolves from the request-scoped registry.

    Requires the ScopedRegistryMiddleware to be installed.

    Args:
        dependency_type: The type to resolve from the scoped registry.

    Returns:
        A callable that resolves from the request-scoped registry.

    Example:
        >>> app.add_middleware(ScopedRegistryMiddleware, registry=registry)
        >>>
        >>> get_request_context = create_scoped_dependency(RequestContext)
        >>>
        >>> @app.get("/process")
        >>> async def process_request(ctx: RequestContext = Depends(get_request_context)):
        ...     return {"path": ctx.path}
    """

    def scoped_dependency(request: Request) -> Optional[T]:
        """Resolve from the request's scoped registry."""
        if not hasattr(request.state, "registry"):
            raise RuntimeError(
                "Request does not have a scoped registry. Did you forget to add ScopedRegistryMiddleware?"
            )
        scoped_registry: IRegistry = request.state.registry
        return scoped_registry.resolve(dependency_type)

    return scoped_dependency


class ScopedRegistryMiddleware(BaseHTTPMiddleware):
    """Middleware that gives each request its own copy of the registry.

    The copy has the request bound as a singleton and is accessible via
    `request.state.registry`. Bindings added to it never reach the parent.

    Attributes:
        registry: The parent registry to copy for each request.
    """

    def __init__(self, app: FastAPI, registry: IRegistry):
        """Initialize the middleware with a parent registry.

        Args:
            app: The FastAPI/Starlette application.
            registry: The parent registry to copy for each request.
        """
        super().__init__(app)
        self.registry = registry

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Attach a scoped registry to the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        try:
            scoped_registry = self.registry.copy()
            scoped_registry.add_mapping(request)
        except CloneError:
            logger.warning("Unable to copy the registry, request uses the parent registry", exc_info=True)
            scoped_registry = self.registry
        request.state.registry = scoped_registry

        return await call_next(request)
