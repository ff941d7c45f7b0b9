import inspect
import logging
from typing import Any, Awaitable, Callable

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from strata_di.application import DIContainer
from strata_di.domain import IContainer

logger = logging.getLogger(__name__)


def create_fastapi_dependency(container: IContainer, key: Any) -> Callable[[], Any]:
    """Create a FastAPI Depends() callable that resolves from the DI container.

    The resolved instance lifetime follows the key's registration in the
    container, including strategies attached with ``@singleton`` or ``@transient``.

    Args:
        container: The DI container to resolve dependencies from.
        key: The key to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> @singleton()
        ... class UserRepository:
        ...     def __init__(self, db: DatabaseConnection):
        ...         self.db = db
        >>>
        >>> get_user_repo = create_fastapi_dependency(container, UserRepository)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(repo: UserRepository = Depends(get_user_repo)):
        ...     return await repo.get_all()
    """

    def dependency() -> Any:
        """Resolve the dependency from the container."""
        return container.resolve(key)

    return dependency


def create_child_dependency(key: Any) -> Callable[[Request], Any]:
    """Create a FastAPI dependency that resolves from the request's child container.

    Requires the ChildContainerMiddleware to be installed. Keys registered with
    ``@singleton(True)`` get one instance per request; plain singletons are
    still shared through the root container.

    Args:
        key: The key to resolve from the child container.

    Returns:
        A callable that resolves from the request's child container.

    Example:
        >>> app.add_middleware(ChildContainerMiddleware, container=container)
        >>>
        >>> get_request_context = create_child_dependency(RequestContext)
        >>>
        >>> @app.get("/process")
        >>> async def process_request(ctx: RequestContext = Depends(get_request_context)):
        ...     return {"request_id": ctx.request_id}
    """

    def child_dependency(request: Request) -> Any:
        """Resolve from the request's child container."""
        if not hasattr(request.state, "di_container"):
            raise RuntimeError(
                "Request does not have a child DI container. Did you forget to add ChildContainerMiddleware?"
            )
        child_container: IContainer = request.state.di_container
        return child_container.resolve(key)

    return child_dependency


class ChildContainerMiddleware(BaseHTTPMiddleware):
    """Middleware that creates a child DI container for each request.

    The child container is accessible via `request.state.di_container` and is
    cleared once the response has been produced.

    Attributes:
        container: The parent DI container to create children from.

    Example:
        >>> app = FastAPI()
        >>> app.add_middleware(ChildContainerMiddleware, container=container)
        >>>
        >>> @app.get("/")
        >>> async def root(request: Request):
        ...     child_container = request.state.di_container
        ...     return {"message": "Hello"}
    """

    def __init__(self, app: FastAPI, container: IContainer):
        """Initialize the middleware with a parent container.

        Args:
            app: The FastAPI/Starlette application.
            container: The parent DI container to create children from.
        """
        super().__init__(app)
        self.container = container

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        """Create a child container for the request and execute the endpoint.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or endpoint handler.

        Returns:
            The response from the endpoint.
        """
        child_container = self.container.create_child()
        request.state.di_container = child_container
        logger.debug("Created child container for %s %s", request.method, request.url.path)

        try:
            response = await call_next(request)
            return response
        finally:
            child_container.clear()


def inject_dependencies(container: IContainer, *keys: Any) -> Callable:
    """Decorator that injects dependencies into an async function.

    Resolves the given keys from the container and passes them as keyword
    arguments, matched in order to the function's leading parameters.
    Arguments supplied by the caller are left untouched.

    Args:
        container: The DI container to resolve dependencies from.
        *keys: Keys to resolve and inject.

    Returns:
        A decorator function.

    Example:
        >>> @inject_dependencies(container, UserService, Logger)
        ... async def list_users(user_service: UserService, logger: Logger):
        ...     logger.info("Listing users")
        ...     return await user_service.get_all()
    """

    def decorator(func: Callable) -> Callable:
        """Wrap the function with dependency injection logic."""
        signature = inspect.signature(func)
        param_names = list(signature.parameters.keys())

        async def wrapper(*args, **kwargs):
            """Resolve dependencies and call the original function."""
            for param_name, key in zip(param_names[len(args) :], keys[len(args) :]):
                if param_name not in kwargs:
                    kwargs[param_name] = container.resolve(key)

            return await func(*args, **kwargs)

        wrapper.__name__ = func.__name__
        wrapper.__doc__ = func.__doc__
        return wrapper

    return decorator
