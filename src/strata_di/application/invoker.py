import inspect
from typing import Any, Callable, Dict, List, get_type_hints

from strata_di.domain import IContainer, IInvoker, UnresolvableError


class DependencyInvoker(IInvoker):
    """Calls factories with parameters resolved from type hints.

    Classes are inspected through their constructor, functions and bound
    methods through their own signature.
    """

    def invoke(self, factory: Callable[..., Any], container: IContainer) -> Any:
        """Resolve all parameters of the factory and call it.

        Args:
            factory: The class or function to call.
            container: The container to resolve parameters from.

        Returns:
            The factory's result.

        Raises:
            UnresolvableError: If any parameter cannot be resolved or lacks a type hint.

        Example:
            >>> class UserService:
            ...     def __init__(self, db: DatabaseConnection, logger: Logger):
            ...         self.db = db
            ...         self.logger = logger
            >>>
            >>> invoker = DependencyInvoker()
            >>> instance = invoker.invoke(UserService, container)
        """
        try:
            target = factory.__init__ if inspect.isclass(factory) else factory
            signature = inspect.signature(target)
            type_hints = get_type_hints(target)

            args: List[Any] = []
            kwargs: Dict[str, Any] = {}
            for param_name, param in signature.parameters.items():
                if param_name == "self" and inspect.isclass(factory):
                    continue

                # Skip *args and **kwargs parameters
                if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                    continue

                # Parameters with defaults keep them
                if param.default is not inspect.Parameter.empty:
                    continue

                if param_name not in type_hints:
                    raise UnresolvableError(
                        factory,
                        f"Parameter '{param_name}' lacks type hint and has no default value.",
                    )

                try:
                    value = container.resolve(type_hints[param_name])
                except Exception as e:
                    raise UnresolvableError(
                        factory,
                        f"Failed to resolve dependency for parameter '{param_name}': {e}",
                    ) from e

                if param.kind == inspect.Parameter.POSITIONAL_ONLY:
                    args.append(value)
                else:
                    kwargs[param_name] = value

            return factory(*args, **kwargs)

        except UnresolvableError:
            raise
        except Exception as e:
            raise UnresolvableError(factory, f"Failed to invoke {factory}: {e}") from e
