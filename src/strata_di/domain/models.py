from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from strata_di.domain.enums import ResolverStrategy
from strata_di.domain.exceptions import RegistrationError


class Resolver(BaseModel):
    """Handle stored by a container per key and used to produce instances.

    Attributes:
        key: The key the resolver is registered under.
        strategy: How instances are produced.
        state: Strategy payload: the instance, factory, handler or aliased key.
        cached_instance: Cached instance for singletons.
        is_cached: Whether cached_instance holds a created singleton.
        resolution_count: Number of times this resolver has been resolved.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: Any = Field(..., description="The key the resolver is registered under.")
    strategy: ResolverStrategy = Field(..., description="How the resolver produces instances.")
    state: Any = Field(default=None, description="Instance, factory, handler or aliased key.")
    cached_instance: Optional[Any] = Field(default=None, description="Cached singleton instance.")
    is_cached: bool = Field(default=False, description="Whether a singleton instance was created.")
    resolution_count: int = Field(default=0, description="Number of times the resolver was used.")


class ContainerConfiguration(BaseModel):
    """Options shared by a container hierarchy.

    Attributes:
        default_lifetime: Lifetime used when auto-registering a factory without a strategy.
        auto_register: Whether unknown class or callable keys are registered on first resolution.
    """

    model_config = ConfigDict(frozen=True)

    default_lifetime: ResolverStrategy = Field(
        default=ResolverStrategy.SINGLETON,
        description="Lifetime for factories auto-registered without a strategy.",
    )
    auto_register: bool = Field(
        default=True,
        description="Register unknown callable keys on first resolution.",
    )

    @field_validator("default_lifetime")
    @classmethod
    def _check_default_lifetime(cls, value: ResolverStrategy) -> ResolverStrategy:
        if value not in (ResolverStrategy.SINGLETON, ResolverStrategy.TRANSIENT):
            raise RegistrationError(f"Unsupported default lifetime: {value}")
        return value
