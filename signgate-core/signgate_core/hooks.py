"""
Action Hooks
============
Pre-action hooks filtered by action name.

Hooks are declared on a controller as ``before_action_list``::

    before_action_list = [
        "load_profile",
        ("check_owner", {"only": "update,delete"}),
        HookSpec("audit", except_=["list"]),
    ]

or as a mapping of method name to options::

    before_action_list = {"load_profile": {}, "check_owner": {"only": ["update"]}}
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import structlog

from .response import ApiResult

logger = structlog.get_logger(__name__)

HookMethod = Union[str, Callable[[], Optional[ApiResult]]]


def _split_actions(value: Union[None, str, Iterable[str]]) -> Optional[Tuple[str, ...]]:
    if value is None:
        return None
    if isinstance(value, str):
        value = value.split(",")
    return tuple(name.strip().lower() for name in value if name and name.strip())


@dataclass(frozen=True)
class HookSpec:
    """A hook method with an optional ``only`` or ``except`` action filter."""
    method: HookMethod
    only: Optional[Tuple[str, ...]] = None
    except_: Optional[Tuple[str, ...]] = None

    @classmethod
    def create(
        cls,
        method: HookMethod,
        only: Union[None, str, Iterable[str]] = None,
        except_: Union[None, str, Iterable[str]] = None,
    ) -> "HookSpec":
        return cls(method=method, only=_split_actions(only), except_=_split_actions(except_))

    def applies_to(self, action: str) -> bool:
        action = action.lower()
        if self.only is not None:
            return action in self.only
        if self.except_ is not None:
            return action not in self.except_
        return True

    @property
    def name(self) -> str:
        if isinstance(self.method, str):
            return self.method
        return getattr(self.method, "__name__", repr(self.method))


def _from_options(method: HookMethod, options: Optional[Mapping[str, Any]]) -> HookSpec:
    options = options or {}
    return HookSpec.create(method, only=options.get("only"), except_=options.get("except"))


def parse_hooks(declared: Union[None, Mapping[str, Any], Sequence[Any]]) -> List[HookSpec]:
    """Normalize a ``before_action_list`` declaration into HookSpecs."""
    if not declared:
        return []
    if isinstance(declared, Mapping):
        return [_from_options(method, options) for method, options in declared.items()]

    specs = []
    for entry in declared:
        if isinstance(entry, HookSpec):
            specs.append(entry)
        elif isinstance(entry, tuple):
            method, options = entry
            specs.append(_from_options(method, options))
        else:
            specs.append(HookSpec.create(entry))
    return specs


class ActionHookDispatcher:
    """Runs hooks in declared order, honoring their filters."""

    def __init__(self, specs: Sequence[HookSpec]):
        self.specs = list(specs)

    def dispatch(self, target: Any, action: str) -> Optional[ApiResult]:
        """
        Run the hooks that apply to an action.
        
        Args:
            target: Object string hook names are looked up on
            action: Current action name
            
        Returns:
            The ApiResult of the first hook that produced one, else None
        """
        for spec in self.specs:
            if not spec.applies_to(action):
                continue
            method = getattr(target, spec.method) if isinstance(spec.method, str) else spec.method
            result = method()
            if isinstance(result, ApiResult):
                logger.info("hook_short_circuit", hook=spec.name, action=action, code=result.code)
                return result
        return None
