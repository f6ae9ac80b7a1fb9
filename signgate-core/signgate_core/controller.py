"""
API Controller
==============
Base class running the guarded request pipeline for one action.

Usage:
    class Order(ApiController):
        no_need_login = ["ping"]
        before_action_list = [("_load_order", {"only": "detail,cancel"})]

        def ping(self):
            return self.success("pong")

        def detail(self):
            return self.success("", {"id": self.order_id})

Pipeline:
    1. login / permission check through the Auth collaborator
    2. RequestGate for actions that need login
    3. before-action hooks
    4. the action itself

Any step may produce an ApiResult, which ends the pipeline and is rendered
as-is by the caller.
"""

import time
import types
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Sequence

import structlog

from .auth import AuthService
from .config import ResponseConfig
from .hooks import ActionHookDispatcher, parse_hooks
from .lang import Translator
from .response import ApiResult, ResponseEnvelope
from .signing.gate import RequestGate

logger = structlog.get_logger(__name__)


@dataclass
class RequestContext:
    """Everything the pipeline needs from an inbound request."""
    controller: str
    action: str
    params: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)  # lowercased names
    cookies: Dict[str, str] = field(default_factory=dict)
    request_time: int = field(default_factory=lambda: int(time.time()))
    lang: str = "en"

    def __post_init__(self):
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    @property
    def path(self) -> str:
        """Auth path of the action, e.g. ``user/profile`` or ``user/address/list``."""
        return f"{self.controller.lower().replace('.', '/')}/{self.action.lower()}"

    @property
    def token(self) -> Optional[str]:
        """Session token: header first, then parameter, then cookie."""
        return (
            self.headers.get("token")
            or self.params.get("token")
            or self.cookies.get("token")
            or None
        )


class ApiController:
    """Base class for guarded API controllers."""

    # Actions that need no login (and therefore no permission check either)
    no_need_login: Sequence[str] = ()
    # Actions that need login but no permission check
    no_need_right: Sequence[str] = ()
    before_action_list: Any = ()
    # Run the signed request gate on actions that need login
    check_parameters: bool = True
    response_type: str = "json"

    def __init__(
        self,
        context: RequestContext,
        auth: AuthService,
        gate: RequestGate,
        response_config: Optional[ResponseConfig] = None,
    ):
        self.request = context
        self.auth = auth
        self.gate = gate
        self.response_config = response_config or ResponseConfig()
        self.translate = Translator(context.lang)

        response_type = self.response_type
        if context.params.get(self.response_config.jsonp_handler):
            response_type = "jsonp"
        self.envelope = ResponseEnvelope(
            config=self.response_config,
            request_time=context.request_time,
            response_type=response_type,
            translate=self.translate,
        )

    def success(self, msg: str = "", data: Any = None, code: int = 1, type: Optional[str] = None, header=None) -> ApiResult:
        return self.envelope.success(msg, data, code, type, header)

    def error(self, msg: str = "", data: Any = None, code: int = 0, type: Optional[str] = None, header=None) -> ApiResult:
        return self.envelope.error(msg, data, code, type, header)

    def initialize(self) -> Optional[ApiResult]:
        """Login, permission and signed request checks."""
        path = self.request.path
        token = self.request.token
        self.auth.set_request_uri(path)

        if self.auth.match(self.no_need_login):
            if token:
                self.auth.init(token)
            return None

        self.auth.init(token)
        if not self.auth.is_login():
            logger.info("auth_not_logged_in", path=path)
            return self.error("Please login first", None, 401)

        if not self.auth.match(self.no_need_right) and not self.auth.check(path):
            logger.info("auth_no_permission", path=path)
            return self.error("You have no permission", None, 403)

        if self.check_parameters:
            outcome = self.gate.evaluate(self.request.params, now=self.request.request_time)
            if not outcome.is_accepted:
                return self.error(outcome.message, None, outcome.code)
        return None

    def run(self) -> ApiResult:
        """Run the whole pipeline and return the result to render."""
        halted = self.initialize()
        if halted is not None:
            return halted

        action = self.request.action.lower()
        halted = ActionHookDispatcher(parse_hooks(self.before_action_list)).dispatch(self, action)
        if halted is not None:
            return halted

        method = self._resolve_action(action)
        if method is None:
            logger.info("action_not_found", path=self.request.path)
            return self.error("Action not found", None, 404)

        result = method()
        if result is None:
            return self.success()
        return result

    def _resolve_action(self, name: str) -> Optional[Callable[[], Any]]:
        """Bound action method, or None when name is not routable."""
        if name.startswith("_"):
            return None
        # Only plain functions defined on subclasses are routable
        for cls in type(self).__mro__:
            if cls is ApiController:
                return None
            member = cls.__dict__.get(name)
            if member is not None:
                if not isinstance(member, types.FunctionType):
                    return None
                return member.__get__(self, type(self))
        return None
