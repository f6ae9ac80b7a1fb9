"""
Tests for the controller pipeline.
"""

import pytest

from conftest import NOW, TOKEN, FakeAuth
from signgate_core.controller import ApiController, RequestContext
from signgate_core.signing import create_signed_params


class Order(ApiController):
    no_need_login = ["ping"]
    no_need_right = ["mine"]
    before_action_list = [
        ("_load_order", {"only": "detail,cancel"}),
        ("_audit", {"except": "ping"}),
    ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.trail = []

    def _load_order(self):
        self.trail.append("load")
        if self.request.params.get("order_id") == "missing":
            return self.error("Order not found", None, 404)

    def _audit(self):
        self.trail.append("audit")

    def ping(self):
        return self.success("pong", {"user": self.auth.user})

    def mine(self):
        return self.success("", ["o-1"])

    def detail(self):
        self.trail.append("detail")
        return self.success("", {"id": self.request.params["order_id"]})

    def cancel(self):
        self.trail.append("cancel")


def make(action, params=None, auth=None, gate=None, headers=None, cookies=None, lang="en"):
    context = RequestContext(
        controller="Order",
        action=action,
        params=params or {},
        headers=headers or {},
        cookies=cookies or {},
        request_time=NOW,
        lang=lang,
    )
    return Order(context, auth or FakeAuth(), gate)


def signed(nonce="n-1", **params):
    return create_signed_params(params, token=TOKEN, timestamp=NOW, nonce=nonce)


class TestRequestContext:
    """Request context helpers."""

    def test_path_lowercases_and_nests(self):
        context = RequestContext(controller="User.Address", action="List")

        assert context.path == "user/address/list"

    def test_token_precedence(self):
        """Header beats parameter, parameter beats cookie."""
        both = RequestContext("c", "a", params={"token": "p"}, headers={"Token": "h"}, cookies={"token": "k"})
        param = RequestContext("c", "a", params={"token": "p"}, cookies={"token": "k"})
        cookie = RequestContext("c", "a", cookies={"token": "k"})

        assert both.token == "h"
        assert param.token == "p"
        assert cookie.token == "k"
        assert RequestContext("c", "a").token is None


class TestAuthChecks:
    """Login and permission handling."""

    def test_public_action_needs_no_signature(self, gate):
        """Actions in no_need_login skip login and the gate."""
        result = make("ping", gate=gate).run()

        assert result.code == 1
        assert result.data == {"user": None}

    def test_public_action_initializes_auth_when_token_sent(self, gate):
        auth = FakeAuth()

        result = make("ping", params={"token": TOKEN}, auth=auth, gate=gate).run()

        assert auth.init_calls == [TOKEN]
        assert result.data == {"user": "alice"}

    def test_not_logged_in(self, gate):
        """Unknown tokens get 401 before any signature check."""
        result = make("detail", params=signed(order_id="1"), auth=FakeAuth(tokens={}), gate=gate).run()

        assert result.code == 401
        assert result.status_code == 401
        assert result.msg == "Please login first"

    def test_no_permission(self, gate):
        """Logged in users without the permission get 403."""
        auth = FakeAuth(permissions={"order/other"})

        result = make("detail", params=signed(order_id="1"), auth=auth, gate=gate).run()

        assert result.code == 403
        assert auth.request_uri == "order/detail"

    def test_no_need_right_skips_permission(self, gate):
        auth = FakeAuth(permissions=set())

        result = make("mine", params=signed(), auth=auth, gate=gate).run()

        assert result.code == 1
        assert result.data == ["o-1"]


class TestGuardedActions:
    """Signed request gate inside the pipeline."""

    def test_valid_signed_request(self, gate):
        controller = make("detail", params=signed(order_id="42"), gate=gate)

        result = controller.run()

        assert result.to_dict() == {"code": 1, "msg": "", "time": NOW, "data": {"id": "42"}}
        assert controller.trail == ["load", "audit", "detail"]

    @pytest.mark.parametrize(
        "mutate,code",
        [
            (lambda p: p.pop("nonce"), 503),
            (lambda p: p.update(order_id="43"), 504),
        ],
    )
    def test_gate_rejections(self, gate, mutate, code):
        """Gate rejections end the pipeline before hooks run."""
        params = signed(order_id="42")
        mutate(params)
        controller = make("detail", params=params, gate=gate)

        result = controller.run()

        assert result.code == code
        assert result.status_code == code
        assert controller.trail == []

    def test_replayed_request(self, gate):
        params = signed(order_id="42")

        assert make("detail", params=dict(params), gate=gate).run().code == 1
        assert make("detail", params=dict(params), gate=gate).run().code == 555

    def test_gate_disabled(self, gate):
        """check_parameters = False leaves only the auth checks."""

        class Unsigned(Order):
            check_parameters = False

        context = RequestContext("order", "mine", params={"token": TOKEN}, request_time=NOW)

        assert Unsigned(context, FakeAuth(), gate).run().code == 1

    def test_translated_rejection(self, gate):
        params = signed()
        del params["timestamp"]

        result = make("mine", params=params, gate=gate, lang="zh-cn").run()

        assert result.msg == "缺少必要参数"


class TestPipeline:
    """Hooks, action lookup and return values."""

    def test_hook_short_circuit_skips_action(self, gate):
        controller = make("detail", params=signed(order_id="missing"), gate=gate)

        result = controller.run()

        assert result.code == 404
        assert result.msg == "Order not found"
        assert controller.trail == ["load"]

    def test_action_returning_none(self, gate):
        """An action with no return value renders a plain success."""
        controller = make("cancel", params=signed(order_id="1"), gate=gate)

        result = controller.run()

        assert result.code == 1
        assert controller.trail == ["load", "audit", "cancel"]

    @pytest.mark.parametrize(
        "action",
        ["missing", "_audit", "run", "success", "translate", "envelope", "auth", "request", "trail"],
    )
    def test_unknown_action(self, gate, action):
        """Only public methods defined on the subclass are routable."""
        controller = make(action, params={"token": TOKEN}, gate=gate)
        controller.no_need_login = ["*"]

        assert controller.run().code == 404

    def test_jsonp_negotiated_from_callback(self, gate):
        result = make("ping", params={"callback": "cb"}, gate=gate).run()

        assert result.response_type == "jsonp"

    def test_empty_callback_keeps_json(self, gate):
        """An empty callback parameter does not switch to JSONP."""
        result = make("ping", params={"callback": ""}, gate=gate).run()

        assert result.response_type == "json"

    def test_inherited_actions_are_routable(self, gate):
        """Actions defined on an intermediate controller class resolve."""

        class AdminOrder(Order):
            pass

        context = RequestContext("order", "ping", request_time=NOW)

        assert AdminOrder(context, FakeAuth(), gate).run().msg == "pong"
