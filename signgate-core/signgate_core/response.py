"""
Response Envelope
=================
Uniform success/error payloads and their rendering.

``success()`` and ``error()`` return an ``ApiResult``. The pipeline treats any
``ApiResult`` produced before the action body as a request to stop and emit
it: hooks and the gate hand it back up the call stack and the outermost
handler renders exactly that result.

Wire format::

    {"code": 1, "msg": "", "time": 1700000000, "data": null}
"""

import json
import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from xml.sax.saxutils import escape

from starlette.responses import JSONResponse, Response

from .config import RESPONSE_TYPES, ResponseConfig
from .errors import ConfigurationError

_CALLBACK_RE = re.compile(r"^[A-Za-z_$][\w$.]*$")


def status_for_code(code: int) -> int:
    """HTTP status derived from an envelope code: [200, 1000) passes through."""
    return code if 200 <= code < 1000 else 200


@dataclass
class ApiResult:
    """A fully formed API response waiting to be rendered."""
    code: int
    msg: str
    time: int
    data: Any = None
    status_code: int = 200
    response_type: str = "json"
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.code == 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "msg": self.msg,
            "time": self.time,
            "data": self.data,
        }


class ResponseEnvelope:
    """Builds ApiResult objects for one request."""

    def __init__(
        self,
        config: Optional[ResponseConfig] = None,
        request_time: Optional[int] = None,
        response_type: Optional[str] = None,
        translate: Optional[Callable[[str], str]] = None,
    ):
        self.config = config or ResponseConfig()
        self.request_time = request_time
        self.response_type = response_type or self.config.default_type
        self.translate = translate or (lambda message: message)

    def success(
        self,
        msg: str = "",
        data: Any = None,
        code: int = 1,
        type: Optional[str] = None,
        header: Optional[Dict[str, Any]] = None,
    ) -> ApiResult:
        return self.result(msg, data, code, type, header)

    def error(
        self,
        msg: str = "",
        data: Any = None,
        code: int = 0,
        type: Optional[str] = None,
        header: Optional[Dict[str, Any]] = None,
    ) -> ApiResult:
        return self.result(msg, data, code, type, header)

    def result(
        self,
        msg: str,
        data: Any = None,
        code: int = 0,
        type: Optional[str] = None,
        header: Optional[Dict[str, Any]] = None,
    ) -> ApiResult:
        """
        Build the envelope.
        
        Args:
            msg: Message, translated for the request language
            data: Payload
            code: Envelope code
            type: json, jsonp or xml (defaults to the negotiated type)
            header: Extra response headers; ``statuscode`` overrides the status
            
        Returns:
            ApiResult ready to be rendered
        """
        response_type = type or self.response_type
        if response_type not in RESPONSE_TYPES:
            raise ConfigurationError(f"unsupported response type: {response_type}")

        headers = {str(k): str(v) for k, v in (header or {}).items()}
        if "statuscode" in headers:
            status_code = int(headers.pop("statuscode"))
        else:
            status_code = status_for_code(code)

        return ApiResult(
            code=code,
            msg=self.translate(msg) if msg else msg,
            time=self.request_time if self.request_time is not None else int(time.time()),
            data=data,
            status_code=status_code,
            response_type=response_type,
            headers=headers,
        )


def _to_xml(data: Any, item_node: str, item_key: str) -> str:
    if isinstance(data, dict):
        items = data.items()
    elif isinstance(data, (list, tuple)):
        items = enumerate(data)
    else:
        return "" if data is None else escape(str(data))

    parts = []
    for key, value in items:
        attr = ""
        if isinstance(key, int):
            attr = f' {item_key}="{key}"'
            key = item_node
        parts.append(f"<{key}{attr}>{_to_xml(value, item_node, item_key)}</{key}>")
    return "".join(parts)


def render_xml(result: ApiResult, config: ResponseConfig) -> str:
    body = _to_xml(result.to_dict(), config.xml_item_node, config.xml_item_key)
    root = config.xml_root_node
    return f'<?xml version="1.0" encoding="utf-8"?><{root}>{body}</{root}>'


def render_response(
    result: ApiResult,
    config: Optional[ResponseConfig] = None,
    callback: Optional[str] = None,
) -> Response:
    """
    Render an ApiResult as a Starlette response.
    
    Args:
        result: Envelope to emit
        config: Rendering configuration
        callback: JSONP callback name from the request, if any
    """
    config = config or ResponseConfig()
    if result.response_type == "xml":
        return Response(
            content=render_xml(result, config),
            status_code=result.status_code,
            headers=result.headers,
            media_type="text/xml",
        )
    if result.response_type == "jsonp":
        handler = callback if callback and _CALLBACK_RE.match(callback) else config.default_jsonp_callback
        body = json.dumps(result.to_dict(), ensure_ascii=False, separators=(",", ":"))
        return Response(
            content=f"{handler}({body});",
            status_code=result.status_code,
            headers=result.headers,
            media_type="application/javascript",
        )
    return JSONResponse(
        content=result.to_dict(),
        status_code=result.status_code,
        headers=result.headers,
    )
