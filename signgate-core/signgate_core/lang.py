"""
Message Translation
===================
Language catalogs for guard and auth messages.
"""

from typing import Dict, Mapping, Optional

DEFAULT_LANG = "en"

CATALOGS: Dict[str, Dict[str, str]] = {
    "zh-cn": {
        "Please login first": "请登录后操作",
        "You have no permission": "你没有权限访问",
        "Missing required parameters": "缺少必要参数",
        "Parameter error": "参数错误",
        "Request has expired": "请求已过期",
        "Do not submit repeatedly": "请勿重复提交",
        "Action not found": "操作不存在",
        "Service unavailable": "服务暂不可用",
    },
}


def detect_lang(
    params: Mapping[str, str],
    headers: Mapping[str, str],
    default: str = DEFAULT_LANG,
) -> str:
    """Pick the language from the ``lang`` parameter, then Accept-Language."""
    lang = params.get("lang")
    if not lang:
        accept = headers.get("accept-language", "")
        lang = accept.split(",")[0].split(";")[0].strip()
    return str(lang).lower() if lang else default


class Translator:
    """Looks messages up in the catalog of the request language."""

    def __init__(self, lang: str = DEFAULT_LANG, catalogs: Optional[Dict[str, Dict[str, str]]] = None):
        self.lang = lang.lower()
        self.catalogs = catalogs if catalogs is not None else CATALOGS

    def __call__(self, message: str) -> str:
        catalog = self.catalogs.get(self.lang)
        if catalog is None:
            # zh-CN style tags fall back to their primary subtag catalogs
            catalog = self.catalogs.get(self.lang.split("-")[0], {})
        return catalog.get(message, message)
