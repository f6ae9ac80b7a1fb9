"""
Gate Configuration
==================
Configuration for the request gate and the response envelope.
"""

import os
from dataclasses import dataclass
from typing import Tuple

from .errors import ConfigurationError

# Fields that must be present before a guarded request is hashed
DEFAULT_REQUIRED_FIELDS: Tuple[str, ...] = ("timestamp", "token", "signature", "nonce")
DEFAULT_SIGNATURE_FIELD = "signature"
DEFAULT_SIGN_EXPIRE = 500
DEFAULT_REPLAY_KEY_PREFIX = "signgate:replay:"

RESPONSE_TYPES = ("json", "jsonp", "xml")


@dataclass(frozen=True)
class GateConfig:
    """Configuration for RequestGate and the replay guards."""
    signature_field: str = DEFAULT_SIGNATURE_FIELD
    required_fields: Tuple[str, ...] = DEFAULT_REQUIRED_FIELDS
    sign_expire: int = DEFAULT_SIGN_EXPIRE  # seconds
    replay_key_prefix: str = DEFAULT_REPLAY_KEY_PREFIX
    replay_max_entries: int = 100000

    def __post_init__(self):
        if self.sign_expire <= 0:
            raise ConfigurationError("sign_expire must be positive")
        if not self.signature_field:
            raise ConfigurationError("signature_field must not be empty")
        if self.signature_field not in self.required_fields:
            raise ConfigurationError(
                f"signature field '{self.signature_field}' missing from required_fields"
            )

    @classmethod
    def from_env(cls) -> "GateConfig":
        """Build configuration from SIGNGATE_* environment variables."""
        required = os.getenv("SIGNGATE_REQUIRED_FIELDS")
        return cls(
            signature_field=os.getenv("SIGNGATE_SIGNATURE_FIELD", DEFAULT_SIGNATURE_FIELD),
            required_fields=(
                tuple(f.strip() for f in required.split(",") if f.strip())
                if required else DEFAULT_REQUIRED_FIELDS
            ),
            sign_expire=int(os.getenv("SIGNGATE_SIGN_EXPIRE", str(DEFAULT_SIGN_EXPIRE))),
            replay_key_prefix=os.getenv(
                "SIGNGATE_REPLAY_KEY_PREFIX", DEFAULT_REPLAY_KEY_PREFIX
            ),
            replay_max_entries=int(os.getenv("SIGNGATE_REPLAY_MAX_ENTRIES", "100000")),
        )


@dataclass(frozen=True)
class ResponseConfig:
    """Configuration for envelope rendering."""
    default_type: str = "json"
    jsonp_handler: str = "callback"
    default_jsonp_callback: str = "jsonpReturn"
    xml_root_node: str = "think"
    xml_item_node: str = "item"
    xml_item_key: str = "id"

    def __post_init__(self):
        if self.default_type not in RESPONSE_TYPES:
            raise ConfigurationError(f"unsupported response type: {self.default_type}")

    @classmethod
    def from_env(cls) -> "ResponseConfig":
        return cls(
            default_type=os.getenv("SIGNGATE_RESPONSE_TYPE", "json"),
            jsonp_handler=os.getenv("SIGNGATE_JSONP_HANDLER", "callback"),
        )
