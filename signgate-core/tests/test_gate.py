"""
Tests for the request gate.
"""

from unittest.mock import patch

import pytest

from conftest import NOW
from signgate_core.config import GateConfig
from signgate_core.errors import ConfigurationError
from signgate_core.metrics import GATE_REGISTRY
from signgate_core.signing import (
    GateDecision,
    RejectReason,
    canonicalize,
    compute_signature,
    create_signed_params,
)


def signed(timestamp=NOW, nonce="nonce-1", **params):
    return create_signed_params(params or {"amount": "10"}, token="tok", timestamp=timestamp, nonce=nonce)


class TestRequestGate:
    """Gate check order and outcomes."""

    def test_accepts_valid_request(self, gate):
        """A fresh, correctly signed request is accepted."""
        params = signed()

        outcome = gate.evaluate(params)

        assert outcome.decision == GateDecision.ACCEPTED
        assert outcome.signature == params["signature"]
        assert outcome.code is None

    @pytest.mark.parametrize("field", ["timestamp", "token", "nonce", "signature"])
    def test_missing_field(self, gate, field):
        """Each distinguished field is required."""
        params = signed()
        del params[field]

        outcome = gate.evaluate(params)

        assert outcome.reason == RejectReason.MISSING_PARAMETERS
        assert outcome.code == 503

    @pytest.mark.parametrize("value", ["", "   ", "0", None])
    def test_blank_field_counts_as_missing(self, gate, value):
        """Empty strings, "0" and None are all treated as absent."""
        params = signed()
        params["nonce"] = value

        assert gate.evaluate(params).code == 503

    def test_missing_field_skips_hashing(self, gate):
        """No canonicalization happens when a field is missing."""
        params = signed()
        del params["nonce"]

        with patch("signgate_core.signing.gate.canonicalize") as canonical:
            outcome = gate.evaluate(params)

        canonical.assert_not_called()
        assert outcome.signature is None

    def test_tampered_request(self, gate):
        """A changed value after signing is rejected with 504."""
        params = signed()
        params["amount"] = "1000"

        outcome = gate.evaluate(params)

        assert outcome.reason == RejectReason.TAMPERED
        assert outcome.code == 504
        assert outcome.signature != params["signature"]

    def test_expiry_boundary(self, gate):
        """499 seconds old passes, 501 seconds old is expired."""
        assert gate.evaluate(signed(timestamp=NOW - 499, nonce="a")).is_accepted
        assert gate.evaluate(signed(timestamp=NOW - 500, nonce="b")).is_accepted

        outcome = gate.evaluate(signed(timestamp=NOW - 501, nonce="c"))

        assert outcome.reason == RejectReason.EXPIRED
        assert outcome.code == 505

    def test_future_timestamp_accepted(self, gate):
        """Only the past side of the window is enforced."""
        assert gate.evaluate(signed(timestamp=NOW + 10_000)).is_accepted

    def test_non_integer_timestamp_is_expired(self, gate):
        """A correctly signed but unparseable timestamp is rejected as expired."""
        params = {"token": "tok", "nonce": "n", "timestamp": "yesterday"}
        params["signature"] = compute_signature(canonicalize(params))

        assert gate.evaluate(params).code == 505

    def test_explicit_now_overrides_clock(self, gate):
        """The caller's request time is used when given."""
        params = signed(timestamp=NOW)

        assert gate.evaluate(params, now=NOW + 501).code == 505

    def test_duplicate_rejected_then_accepted_after_ttl(self, gate, clock):
        """Replays inside the window get 555; after the TTL the key is forgotten."""
        params = signed()

        assert gate.evaluate(dict(params)).is_accepted

        second = gate.evaluate(dict(params))
        assert second.reason == RejectReason.DUPLICATE
        assert second.code == 555

        clock.advance(500)
        assert gate.evaluate(dict(params), now=NOW + 500).is_accepted

    def test_rejections_do_not_mark_replay(self, gate):
        """Tampered requests leave no replay record behind."""
        params = signed()
        tampered = dict(params, amount="999")

        gate.evaluate(tampered)

        assert len(gate.replay_guard) == 0
        assert gate.evaluate(params).is_accepted

    def test_decisions_are_counted(self, gate):
        """Each evaluation increments the Prometheus counter."""
        labels = {"decision": "REJECTED", "reason": "duplicate_submission"}
        before = GATE_REGISTRY.get_sample_value("signgate_gate_decisions_total", labels) or 0
        params = signed(nonce="metrics")

        gate.evaluate(dict(params))
        gate.evaluate(dict(params))

        assert GATE_REGISTRY.get_sample_value("signgate_gate_decisions_total", labels) == before + 1


class TestGateConfig:
    """Gate configuration."""

    def test_defaults(self):
        config = GateConfig()

        assert config.sign_expire == 500
        assert config.signature_field == "signature"
        assert set(config.required_fields) == {"timestamp", "token", "nonce", "signature"}

    def test_from_env(self, monkeypatch):
        """SIGNGATE_* variables override the defaults."""
        monkeypatch.setenv("SIGNGATE_SIGN_EXPIRE", "60")
        monkeypatch.setenv("SIGNGATE_SIGNATURE_FIELD", "sign")
        monkeypatch.setenv("SIGNGATE_REQUIRED_FIELDS", "timestamp, nonce, sign")

        config = GateConfig.from_env()

        assert config.sign_expire == 60
        assert config.signature_field == "sign"
        assert config.required_fields == ("timestamp", "nonce", "sign")

    def test_rejects_non_positive_window(self):
        with pytest.raises(ConfigurationError):
            GateConfig(sign_expire=0)

    def test_signature_field_must_be_required(self):
        with pytest.raises(ConfigurationError):
            GateConfig(signature_field="sign")
