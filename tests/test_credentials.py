"""Tests for CredentialState and its authorization transitions."""

from __future__ import annotations

import pytest

from vksdk.credentials import AuthState, CredentialState


class TestConstruction:
    def test_defaults(self) -> None:
        state = CredentialState("42", "s3cr3t")
        assert state.app_id == "42"
        assert state.api_secret == "s3cr3t"
        assert state.access_token is None
        assert state.api_version is None
        assert state.state == AuthState.UNAUTHENTICATED
        assert state.is_authorized() is False

    def test_token_supplied_at_construction_is_not_trusted(self) -> None:
        state = CredentialState("42", "s3cr3t", access_token="abc")
        assert state.access_token == "abc"
        assert state.authorized is False

    def test_app_id_is_coerced_to_str(self) -> None:
        assert CredentialState(42, "s3cr3t").app_id == "42"  # type: ignore[arg-type]

    def test_identity_is_read_only(self) -> None:
        state = CredentialState("42", "s3cr3t")
        with pytest.raises(AttributeError):
            state.app_id = "43"  # type: ignore[misc]
        with pytest.raises(AttributeError):
            state.api_secret = "other"  # type: ignore[misc]

    def test_repr_hides_secret_and_token(self) -> None:
        text = repr(CredentialState("42", "s3cr3t", access_token="tok-value"))
        assert "s3cr3t" not in text
        assert "tok-value" not in text
        assert "has_token=True" in text


class TestApiVersion:
    def test_set_and_overwrite(self) -> None:
        state = CredentialState("42", "s3cr3t")
        state.set_api_version("5.131")
        assert state.api_version == "5.131"
        state.set_api_version(5.199)
        assert state.api_version == "5.199"

    def test_none_unpins(self) -> None:
        state = CredentialState("42", "s3cr3t", api_version="5.131")
        state.set_api_version(None)
        assert state.api_version is None


class TestTransitions:
    def test_exchange_success(self) -> None:
        state = CredentialState("42", "s3cr3t")
        previous = state.begin_exchange()
        assert previous == AuthState.UNAUTHENTICATED
        assert state.state == AuthState.EXCHANGING
        assert state.authorized is False
        state.mark_authorized("abc")
        assert state.state == AuthState.AUTHORIZED
        assert state.access_token == "abc"
        assert state.is_authorized() is True

    def test_exchange_restore(self) -> None:
        state = CredentialState("42", "s3cr3t")
        previous = state.begin_exchange()
        state.restore(previous)
        assert state.state == AuthState.UNAUTHENTICATED

    def test_validation_failure_keeps_token_but_drops_authorization(self) -> None:
        state = CredentialState("42", "s3cr3t")
        state.mark_authorized("old")
        assert state.begin_validation() == AuthState.AUTHORIZED
        assert state.authorized is False
        state.mark_unauthenticated()
        assert state.state == AuthState.UNAUTHENTICATED
        assert state.access_token == "old"

    def test_mark_authorized_requires_token(self) -> None:
        state = CredentialState("42", "s3cr3t")
        with pytest.raises(ValueError):
            state.mark_authorized("")
        assert state.authorized is False
