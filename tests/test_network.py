"""Tests for the two-step network descriptor."""
import pytest
from pydantic import ValidationError

from bridgechain.network import (
    NetworkConfig,
    NetworkDraft,
    compose_network,
    compose_peers,
)

NETHASH = "ab" * 32


def test_compose_network(params):
    draft = compose_network(params)

    assert isinstance(draft, NetworkDraft)
    assert draft.to_dict() == {
        "name": "mainnet",
        "messagePrefix": "testchain message:\n",
        "pubKeyHash": params.address_prefix,
        "wif": params.wif_prefix,
        "client": {
            "token": "TEST",
            "symbol": "T",
            "explorer": "http://127.0.0.1:4200",
        },
    }


def test_stamp_returns_new_config(params):
    draft = compose_network(params)
    network = draft.stamp(NETHASH)

    assert isinstance(network, NetworkConfig)
    assert network.nethash == NETHASH
    assert network.to_dict()["nethash"] == NETHASH
    assert "nethash" not in draft.to_dict()
    assert not hasattr(draft, "nethash")


def test_draft_is_immutable(params):
    draft = compose_network(params)
    with pytest.raises(ValidationError):
        draft.pub_key_hash = 1


@pytest.mark.parametrize("nethash", ["", "ab" * 31, "AB" * 32, "zz" * 32])
def test_stamp_rejects_bad_nethash(params, nethash):
    with pytest.raises(ValueError):
        compose_network(params).stamp(nethash)


def test_compose_peers(params):
    params = params.with_overrides(peers="10.0.0.1, 10.0.0.2", p2p_port=4102)

    assert compose_peers(params) == {
        "list": [
            {"ip": "10.0.0.1", "port": 4102},
            {"ip": "10.0.0.2", "port": 4102},
        ],
        "sources": [],
    }
