"""Shared fixtures for the bridgechain test suite."""
import json

import pytest

from bridgechain.config import ParameterSet
from bridgechain.deployer import TemplateSource
from bridgechain.wallet import Wallet

PLUGINS_TEMPLATE = """module.exports = {
    "@arkecosystem/core-event-emitter": {},
    "@arkecosystem/core-database-postgres": {
        connection: {
            host: process.env.CORE_DB_HOST || "localhost",
            port: process.env.CORE_DB_PORT || 5432,
            database: process.env.CORE_DB_DATABASE || `${process.env.CORE_TOKEN}_${process.env.CORE_NETWORK_NAME}`,
            user: process.env.CORE_DB_USERNAME || process.env.CORE_TOKEN,
        },
    },
    "@arkecosystem/core-transaction-pool": {
        enabled: !process.env.CORE_TRANSACTION_POOL_DISABLED,
        maxTransactionsInPool: process.env.CORE_MAX_TRANSACTIONS_IN_POOL || 100000,
        dynamicFees: {
            enabled: true,
            minFeePool: 1000,
            minFeeBroadcast: 1000,
            addonBytes: {
                transfer: 100,
                secondSignature: 250,
                delegateRegistration: 400000,
                vote: 100,
                multiSignature: 500,
                ipfs: 250,
                multiPayment: 500,
                delegateResignation: 400000,
            },
        },
    },
    "@arkecosystem/core-p2p": {
        server: {
            port: process.env.CORE_P2P_PORT || 4000,
        },
    },
    "@arkecosystem/core-api": {
        server: {
            http: {
                port: process.env.CORE_API_PORT || 4003,
            },
        },
    },
    "@arkecosystem/core-webhooks": {
        enabled: process.env.CORE_WEBHOOKS_ENABLED,
        server: {
            http: {
                port: process.env.CORE_WEBHOOKS_PORT || 4004,
            },
        },
    },
    "@arkecosystem/core-exchange-json-rpc": {
        enabled: process.env.CORE_EXCHANGE_JSON_RPC_ENABLED,
        port: process.env.CORE_EXCHANGE_JSON_RPC_PORT || 8080,
    },
};
"""

ENV_TEMPLATE = """CORE_LOG_LEVEL=info
CORE_LOG_LEVEL_FILE=info

CORE_DB_HOST=localhost
CORE_DB_PORT=5432

CORE_P2P_HOST=0.0.0.0
CORE_P2P_PORT=4000

CORE_API_HOST=0.0.0.0
CORE_API_PORT=4003

CORE_WEBHOOKS_HOST=0.0.0.0
CORE_WEBHOOKS_PORT=4004

CORE_EXCHANGE_JSON_RPC_HOST=0.0.0.0
CORE_EXCHANGE_JSON_RPC_PORT=8080
"""


@pytest.fixture
def params():
    """Small, valid parameter set."""
    return ParameterSet.parse({
        "chainName": "testchain",
        "token": "TEST",
        "symbol": "T",
        "forgers": 3,
        "totalPremine": "1000000000000",
        "rewardHeightStart": 1,
        "rewardPerBlock": "200000000",
        "epoch": "2024-01-01T00:00:00Z",
    })


@pytest.fixture
def genesis_wallet(params):
    return Wallet.from_passphrase("genesis wallet test passphrase", params.address_prefix)


@pytest.fixture
def delegate_wallets(params):
    return [
        Wallet.from_passphrase(f"delegate test passphrase {index}", params.address_prefix)
        for index in range(params.forgers)
    ]


def _write_network(root, network):
    core = root / "packages" / "core" / "bin" / "config" / network
    crypto = root / "packages" / "crypto" / "src" / "networks" / network
    core.mkdir(parents=True)
    crypto.mkdir(parents=True)

    (core / "plugins.js").write_text(PLUGINS_TEMPLATE)
    (core / ".env").write_text(ENV_TEMPLATE)
    (core / "peers.json").write_text(json.dumps({"list": [{"ip": "1.2.3.4", "port": 4000}]}))
    (core / "delegates.json").write_text(json.dumps({"secrets": []}))

    (crypto / "network.json").write_text(json.dumps({"name": network, "nethash": "00" * 32}))
    (crypto / "milestones.json").write_text("[]")
    (crypto / "genesisBlock.json").write_text("{}")
    (crypto / "exceptions.json").write_text("{}")
    (crypto / "index.ts").write_text("export * from './network';\n")


@pytest.fixture
def core_path(tmp_path):
    """A fake core checkout holding templates for every base network."""
    root = tmp_path / "core-bridgechain"
    for network in ("mainnet", "devnet", "testnet"):
        _write_network(root, network)
    return root


@pytest.fixture
def template_source(core_path, params):
    return TemplateSource.for_network(core_path, params.network)


@pytest.fixture
def destination(tmp_path, params):
    return tmp_path / "bridgechains" / params.network.value / params.chain_name
