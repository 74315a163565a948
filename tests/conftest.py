"""
Shared pytest fixtures for the gasless DAO test suite.

Accounts use the well-known local development keys so signatures are
reproducible. Every test gets a fresh LocalChain with a fixed start time and
fresh module-level singletons.
"""

import pytest
from eth_account import Account

from gasless_dao.chain import LocalChain
from gasless_dao.config import ONE_ETHER, DAOSettings
from gasless_dao.deployment import deploy_gasless_dao
from gasless_dao.forwarder import SequenceStore

GENESIS_TIMESTAMP = 1_700_000_000

ALICE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
BOB_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
CAROL_KEY = "0x5de4111afa1a4b94908f83103eb1f1706367c2e68ca870fc3fb9a804cdab365a"
RELAYER_KEY = "0x7c852118294e51e653712a81e05800f419141751be58f605c371e15141b007a6"

RECIPIENT = "0x000000000000000000000000000000000000bEEF"


# ==================== Global State ====================


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset module-level settings and sequence store around each test."""
    import gasless_dao.config as config_module
    import gasless_dao.forwarder.sequence_store as store_module

    original_settings = config_module._settings
    original_store = store_module._sequence_store
    config_module._settings = None
    store_module._sequence_store = None
    yield
    config_module._settings = original_settings
    store_module._sequence_store = original_store


# ==================== Accounts ====================


@pytest.fixture
def alice():
    return Account.from_key(ALICE_KEY)


@pytest.fixture
def bob():
    return Account.from_key(BOB_KEY)


@pytest.fixture
def carol():
    return Account.from_key(CAROL_KEY)


@pytest.fixture
def relayer():
    return Account.from_key(RELAYER_KEY)


@pytest.fixture
def recipient():
    return RECIPIENT


# ==================== Ledger ====================


@pytest.fixture
def settings():
    """Settings for a local test network."""
    return DAOSettings(app_env="testing", chain_id=31337)


@pytest.fixture
def chain(alice, bob, carol, relayer):
    """A fresh ledger with 100 ether in every test account."""
    ledger = LocalChain(chain_id=31337, timestamp=GENESIS_TIMESTAMP)
    for account in (alice, bob, carol, relayer):
        ledger.set_balance(account.address, 100 * ONE_ETHER)
    return ledger


@pytest.fixture
def sequence_store():
    return SequenceStore()


@pytest.fixture
def deployment(chain, settings, sequence_store):
    """Forwarder and DAO deployed on the test chain."""
    return deploy_gasless_dao(chain, settings, sequence_store=sequence_store)


@pytest.fixture
def forwarder(deployment):
    return deployment.forwarder_handle


@pytest.fixture
def dao(deployment):
    return deployment.dao_handle
