"""
Deployment

Wires a forwarder and a voting ledger onto a LocalChain from settings:
the forwarder's EIP-712 domain name and version, the sequence store backend
and the DAO's minimum voting balance.
"""

from dataclasses import dataclass

import structlog

from .chain.handle import ContractHandle
from .chain.local_chain import LocalChain
from .config import DAOSettings, get_settings
from .forwarder.forwarder import MinimalForwarder
from .forwarder.recovery import SignatureRecoverer
from .forwarder.sequence_store import SequenceStore, init_sequence_store
from .ledger.dao import DAOVoting
from .models.base import ZERO_ADDRESS

logger = structlog.get_logger(__name__)


@dataclass
class Deployment:
    """A deployed forwarder + DAO pair and their client handles."""

    chain: LocalChain
    forwarder: MinimalForwarder
    dao: DAOVoting
    forwarder_handle: ContractHandle
    dao_handle: ContractHandle

    @property
    def forwarder_address(self) -> str:
        return self.forwarder_handle.address

    @property
    def dao_address(self) -> str:
        return self.dao_handle.address


def deploy_gasless_dao(
    chain: LocalChain | None = None,
    settings: DAOSettings | None = None,
    deployer: str = ZERO_ADDRESS,
    sequence_store: SequenceStore | None = None,
    recoverer: SignatureRecoverer | None = None,
) -> Deployment:
    """
    Deploy the forwarder, then the DAO trusting it.

    Without an explicit sequence store, the global one is initialised from
    settings (Redis when `redis_url` is set, memory otherwise) and the
    forwarder gets its own namespace in it, keyed by chain id and forwarder
    address.
    """
    settings = settings or get_settings()
    chain = chain or LocalChain(chain_id=settings.chain_id)

    base_store = None
    if sequence_store is None:
        base_store = init_sequence_store(
            redis_url=settings.redis_url,
            redis_password=settings.redis_password,
        )

    forwarder = MinimalForwarder(
        name=settings.forwarder_name,
        version=settings.forwarder_version,
        sequence_store=sequence_store,
        recoverer=recoverer,
    )
    forwarder_address = chain.deploy(forwarder, deployer=deployer)
    if base_store is not None:
        forwarder.sequence_store = base_store.scoped(f"{chain.chain_id}:{forwarder_address}")

    dao = DAOVoting(
        trusted_forwarder=forwarder_address,
        minimum_voting_balance=settings.minimum_voting_balance,
    )
    dao_address = chain.deploy(dao, deployer=deployer)

    logger.info(
        "gasless_dao_deployed",
        chain_id=chain.chain_id,
        forwarder=forwarder_address,
        dao=dao_address,
        sequence_backend=forwarder.sequence_store.backend,
    )
    return Deployment(
        chain=chain,
        forwarder=forwarder,
        dao=dao,
        forwarder_handle=ContractHandle.for_contract(forwarder),
        dao_handle=ContractHandle.for_contract(dao),
    )
