"""
Gasless DAO - Meta-Transaction Forwarder and Voting Ledger

Contributors pool funds into a DAO treasury, propose transfers, vote and
execute approved transfers. Any action can be signed off-chain (EIP-712) and
relayed through a trusted forwarder that pays the submission fee.
"""

__version__ = "1.0.0"

from gasless_dao.config import DAOSettings, get_settings
from gasless_dao.deployment import Deployment, deploy_gasless_dao

__all__ = [
    "DAOSettings",
    "Deployment",
    "deploy_gasless_dao",
    "get_settings",
    "__version__",
]
