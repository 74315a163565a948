"""
Execution Environment Package

The deterministic ledger the forwarder and voting contracts run on:

- LocalChain: balances, deployed contracts, atomic call frames, events
- Contract: ABI-dispatched contract base class with rollback snapshots
- ContractHandle: caller-side ABI client (encode, transact, call)

Usage:
    from gasless_dao.chain import LocalChain, ContractHandle

    chain = LocalChain(chain_id=31337)
    address = chain.deploy(my_contract)
    handle = ContractHandle.for_contract(my_contract)
    receipt = handle.transact("fundDAO", sender=alice, value=10**18)
"""

from .abi import FunctionSpec, build_function_table, decode_return, encode_function_call
from .contract import Contract, ReentrancyGuard, non_reentrant
from .errors import (
    ChainError,
    ContractRevert,
    InsufficientBalance,
    InvalidCalldata,
    NonPayableFunction,
    NoReceiveFunction,
    ReentrantCall,
    TimestampError,
    UnknownContractError,
    UnknownFunction,
    WriteProtection,
)
from .handle import ContractHandle
from .local_chain import LOCAL_CHAIN_ID, CallResult, LocalChain, Message

__all__ = [
    # ABI
    "FunctionSpec",
    "build_function_table",
    "decode_return",
    "encode_function_call",
    # Contracts
    "Contract",
    "ReentrancyGuard",
    "non_reentrant",
    # Errors
    "ChainError",
    "ContractRevert",
    "InsufficientBalance",
    "InvalidCalldata",
    "NonPayableFunction",
    "NoReceiveFunction",
    "ReentrantCall",
    "TimestampError",
    "UnknownContractError",
    "UnknownFunction",
    "WriteProtection",
    # Ledger
    "LOCAL_CHAIN_ID",
    "CallResult",
    "ContractHandle",
    "LocalChain",
    "Message",
]
