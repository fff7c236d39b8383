"""
Configuration package for the EIP-7702 batch sponsor demo.
"""

from batch_sponsor.config.network import (
    CHAINS,
    DELEGATION_DESIGNATOR,
    DEFAULT_RECIPIENT,
    ZERO_ADDRESS,
    get_chain_name,
    get_explorer_tx_url,
)

from batch_sponsor.config.logging_config import (
    setup_logger,
    log_step,
    get_demo_logger,
)

from batch_sponsor.config.settings import (
    ACCOUNT_ROLES,
    REQUIRED_VARS,
    DemoContext,
    Settings,
    build_context,
)

from batch_sponsor.config.abis import (
    ERC20_ABI,
    BATCH_CALL_AND_SPONSOR_ABI,
)

__all__ = [
    # Network
    'CHAINS',
    'DELEGATION_DESIGNATOR',
    'DEFAULT_RECIPIENT',
    'ZERO_ADDRESS',
    'get_chain_name',
    'get_explorer_tx_url',

    # Logging
    'setup_logger',
    'log_step',
    'get_demo_logger',

    # Settings
    'ACCOUNT_ROLES',
    'REQUIRED_VARS',
    'DemoContext',
    'Settings',
    'build_context',

    # ABIs
    'ERC20_ABI',
    'BATCH_CALL_AND_SPONSOR_ABI',
]
