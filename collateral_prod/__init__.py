"""
Production tests for the multi-collateral lending system.

Helpers to reach an already deployed set of contracts on a live or forked
network: network detection, contract binding from deployment files, account
funding and the collateral loan driver used by ``tests_prod``.
"""

__version__ = "0.1.0"
