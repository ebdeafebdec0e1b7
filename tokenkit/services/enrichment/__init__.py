"""
Token Enrichment

Attaches resolved token metadata (and market slugs) to balance, market,
supply and bridge records.
"""

from .service import TokenEnrichmentService, synthetic_token
from .slugs import (
    binary_options_base_symbol,
    derivative_base_symbol,
    spot_market_slug,
    ticker_slug,
)
from .models import (
    BankBalancesWithToken,
    BankBalanceWithToken,
    BinaryOptionsMarket,
    BinaryOptionsMarketWithToken,
    BridgeTransaction,
    BridgeTransactionState,
    BridgeTransactionWithToken,
    BridgingNetwork,
    Coin,
    CoinWithLabel,
    ContractAccountBalance,
    ContractAccountBalanceWithToken,
    Cw20Balance,
    Cw20BalanceWithToken,
    DerivativeMarket,
    DerivativeMarketWithToken,
    SpotMarket,
    SpotMarketWithToken,
    SubaccountBalance,
    SubaccountBalanceWithToken,
    SupplyWithLabel,
)

__all__ = [
    "TokenEnrichmentService",
    "synthetic_token",
    "binary_options_base_symbol",
    "derivative_base_symbol",
    "spot_market_slug",
    "ticker_slug",
    "BankBalancesWithToken",
    "BankBalanceWithToken",
    "BinaryOptionsMarket",
    "BinaryOptionsMarketWithToken",
    "BridgeTransaction",
    "BridgeTransactionState",
    "BridgeTransactionWithToken",
    "BridgingNetwork",
    "Coin",
    "CoinWithLabel",
    "ContractAccountBalance",
    "ContractAccountBalanceWithToken",
    "Cw20Balance",
    "Cw20BalanceWithToken",
    "DerivativeMarket",
    "DerivativeMarketWithToken",
    "SpotMarket",
    "SpotMarketWithToken",
    "SubaccountBalance",
    "SubaccountBalanceWithToken",
    "SupplyWithLabel",
]
