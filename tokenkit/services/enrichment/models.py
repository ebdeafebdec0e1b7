"""
Enrichment Record Models

Input records as they arrive from balance, market and bridge sources, and
their enriched counterparts. Unknown fields are kept on the model and passed
through to the enriched record unchanged.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

from ..token_metadata.models import TokenMeta


R = TypeVar("R", bound="Record")

# Amounts arrive as strings from the indexers but may be plain numbers; kept as given.
Amount = Union[str, int, float, Decimal]


class Record(BaseModel):
    """Base for all transport records: camelCase aliases, extras passed through."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @classmethod
    def coerce(cls: Type[R], data: Union["Record", Mapping[str, Any]]) -> R:
        if isinstance(data, cls):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump(by_alias=True)
        return cls.model_validate(dict(data))

    def extend(self, target: Type[R], **updates: Any) -> R:
        """Build a ``target`` record from this one plus ``updates``.

        Updates always win over same-named input fields, including
        pass-through extras spelled with the target field's alias.
        """
        data = self.model_dump(by_alias=True)
        for name, value in updates.items():
            field = target.model_fields.get(name)
            key = field.alias if field is not None and field.alias else name
            data.pop(name, None)
            data[key] = value
        return target.model_validate(data)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class BridgingNetwork(str, Enum):
    AXELAR = "axelar"
    CHIHUAHUA = "chihuahua"
    COSMOS_HUB = "cosmosHub"
    COSMOS_HUB_TESTNET = "cosmosHub-testnet"
    ETHEREUM = "ethereum"
    ETHEREUM_WH = "ethereumWh"
    EVMOS = "evmos"
    INJECTIVE = "injective"
    JUNO = "juno"
    OSMOSIS = "osmosis"
    PERSISTENCE = "Persistence"
    TERRA = "terra"
    MOONBEAM = "moonbeam"
    SECRET = "secret"
    STRIDE = "stride"
    CRESCENT = "crescent"
    SOLANA = "solana"
    SOMMELIER = "sommelier"


class BridgeTransactionState(str, Enum):
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"
    CONFIRMING = "Confirming"
    ETHEREUM_CONFIRMING = "EthereumConfirming"
    FAILED = "Failed"
    INJECTIVE_CONFIRMING = "InjectiveConfirming"
    SUBMITTED = "Submitted"
    FAILED_CANCELLED = "failed-cancelled"
    IN_PROGRESS = "in-progress"


# =============================================================================
# Supply
# =============================================================================

class Coin(Record):
    denom: str
    amount: Amount = "0"


class CoinWithLabel(Coin):
    code: str
    label: str


class SupplyWithLabel(BaseModel):
    bank_supply: List[CoinWithLabel] = Field(default_factory=list)
    ibc_bank_supply: List[CoinWithLabel] = Field(default_factory=list)


# =============================================================================
# Balances
# =============================================================================

class BankBalanceWithToken(Record):
    denom: str
    balance: Amount
    token: TokenMeta


class BankBalancesWithToken(BaseModel):
    bank_balances_with_token: List[BankBalanceWithToken] = Field(default_factory=list)
    ibc_bank_balances_with_token: List[BankBalanceWithToken] = Field(default_factory=list)


class Cw20Balance(Record):
    contract_address: str = Field(..., alias="contractAddress")
    account: Optional[str] = None
    balance: Amount = "0"


class ContractDetails(BaseModel):
    address: str


class Cw20BalanceWithToken(Cw20Balance):
    token: TokenMeta
    denom: str
    contract_details: ContractDetails = Field(..., alias="contractDetails")


class ContractAccountBalance(Record):
    account: str
    balance: Amount = "0"


class ContractAccountBalanceWithToken(ContractAccountBalance):
    token: TokenMeta


class SubaccountBalance(Record):
    denom: str
    available_balance: Amount = Field("0", alias="availableBalance")
    total_balance: Amount = Field("0", alias="totalBalance")


class SubaccountBalanceWithToken(SubaccountBalance):
    token: Optional[TokenMeta] = None


# =============================================================================
# Markets
# =============================================================================

class SpotMarket(Record):
    market_id: str = Field("", alias="marketId")
    ticker: str
    base_denom: str = Field(..., alias="baseDenom")
    quote_denom: str = Field(..., alias="quoteDenom")


class SpotMarketWithToken(SpotMarket):
    slug: str
    base_token: Optional[TokenMeta] = Field(None, alias="baseToken")
    quote_token: Optional[TokenMeta] = Field(None, alias="quoteToken")


class DerivativeMarket(Record):
    """Perpetual or expiry futures market; both are enriched the same way."""

    market_id: str = Field("", alias="marketId")
    ticker: str
    quote_denom: str = Field(..., alias="quoteDenom")
    is_perpetual: Optional[bool] = Field(None, alias="isPerpetual")


class DerivativeMarketWithToken(DerivativeMarket):
    slug: str
    base_token: Optional[TokenMeta] = Field(None, alias="baseToken")
    quote_token: Optional[TokenMeta] = Field(None, alias="quoteToken")


class BinaryOptionsMarket(Record):
    market_id: str = Field("", alias="marketId")
    ticker: str
    quote_denom: str = Field(..., alias="quoteDenom")


class BinaryOptionsMarketWithToken(BinaryOptionsMarket):
    slug: str
    base_token: TokenMeta = Field(..., alias="baseToken")
    quote_token: Optional[TokenMeta] = Field(None, alias="quoteToken")


# =============================================================================
# Bridge
# =============================================================================

class BridgeTransaction(Record):
    """Bridge transfer as reported by the bridge indexers. Every field is
    optional because partially populated transactions do occur."""

    amount: Optional[Amount] = None
    denom: Optional[str] = None
    receiver: Optional[str] = None
    sender: Optional[str] = None
    tx_hash: Optional[str] = Field(None, alias="txHash")
    explorer_link: Optional[str] = Field(None, alias="explorerLink")
    timestamp: Optional[int] = None
    state: Optional[Union[BridgeTransactionState, str]] = None
    block_height: Optional[int] = Field(None, alias="blockHeight")
    nonce: Optional[int] = None
    bridge_fee: Optional[str] = Field(None, alias="bridgeFee")
    timeout_timestamp: Optional[str] = Field(None, alias="timeoutTimestamp")
    type: Optional[str] = None
    tx_hashes: Optional[List[str]] = Field(None, alias="txHashes")

    @property
    def is_empty(self) -> bool:
        return not self.denom


class BridgeTransactionWithToken(BridgeTransaction):
    token: Optional[TokenMeta] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
