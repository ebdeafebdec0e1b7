"""
Token Enrichment Service

Attaches resolved token metadata to balances, markets and bridge
transactions.

Every batch operation fans out one lookup per record (or one per contract,
for contract account balances) through the injected DenomLookupClient,
awaits all of them, then drops the records whose token did not resolve.
Binary options markets and bridge transactions have their own fallbacks and
are never dropped for a missing base/bridge token.

Errors raised by the lookup client are not caught here: they fail the whole
batch call.
"""

from __future__ import annotations

import asyncio
import logging
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    TypeVar,
    Union,
)

from pydantic import BaseModel

from ...config import settings
from ...providers.base import DenomLookupClient
from ..token_metadata.models import TokenMeta
from .models import (
    Amount,
    BankBalancesWithToken,
    BankBalanceWithToken,
    BinaryOptionsMarket,
    BinaryOptionsMarketWithToken,
    BridgeTransaction,
    BridgeTransactionWithToken,
    Coin,
    CoinWithLabel,
    ContractAccountBalance,
    ContractAccountBalanceWithToken,
    ContractDetails,
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
from .slugs import (
    binary_options_base_symbol,
    derivative_base_symbol,
    spot_market_slug,
    ticker_slug,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

IBC_DENOM_PREFIX = "ibc/"

RecordInput = Union[Mapping[str, Any], BaseModel]


class TokenEnrichmentService:
    """
    Converts records carrying denoms into records carrying token metadata.

    The service holds no mutable state; one instance can serve any number of
    concurrent calls.
    """

    def __init__(
        self,
        denom_client: DenomLookupClient,
        *,
        max_concurrency: Optional[int] = None,
        native_symbol: Optional[str] = None,
        native_denom: Optional[str] = None,
    ):
        """
        Args:
            denom_client: Lookup client resolving denoms, symbols and contract addresses
            max_concurrency: Max in-flight lookups per service (0/None = unbounded,
                defaults to settings.max_concurrent_lookups)
            native_symbol: Symbol of the native token (default: settings.native_symbol)
            native_denom: Denom of the native token (default: settings.native_denom)
        """
        self._denom_client = denom_client
        limit = settings.max_concurrent_lookups if max_concurrency is None else max_concurrency
        self._semaphore = asyncio.Semaphore(limit) if limit else None
        self._native_symbol = native_symbol or settings.native_symbol
        self._native_denom = native_denom or settings.native_denom

    # =========================================================================
    # Fan-out helpers
    # =========================================================================

    async def _lookup(self, identifier: str) -> Optional[TokenMeta]:
        if self._semaphore is None:
            return await self._denom_client.resolve(identifier)
        async with self._semaphore:
            return await self._denom_client.resolve(identifier)

    @staticmethod
    async def _fan_out(items: Iterable[T], fn: Callable[[T], Awaitable[U]]) -> List[U]:
        return list(await asyncio.gather(*[fn(item) for item in items]))

    @staticmethod
    def _keep(results: Sequence[T], predicate: Callable[[T], bool], kind: str) -> List[T]:
        kept = [result for result in results if predicate(result)]
        dropped = len(results) - len(kept)
        if dropped:
            logger.debug("Dropped %d/%d %s without a resolved token", dropped, len(results), kind)
        return kept

    # =========================================================================
    # Supply
    # =========================================================================

    async def to_coins_with_token(self, supply: Sequence[RecordInput]) -> List[TokenMeta]:
        coins = [Coin.coerce(coin) for coin in supply]
        tokens = await self._fan_out(coins, lambda coin: self._lookup(coin.denom))
        return self._keep(tokens, lambda token: token is not None, "coins")

    async def to_supply_with_token(self, supply: Sequence[RecordInput]) -> List[TokenMeta]:
        return await self.to_coins_with_token(supply)

    async def to_supply_with_token_and_label(self, supply: Sequence[RecordInput]) -> SupplyWithLabel:
        """Label every coin with its token symbol (or its denom when unknown)
        and split native bank supply from IBC supply."""
        coins = [Coin.coerce(coin) for coin in supply]
        tokens = await self._fan_out(coins, lambda coin: self._lookup(coin.denom))

        labelled = [
            coin.extend(
                CoinWithLabel,
                code=coin.denom,
                label=token.symbol if token is not None else coin.denom,
            )
            for coin, token in zip(coins, tokens)
        ]

        return SupplyWithLabel(
            bank_supply=[c for c in labelled if not c.denom.startswith(IBC_DENOM_PREFIX)],
            ibc_bank_supply=[c for c in labelled if c.denom.startswith(IBC_DENOM_PREFIX)],
        )

    # =========================================================================
    # Balances
    # =========================================================================

    async def _bank_balances_with_token(self, balances: Mapping[str, Amount]) -> List[BankBalanceWithToken]:
        async def enrich(denom: str) -> Optional[BankBalanceWithToken]:
            token = await self._lookup(denom)
            if token is None:
                return None
            return BankBalanceWithToken(denom=denom, balance=balances[denom], token=token)

        results = await self._fan_out(list(balances), enrich)
        return self._keep(results, lambda balance: balance is not None, "bank balances")

    async def to_balances_with_token(
        self,
        balances: Mapping[str, Amount],
        ibc_balances: Mapping[str, Amount],
    ) -> BankBalancesWithToken:
        bank, ibc = await asyncio.gather(
            self._bank_balances_with_token(balances),
            self._bank_balances_with_token(ibc_balances),
        )
        return BankBalancesWithToken(
            bank_balances_with_token=bank,
            ibc_bank_balances_with_token=ibc,
        )

    async def to_cw20_balances_with_token(
        self,
        cw20_balances: Sequence[RecordInput],
    ) -> List[Cw20BalanceWithToken]:
        async def enrich(balance: Cw20Balance) -> Optional[Cw20BalanceWithToken]:
            token = await self._lookup(balance.contract_address)
            if token is None:
                return None
            return balance.extend(
                Cw20BalanceWithToken,
                token=token,
                denom=token.symbol,
                contract_details=ContractDetails(address=balance.contract_address),
            )

        balances = [Cw20Balance.coerce(balance) for balance in cw20_balances]
        results = await self._fan_out(balances, enrich)
        return self._keep(results, lambda balance: balance is not None, "cw20 balances")

    async def to_contract_cw20_balances_with_token(
        self,
        contract_address: str,
        contract_accounts_balance: Sequence[RecordInput],
    ) -> List[ContractAccountBalanceWithToken]:
        """All rows belong to the same contract, so a single lookup serves them all."""
        token = await self._lookup(contract_address)
        if token is None:
            logger.debug("No token for contract %s; dropping %d balances",
                         contract_address, len(contract_accounts_balance))
            return []

        return [
            ContractAccountBalance.coerce(balance).extend(ContractAccountBalanceWithToken, token=token)
            for balance in contract_accounts_balance
        ]

    async def to_subaccount_balance_with_token(self, balance: RecordInput) -> SubaccountBalanceWithToken:
        balance = SubaccountBalance.coerce(balance)
        token = await self._lookup(balance.denom)
        return balance.extend(SubaccountBalanceWithToken, token=token)

    async def to_subaccount_balances_with_token(
        self,
        balances: Sequence[RecordInput],
    ) -> List[SubaccountBalanceWithToken]:
        results = await self._fan_out(balances, self.to_subaccount_balance_with_token)
        return self._keep(results, lambda balance: balance.token is not None, "subaccount balances")

    # =========================================================================
    # Markets
    # =========================================================================

    async def to_spot_market_with_token(self, market: RecordInput) -> SpotMarketWithToken:
        market = SpotMarket.coerce(market)
        base_token, quote_token = await asyncio.gather(
            self._lookup(market.base_denom),
            self._lookup(market.quote_denom),
        )
        return market.extend(
            SpotMarketWithToken,
            slug=spot_market_slug(market.ticker, base_token, quote_token),
            base_token=base_token,
            quote_token=quote_token,
        )

    async def to_spot_markets_with_token(self, markets: Sequence[RecordInput]) -> List[SpotMarketWithToken]:
        results = await self._fan_out(markets, self.to_spot_market_with_token)
        return self._keep(results, _has_both_tokens, "spot markets")

    async def to_derivative_market_with_token(self, market: RecordInput) -> DerivativeMarketWithToken:
        market = DerivativeMarket.coerce(market)
        slug = ticker_slug(market.ticker)
        base_token, quote_token = await asyncio.gather(
            self._lookup(derivative_base_symbol(slug)),
            self._lookup(market.quote_denom),
        )
        return market.extend(
            DerivativeMarketWithToken,
            slug=slug,
            base_token=base_token,
            quote_token=quote_token,
        )

    async def to_derivative_markets_with_token(
        self,
        markets: Sequence[RecordInput],
    ) -> List[DerivativeMarketWithToken]:
        results = await self._fan_out(markets, self.to_derivative_market_with_token)
        return self._keep(results, _has_both_tokens, "derivative markets")

    async def to_binary_options_market_with_token(self, market: RecordInput) -> BinaryOptionsMarketWithToken:
        """The base side of a binary options market is not a chain asset, so a
        synthetic token is built for it from the ticker."""
        market = BinaryOptionsMarket.coerce(market)
        quote_token = await self._lookup(market.quote_denom)
        slug = ticker_slug(market.ticker)
        base_symbol = binary_options_base_symbol(market.ticker, quote_token)

        return market.extend(
            BinaryOptionsMarketWithToken,
            slug=slug,
            base_token=synthetic_token(base_symbol, denom=slug),
            quote_token=quote_token,
        )

    async def to_binary_options_markets_with_token(
        self,
        markets: Sequence[RecordInput],
    ) -> List[BinaryOptionsMarketWithToken]:
        results = await self._fan_out(markets, self.to_binary_options_market_with_token)
        return self._keep(results, _has_both_tokens, "binary options markets")

    # =========================================================================
    # Bridge transactions
    # =========================================================================

    def _is_inbound_native_transfer(self, denom: str) -> bool:
        return denom.startswith(settings.inbound_transfer_prefix) and denom.endswith(self._native_denom)

    async def _native_token(self) -> TokenMeta:
        token = await self._lookup(self._native_symbol)
        if token is not None:
            return token
        logger.warning("Native token %s is not resolvable; using a synthetic token", self._native_symbol)
        return synthetic_token(self._native_symbol, denom=self._native_denom)

    async def to_bridge_transaction_with_token(
        self,
        transaction: Optional[RecordInput],
    ) -> BridgeTransactionWithToken:
        if not transaction:
            return BridgeTransactionWithToken()

        transaction = BridgeTransaction.coerce(transaction)
        if transaction.is_empty:
            return BridgeTransactionWithToken()

        # INJ sent back from an IBC chain (e.g. transfer/channel-8/inj)
        if self._is_inbound_native_transfer(transaction.denom):
            return transaction.extend(BridgeTransactionWithToken, token=await self._native_token())

        token = await self._lookup(transaction.denom)
        if token is None:
            logger.info("Bridge denom %s not resolved; falling back to %s",
                        transaction.denom, self._native_symbol)
            token = await self._native_token()

        return transaction.extend(BridgeTransactionWithToken, token=token)

    async def to_bridge_transactions_with_token(
        self,
        transactions: Sequence[Optional[RecordInput]],
    ) -> List[BridgeTransactionWithToken]:
        """Never drops a transaction: unresolved denoms carry the native token and
        empty transactions come back as an empty record."""
        return await self._fan_out(transactions, self.to_bridge_transaction_with_token)


def _has_both_tokens(market: Any) -> bool:
    return market.base_token is not None and market.quote_token is not None


def synthetic_token(symbol: str, denom: Optional[str] = None) -> TokenMeta:
    """Placeholder token for assets that have no catalog entry."""
    return TokenMeta(
        symbol=symbol,
        name=symbol,
        decimals=settings.placeholder_decimals,
        logo=settings.placeholder_logo,
        icon=settings.placeholder_logo,
        coin_gecko_id="",
        denom=denom,
    )
