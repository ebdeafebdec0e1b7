"""
Tests for the TokenEnrichmentService.

Covers:
- Drop policy per record kind
- One lookup per contract for contract account balances
- Slugs for spot, derivative and binary options markets
- Synthetic base tokens for binary options markets
- Native token fallbacks for bridge transactions
- Concurrent fan-out and error propagation
- Numeric amounts and unknown fields passed through; resolved values overwrite input
"""

import asyncio
from typing import Dict, List, Optional

import pytest
from unittest.mock import AsyncMock

from tokenkit.providers import DenomLookupClient, DenomLookupError
from tokenkit.services.enrichment import (
    BridgeTransactionState,
    BridgeTransactionWithToken,
    SpotMarket,
    TokenEnrichmentService,
)
from tokenkit.services.token_metadata import TokenMeta


INJ = TokenMeta(symbol="INJ", name="Injective", decimals=18, coinGeckoId="injective-protocol")
ATOM = TokenMeta(symbol="ATOM", name="Cosmos", decimals=6, coinGeckoId="cosmos")
USDT = TokenMeta(symbol="USDT", name="Tether", decimals=6, coinGeckoId="tether")
BTC = TokenMeta(symbol="BTC", name="Bitcoin", decimals=8)
WETH = TokenMeta(symbol="WETH", name="Wrapped Ether", decimals=18)

ATOM_IBC = "ibc/C4CFF46FD6DE35CA4CF4CE031E643C8FDC9BA4B99AE598E9B0ED98FE3A2319F9"
CW20_CONTRACT = "inj1q6zlut7gtkzknkk773jecujwsdkgq882akqksk"


class FakeDenomClient(DenomLookupClient):
    """Dictionary-backed lookup client that records every call."""

    name = "fake"

    def __init__(self, tokens: Dict[str, TokenMeta]):
        self._tokens = tokens
        self.calls: List[str] = []

    async def resolve(self, identifier: str) -> Optional[TokenMeta]:
        self.calls.append(identifier)
        await asyncio.sleep(0)
        return self._tokens.get(identifier)


@pytest.fixture
def denom_client():
    return FakeDenomClient({
        "inj": INJ,
        "INJ": INJ,
        "uatom": ATOM,
        ATOM_IBC: ATOM,
        "uusdt": USDT,
        "btc": BTC,
        CW20_CONTRACT: WETH,
    })


@pytest.fixture
def service(denom_client):
    return TokenEnrichmentService(denom_client, max_concurrency=0, native_symbol="INJ", native_denom="inj")


# =============================================================================
# Supply
# =============================================================================

class TestSupply:

    @pytest.mark.asyncio
    async def test_coins_with_token_drops_unresolved(self, service):
        tokens = await service.to_coins_with_token([
            {"denom": "inj", "amount": "100"},
            {"denom": "unknown", "amount": "1"},
        ])
        assert tokens == [INJ]

    @pytest.mark.asyncio
    async def test_supply_with_token_matches_coins(self, service):
        supply = [{"denom": "uatom", "amount": "5"}]
        assert await service.to_supply_with_token(supply) == [ATOM]

    @pytest.mark.asyncio
    async def test_supply_with_label_splits_bank_and_ibc(self, service):
        result = await service.to_supply_with_token_and_label([
            {"denom": "inj", "amount": "100"},
            {"denom": ATOM_IBC, "amount": "7"},
            {"denom": "peggy0xunknown", "amount": "3"},
        ])

        assert [c.denom for c in result.bank_supply] == ["inj", "peggy0xunknown"]
        assert [c.denom for c in result.ibc_bank_supply] == [ATOM_IBC]

    @pytest.mark.asyncio
    async def test_supply_label_falls_back_to_denom(self, service):
        result = await service.to_supply_with_token_and_label([
            {"denom": "inj", "amount": "100"},
            {"denom": "peggy0xunknown", "amount": "3"},
        ])

        labels = {c.denom: (c.code, c.label) for c in result.bank_supply}
        assert labels["inj"] == ("inj", "INJ")
        assert labels["peggy0xunknown"] == ("peggy0xunknown", "peggy0xunknown")


# =============================================================================
# Balances
# =============================================================================

class TestBankBalances:

    @pytest.mark.asyncio
    async def test_unresolved_balance_is_omitted(self, service):
        result = await service.to_balances_with_token({"inj": "10", "unknown": "5"}, {})

        assert len(result.bank_balances_with_token) == 1
        balance = result.bank_balances_with_token[0]
        assert (balance.denom, balance.balance, balance.token) == ("inj", "10", INJ)
        assert result.ibc_bank_balances_with_token == []

    @pytest.mark.asyncio
    async def test_ibc_balances_enriched_separately(self, service, denom_client):
        result = await service.to_balances_with_token({"inj": "1"}, {ATOM_IBC: "2", "ibc/FFFF": "3"})

        assert [b.token for b in result.bank_balances_with_token] == [INJ]
        assert [b.token for b in result.ibc_bank_balances_with_token] == [ATOM]
        assert sorted(denom_client.calls) == sorted(["inj", ATOM_IBC, "ibc/FFFF"])


class TestCw20Balances:

    @pytest.mark.asyncio
    async def test_denom_is_taken_from_token(self, service):
        result = await service.to_cw20_balances_with_token([
            {"contractAddress": CW20_CONTRACT, "account": "inj1holder", "balance": "42", "updatedAt": 1700000000},
            {"contractAddress": "inj1unknown", "account": "inj1holder", "balance": "1"},
        ])

        assert len(result) == 1
        balance = result[0]
        assert balance.token == WETH
        assert balance.denom == "WETH"
        assert balance.contract_details.address == CW20_CONTRACT

        data = balance.to_dict()
        assert data["contractAddress"] == CW20_CONTRACT
        assert data["updatedAt"] == 1700000000


class TestContractAccountBalances:

    @pytest.mark.asyncio
    async def test_single_lookup_for_all_rows(self):
        client = AsyncMock(spec=DenomLookupClient)
        client.resolve.return_value = WETH
        service = TokenEnrichmentService(client)
        rows = [{"account": f"inj1account{i}", "balance": str(i)} for i in range(50)]

        result = await service.to_contract_cw20_balances_with_token(CW20_CONTRACT, rows)

        assert len(result) == 50
        assert all(balance.token == WETH for balance in result)
        client.resolve.assert_awaited_once_with(CW20_CONTRACT)

    @pytest.mark.asyncio
    async def test_unresolved_contract_drops_all_rows(self, service):
        rows = [{"account": "inj1a", "balance": "1"}, {"account": "inj1b", "balance": "2"}]
        assert await service.to_contract_cw20_balances_with_token("inj1unknown", rows) == []


class TestSubaccountBalances:

    @pytest.mark.asyncio
    async def test_unresolved_dropped(self, service):
        result = await service.to_subaccount_balances_with_token([
            {"denom": "inj", "availableBalance": "1", "totalBalance": "2"},
            {"denom": "unknown", "availableBalance": "3", "totalBalance": "4"},
        ])

        assert len(result) == 1
        assert result[0].token == INJ
        assert result[0].available_balance == "1"
        assert result[0].total_balance == "2"

    @pytest.mark.asyncio
    async def test_single_balance_keeps_missing_token(self, service):
        balance = await service.to_subaccount_balance_with_token({"denom": "unknown"})
        assert balance.token is None


# =============================================================================
# Markets
# =============================================================================

class TestSpotMarkets:

    @pytest.mark.asyncio
    async def test_slug_from_tokens(self, service):
        result = await service.to_spot_markets_with_token([
            {"marketId": "0x01", "ticker": "ATOM/USDT", "baseDenom": "uatom", "quoteDenom": "uusdt"},
        ])

        assert len(result) == 1
        market = result[0]
        assert market.slug == "atom-usdt"
        assert market.base_token == ATOM
        assert market.quote_token == USDT

    @pytest.mark.asyncio
    async def test_market_with_missing_token_is_dropped(self, service):
        result = await service.to_spot_markets_with_token([
            {"ticker": "ATOM/USDT", "baseDenom": "uatom", "quoteDenom": "uusdt"},
            {"ticker": "FOO/USDT", "baseDenom": "ufoo", "quoteDenom": "uusdt"},
            {"ticker": "ATOM/BAR", "baseDenom": "uatom", "quoteDenom": "ubar"},
        ])
        assert [m.slug for m in result] == ["atom-usdt"]

    @pytest.mark.asyncio
    async def test_single_market_falls_back_to_ticker_slug(self, service):
        market = await service.to_spot_market_with_token(
            SpotMarket(ticker="FOO/USDT Old", base_denom="ufoo", quote_denom="uusdt")
        )
        assert market.slug == "foo-usdt-old"
        assert market.base_token is None
        assert market.quote_token == USDT

    @pytest.mark.asyncio
    async def test_extra_fields_pass_through(self, service):
        result = await service.to_spot_markets_with_token([
            {
                "marketId": "0x01",
                "ticker": "ATOM/USDT",
                "baseDenom": "uatom",
                "quoteDenom": "uusdt",
                "minPriceTickSize": "0.001",
            },
        ])
        data = result[0].to_dict()
        assert data["minPriceTickSize"] == "0.001"
        assert data["marketId"] == "0x01"
        assert data["baseToken"]["symbol"] == "ATOM"


class TestDerivativeMarkets:

    @pytest.mark.asyncio
    async def test_base_token_from_slug(self, service, denom_client):
        result = await service.to_derivative_markets_with_token([
            {"ticker": "BTC/USDT PERP", "quoteDenom": "uusdt", "isPerpetual": True},
        ])

        assert len(result) == 1
        market = result[0]
        assert market.slug == "btc-usdt-perp"
        assert market.base_token == BTC
        assert market.quote_token == USDT
        assert "btc" in denom_client.calls

    @pytest.mark.asyncio
    async def test_expiry_futures_handled_the_same(self, service):
        result = await service.to_derivative_markets_with_token([
            {"ticker": "BTC/USDT 24-3-2023", "quoteDenom": "uusdt", "isPerpetual": False},
        ])
        assert result[0].slug == "btc-usdt-24-3-2023"

    @pytest.mark.asyncio
    async def test_unresolved_base_or_quote_dropped(self, service):
        result = await service.to_derivative_markets_with_token([
            {"ticker": "DOGE/USDT PERP", "quoteDenom": "uusdt"},
            {"ticker": "BTC/USDC PERP", "quoteDenom": "uusdc"},
        ])
        assert result == []


class TestBinaryOptionsMarkets:

    @pytest.mark.asyncio
    async def test_unresolved_quote_dropped(self, service):
        result = await service.to_binary_options_markets_with_token([
            {"ticker": "BTC/USDC", "quoteDenom": "uusdc"},
        ])
        assert result == []

    @pytest.mark.asyncio
    async def test_synthetic_base_token(self, service):
        result = await service.to_binary_options_markets_with_token([
            {"ticker": "BTC/USDT", "quoteDenom": "uusdt"},
        ])

        market = result[0]
        assert market.slug == "btc-usdt"
        assert market.quote_token == USDT
        assert market.base_token.symbol == "BTC"
        assert market.base_token.decimals == 18
        assert market.base_token.coin_gecko_id == ""
        assert market.base_token.logo == "injective-v3.svg"
        assert market.base_token.icon == "injective-v3.svg"
        assert market.base_token.denom == "btc-usdt"

    @pytest.mark.asyncio
    async def test_ambiguous_ticker_still_gets_placeholder(self, service):
        ticker = "UFC-KHABIB-TKO-05/30/2023"
        result = await service.to_binary_options_markets_with_token([
            {"ticker": ticker, "quoteDenom": "uusdt"},
        ])

        market = result[0]
        assert market.slug == "ufc-khabib-tko-05-30-2023"
        assert market.base_token.symbol == ticker
        assert market.base_token.decimals == 18


# =============================================================================
# Bridge Transactions
# =============================================================================

class TestBridgeTransactions:

    @pytest.mark.asyncio
    async def test_inbound_native_transfer(self, service, denom_client):
        tx = await service.to_bridge_transaction_with_token({
            "denom": "transfer/channel-0/inj",
            "amount": "1000",
            "txHash": "ABC",
            "state": "Completed",
        })

        assert tx.token == INJ
        assert tx.tx_hash == "ABC"
        assert tx.state == BridgeTransactionState.COMPLETED
        assert "transfer/channel-0/inj" not in denom_client.calls

    @pytest.mark.asyncio
    async def test_resolved_denom(self, service):
        tx = await service.to_bridge_transaction_with_token({"denom": ATOM_IBC, "amount": "1"})
        assert tx.token == ATOM

    @pytest.mark.asyncio
    async def test_unresolved_denom_falls_back_to_native(self, service, denom_client):
        tx = await service.to_bridge_transaction_with_token({"denom": "peggy0xunknown", "amount": "1"})

        assert tx.token == INJ
        assert denom_client.calls == ["peggy0xunknown", "INJ"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("transaction", [None, {}, {"amount": "1"}])
    async def test_empty_transaction_gives_empty_shape(self, service, transaction):
        tx = await service.to_bridge_transaction_with_token(transaction)

        assert isinstance(tx, BridgeTransactionWithToken)
        assert tx.to_dict() == {}

    @pytest.mark.asyncio
    async def test_batch_never_drops(self, service):
        result = await service.to_bridge_transactions_with_token([
            {"denom": "uatom", "amount": "1"},
            {"denom": "mystery", "amount": "2"},
            {},
        ])

        assert len(result) == 3
        assert result[0].token == ATOM
        assert result[1].token == INJ
        assert result[2].to_dict() == {}

    @pytest.mark.asyncio
    async def test_unresolvable_native_token_is_synthesized(self):
        service = TokenEnrichmentService(FakeDenomClient({}), native_symbol="INJ", native_denom="inj")

        tx = await service.to_bridge_transaction_with_token({"denom": "mystery", "amount": "2"})

        assert tx.token.symbol == "INJ"
        assert tx.token.denom == "inj"
        assert tx.token.decimals == 18


# =============================================================================
# Concurrency & Errors
# =============================================================================

class InFlightClient(DenomLookupClient):
    """Tracks the highest number of lookups in flight at once."""

    name = "in_flight"

    def __init__(self):
        self.in_flight = 0
        self.max_in_flight = 0

    async def resolve(self, identifier: str) -> Optional[TokenMeta]:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        self.in_flight -= 1
        return INJ


class TestConcurrency:

    @pytest.mark.asyncio
    async def test_lookups_run_concurrently(self):
        client = InFlightClient()
        service = TokenEnrichmentService(client, max_concurrency=0)

        result = await service.to_subaccount_balances_with_token([{"denom": f"d{i}"} for i in range(10)])

        assert len(result) == 10
        assert client.max_in_flight == 10

    @pytest.mark.asyncio
    async def test_max_concurrency_bounds_fan_out(self):
        client = InFlightClient()
        service = TokenEnrichmentService(client, max_concurrency=2)

        result = await service.to_subaccount_balances_with_token([{"denom": f"d{i}"} for i in range(10)])

        assert len(result) == 10
        assert client.max_in_flight == 2

    @pytest.mark.asyncio
    async def test_lookup_failure_fails_the_batch(self):
        client = AsyncMock(spec=DenomLookupClient)
        client.resolve.side_effect = DenomLookupError("indexer unavailable")
        service = TokenEnrichmentService(client)

        with pytest.raises(DenomLookupError):
            await service.to_balances_with_token({"inj": "1"}, {})

        with pytest.raises(DenomLookupError):
            await service.to_bridge_transactions_with_token([{"denom": "inj"}])


# =============================================================================
# Record Pass-Through & Overwrites
# =============================================================================

STALE = {"symbol": "OLD", "name": "Stale", "decimals": 0}


class TestNumericAmounts:

    @pytest.mark.asyncio
    async def test_numeric_balances_pass_through(self):
        service = TokenEnrichmentService(FakeDenomClient({"A": INJ}))

        result = await service.to_balances_with_token({"A": 10, "B": 5}, {})

        assert [(b.denom, b.balance) for b in result.bank_balances_with_token] == [("A", 10)]

    @pytest.mark.asyncio
    async def test_numeric_record_amounts_kept_as_given(self, service):
        supply = await service.to_supply_with_token_and_label([{"denom": "inj", "amount": 100}])
        subaccounts = await service.to_subaccount_balances_with_token([
            {"denom": "inj", "availableBalance": 1.5, "totalBalance": 2},
        ])
        cw20 = await service.to_cw20_balances_with_token([
            {"contractAddress": CW20_CONTRACT, "balance": 42},
        ])
        contract = await service.to_contract_cw20_balances_with_token(CW20_CONTRACT, [
            {"account": "inj1a", "balance": 7},
        ])

        assert supply.bank_supply[0].amount == 100
        assert (subaccounts[0].available_balance, subaccounts[0].total_balance) == (1.5, 2)
        assert cw20[0].balance == 42
        assert contract[0].balance == 7


class TestResolvedValuesOverwriteInput:

    @pytest.mark.asyncio
    async def test_spot_market_stale_tokens_and_slug(self, service):
        result = await service.to_spot_markets_with_token([
            {
                "ticker": "ATOM/USDT",
                "baseDenom": "uatom",
                "quoteDenom": "uusdt",
                "baseToken": STALE,
                "quoteToken": STALE,
                "slug": "stale-slug",
            },
        ])

        market = result[0]
        assert market.base_token == ATOM
        assert market.quote_token == USDT
        assert market.slug == "atom-usdt"
        assert market.to_dict()["baseToken"]["symbol"] == "ATOM"

    @pytest.mark.asyncio
    async def test_stale_token_does_not_bypass_drop(self, service):
        result = await service.to_spot_markets_with_token([
            {"ticker": "FOO/USDT", "baseDenom": "ufoo", "quoteDenom": "uusdt", "baseToken": STALE},
            {"ticker": "FOO/USDT", "baseDenom": "ufoo", "quoteDenom": "uusdt", "base_token": STALE},
        ])
        assert result == []

    @pytest.mark.asyncio
    async def test_binary_options_synthetic_base_replaces_input(self, service):
        result = await service.to_binary_options_markets_with_token([
            {"ticker": "BTC/USDT", "quoteDenom": "uusdt", "baseToken": STALE, "slug": "stale"},
        ])

        market = result[0]
        assert market.base_token.symbol == "BTC"
        assert market.base_token.decimals == 18
        assert market.slug == "btc-usdt"

    @pytest.mark.asyncio
    async def test_cw20_contract_details_and_denom(self, service):
        result = await service.to_cw20_balances_with_token([
            {
                "contractAddress": CW20_CONTRACT,
                "balance": "1",
                "contractDetails": {"address": "inj1stale"},
                "denom": "STALE",
                "token": STALE,
            },
        ])

        balance = result[0]
        assert balance.contract_details.address == CW20_CONTRACT
        assert balance.denom == "WETH"
        assert balance.token == WETH

    @pytest.mark.asyncio
    async def test_subaccount_and_bridge_token_overwritten(self, service):
        subaccount = await service.to_subaccount_balance_with_token({"denom": "inj", "token": STALE})
        bridge = await service.to_bridge_transaction_with_token({"denom": "uatom", "token": STALE})

        assert subaccount.token == INJ
        assert bridge.token == ATOM

    @pytest.mark.asyncio
    async def test_unknown_fields_survive_enrichment(self, service):
        bridge = await service.to_bridge_transaction_with_token({
            "denom": "uatom",
            "txHash": "ABC",
            "sourceChain": "cosmoshub-4",
        })

        data = bridge.to_dict()
        assert data["txHash"] == "ABC"
        assert data["sourceChain"] == "cosmoshub-4"
        assert data["token"]["symbol"] == "ATOM"
