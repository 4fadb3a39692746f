"""Unit tests for the batched query client."""

import pytest

from arb_deployments.config_store import ConfigStore
from arb_deployments.constants import INVALID_TOKEN_SENTINEL
from arb_deployments.exceptions import ConfigNotFoundError, ContractNotDeployedError, RpcError
from arb_deployments.query import (
    ALL_GROUPS,
    BALANCES,
    CONTRACT_INFO,
    SELF_TEST,
    TOKEN_INFO,
    VALIDATION,
    BatchedQueryClient,
    registry_items,
)
from arb_deployments.types import ContractInfo, GroupStatus, TokenEntry, TokenInfo

USDC = "0x2791Bca1f2de4661ED88A30C99A7a9449Aa84174"
WETH = "0x7ceB23fD6bC0adD59E62ac25578270cFf1b9f619"
WMATIC = "0x0d500B1d8E8eF31E21C99d1Db9A6444d3ADf1270"
TOKEN_A = "0x5555555555555555555555555555555555555555"
TOKEN_B = "0x6666666666666666666666666666666666666666"


@pytest.fixture
def tokens():
    return {
        "USDC": TokenEntry(address=USDC, decimals=6),
        "WETH": TokenEntry(address=WETH, decimals=18),
        "WMATIC": TokenEntry(address=WMATIC, decimals=18),
    }


@pytest.fixture
def client(fake_contract, tokens):
    return BatchedQueryClient(fake_contract, tokens, native_symbol="MATIC")


class TestRegistryItems:
    def test_mapping_keeps_order(self, tokens):
        assert registry_items(tokens) == [("USDC", USDC), ("WETH", WETH), ("WMATIC", WMATIC)]

    def test_bare_addresses_key_themselves(self):
        assert registry_items([TOKEN_A, TOKEN_B]) == [(TOKEN_A, TOKEN_A), (TOKEN_B, TOKEN_B)]


class TestBalances:
    """Test the balances group."""

    def test_balances_in_registry_order_then_native(self, client, fake_contract):
        result = client.balances()

        assert result.status is GroupStatus.SUCCEEDED
        assert [item.key for item in result.items] == ["USDC", "WETH", "WMATIC", "MATIC"]
        assert result.values() == [1_500_000, 2 * 10**18, 0, 5 * 10**17]
        assert fake_contract.calls == ["get_multiple_balances", "get_balance"]

    def test_empty_registry_only_reads_native(self, client, fake_contract):
        """Test that no batched call is made for an empty registry."""
        result = client.balances([])

        assert result.succeeded
        assert [item.key for item in result.items] == ["MATIC"]
        assert fake_contract.calls == ["get_balance"]

    def test_malformed_response_fails_group(self, client, fake_contract):
        """Test that a length mismatch is never mapped positionally."""
        fake_contract.get_multiple_balances = lambda tokens: [1]

        result = client.balances()

        assert result.status is GroupStatus.FAILED
        assert "malformed response" in result.error
        assert result.items == ()

    def test_remote_failure_fails_group(self, client, fake_contract):
        fake_contract.errors["get_multiple_balances"] = RpcError("execution reverted")

        result = client.balances()

        assert result.status is GroupStatus.FAILED
        assert result.error == "execution reverted"


class TestTokenInfo:
    """Test the token-info group."""

    def test_one_info_per_token(self, client):
        result = client.token_info()

        assert result.succeeded
        assert [item.key for item in result.items] == ["USDC", "WETH", "WMATIC"]
        assert all(isinstance(value, TokenInfo) for value in result.values())
        assert [value.address for value in result.values()] == [USDC, WETH, WMATIC]

    def test_empty_registry_makes_no_call(self, client, fake_contract):
        result = client.token_info([])

        assert result.succeeded
        assert result.items == ()
        assert fake_contract.calls == []


class TestValidate:
    """Test the validation group."""

    def test_valid_then_invalid(self, fake_contract):
        fake_contract.valid[TOKEN_A.lower()] = True
        client = BatchedQueryClient(fake_contract)

        result = client.validate([TOKEN_A, TOKEN_B])

        assert result.succeeded
        assert [(item.key, item.value) for item in result.items] == [(TOKEN_A, True), (TOKEN_B, False)]

    def test_invalid_token_is_a_value_not_a_failure(self, client):
        result = client.validate()

        assert result.succeeded
        assert result.values() == [True, True, False]

    def test_empty_registry_makes_no_call(self, client, fake_contract):
        result = client.validate([])

        assert result.succeeded
        assert fake_contract.calls == []


class TestContractInfo:
    def test_combines_metadata_and_owner(self, client, fake_contract):
        result = client.contract_info()

        assert result.succeeded
        [item] = result.items
        assert item.key == fake_contract.address
        assert item.value == ContractInfo(
            version="1.0.0",
            deployed=1700000000,
            paused=False,
            owner="0x2222222222222222222222222222222222222222",
            address=fake_contract.address,
        )

    def test_owner_failure_fails_group(self, client, fake_contract):
        fake_contract.errors["owner"] = RpcError("timeout")

        result = client.contract_info()

        assert not result.succeeded
        assert result.error == "timeout"


class TestSelfTest:
    """Test the self-test group."""

    def test_expected_outcomes(self, client, fake_contract):
        result = client.self_test()

        assert result.succeeded
        assert [item.key for item in result.items] == [
            "balance:USDC",
            "valid:USDC",
            f"valid:{INVALID_TOKEN_SENTINEL}",
        ]
        assert result.values() == [1_500_000, True, False]

    def test_sentinel_reported_valid_fails(self, client, fake_contract):
        fake_contract.valid[INVALID_TOKEN_SENTINEL.lower()] = True

        result = client.self_test()

        assert result.status is GroupStatus.FAILED
        assert "expected an invalid token" in result.error
        assert len(result.items) == 3

    def test_falls_back_to_first_token(self, fake_contract):
        client = BatchedQueryClient(fake_contract, {"WETH": TokenEntry(address=WETH)})

        result = client.self_test()

        assert result.items[0].key == "balance:WETH"

    def test_no_tokens_fails(self, fake_contract):
        result = BatchedQueryClient(fake_contract).self_test()

        assert result.status is GroupStatus.FAILED
        assert "no token" in result.error


class TestRun:
    """Test group isolation across a full run."""

    def test_all_groups_in_default_order(self, client):
        report = client.run()

        assert [r.group for r in report.results] == list(ALL_GROUPS)
        assert report.ok

    def test_failed_group_does_not_affect_others(self, client, fake_contract):
        """Test that a failing balances call leaves token-info intact."""
        fake_contract.errors["get_multiple_balances"] = RpcError("node unavailable")

        report = client.run([TOKEN_INFO, BALANCES, VALIDATION])

        assert report.failed == [BALANCES]
        assert report.succeeded == [TOKEN_INFO, VALIDATION]
        assert len(report.get(TOKEN_INFO).items) == 3
        assert report.get(VALIDATION).values() == [True, True, False]
        assert not report.ok

    def test_every_group_failing_still_returns_report(self, client, fake_contract):
        for method in [
            "get_multiple_balances",
            "get_multiple_token_info",
            "batch_validate_tokens",
            "get_contract_info",
            "get_balance",
        ]:
            fake_contract.errors[method] = RpcError("down")

        report = client.run()

        assert report.failed == list(ALL_GROUPS)

    def test_malformed_registry_fails_groups_not_run(self, client, fake_contract):
        """Test that a registry of raw dicts is reported per group instead of raising."""
        registry = {"USDC": {"address": USDC, "decimals": 6}}

        report = client.run(registry=registry)

        assert report.failed == [VALIDATION, TOKEN_INFO, BALANCES, SELF_TEST]
        assert report.succeeded == [CONTRACT_INFO]
        assert all(report.get(group).error for group in report.failed)
        assert "get_multiple_balances" not in fake_contract.calls

    def test_registry_override(self, client):
        report = client.run([VALIDATION], registry=[TOKEN_A])

        assert report.get(VALIDATION).values() == [False]
        assert report.get(CONTRACT_INFO) is None

    def test_unknown_group_raises(self, client):
        with pytest.raises(ValueError, match="bogus"):
            client.run([SELF_TEST, "bogus"])


class TestFromConfig:
    """Test BatchedQueryClient.from_config()."""

    def test_missing_contract_entry(self, config_store: ConfigStore, artifact):
        with pytest.raises(ContractNotDeployedError, match="'arb' is not deployed on polygon"):
            BatchedQueryClient.from_config(config_store, rpc=None, abi=artifact.abi)

    def test_missing_config(self, tmp_path, artifact):
        with pytest.raises(ConfigNotFoundError):
            BatchedQueryClient.from_config(ConfigStore(tmp_path / "polygon.json"), rpc=None, abi=artifact.abi)

    def test_uses_config_address_and_tokens(self, config_store: ConfigStore, artifact):
        config_store.record_deployment("arb", "0x1111111111111111111111111111111111111111", "2024-01-01T00:00:00+00:00")

        client = BatchedQueryClient.from_config(config_store, rpc=None, abi=artifact.abi, native_symbol="MATIC")

        assert client.contract.address == "0x1111111111111111111111111111111111111111"
        assert list(client.tokens) == ["USDC", "WETH", "WMATIC"]
        assert client.tokens["USDC"].decimals == 6
