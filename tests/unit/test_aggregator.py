"""Unit tests for token position aggregation."""
from __future__ import annotations

import copy

import pytest

from conftest import BONK_MINT, BUNDLED_WALLET, JUP_MINT, MAIN_WALLET, OTHER_WALLET, USDC_MINT, make_account
from solana_wallet_tracker.models import TokenInfo
from solana_wallet_tracker.services.aggregator import (
    SignificanceFilter,
    aggregate,
    holding_usd_value,
)


class TestHoldingUsdValue:
    def test_decimal_adjusted(self) -> None:
        assert holding_usd_value(1_000_000, 6, 2.0) == pytest.approx(2.0)

    def test_no_price_is_zero(self) -> None:
        assert holding_usd_value(1_000_000, 6, None) == 0
        assert holding_usd_value(1_000_000, 6, 0.0) == 0


class TestAggregate:
    def test_empty_input(self) -> None:
        summary = aggregate([])
        assert summary.total_usd_value == 0
        assert summary.tokens == ()

    def test_single_holding(self, jup_info: TokenInfo) -> None:
        summary = aggregate(
            [(MAIN_WALLET, [make_account(MAIN_WALLET, JUP_MINT, 1_000_000, 6, jup_info)])]
        )
        assert len(summary.tokens) == 1
        position = summary.tokens[0]
        assert position.token is jup_info
        assert position.total_amount == 1_000_000
        assert position.usd_value == pytest.approx(2.0)
        assert summary.total_usd_value == pytest.approx(2.0)

    def test_merges_across_addresses_in_order(self, jup_info: TokenInfo) -> None:
        summary = aggregate(
            [
                (MAIN_WALLET, [make_account(MAIN_WALLET, JUP_MINT, 1_000_000, 6, jup_info)]),
                (BUNDLED_WALLET, [make_account(BUNDLED_WALLET, JUP_MINT, 500_000, 6, jup_info)]),
            ]
        )
        position = summary.tokens[0]
        assert position.total_amount == 1_500_000
        assert position.usd_value == pytest.approx(3.0)
        assert [p.address for p in position.positions] == [MAIN_WALLET, BUNDLED_WALLET]
        assert [p.amount for p in position.positions] == [1_000_000, 500_000]
        assert [p.usd_value for p in position.positions] == pytest.approx([2.0, 1.0])

    def test_total_amount_is_raw_not_decimal_adjusted(self, usdc_info: TokenInfo) -> None:
        summary = aggregate(
            [(MAIN_WALLET, [make_account(MAIN_WALLET, USDC_MINT, 123_456_789, 6, usdc_info)])]
        )
        assert summary.tokens[0].total_amount == 123_456_789
        assert summary.tokens[0].usd_value == pytest.approx(123.456789)

    def test_skips_holdings_without_token_info(self, usdc_info: TokenInfo) -> None:
        summary = aggregate(
            [
                (
                    MAIN_WALLET,
                    [
                        make_account(MAIN_WALLET, BONK_MINT, 10**12, 5, None),
                        make_account(MAIN_WALLET, USDC_MINT, 2_000_000, 6, usdc_info),
                    ],
                ),
                (BUNDLED_WALLET, [make_account(BUNDLED_WALLET, BONK_MINT, 10**9, 5, None)]),
            ]
        )
        assert [t.token.address for t in summary.tokens] == [USDC_MINT]
        assert summary.total_usd_value == pytest.approx(2.0)
        assert all(p.address == MAIN_WALLET for p in summary.tokens[0].positions)

    def test_unpriced_token_counts_with_zero_value(self, bonk_info: TokenInfo) -> None:
        summary = aggregate(
            [(MAIN_WALLET, [make_account(MAIN_WALLET, BONK_MINT, 10**10, 5, bonk_info)])]
        )
        assert summary.tokens[0].total_amount == 10**10
        assert summary.tokens[0].usd_value == 0
        assert summary.total_usd_value == 0

    def test_sorted_descending_by_usd_value(
        self, usdc_info: TokenInfo, jup_info: TokenInfo, bonk_info: TokenInfo
    ) -> None:
        summary = aggregate(
            [
                (
                    MAIN_WALLET,
                    [
                        make_account(MAIN_WALLET, BONK_MINT, 10**10, 5, bonk_info),
                        make_account(MAIN_WALLET, USDC_MINT, 5_000_000, 6, usdc_info),
                        make_account(MAIN_WALLET, JUP_MINT, 10_000_000, 6, jup_info),
                    ],
                )
            ]
        )
        values = [t.usd_value for t in summary.tokens]
        assert values == sorted(values, reverse=True)
        assert [t.token.symbol for t in summary.tokens] == ["JUP", "USDC", "BONK"]

    def test_ties_keep_first_encountered_order(self) -> None:
        infos = [
            TokenInfo(address=f"Mint{i}", symbol=f"T{i}", name=f"Token {i}", decimals=0, price=1.0)
            for i in range(4)
        ]
        summary = aggregate(
            [
                (MAIN_WALLET, [make_account(MAIN_WALLET, infos[2].address, 5, 0, infos[2])]),
                (
                    BUNDLED_WALLET,
                    [
                        make_account(BUNDLED_WALLET, infos[0].address, 5, 0, infos[0]),
                        make_account(BUNDLED_WALLET, infos[3].address, 7, 0, infos[3]),
                        make_account(BUNDLED_WALLET, infos[1].address, 5, 0, infos[1]),
                    ],
                ),
            ]
        )
        assert [t.token.symbol for t in summary.tokens] == ["T3", "T2", "T0", "T1"]

    def test_sum_invariants(
        self, usdc_info: TokenInfo, jup_info: TokenInfo, bonk_info: TokenInfo
    ) -> None:
        holdings = [
            (
                MAIN_WALLET,
                [
                    make_account(MAIN_WALLET, USDC_MINT, 1_234_567, 6, usdc_info),
                    make_account(MAIN_WALLET, JUP_MINT, 7_654_321, 6, jup_info),
                ],
            ),
            (
                BUNDLED_WALLET,
                [
                    make_account(BUNDLED_WALLET, JUP_MINT, 333_333, 6, jup_info),
                    make_account(BUNDLED_WALLET, BONK_MINT, 10**8, 5, bonk_info),
                ],
            ),
            (OTHER_WALLET, [make_account(OTHER_WALLET, USDC_MINT, 9_999, 6, usdc_info)]),
        ]
        summary = aggregate(holdings)

        for token in summary.tokens:
            assert token.total_amount == sum(p.amount for p in token.positions)
            assert token.usd_value == pytest.approx(sum(p.usd_value for p in token.positions))
        assert summary.total_usd_value == pytest.approx(sum(t.usd_value for t in summary.tokens))

    def test_idempotent_and_does_not_mutate_input(
        self, usdc_info: TokenInfo, jup_info: TokenInfo
    ) -> None:
        holdings = [
            (MAIN_WALLET, [make_account(MAIN_WALLET, USDC_MINT, 1_500_000, 6, usdc_info)]),
            (BUNDLED_WALLET, [make_account(BUNDLED_WALLET, JUP_MINT, 2_500_000, 6, jup_info)]),
        ]
        snapshot = copy.deepcopy(holdings)

        first = aggregate(holdings)
        second = aggregate(holdings)

        assert first == second
        assert holdings == snapshot


class TestSignificanceFilter:
    def test_drops_small_holdings_and_positions(
        self, usdc_info: TokenInfo, jup_info: TokenInfo
    ) -> None:
        summary = aggregate(
            [
                (
                    MAIN_WALLET,
                    [
                        make_account(MAIN_WALLET, USDC_MINT, 150_000_000, 6, usdc_info),
                        make_account(MAIN_WALLET, JUP_MINT, 10_000_000, 6, jup_info),
                    ],
                ),
                (BUNDLED_WALLET, [make_account(BUNDLED_WALLET, USDC_MINT, 50_000_000, 6, usdc_info)]),
            ],
            SignificanceFilter(min_usd_value=100.0),
        )
        assert [t.token.symbol for t in summary.tokens] == ["USDC"]
        assert summary.tokens[0].total_amount == 150_000_000
        assert len(summary.tokens[0].positions) == 1

    def test_supply_share_filter(self) -> None:
        info = TokenInfo(
            address=BONK_MINT,
            symbol="BONK",
            name="Bonk",
            decimals=0,
            price=1.0,
            holder=1000,
            supply="1000000000",
        )
        small = make_account(MAIN_WALLET, BONK_MINT, 500, 0, info)
        large = make_account(BUNDLED_WALLET, BONK_MINT, 200_000, 0, info)
        summary = aggregate(
            [(MAIN_WALLET, [small]), (BUNDLED_WALLET, [large])],
            SignificanceFilter(min_usd_value=100.0, min_holder_percentage=0.01),
        )
        assert summary.tokens[0].total_amount == 200_000
        assert [p.address for p in summary.tokens[0].positions] == [BUNDLED_WALLET]

    def test_supply_share_ignored_without_holder_count(self) -> None:
        info = TokenInfo(
            address=BONK_MINT, symbol="BONK", name="Bonk", decimals=0, price=1.0,
            supply="1000000000",
        )
        summary = aggregate(
            [(MAIN_WALLET, [make_account(MAIN_WALLET, BONK_MINT, 500, 0, info)])],
            SignificanceFilter(min_usd_value=100.0),
        )
        assert summary.tokens[0].total_amount == 500
