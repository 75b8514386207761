import pytest

from chainlens.models.schema import TokenBalance
from chainlens.tokens.nfts import NFTOwnershipTracker
from chainlens.tokens.transfers import sum_received_amounts, transfer_rows

from factories import (
    NFT,
    OTHER,
    TOKEN_A,
    TOKEN_B,
    WALLET,
    erc20_transfer,
    erc721_transfer,
    transfer_batch,
    transfer_single,
)


class TestReceivedAmounts:
    def test_sums_per_token_in_first_seen_order(self, decoder):
        events = decoder.decode_logs([
            erc20_transfer(TOKEN_A, OTHER, WALLET, 100),
            erc20_transfer(TOKEN_B, OTHER, WALLET, 7),
            erc20_transfer(TOKEN_A, OTHER, WALLET, 50),
        ])

        assert sum_received_amounts(events, WALLET) == [
            TokenBalance(token=TOKEN_A, balance=150),
            TokenBalance(token=TOKEN_B, balance=7),
        ]

    def test_outgoing_not_subtracted_and_filtered(self, decoder):
        events = decoder.decode_logs([
            erc20_transfer(TOKEN_A, OTHER, WALLET, 100),
            erc20_transfer(TOKEN_A, WALLET, OTHER, 60),
        ])
        assert sum_received_amounts(events, WALLET) == [TokenBalance(token=TOKEN_A, balance=100)]

    def test_skips_none_and_nft_events(self, decoder):
        events = decoder.decode_logs([
            erc721_transfer(NFT, OTHER, WALLET, 1),
            erc20_transfer(TOKEN_A, OTHER, WALLET, 2**128),
        ]) + [None]
        assert sum_received_amounts(events) == [TokenBalance(token=TOKEN_A, balance=2**128)]

    def test_empty(self):
        assert sum_received_amounts([]) == []


class TestLastTouch:
    def test_erc721_dedup(self, decoder):
        events = decoder.decode_logs([
            erc721_transfer(NFT, OTHER, WALLET, 42),
            erc721_transfer(NFT, OTHER, WALLET, 42),
            erc721_transfer(NFT, OTHER, WALLET, 43),
        ])
        holdings = NFTOwnershipTracker().update(events).holdings()

        assert [(h.token_id, h.balance, h.standard) for h in holdings] == [
            ("42", 1, "ERC721"),
            ("43", 1, "ERC721"),
        ]

    def test_transfer_single_last_value_wins(self, decoder):
        events = decoder.decode_logs([
            transfer_single(NFT, OTHER, WALLET, 7, 5),
            transfer_single(NFT, OTHER, WALLET, 7, 3),
        ])
        holdings = NFTOwnershipTracker().update(events).holdings()

        assert len(holdings) == 1
        assert holdings[0].standard == "ERC1155"
        assert holdings[0].balance == 3

    def test_transfer_batch_ignored(self, decoder):
        events = decoder.decode_logs([transfer_batch(NFT, OTHER, WALLET, [1, 2], [1, 1])])
        assert NFTOwnershipTracker().update(events).holdings() == []

    def test_token_id_beyond_64_bits(self, decoder):
        token_id = 2**255 + 1
        events = decoder.decode_logs([erc721_transfer(NFT, OTHER, WALLET, token_id)])
        holding = NFTOwnershipTracker().update(events).holdings()[0]
        assert holding.token_id == str(token_id)


class TestNetMode:
    def test_requires_wallet(self):
        with pytest.raises(ValueError):
            NFTOwnershipTracker(mode="net")

    def test_erc721_sent_away_is_removed(self, decoder):
        events = decoder.decode_logs([
            erc721_transfer(NFT, OTHER, WALLET, 1),
            erc721_transfer(NFT, OTHER, WALLET, 2),
            erc721_transfer(NFT, WALLET, OTHER, 1),
        ])
        holdings = NFTOwnershipTracker(WALLET, mode="net").update(events).holdings()
        assert [h.token_id for h in holdings] == ["2"]

    def test_erc1155_balances_net_out(self, decoder):
        events = decoder.decode_logs([
            transfer_single(NFT, OTHER, WALLET, 7, 5),
            transfer_single(NFT, WALLET, OTHER, 7, 2),
            transfer_batch(NFT, OTHER, WALLET, [8, 9], [4, 6]),
            transfer_batch(NFT, WALLET, OTHER, [9], [6]),
        ])
        holdings = NFTOwnershipTracker(WALLET, mode="net").update(events).holdings()

        assert {h.token_id: h.balance for h in holdings} == {"7": 3, "8": 4}


class TestTransferRows:
    def test_rows_for_each_standard(self, decoder):
        events = decoder.decode_logs([
            erc20_transfer(TOKEN_A, WALLET, OTHER, 10),
            erc721_transfer(NFT, OTHER, WALLET, 5),
            transfer_batch(NFT, OTHER, WALLET, [1, 2], [3, 4]),
            erc20_transfer(TOKEN_B, OTHER, OTHER, 99),
        ])
        rows = transfer_rows(events, WALLET)

        assert [(r.standard, r.token_id, r.amount) for r in rows] == [
            ("ERC20", None, 10),
            ("ERC721", "5", 1),
            ("ERC1155", "1", 3),
            ("ERC1155", "2", 4),
        ]
        assert rows[0].from_address == WALLET
        assert rows[2].to_address == WALLET
