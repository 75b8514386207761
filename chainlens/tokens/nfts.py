"""NFT holdings keyed by (contract, token_id)."""

from __future__ import annotations

from typing import Iterable, Literal

from chainlens.models.schema import DecodedEvent, NFTHolding

HoldingMode = Literal["last_touch", "net"]


class NFTOwnershipTracker:
    """Fold ERC-721 / ERC-1155 transfer events into one row per NFT.

    ``last_touch`` (default): the last event seen for a key replaces the
    row. ERC-721 rows always carry balance 1 and ERC-1155 TransferSingle rows
    carry the event's ``value``; nothing is netted and TransferBatch is not
    expanded. Because the query returns logs in chain order, "last seen" is
    the most recent on-chain touch, which is not necessarily current
    ownership.

    ``net``: incoming transfers to ``wallet`` credit the key and outgoing
    ones debit it. ERC-721 transfers out remove the row, ERC-1155 rows that
    reach zero are dropped, and TransferBatch is expanded per item.
    """

    def __init__(self, wallet: str | None = None, mode: HoldingMode = "last_touch"):
        if mode == "net" and not wallet:
            raise ValueError("net mode needs the wallet address")
        self.wallet = wallet.lower() if wallet else None
        self.mode = mode
        self._holdings: dict[tuple[str, str], NFTHolding] = {}

    def apply(self, event: DecodedEvent | None) -> None:
        if event is None:
            return
        if self.mode == "net":
            self._apply_net(event)
            return

        if event.standard == "ERC721":
            token_id = str(event.indexed[2].val)
            self._holdings[(event.address, token_id)] = NFTHolding(
                contract_address=event.address,
                token_id=token_id,
                standard="ERC721",
                balance=1,
            )
        elif event.name == "TransferSingle":
            token_id = str(event.body[0].val)
            self._holdings[(event.address, token_id)] = NFTHolding(
                contract_address=event.address,
                token_id=token_id,
                standard="ERC1155",
                balance=event.body[1].val,
            )

    def _apply_net(self, event: DecodedEvent) -> None:
        if event.standard == "ERC721":
            from_addr, to_addr = event.indexed[0].val, event.indexed[1].val
            key = (event.address, str(event.indexed[2].val))
            if from_addr == self.wallet:
                self._holdings.pop(key, None)
            if to_addr == self.wallet:
                self._holdings[key] = NFTHolding(
                    contract_address=event.address, token_id=key[1], standard="ERC721", balance=1,
                )
            return

        if event.standard != "ERC1155":
            return
        from_addr, to_addr = event.indexed[1].val, event.indexed[2].val
        if event.name == "TransferSingle":
            items = [(event.body[0].val, event.body[1].val)]
        else:
            items = list(zip(event.body[0].val, event.body[1].val))

        for token_id, value in items:
            delta = 0
            if to_addr == self.wallet:
                delta += value
            if from_addr == self.wallet:
                delta -= value
            if delta:
                self._credit(event.address, str(token_id), delta)

    def _credit(self, contract: str, token_id: str, delta: int) -> None:
        key = (contract, token_id)
        current = self._holdings.get(key)
        balance = (current.balance if current else 0) + delta
        if balance <= 0:
            self._holdings.pop(key, None)
            return
        self._holdings[key] = NFTHolding(
            contract_address=contract, token_id=token_id, standard="ERC1155", balance=balance,
        )

    def update(self, events: Iterable[DecodedEvent | None]) -> NFTOwnershipTracker:
        for event in events:
            self.apply(event)
        return self

    def holdings(self) -> list[NFTHolding]:
        return list(self._holdings.values())
