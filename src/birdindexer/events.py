"""
Decoded protocol events, as delivered by the event source.

Every event carries the emitting contract address and its position on chain. `log_index` is the
position of the log within its transaction; together with the transaction hash it identifies the
event. Amounts are the raw integers from the log.
"""

from dataclasses import dataclass

from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from birdindexer.functions import event_record_id


@dataclass(slots=True, frozen=True, kw_only=True)
class ContractEvent:
    address: ChecksumAddress
    transaction_hash: HexBytes
    transaction_index: int
    log_index: int
    block_number: int
    block_timestamp: int

    @property
    def position(self) -> tuple[int, int, int]:
        return self.block_number, self.transaction_index, self.log_index

    @property
    def record_id(self) -> str:
        return event_record_id(self.transaction_hash, self.log_index)


# bToken events


@dataclass(slots=True, frozen=True, kw_only=True)
class MintEvent(ContractEvent):
    minter: ChecksumAddress
    mint_amount: int
    mint_tokens: int


@dataclass(slots=True, frozen=True, kw_only=True)
class RedeemEvent(ContractEvent):
    redeemer: ChecksumAddress
    redeem_amount: int
    redeem_tokens: int


@dataclass(slots=True, frozen=True, kw_only=True)
class BorrowEvent(ContractEvent):
    borrower: ChecksumAddress
    borrow_amount: int
    account_borrows: int
    total_borrows: int


@dataclass(slots=True, frozen=True, kw_only=True)
class RepayBorrowEvent(ContractEvent):
    payer: ChecksumAddress
    borrower: ChecksumAddress
    repay_amount: int
    account_borrows: int
    total_borrows: int


@dataclass(slots=True, frozen=True, kw_only=True)
class LiquidateBorrowEvent(ContractEvent):
    liquidator: ChecksumAddress
    borrower: ChecksumAddress
    repay_amount: int
    btoken_collateral: ChecksumAddress
    seize_tokens: int


@dataclass(slots=True, frozen=True, kw_only=True)
class TransferEvent(ContractEvent):
    from_: ChecksumAddress
    to: ChecksumAddress
    amount: int


@dataclass(slots=True, frozen=True, kw_only=True)
class AccrueInterestEvent(ContractEvent):
    cash_prior: int
    interest_accumulated: int
    borrow_index: int
    total_borrows: int


@dataclass(slots=True, frozen=True, kw_only=True)
class NewReserveFactorEvent(ContractEvent):
    old_reserve_factor_mantissa: int
    new_reserve_factor_mantissa: int


@dataclass(slots=True, frozen=True, kw_only=True)
class NewInterestRateModelEvent(ContractEvent):
    old_interest_rate_model: ChecksumAddress
    new_interest_rate_model: ChecksumAddress


# Price oracle events


@dataclass(slots=True, frozen=True, kw_only=True)
class PricePostedEvent(ContractEvent):
    asset: ChecksumAddress
    previous_price_mantissa: int
    requested_price_mantissa: int
    new_price_mantissa: int


# BirdCore (comptroller) events


@dataclass(slots=True, frozen=True, kw_only=True)
class MarketListedEvent(ContractEvent):
    btoken: ChecksumAddress


@dataclass(slots=True, frozen=True, kw_only=True)
class MarketEnteredEvent(ContractEvent):
    btoken: ChecksumAddress
    account: ChecksumAddress


@dataclass(slots=True, frozen=True, kw_only=True)
class MarketExitedEvent(ContractEvent):
    btoken: ChecksumAddress
    account: ChecksumAddress


@dataclass(slots=True, frozen=True, kw_only=True)
class NewCloseFactorEvent(ContractEvent):
    old_close_factor_mantissa: int
    new_close_factor_mantissa: int


@dataclass(slots=True, frozen=True, kw_only=True)
class NewCollateralFactorEvent(ContractEvent):
    btoken: ChecksumAddress
    old_collateral_factor_mantissa: int
    new_collateral_factor_mantissa: int


@dataclass(slots=True, frozen=True, kw_only=True)
class NewLiquidationIncentiveEvent(ContractEvent):
    old_liquidation_incentive_mantissa: int
    new_liquidation_incentive_mantissa: int


@dataclass(slots=True, frozen=True, kw_only=True)
class NewMaxAssetsEvent(ContractEvent):
    old_max_assets: int
    new_max_assets: int


@dataclass(slots=True, frozen=True, kw_only=True)
class NewPriceOracleEvent(ContractEvent):
    old_price_oracle: ChecksumAddress
    new_price_oracle: ChecksumAddress


@dataclass(slots=True, frozen=True, kw_only=True)
class NewBirdPlusRateEvent(ContractEvent):
    old_bird_rate: int
    new_bird_rate: int


@dataclass(slots=True, frozen=True, kw_only=True)
class BirdPlusSpeedUpdatedEvent(ContractEvent):
    btoken: ChecksumAddress
    new_speed: int


@dataclass(slots=True, frozen=True, kw_only=True)
class DistributedSupplierBirdPlusEvent(ContractEvent):
    btoken: ChecksumAddress
    supplier: ChecksumAddress
    bird_delta: int
    bird_supply_index: int


@dataclass(slots=True, frozen=True, kw_only=True)
class DistributedBorrowerBirdPlusEvent(ContractEvent):
    btoken: ChecksumAddress
    borrower: ChecksumAddress
    bird_delta: int
    bird_borrow_index: int


# Underlying ERC-20 events


@dataclass(slots=True, frozen=True, kw_only=True)
class ApprovalEvent(ContractEvent):
    owner: ChecksumAddress
    spender: ChecksumAddress
    value: int
