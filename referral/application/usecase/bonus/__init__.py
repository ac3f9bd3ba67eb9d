"""Bonus use cases."""

from referral.application.usecase.bonus.record_address_book_sync import (
    RecordAddressBookSyncRequest,
    RecordAddressBookSyncUseCase,
)
from referral.application.usecase.bonus.record_connections import (
    BonusResponse,
    RecordConnectionsRequest,
    RecordConnectionsUseCase,
)

__all__ = [
    "BonusResponse",
    "RecordAddressBookSyncRequest",
    "RecordAddressBookSyncUseCase",
    "RecordConnectionsRequest",
    "RecordConnectionsUseCase",
]
