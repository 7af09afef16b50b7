from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    COLLABORATOR = "collaborator"
    STORAGE = "storage"


class MindMintError(Exception):
    def __init__(self, message: str, category: ErrorCategory) -> None:
        self.message = message
        self.category = category
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.category.value}] {self.message}"


# Validation
class EntryValidationError(MindMintError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCategory.VALIDATION)


# Not found
class NotFoundError(MindMintError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCategory.NOT_FOUND)


class EntryNotFoundError(NotFoundError):
    def __init__(self, entry_id: str) -> None:
        self.entry_id = entry_id
        super().__init__(f"Journal entry {entry_id} not found")


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


# Conflicts (violated preconditions)
class ConflictError(MindMintError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCategory.CONFLICT)


class AlreadyMintedError(ConflictError):
    def __init__(self, entry_id: str) -> None:
        self.entry_id = entry_id
        super().__init__(f"Journal entry {entry_id} is already minted")


class MintInProgressError(ConflictError):
    def __init__(self, entry_id: str) -> None:
        self.entry_id = entry_id
        super().__init__(f"A mint for journal entry {entry_id} is already in progress")


class WalletNotConnectedError(ConflictError):
    def __init__(self, message: str = "Wallet not connected") -> None:
        super().__init__(message)


class SyncInProgressError(ConflictError):
    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"A cloud sync for user {user_id} is already running")


# Collaborators
class CollaboratorError(MindMintError):
    """
    Failure of an external collaborator.

    `side_effect_possible` tells the caller whether the collaborator may have
    changed remote state before failing (e.g. a transaction was sent but its
    confirmation timed out).
    """

    collaborator = "collaborator"

    def __init__(self, message: str, side_effect_possible: bool = False) -> None:
        self.side_effect_possible = side_effect_possible
        super().__init__(message, ErrorCategory.COLLABORATOR)

    def __str__(self) -> str:
        return f"[{self.category.value}:{self.collaborator}] {self.message}"


class WalletError(CollaboratorError):
    collaborator = "wallet"


class ChainError(CollaboratorError):
    collaborator = "chain"


class MetadataStoreError(CollaboratorError):
    collaborator = "metadata_store"


class CloudMirrorError(CollaboratorError):
    collaborator = "cloud_mirror"


# Local storage
class StorageError(MindMintError):
    def __init__(self, message: str) -> None:
        super().__init__(message, ErrorCategory.STORAGE)


class MintPersistenceError(StorageError):
    """The token exists on-chain but recording it locally failed."""

    def __init__(self, entry_id: str, nft_address: str, transaction_signature: str, reason: Optional[str] = None) -> None:
        self.entry_id = entry_id
        self.nft_address = nft_address
        self.transaction_signature = transaction_signature
        self.side_effect_possible = True
        message = f"Minted {nft_address} for entry {entry_id} but failed to record it locally"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
