"""Custom exception classes for forge-chronicles library."""


class ChronicleError(Exception):
    """Base exception for deployment-record errors."""

    pass


class CommitAlreadyProcessedError(ChronicleError, ValueError):
    """Raised when the batch's commit is already the most recent history entry."""

    pass


class ConstructorMismatchError(ChronicleError, ValueError):
    """Raised when constructor arguments do not line up with the ABI constructor."""

    pass


class UpgradeVerificationError(ChronicleError, RuntimeError):
    """Raised when a proxy's on-chain implementation does not match the new deployment."""

    pass


class ChainReaderUnavailableError(UpgradeVerificationError):
    """Raised when the chain cannot be queried while an upgrade must be verified."""

    pass


class ArtifactBuildError(ChronicleError, RuntimeError):
    """Raised when compiling contract artifacts fails."""

    pass


class ArtifactNotFoundError(ChronicleError, FileNotFoundError):
    """Raised when a compiled contract artifact is missing."""

    pass


class BroadcastNotFoundError(ChronicleError, FileNotFoundError):
    """Raised when the broadcast file for a script/chain is missing."""

    pass


class LedgerNotFoundError(ChronicleError, FileNotFoundError):
    """Raised when a chain's deployment ledger file is not found."""

    pass


class ContractNotFoundError(ChronicleError, ValueError):
    """Raised when requested contract is not found in the ledger."""

    pass
